"""Command line tool resolving a schema and printing its properties.

Example::

    propconf --id app.Server --source 'file:${user.home}/server.properties' \\
        --source classpath:app/Server.properties --load-type merge \\
        --default port=8080 --set debug=true
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .errors import ConfigurationError
from .loader.env import EnvironmentLoader
from .loader.resolver import SourceResolver
from .manager import PropertiesManager
from .models.schemas import LoadType, ResolverSettings, Schema

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_assignment(value: str) -> tuple[str, str]:
    """Split a ``KEY=VALUE`` argument.

    Raises:
        argparse.ArgumentTypeError: If the value has no '=' or an empty key
    """
    key, sep, assigned = value.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{value}'")
    return key, assigned


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="propconf",
        description="Resolve configuration properties from their sources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Precedence, lowest to highest: --default, --env-prefix, --set, sources.\n"
            "Without --source the resource classpath:<id as path>.properties is used."
        ),
    )
    parser.add_argument("--id", required=True, help="Schema identifier, e.g. pkg.Widget")
    parser.add_argument(
        "--source",
        action="append",
        default=[],
        metavar="LOCATION",
        help="Source location, may be repeated; supports ${name} variables",
    )
    parser.add_argument(
        "--load-type",
        choices=[load_type.value for load_type in LoadType],
        default=LoadType.FIRST.value,
        help="Use the first source that resolves, or merge all of them",
    )
    parser.add_argument(
        "--default",
        action="append",
        default=[],
        type=parse_assignment,
        metavar="KEY=VALUE",
        help="Schema default value",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        type=parse_assignment,
        metavar="KEY=VALUE",
        help="Override imported ahead of the environment",
    )
    parser.add_argument(
        "--env-prefix",
        metavar="PREFIX",
        help="Import environment variables starting with PREFIX",
    )
    parser.add_argument(
        "--classpath",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory searched for classpath resources, may be repeated",
    )
    parser.add_argument("--key", help="Print only the value of this key")
    parser.add_argument(
        "--format",
        choices=["properties", "json"],
        default="properties",
        help="Output format",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def build_settings(args: argparse.Namespace) -> ResolverSettings:
    """Read resolver settings from the environment and apply --classpath.

    Raises:
        ValidationError: If a ``PROPCONF_*`` variable holds an invalid value
    """
    settings = ResolverSettings.from_environment()
    if args.classpath:
        roots = [Path(directory) for directory in args.classpath]
        settings = settings.model_copy(update={"classpath_roots": roots})
    return settings


def build_manager(
    args: argparse.Namespace, settings: Optional[ResolverSettings] = None
) -> PropertiesManager:
    """Create the properties manager described by parsed arguments."""
    schema = Schema(
        identifier=args.id,
        sources=tuple(args.source),
        load_type=LoadType(args.load_type),
        defaults=dict(args.default),
    )

    imports = [dict(args.set)]
    if args.env_prefix:
        imports.append(EnvironmentLoader(prefix=args.env_prefix).load())

    if settings is None:
        settings = build_settings(args)

    return PropertiesManager(schema, *imports, resolver=SourceResolver(settings=settings))


def format_properties(properties: dict[str, str], format: str) -> str:
    if format == "json":
        return json.dumps(properties, indent=2, sort_keys=True)
    return "\n".join(f"{key}={properties[key]}" for key in sorted(properties))


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line tool.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    try:
        settings = build_settings(args)
    except ValidationError as e:
        print(f"error: invalid PROPCONF_* settings: {e}", file=sys.stderr)
        return 2

    try:
        manager = build_manager(args, settings)
        properties = manager.load()
    except ValidationError as e:
        print(f"error: invalid schema: {e}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        logger.debug("Loading failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.key is not None:
        value = properties.get(args.key)
        if value is None:
            print(f"error: property not found: {args.key}", file=sys.stderr)
            return 1
        print(value)
        return 0

    output = format_properties(properties, args.format)
    if output:
        print(output)
    return 0
