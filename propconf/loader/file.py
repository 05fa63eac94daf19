"""Parsing of source streams into flat property maps.

Java-style ``.properties`` content is the native format and is also used
for unknown extensions. JSON, YAML, INI and TOML sources are parsed and
flattened into dot-notation keys with string values.
"""

import configparser
import json
import logging
import tomllib
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, BinaryIO

import yaml
from jproperties import Properties

from ..errors import SourceReadError
from ..utils.converter import to_property_map

logger = logging.getLogger(__name__)


class SourceFormat(Enum):
    """Supported source formats."""

    PROPERTIES = "properties"
    JSON = "json"
    YAML = "yaml"
    INI = "ini"
    TOML = "toml"


_FORMAT_MAP = {
    ".properties": SourceFormat.PROPERTIES,
    ".json": SourceFormat.JSON,
    ".yaml": SourceFormat.YAML,
    ".yml": SourceFormat.YAML,
    ".ini": SourceFormat.INI,
    ".toml": SourceFormat.TOML,
}


def detect_format(location: str) -> SourceFormat:
    """Detect the format of a source from its location's extension.

    Query strings and fragments of URLs are ignored. Unknown extensions are
    read as properties.
    """
    path = location.split("?", 1)[0].split("#", 1)[0]
    suffix = PurePosixPath(path).suffix.lower()
    return _FORMAT_MAP.get(suffix, SourceFormat.PROPERTIES)


def parse_stream(
    stream: BinaryIO, location: str, encoding: str = "utf-8"
) -> dict[str, str]:
    """Read a whole stream and parse it into properties.

    Args:
        stream: Open binary stream, closed by the caller
        location: Expanded location the stream was opened from
        encoding: Text encoding of the content

    Returns:
        Flat property map

    Raises:
        SourceReadError: If the stream cannot be read or parsed
    """
    try:
        content = stream.read()
    except OSError as e:
        raise SourceReadError(f"Failed to read source {location}: {e}") from e

    format = detect_format(location)
    properties = parse_content(content, format, encoding, location)
    logger.debug(f"Parsed {len(properties)} properties from {location} ({format.value})")
    return properties


def parse_content(
    content: bytes,
    format: SourceFormat,
    encoding: str = "utf-8",
    location: str = "<memory>",
) -> dict[str, str]:
    """Parse raw source content in the given format.

    Raises:
        SourceReadError: If parsing fails
    """
    try:
        if format == SourceFormat.PROPERTIES:
            return _parse_properties(content, encoding)

        text = content.decode(encoding)

        if format == SourceFormat.JSON:
            data = json.loads(text) if text.strip() else {}
        elif format == SourceFormat.YAML:
            data = yaml.safe_load(text) or {}
        elif format == SourceFormat.INI:
            data = _parse_ini(text)
        elif format == SourceFormat.TOML:
            data = tomllib.loads(text)
        else:
            raise SourceReadError(f"Unsupported format: {format}")

    except SourceReadError:
        raise
    except Exception as e:
        raise SourceReadError(
            f"Failed to parse {format.value} source {location}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise SourceReadError(
            f"Expected a mapping at the top of {format.value} source {location}, "
            f"got {type(data).__name__}"
        )
    return to_property_map(data)


def _parse_properties(content: bytes, encoding: str) -> dict[str, str]:
    parser = Properties()
    parser.load(content, encoding)
    return {str(key): value.data for key, value in parser.items()}


def _parse_ini(text: str) -> dict[str, Any]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # keep key case
    parser.read_string(text)

    config: dict[str, Any] = dict(parser.defaults())
    for section_name in parser.sections():
        config[section_name] = dict(parser.items(section_name, raw=True))
    return config
