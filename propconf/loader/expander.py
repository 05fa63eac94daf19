"""Expansion of ``${name}`` references in source location templates."""

import getpass
import logging
import os
import platform
import re
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_VARIABLE_PATTERN = re.compile(r"\$\{([^${}]+)\}")


def default_system_properties() -> dict[str, str]:
    """Return the built-in system properties of the running process.

    ``user.dir`` is the working directory at call time.
    """
    try:
        user_name = getpass.getuser()
    except (KeyError, OSError):
        user_name = ""

    return {
        "user.home": str(Path.home()),
        "user.dir": os.getcwd(),
        "user.name": user_name,
        "os.name": platform.system(),
        "file.separator": os.sep,
        "path.separator": os.pathsep,
        "line.separator": os.linesep,
        "tmp.dir": tempfile.gettempdir(),
    }


class VariableExpander:
    """Replaces ``${name}`` references with system properties or env vars.

    Lookup order is: explicit system properties, built-in system properties,
    environment variables. References that none of them define are left in
    place as literal text.
    """

    def __init__(
        self,
        system_properties: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        include_builtin: bool = True,
    ):
        """Initialize the expander.

        Args:
            system_properties: Extra properties taking precedence over the environment
            environ: Mapping used instead of ``os.environ``
            include_builtin: Whether the built-in system properties are consulted
        """
        self._system_properties = dict(system_properties or {})
        self._environ = environ
        self._include_builtin = include_builtin

    def lookup(self, name: str) -> Optional[str]:
        """Resolve a single variable name, or None when undefined."""
        if name in self._system_properties:
            return self._system_properties[name]

        if self._include_builtin:
            builtin = default_system_properties()
            if name in builtin:
                return builtin[name]

        environ = os.environ if self._environ is None else self._environ
        return environ.get(name)

    def expand(self, template: str) -> str:
        """Expand every defined reference in ``template``.

        Args:
            template: Text possibly containing ``${name}`` references

        Returns:
            Expanded text
        """

        def replace(match: re.Match) -> str:
            value = self.lookup(match.group(1))
            if value is None:
                logger.debug(f"Leaving undefined variable as literal: {match.group(0)}")
                return match.group(0)
            return value

        return _VARIABLE_PATTERN.sub(replace, template)


# Shared instance used when no expander is injected
DEFAULT_EXPANDER = VariableExpander()
