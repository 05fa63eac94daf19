"""Environment variable property loader.

Turns environment variables into a flat property map that can be passed to
the properties manager as an import, with prefix filtering and nested key
support.
"""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class EnvironmentLoader:
    """Environment variable property loader.

    Supports:
    - Prefix filtering (the prefix is stripped from produced keys)
    - Nested keys from a separator (``DB__HOST`` -> ``db.host``)
    - Include/exclude regex patterns
    """

    def __init__(
        self,
        prefix: str = "",
        nested_separator: str = "__",
        lowercase: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the environment loader.

        Args:
            prefix: Only variables starting with this prefix are loaded
            nested_separator: Separator mapped to '.' in property keys
            lowercase: Whether property keys are lowercased
            environ: Mapping to read instead of ``os.environ``
        """
        self.prefix = prefix
        self.nested_separator = nested_separator
        self.lowercase = lowercase
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def load(
        self,
        include_patterns: Optional[list[str]] = None,
        exclude_patterns: Optional[list[str]] = None,
    ) -> dict[str, str]:
        """Load matching environment variables as properties.

        Args:
            include_patterns: Regex patterns a variable name must match
            exclude_patterns: Regex patterns that exclude a variable name

        Returns:
            Property map keyed by converted variable names
        """
        env_vars = self._get_filtered_env_vars(include_patterns, exclude_patterns)

        properties = {}
        for env_key, env_value in env_vars.items():
            config_key = self._env_key_to_config_key(env_key)
            if not config_key:
                continue
            properties[config_key] = env_value
            logger.debug(f"Loaded env var: {env_key} -> {config_key}")

        logger.info(f"Loaded {len(properties)} environment variables")
        return properties

    def get_env_var(self, config_key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a single environment variable by its property key.

        Args:
            config_key: Property key (converted to the variable name)
            default: Value returned when the variable is not set

        Returns:
            Raw variable value or default
        """
        return self.environ.get(self._config_key_to_env_key(config_key), default)

    def split_path_list(self, value: str) -> list[Path]:
        """Split an ``os.pathsep`` separated list into paths."""
        return [Path(item) for item in value.split(os.pathsep) if item]

    def _get_filtered_env_vars(
        self,
        include_patterns: Optional[list[str]] = None,
        exclude_patterns: Optional[list[str]] = None,
    ) -> dict[str, str]:
        """Get filtered environment variables."""
        env_vars = {}

        for key, value in self.environ.items():
            if self.prefix and not key.startswith(self.prefix):
                continue

            if include_patterns:
                if not any(re.match(pattern, key) for pattern in include_patterns):
                    continue

            if exclude_patterns:
                if any(re.match(pattern, key) for pattern in exclude_patterns):
                    continue

            env_vars[key] = value

        return env_vars

    def _env_key_to_config_key(self, env_key: str) -> str:
        """Convert environment variable name to property key."""
        key = env_key[len(self.prefix):] if self.prefix else env_key
        if self.lowercase:
            key = key.lower()
        return key.replace(self.nested_separator, ".")

    def _config_key_to_env_key(self, config_key: str) -> str:
        """Convert property key to environment variable name."""
        key = config_key.replace(".", self.nested_separator)
        return f"{self.prefix}{key.upper()}"
