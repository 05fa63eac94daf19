"""Pydantic models describing property schemas and resolver settings.

A ``Schema`` is the declarative description handed to the properties
manager: an identifier, the ordered source locations to load from, the load
policy and the per-key default values. ``ResolverSettings`` and
``HotReloadSettings`` configure the loading machinery itself.
"""

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.converter import to_property_value


class LoadType(str, Enum):
    """Strategy used to combine the declared sources of a schema."""

    FIRST = "first"  # First source that resolves wins
    MERGE = "merge"  # Every source that resolves is merged, later wins


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )


class Schema(BaseConfig):
    """Immutable description of a set of configuration properties."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    identifier: str = Field(
        ..., min_length=1, description="Schema identifier, e.g. 'pkg.Widget'"
    )
    sources: tuple[str, ...] = Field(
        default=(), description="Source location templates in declaration order"
    )
    load_type: LoadType = Field(
        default=LoadType.FIRST, description="How declared sources are combined"
    )
    defaults: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Default value for each declared key, read-only",
    )

    @field_validator("identifier")
    @classmethod
    def _validate_identifier(cls, v: str) -> str:
        if v != v.strip() or any(ch.isspace() for ch in v):
            raise ValueError(f"identifier must not contain whitespace: {v!r}")
        return v

    @field_validator("sources", mode="before")
    @classmethod
    def _validate_sources(cls, v: Any) -> Any:
        if isinstance(v, str):
            return (v,)
        return v

    @field_validator("sources")
    @classmethod
    def _reject_blank_sources(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for location in v:
            if not location.strip():
                raise ValueError("source locations must not be blank")
        return v

    @field_validator("defaults", mode="before")
    @classmethod
    def _stringify_defaults(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {str(key): to_property_value(value) for key, value in v.items()}
        return v

    @field_validator("defaults")
    @classmethod
    def _freeze_defaults(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("defaults")
    def _serialize_defaults(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    @classmethod
    def for_type(cls, target: type, **kwargs: Any) -> "Schema":
        """Create a schema whose identifier is derived from a Python class.

        Args:
            target: Class the schema describes
            **kwargs: Remaining schema fields

        Returns:
            Schema identified as ``module.QualifiedName``
        """
        identifier = f"{target.__module__}.{target.__qualname__}"
        return cls(identifier=identifier, **kwargs)

    def default_for(self, key: str) -> Optional[str]:
        """Return the declared default for ``key``, or None."""
        return self.defaults.get(key)

    @property
    def has_sources(self) -> bool:
        return bool(self.sources)


class ResolverSettings(BaseConfig):
    """Settings for opening and decoding source streams."""

    encoding: str = Field(default="utf-8", description="Text encoding of sources")
    http_timeout: Optional[float] = Field(
        default=None, gt=0, description="Seconds to wait for URL sources, None waits forever"
    )
    classpath_roots: list[Path] = Field(
        default_factory=list,
        description="Roots searched for classpath resources, empty means sys.path",
    )
    default_extension: str = Field(
        default=".properties",
        description="Extension of the conventional per-schema resource",
    )

    @classmethod
    def from_environment(cls, prefix: str = "PROPCONF_") -> "ResolverSettings":
        """Build settings from ``PROPCONF_*`` environment variables.

        Recognised variables are ``ENCODING``, ``HTTP_TIMEOUT`` and
        ``CLASSPATH`` (an ``os.pathsep`` separated list of directories).

        Raises:
            ValidationError: If a variable holds an invalid value
        """
        from ..loader.env import EnvironmentLoader

        env = EnvironmentLoader(prefix=prefix)
        values: dict[str, Any] = {}

        encoding = env.get_env_var("encoding")
        if encoding:
            values["encoding"] = encoding

        timeout = env.get_env_var("http_timeout")
        if timeout:
            values["http_timeout"] = timeout

        classpath = env.get_env_var("classpath")
        if classpath:
            values["classpath_roots"] = env.split_path_list(classpath)

        return cls(**values)


class HotReloadSettings(BaseConfig):
    """Hot reload configuration."""

    enabled: bool = True
    debounce_delay: float = Field(
        default=0.5, ge=0, description="Seconds to wait for rapid changes to settle"
    )
    recursive: bool = False
