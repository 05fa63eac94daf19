"""Declarative configuration property loading.

A ``Schema`` names the keys, defaults and source locations of a set of
configuration properties. ``PropertiesManager`` resolves those sources,
merges them with defaults and caller supplied imports, and serves the
result under a reader/writer lock with explicit reload support.
"""

from .errors import ConfigurationError, MalformedSourceError, SourceReadError
from .loader.expander import VariableExpander
from .loader.resolver import SearchPathResourceLoader, SourceResolver
from .manager import PropertiesManager, ReloadEvent, create
from .models.schemas import LoadType, ResolverSettings, Schema

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "LoadType",
    "MalformedSourceError",
    "PropertiesManager",
    "ReloadEvent",
    "ResolverSettings",
    "Schema",
    "SearchPathResourceLoader",
    "SourceReadError",
    "SourceResolver",
    "VariableExpander",
    "create",
]
