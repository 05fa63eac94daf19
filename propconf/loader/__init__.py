"""Property loader package.

This package resolves source locations into byte streams, parses them into
flat property maps and combines them according to a schema's load policy.
"""

from .env import EnvironmentLoader
from .expander import DEFAULT_EXPANDER, VariableExpander, default_system_properties
from .file import SourceFormat, detect_format, parse_content, parse_stream
from .merger import changed_keys, merge, merge_imports
from .policy import LoadedSource, LoadResult, load_first, load_merge, load_sources
from .resolver import ResourceLoader, SearchPathResourceLoader, SourceResolver

__all__ = [
    "DEFAULT_EXPANDER",
    "EnvironmentLoader",
    "LoadResult",
    "LoadedSource",
    "ResourceLoader",
    "SearchPathResourceLoader",
    "SourceFormat",
    "SourceResolver",
    "VariableExpander",
    "changed_keys",
    "default_system_properties",
    "detect_format",
    "load_first",
    "load_merge",
    "load_sources",
    "merge",
    "merge_imports",
    "parse_content",
    "parse_stream",
]
