"""Load policies deciding which declared sources contribute properties.

``FIRST`` stops at the first location that can be opened. ``MERGE`` opens
every location and merges them in declaration order, later sources winning.
A schema without declared sources is loaded with ``FIRST`` from its
conventional default location.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..models.schemas import LoadType, Schema
from .file import parse_stream
from .merger import merge
from .resolver import SourceResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedSource:
    """Properties read from one resolved location."""

    template: str
    location: str
    properties: dict[str, str]


@dataclass
class LoadResult:
    """Sources that contribute to a load, in merge order."""

    load_type: LoadType
    attempted: list[str] = field(default_factory=list)
    sources: list[LoadedSource] = field(default_factory=list)

    @property
    def locations(self) -> list[str]:
        return [source.location for source in self.sources]

    def merged(self) -> dict[str, str]:
        """Fold the contributing sources, later ones winning."""
        return merge({}, *(source.properties for source in self.sources))


def load_location(template: str, resolver: SourceResolver) -> Optional[LoadedSource]:
    """Open and parse a single location.

    Returns:
        Loaded source, or None when the location cannot be reached
    """
    location = resolver.expand(template)
    stream = resolver.open_location(location)
    if stream is None:
        logger.debug(f"Source did not resolve: {location}")
        return None

    with stream:
        properties = parse_stream(stream, location, resolver.settings.encoding)

    logger.debug(f"Loaded {len(properties)} properties from {location}")
    return LoadedSource(template=template, location=location, properties=properties)


def load_first(templates: Sequence[str], resolver: SourceResolver) -> LoadResult:
    """Load the first location that resolves, ignoring the rest."""
    result = LoadResult(load_type=LoadType.FIRST)
    for template in templates:
        result.attempted.append(template)
        loaded = load_location(template, resolver)
        if loaded is not None:
            result.sources.append(loaded)
            break
    return result


def load_merge(templates: Sequence[str], resolver: SourceResolver) -> LoadResult:
    """Load every location that resolves, in declaration order."""
    result = LoadResult(load_type=LoadType.MERGE)
    for template in templates:
        result.attempted.append(template)
        loaded = load_location(template, resolver)
        if loaded is not None:
            result.sources.append(loaded)
    return result


LOAD_POLICIES: dict[LoadType, Callable[[Sequence[str], SourceResolver], LoadResult]] = {
    LoadType.FIRST: load_first,
    LoadType.MERGE: load_merge,
}


def source_templates(schema: Schema, resolver: SourceResolver) -> list[str]:
    """Declared locations of a schema, or its conventional default location."""
    if schema.has_sources:
        return list(schema.sources)
    return [resolver.default_location(schema.identifier)]


def load_sources(schema: Schema, resolver: SourceResolver) -> LoadResult:
    """Load the sources of a schema according to its load policy.

    Args:
        schema: Schema declaring the sources and policy
        resolver: Resolver used to open each location

    Returns:
        Load result holding only the contributing sources

    Raises:
        MalformedSourceError: If a location cannot be interpreted
        SourceReadError: If a resolved source cannot be read or parsed
    """
    if not schema.has_sources:
        return load_first(source_templates(schema, resolver), resolver)

    policy = LOAD_POLICIES[LoadType(schema.load_type)]
    return policy(schema.sources, resolver)
