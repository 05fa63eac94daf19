"""Properties manager owning the live, reloadable property set."""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .loader.merger import changed_keys, merge, merge_imports
from .loader.policy import LoadResult, load_sources, source_templates
from .loader.resolver import SourceResolver
from .models.schemas import Schema
from .utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReloadEvent:
    """Property set change published after a successful reload."""

    old_properties: dict[str, str]
    new_properties: dict[str, str]
    changed_keys: frozenset[str]


ReloadListener = Callable[[ReloadEvent], None]


class PropertiesManager:
    """Loads the properties of a schema and guards concurrent access.

    Each load builds a complete property set (defaults, then imports, then
    the sources selected by the schema's load policy) in a scratch
    dictionary and publishes it under the write lock only once the whole
    build succeeded. Readers therefore always observe exactly one completed
    build, and a failed reload leaves the previous properties in place.

    Imports are applied in reverse: for ``PropertiesManager(schema, a, b)``
    a key present in both ``a`` and ``b`` takes its value from ``a``.
    """

    def __init__(
        self,
        schema: Schema,
        *imports: Mapping,
        resolver: Optional[SourceResolver] = None,
    ):
        """Initialize the properties manager.

        Args:
            schema: Schema describing defaults, sources and load policy
            *imports: Property maps overriding defaults, first one wins
            resolver: Source resolver, a default resolver when omitted
        """
        self.schema = schema
        self.resolver = resolver or SourceResolver()
        self._imports = tuple(imports)
        self._properties: dict[str, str] = {}
        self._loaded = False
        self._last_result: Optional[LoadResult] = None
        self._lock = ReadWriteLock()
        self._listeners: list[ReloadListener] = []
        self._listeners_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(schema={self.schema.identifier!r}, "
            f"loaded={self._loaded})"
        )

    @property
    def imports(self) -> tuple[Mapping, ...]:
        return self._imports

    @property
    def loaded(self) -> bool:
        """Whether a build has completed successfully."""
        with self._lock.read_locked():
            return self._loaded

    @property
    def last_result(self) -> Optional[LoadResult]:
        """Sources that contributed to the current property set."""
        with self._lock.read_locked():
            return self._last_result

    def load(self) -> dict[str, str]:
        """Build the property set unless it has already been built.

        Returns:
            Snapshot of the current properties

        Raises:
            ConfigurationError: If a source is malformed or cannot be read
        """
        with self._lock.write_locked():
            if not self._loaded:
                self._rebuild()
            return dict(self._properties)

    def reload(self) -> dict[str, str]:
        """Rebuild the property set from scratch.

        Reload listeners are notified after the write lock is released.

        Returns:
            Snapshot of the rebuilt properties

        Raises:
            ConfigurationError: If a source is malformed or cannot be read,
                in which case the previous properties are kept
        """
        with self._lock.write_locked():
            old_properties = self._properties
            self._rebuild()
            new_properties = self._properties

        event = ReloadEvent(
            old_properties=dict(old_properties),
            new_properties=dict(new_properties),
            changed_keys=frozenset(changed_keys(old_properties, new_properties)),
        )
        self._notify(event)
        return dict(new_properties)

    def properties(self) -> dict[str, str]:
        """Return a snapshot of the current properties."""
        with self._lock.read_locked():
            return dict(self._properties)

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a single property.

        Args:
            key: Property key
            default: Value returned when the key is not present

        Returns:
            Property value or default
        """
        with self._lock.read_locked():
            return self._properties.get(key, default)

    def source_paths(self) -> list[Path]:
        """Filesystem paths of the schema's sources that have one.

        Locations are expanded at call time; URL sources and classpath
        resources that are not on disk are left out.
        """
        paths = []
        for template in source_templates(self.schema, self.resolver):
            path = self.resolver.local_path(template)
            if path is not None:
                paths.append(path)
        return paths

    def add_reload_listener(self, listener: ReloadListener) -> None:
        """Register a callback invoked after every successful reload."""
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_reload_listener(self, listener: ReloadListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _rebuild(self) -> None:
        """Build and publish a new property set. Caller holds the write lock."""
        properties = merge(self.schema.defaults, merge_imports(self._imports))
        result = load_sources(self.schema, self.resolver)
        properties = merge(properties, result.merged())

        self._properties = properties
        self._last_result = result
        self._loaded = True

        logger.info(
            f"Loaded {len(properties)} properties for {self.schema.identifier} "
            f"from {len(result.sources)} source(s): {result.locations}"
        )

    def _notify(self, event: ReloadEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                name = getattr(listener, "__name__", repr(listener))
                logger.warning(f"Reload listener {name} failed: {e}")


def create(
    schema: Schema, *imports: Mapping, resolver: Optional[SourceResolver] = None
) -> PropertiesManager:
    """Create a properties manager and load it.

    Raises:
        ConfigurationError: If a source is malformed or cannot be read
    """
    manager = PropertiesManager(schema, *imports, resolver=resolver)
    manager.load()
    return manager
