"""Source location resolution.

Turns a source location template into a readable byte stream. Locations
are expanded with a ``VariableExpander`` and dispatched on their scheme:

- no scheme (or a Windows drive letter): filesystem path
- ``file:``: filesystem path, ``file:relative``, ``file:/abs`` or ``file:///abs``
- ``http:`` / ``https:``: fetched with requests
- ``classpath:``: resource bundled with the running program

A location that cannot be opened yields ``None`` so that load policies can
try the next one. Locations that cannot be interpreted raise
``MalformedSourceError``.
"""

import io
import logging
import re
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union
from urllib.parse import unquote, urlparse

import requests

from ..errors import MalformedSourceError, SourceReadError
from ..models.schemas import ResolverSettings
from .expander import DEFAULT_EXPANDER, VariableExpander

logger = logging.getLogger(__name__)

CLASSPATH_SCHEME = "classpath"
FILE_SCHEME = "file"
URL_SCHEMES = ("http", "https")

_SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):(.*)$", re.DOTALL)
_ABSENT_HTTP_STATUSES = (404, 410)


class ResourceLoader(Protocol):
    """Capability to open resources bundled with the running program."""

    def open_resource(self, name: str) -> Optional[BinaryIO]:
        ...


class SearchPathResourceLoader:
    """Resource loader searching a list of root directories in order.

    With no explicit roots, ``sys.path`` is searched at lookup time, so a
    resource named ``pkg/Widget.properties`` is found next to the ``pkg``
    package wherever it is importable from.
    """

    def __init__(self, roots: Optional[Iterable[Union[str, Path]]] = None):
        self._roots = None if roots is None else [Path(root) for root in roots]

    @property
    def roots(self) -> list[Path]:
        if self._roots is not None:
            return list(self._roots)
        return [Path(entry) if entry else Path.cwd() for entry in sys.path]

    def find_resource(self, name: str) -> Optional[Path]:
        """Return the first existing file for ``name`` under the roots.

        Names resolving outside a root, e.g. through ``..``, are not found.
        """
        relative = name.lstrip("/")
        for root in self.roots:
            candidate = root / relative
            if not candidate.resolve().is_relative_to(root.resolve()):
                logger.debug(f"Resource {name} escapes root {root}, skipping")
                continue
            if candidate.is_file():
                return candidate
        return None

    def open_resource(self, name: str) -> Optional[BinaryIO]:
        path = self.find_resource(name)
        if path is None:
            return None
        try:
            return open(path, "rb")
        except FileNotFoundError:
            return None


class SourceResolver:
    """Expands source location templates and opens them as byte streams."""

    def __init__(
        self,
        expander: Optional[VariableExpander] = None,
        resource_loader: Optional[ResourceLoader] = None,
        settings: Optional[ResolverSettings] = None,
    ):
        """Initialize the resolver.

        Args:
            expander: Variable expander, the shared default when omitted
            resource_loader: Loader for ``classpath:`` locations
            settings: Resolver settings, defaults when omitted
        """
        self.settings = settings or ResolverSettings()
        self.expander = expander or DEFAULT_EXPANDER
        if resource_loader is None:
            roots = self.settings.classpath_roots or None
            resource_loader = SearchPathResourceLoader(roots)
        self.resource_loader = resource_loader

    def expand(self, template: str) -> str:
        return self.expander.expand(template)

    def default_location(self, identifier: str) -> str:
        """Conventional location for a schema without declared sources.

        ``"pkg.Widget"`` maps to ``"classpath:pkg/Widget.properties"``.
        """
        resource = identifier.replace(".", "/") + self.settings.default_extension
        return f"{CLASSPATH_SCHEME}:{resource}"

    def open(self, template: str) -> Optional[BinaryIO]:
        """Open the stream behind a source location template.

        Args:
            template: Location, possibly containing ``${name}`` references

        Returns:
            Binary stream, or None when the location cannot be reached

        Raises:
            MalformedSourceError: If the location cannot be interpreted
            SourceReadError: If the location exists but opening it fails
        """
        return self.open_location(self.expand(template))

    def open_location(self, location: str) -> Optional[BinaryIO]:
        """Open an already expanded location.

        Raises:
            MalformedSourceError: If the location cannot be interpreted
            SourceReadError: If the location exists but opening it fails
        """
        scheme, remainder = self._split(location)

        if scheme is None:
            return self._open_file(Path(location))
        if scheme == FILE_SCHEME:
            return self._open_file(self._file_uri_path(location, remainder))
        if scheme in URL_SCHEMES:
            return self._open_url(location)
        if scheme == CLASSPATH_SCHEME:
            return self._open_resource(self._resource_name(location, remainder))

        raise MalformedSourceError(f"Unsupported source scheme '{scheme}' in: {location}")

    def local_path(self, template: str) -> Optional[Path]:
        """Return the filesystem path behind a location, if it has one.

        Classpath locations only have a path when the resource loader can
        locate the resource on disk.
        """
        location = self.expand(template)
        scheme, remainder = self._split(location)

        if scheme is None:
            return Path(location)
        if scheme == FILE_SCHEME:
            return self._file_uri_path(location, remainder)
        if scheme == CLASSPATH_SCHEME:
            find_resource = getattr(self.resource_loader, "find_resource", None)
            if find_resource is not None:
                return find_resource(self._resource_name(location, remainder))
        return None

    def _split(self, location: str) -> tuple[Optional[str], str]:
        """Split a location into its lowercased scheme and remainder."""
        if not location or not location.strip():
            raise MalformedSourceError("Source location is empty")

        match = _SCHEME_PATTERN.match(location)
        # A single letter is a Windows drive, not a scheme
        if match is None or len(match.group(1)) == 1:
            return None, location
        return match.group(1).lower(), match.group(2)

    def _file_uri_path(self, location: str, remainder: str) -> Path:
        if remainder.startswith("//"):
            parsed = urlparse(location)
            if parsed.netloc not in ("", "localhost"):
                raise MalformedSourceError(f"File location with remote host: {location}")
            path = unquote(parsed.path)
        else:
            path = unquote(remainder)

        if not path:
            raise MalformedSourceError(f"File location without a path: {location}")
        return Path(path)

    def _resource_name(self, location: str, remainder: str) -> str:
        name = remainder.lstrip("/")
        if not name:
            raise MalformedSourceError(f"Classpath location without a resource: {location}")
        if ".." in name.split("/"):
            raise MalformedSourceError(f"Classpath resource must not contain '..': {location}")
        return name

    def _open_file(self, path: Path) -> Optional[BinaryIO]:
        if path.is_dir():
            logger.debug(f"Source is a directory, skipping: {path}")
            return None

        try:
            return open(path, "rb")
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"Source file not found: {path}")
            return None
        except OSError as e:
            raise SourceReadError(f"Failed to open source file {path}: {e}") from e

    def _open_url(self, url: str) -> Optional[BinaryIO]:
        try:
            response = requests.get(url, timeout=self.settings.http_timeout)
        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ) as e:
            raise MalformedSourceError(f"Invalid source URL {url}: {e}") from e
        except requests.exceptions.ConnectionError as e:
            logger.debug(f"Source URL unreachable: {url} ({e})")
            return None
        except requests.exceptions.RequestException as e:
            raise SourceReadError(f"Failed to fetch source URL {url}: {e}") from e

        if response.status_code in _ABSENT_HTTP_STATUSES:
            logger.debug(f"Source URL not found: {url} ({response.status_code})")
            return None

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise SourceReadError(f"Failed to fetch source URL {url}: {e}") from e

        return io.BytesIO(response.content)

    def _open_resource(self, name: str) -> Optional[BinaryIO]:
        stream = self.resource_loader.open_resource(name)
        if stream is None:
            logger.debug(f"Classpath resource not found: {name}")
        return stream
