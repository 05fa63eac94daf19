"""Shared fixtures for propconf tests."""

from pathlib import Path
from typing import Optional

import pytest

from propconf.loader.expander import VariableExpander
from propconf.loader.resolver import SearchPathResourceLoader, SourceResolver


class CountingResolver(SourceResolver):
    """Resolver recording every expanded location it is asked to open."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.opened: list[str] = []
        self.expansions = 0

    def expand(self, template: str) -> str:
        self.expansions += 1
        return super().expand(template)

    def open_location(self, location: str):
        self.opened.append(location)
        return super().open_location(location)

    @property
    def open_count(self) -> int:
        return len(self.opened)


@pytest.fixture()
def classpath_dir(tmp_path: Path) -> Path:
    """Directory used as the only classpath root."""
    directory = tmp_path / "classpath"
    directory.mkdir()
    return directory


@pytest.fixture()
def expander() -> VariableExpander:
    """Expander isolated from the real environment."""
    return VariableExpander(
        system_properties={"app.home": "/opt/app"},
        environ={"CONFIG_DIR": "/etc/app"},
        include_builtin=False,
    )


@pytest.fixture()
def resolver(classpath_dir: Path) -> CountingResolver:
    return CountingResolver(resource_loader=SearchPathResourceLoader([classpath_dir]))


@pytest.fixture()
def write_properties():
    """Write a properties file and return its path."""

    def _write(path: Path, values: Optional[dict] = None, text: Optional[str] = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if text is None:
            text = "".join(f"{key}={value}\n" for key, value in (values or {}).items())
        path.write_text(text, encoding="utf-8")
        return path

    return _write
