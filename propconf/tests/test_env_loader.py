"""Tests for the environment variable property loader."""

import os
from pathlib import Path

from propconf.loader.env import EnvironmentLoader


class TestEnvironmentLoader:
    """Test cases for EnvironmentLoader."""

    def setup_method(self):
        self.environ = {
            "APP_DB__HOST": "db.local",
            "APP_DB__PORT": "5432",
            "APP_DEBUG": "true",
            "OTHER_VALUE": "ignored",
        }

    def test_prefix_filtering(self):
        """Test only prefixed variables are loaded and the prefix is stripped."""
        loader = EnvironmentLoader(prefix="APP_", environ=self.environ)

        assert loader.load() == {"db.host": "db.local", "db.port": "5432", "debug": "true"}

    def test_without_prefix(self):
        """Test all variables are loaded without a prefix."""
        loader = EnvironmentLoader(environ={"PATH_LIKE": "/bin", "A__B": "c"})

        assert loader.load() == {"path_like": "/bin", "a.b": "c"}

    def test_case_preserved(self):
        """Test keys keep their case when lowercasing is off."""
        loader = EnvironmentLoader(prefix="APP_", lowercase=False, environ=self.environ)

        assert loader.load()["DB.HOST"] == "db.local"

    def test_values_are_raw_strings(self):
        """Test no type conversion is applied."""
        loader = EnvironmentLoader(prefix="APP_", environ=self.environ)

        assert loader.load()["db.port"] == "5432"

    def test_include_and_exclude_patterns(self):
        """Test regex filters."""
        loader = EnvironmentLoader(prefix="APP_", environ=self.environ)

        assert loader.load(include_patterns=[r"APP_DB__"]) == {"db.host": "db.local", "db.port": "5432"}
        assert loader.load(exclude_patterns=[r"APP_DB__"]) == {"debug": "true"}

    def test_prefix_only_variable_skipped(self):
        """Test a variable equal to the prefix produces no key."""
        loader = EnvironmentLoader(prefix="APP_", environ={"APP_": "x"})

        assert loader.load() == {}

    def test_get_env_var(self):
        """Test single lookups convert the key to a variable name."""
        loader = EnvironmentLoader(prefix="APP_", environ=self.environ)

        assert loader.get_env_var("db.host") == "db.local"
        assert loader.get_env_var("missing", "fallback") == "fallback"

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is used by default."""
        monkeypatch.setenv("PROPCONF_ENVTEST_NAME", "value")
        loader = EnvironmentLoader(prefix="PROPCONF_ENVTEST_")

        assert loader.load() == {"name": "value"}

    def test_split_path_list(self):
        """Test path lists are split on os.pathsep."""
        loader = EnvironmentLoader()
        value = os.pathsep.join(["/a", "", "/b"])

        assert loader.split_path_list(value) == [Path("/a"), Path("/b")]
