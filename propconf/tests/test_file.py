"""Tests for parsing source streams into property maps."""

import io

import pytest

from propconf.errors import SourceReadError
from propconf.loader.file import SourceFormat, detect_format, parse_content, parse_stream


class TestDetectFormat:
    """Test cases for detect_format()."""

    @pytest.mark.parametrize(
        "location, expected",
        [
            ("app.properties", SourceFormat.PROPERTIES),
            ("/etc/app/config.json", SourceFormat.JSON),
            ("classpath:pkg/App.yaml", SourceFormat.YAML),
            ("file:app.YML", SourceFormat.YAML),
            ("settings.ini", SourceFormat.INI),
            ("pyproject.toml", SourceFormat.TOML),
            ("http://config.local/app.json?version=2#top", SourceFormat.JSON),
        ],
    )
    def test_known_extensions(self, location, expected):
        """Test formats are detected from extensions."""
        assert detect_format(location) == expected

    @pytest.mark.parametrize("location", ["app.conf", "app", "http://config.local/settings"])
    def test_unknown_extension_is_properties(self, location):
        """Test unknown extensions fall back to properties."""
        assert detect_format(location) == SourceFormat.PROPERTIES


class TestPropertiesFormat:
    """Test cases for Java-style properties content."""

    def test_key_value_pairs(self):
        """Test simple key=value lines."""
        content = b"server.host=localhost\nserver.port=8080\n"
        result = parse_content(content, SourceFormat.PROPERTIES)
        assert result == {"server.host": "localhost", "server.port": "8080"}

    def test_comments_and_separators(self):
        """Test comments and alternative separators."""
        content = b"# comment\n! another comment\ncolon: value1\nspace value2\nequals = value3\n"
        result = parse_content(content, SourceFormat.PROPERTIES)
        assert result == {"colon": "value1", "space": "value2", "equals": "value3"}

    def test_line_continuation(self):
        """Test backslash continuation lines are joined."""
        content = b"hosts=alpha,\\\n    beta,\\\n    gamma\n"
        result = parse_content(content, SourceFormat.PROPERTIES)
        assert result == {"hosts": "alpha,beta,gamma"}

    def test_unicode_content(self):
        """Test UTF-8 content is decoded with the given encoding."""
        content = "greeting=héllo\n".encode("utf-8")
        result = parse_content(content, SourceFormat.PROPERTIES, encoding="utf-8")
        assert result == {"greeting": "héllo"}

    def test_empty_content(self):
        """Test empty sources contribute nothing."""
        assert parse_content(b"", SourceFormat.PROPERTIES) == {}


class TestStructuredFormats:
    """Test cases for JSON, YAML, INI and TOML content."""

    def test_json_flattened(self):
        """Test nested JSON objects become dotted keys."""
        content = b'{"db": {"host": "localhost", "port": 5432}, "debug": true, "tags": ["a", "b"]}'
        result = parse_content(content, SourceFormat.JSON)
        assert result == {"db.host": "localhost", "db.port": "5432", "debug": "true", "tags": "a,b"}

    def test_empty_json(self):
        """Test empty JSON sources contribute nothing."""
        assert parse_content(b"  ", SourceFormat.JSON) == {}

    def test_json_top_level_list_raises(self):
        """Test non-mapping documents are rejected."""
        with pytest.raises(SourceReadError):
            parse_content(b"[1, 2]", SourceFormat.JSON)

    def test_undecodable_json_raises(self):
        """Test decoding failures are wrapped."""
        with pytest.raises(SourceReadError):
            parse_content(b"\xff\xfe{}", SourceFormat.JSON, encoding="utf-8")

    def test_invalid_json_raises(self):
        """Test parse errors are wrapped."""
        with pytest.raises(SourceReadError):
            parse_content(b"{not json", SourceFormat.JSON)

    def test_yaml_flattened(self):
        """Test nested YAML mappings become dotted keys."""
        content = b"server:\n  host: example.org\n  port: 443\nempty:\n"
        result = parse_content(content, SourceFormat.YAML)
        assert result == {"server.host": "example.org", "server.port": "443", "empty": ""}

    def test_empty_yaml(self):
        """Test empty YAML documents contribute nothing."""
        assert parse_content(b"", SourceFormat.YAML) == {}

    def test_invalid_yaml_raises(self):
        """Test YAML errors are wrapped."""
        with pytest.raises(SourceReadError):
            parse_content(b"key: [unclosed", SourceFormat.YAML)

    def test_ini_sections(self):
        """Test INI sections prefix their keys."""
        content = b"[database]\nHost = db.local\nport = 5432\n"
        result = parse_content(content, SourceFormat.INI)
        assert result == {"database.Host": "db.local", "database.port": "5432"}

    def test_toml_tables(self):
        """Test TOML tables become dotted keys."""
        content = b'title = "app"\n[server]\nport = 8080\nsecure = false\n'
        result = parse_content(content, SourceFormat.TOML)
        assert result == {"title": "app", "server.port": "8080", "server.secure": "false"}


class TestParseStream:
    """Test cases for parse_stream()."""

    def test_format_from_location(self):
        """Test the location selects the parser."""
        stream = io.BytesIO(b'{"a": {"b": "c"}}')
        assert parse_stream(stream, "classpath:app.json") == {"a.b": "c"}

    def test_read_failure_raises(self):
        """Test stream read errors are wrapped."""

        class BrokenStream(io.BytesIO):
            def read(self, *args):
                raise OSError("disk error")

        with pytest.raises(SourceReadError):
            parse_stream(BrokenStream(), "app.properties")
