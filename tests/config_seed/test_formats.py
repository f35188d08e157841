# === NAVMAP v1 ===
# {
#   "module": "tests.config_seed.test_formats",
#   "purpose": "Reader and dispatcher coverage for .properties, YAML, and TOML files.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Reader and dispatcher coverage for .properties, YAML, and TOML files.

Each reader must yield a flat ``str -> str`` mapping, render scalars as text,
and raise :class:`ParseError` (or :class:`MissingFile`) with the offending
path. The dispatcher must honour the TOML > YAML > properties precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ConfigSeed.errors import ErrorKind, MissingFile, ParseError
from ConfigSeed.formats import (
    PropertyFormat,
    file_extension,
    read_properties_file,
    read_property_file,
    read_toml_file,
    read_yaml_file,
    resolve_format,
)

# --- Test Cases ---


@pytest.mark.parametrize(
    ("filename", "text"),
    [
        ("app.properties", "key=value"),
        ("app.yaml", "key: value"),
        ("app.toml", 'key = "value"'),
    ],
)
def test_single_pair_parses_in_every_format(make_config, write_file, filename, text) -> None:
    """``key=value`` and its YAML/TOML equivalents yield exactly ``{"key": "value"}``."""

    path = write_file(filename, text)
    assert read_property_file(path, make_config()) == {"key": "value"}


def test_properties_reader_handles_comments_continuations_and_escapes(write_file) -> None:
    path = write_file(
        "app.properties",
        "# comment\n"
        "! another comment\n"
        "a = one \\\n"
        "    two\n"
        "b:colon\n"
        "c\\ d=spaced key\n"
        "unicode=caf\\u00e9\n",
    )

    assert read_properties_file(path) == {
        "a": "one two",
        "b": "colon",
        "c d": "spaced key",
        "unicode": "café",
    }


def test_properties_reader_reads_utf8(write_file) -> None:
    path = write_file("app.properties", "greeting=héllo wörld\n")
    assert read_properties_file(path) == {"greeting": "héllo wörld"}


def test_properties_reader_rejects_invalid_unicode_escape(write_file) -> None:
    path = write_file("bad.properties", "key=\\uZZZZ\n")
    with pytest.raises(ParseError) as exc_info:
        read_properties_file(path)
    assert exc_info.value.path == path


@pytest.mark.parametrize("text", ["key=\\ud800\n", "\\udfff=value\n"])
def test_properties_reader_rejects_lone_surrogate_escape(write_file, text: str) -> None:
    path = write_file("surrogate.properties", text)
    with pytest.raises(ParseError) as exc_info:
        read_properties_file(path)
    assert exc_info.value.path == path
    assert "UTF-8" in str(exc_info.value)


def test_reader_rejects_non_utf8_bytes(config_root: Path) -> None:
    path = config_root / "latin.properties"
    path.write_bytes(b"key=caf\xe9\n")
    with pytest.raises(ParseError):
        read_properties_file(path)


def test_yaml_reader_stringifies_scalars(write_file) -> None:
    path = write_file(
        "app.yaml",
        "port: 8080\nenabled: true\ndisabled: false\nratio: 0.5\nempty:\nname: core\n",
    )

    assert read_yaml_file(path) == {
        "port": "8080",
        "enabled": "true",
        "disabled": "false",
        "ratio": "0.5",
        "empty": "",
        "name": "core",
    }


def test_yaml_reader_renders_nested_values_as_json(write_file) -> None:
    path = write_file("app.yaml", "outer:\n  inner: 1\nitems:\n  - a\n  - b\n")
    props = read_yaml_file(path)

    assert set(props) == {"outer", "items"}
    assert json.loads(props["outer"]) == {"inner": 1}
    assert json.loads(props["items"]) == ["a", "b"]


def test_yaml_reader_empty_document_is_empty_mapping(write_file) -> None:
    path = write_file("empty.yaml", "")
    assert read_yaml_file(path) == {}


def test_yaml_reader_rejects_invalid_syntax(write_file) -> None:
    path = write_file("bad.yaml", "key: [unclosed\n")
    with pytest.raises(ParseError) as exc_info:
        read_yaml_file(path)
    assert exc_info.value.kind is ErrorKind.PARSE
    assert "bad.yaml" in str(exc_info.value)


def test_yaml_reader_rejects_top_level_sequence(write_file) -> None:
    path = write_file("list.yaml", "- a\n- b\n")
    with pytest.raises(ParseError):
        read_yaml_file(path)


def test_toml_reader_flattens_top_level(write_file) -> None:
    path = write_file(
        "app.toml",
        'Port = 48061\nPersistence = "file"\nEnabled = true\n\n[Server]\nHost = "localhost"\n',
    )
    props = read_toml_file(path)

    assert props["Port"] == "48061"
    assert props["Persistence"] == "file"
    assert props["Enabled"] == "true"
    assert json.loads(props["Server"]) == {"Host": "localhost"}


def test_toml_reader_rejects_invalid_document(write_file) -> None:
    path = write_file("bad.toml", "key = \n")
    with pytest.raises(ParseError):
        read_toml_file(path)


def test_missing_file_raises_missing_file(config_root: Path) -> None:
    missing = config_root / "absent.properties"
    with pytest.raises(MissingFile) as exc_info:
        read_properties_file(missing)
    assert isinstance(exc_info.value, ParseError)
    assert exc_info.value.path == missing


def test_resolve_format_precedence(make_config) -> None:
    """An extension listed for both TOML and YAML resolves to TOML."""

    config = make_config(yaml_extensions=[".yaml", ".conf"], toml_extensions=[".toml", ".conf"])

    assert resolve_format("service.conf", config) is PropertyFormat.TOML
    assert resolve_format("service.toml", config) is PropertyFormat.TOML
    assert resolve_format("service.yaml", config) is PropertyFormat.YAML
    assert resolve_format("service.properties", config) is PropertyFormat.PROPERTIES
    assert resolve_format("service.txt", config) is PropertyFormat.PROPERTIES


def test_resolve_format_without_toml_extensions(make_config) -> None:
    config = make_config(toml_extensions=[])
    assert resolve_format("service.toml", config) is PropertyFormat.PROPERTIES


def test_unmatched_extension_falls_back_to_properties(make_config, write_file) -> None:
    path = write_file("legacy.cfg", "key=value\n")
    assert read_property_file(path, make_config()) == {"key": "value"}


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("app.properties", ".properties"),
        ("archive.tar.gz", ".gz"),
        (".properties", ".properties"),
        ("README", ""),
        ("dir.d/file", ""),
    ],
)
def test_file_extension(name: str, expected: str) -> None:
    assert file_extension(name) == expected
