# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.formats",
#   "purpose": "Readers that flatten .properties, YAML, and TOML files plus the extension-based dispatcher",
#   "sections": [
#     {
#       "id": "propertyformat",
#       "name": "PropertyFormat",
#       "anchor": "class-propertyformat",
#       "kind": "class"
#     },
#     {
#       "id": "file-extension",
#       "name": "file_extension",
#       "anchor": "function-file-extension",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-format",
#       "name": "resolve_format",
#       "anchor": "function-resolve-format",
#       "kind": "function"
#     },
#     {
#       "id": "read-properties-file",
#       "name": "read_properties_file",
#       "anchor": "function-read-properties-file",
#       "kind": "function"
#     },
#     {
#       "id": "read-yaml-file",
#       "name": "read_yaml_file",
#       "anchor": "function-read-yaml-file",
#       "kind": "function"
#     },
#     {
#       "id": "read-toml-file",
#       "name": "read_toml_file",
#       "anchor": "function-read-toml-file",
#       "kind": "function"
#     },
#     {
#       "id": "read-property-file",
#       "name": "read_property_file",
#       "anchor": "function-read-property-file",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Readers that turn configuration files into flat ``str -> str`` mappings.

Three formats are supported: Java ``.properties`` (via ``javaproperties``),
YAML (via PyYAML), and TOML (via ``tomllib``/``tomli``). Every reader returns
a fresh :data:`ConfigProperties` mapping. YAML and TOML documents are
flattened at the top level only: scalar values are rendered as text, nested
mappings and sequences are rendered as JSON text rather than expanded into
child keys.

The format of a file is resolved from its extension with a fixed precedence:
TOML extensions first, YAML extensions next, and ``.properties`` parsing as
the fallback for anything else.
"""

from __future__ import annotations

import datetime as _dt
import json
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

import javaproperties
import yaml

from .errors import MissingFile, ParseError
from .settings import ResolvedConfig

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - exercised on older interpreters
    import tomli as tomllib  # type: ignore[no-redef]

__all__ = [
    "ConfigProperties",
    "PropertyFormat",
    "READERS",
    "file_extension",
    "resolve_format",
    "read_properties_file",
    "read_yaml_file",
    "read_toml_file",
    "read_property_file",
]

ConfigProperties = Dict[str, str]


class PropertyFormat(str, Enum):
    """Closed set of file formats understood by the importer."""

    PROPERTIES = "properties"
    YAML = "yaml"
    TOML = "toml"


def file_extension(name: str) -> str:
    """Return the extension of ``name`` including the dot.

    Unlike :attr:`pathlib.PurePath.suffix`, a bare dotfile such as
    ``.properties`` is treated as having that extension.
    """

    base = Path(name).name
    index = base.rfind(".")
    if index < 0:
        return ""
    return base[index:]


def resolve_format(filename: str, config: ResolvedConfig) -> PropertyFormat:
    """Select the reader format for ``filename``: TOML, then YAML, then properties."""

    extension = file_extension(filename)
    if extension in config.toml_extensions:
        return PropertyFormat.TOML
    if extension in config.yaml_extensions:
        return PropertyFormat.YAML
    return PropertyFormat.PROPERTIES


def _read_text(path: Path) -> str:
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise MissingFile(f"Cannot read {path}: {exc}", path=Path(path)) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path} is not valid UTF-8: {exc}", path=Path(path)) from exc


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (_dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def _check_encodable(properties: ConfigProperties, path: Path) -> ConfigProperties:
    for key, value in properties.items():
        try:
            key.encode("utf-8")
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ParseError(
                f"{path} yields text that is not encodable as UTF-8 for key {key!r}: {exc}",
                path=path,
            ) from exc
    return properties


def _flatten(document: Any, path: Path) -> ConfigProperties:
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ParseError(
            f"{path} must contain a mapping at the top level, got {type(document).__name__}",
            path=path,
        )
    try:
        flat = {_stringify(key): _stringify(value) for key, value in document.items()}
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Cannot flatten {path}: {exc}", path=path) from exc
    return _check_encodable(flat, path)


def read_properties_file(path: Path) -> ConfigProperties:
    """Parse a Java ``.properties`` file (UTF-8) into a flat mapping."""

    text = _read_text(path)
    try:
        properties = dict(javaproperties.loads(text))
    except ValueError as exc:
        raise ParseError(f"Malformed properties file {path}: {exc}", path=Path(path)) from exc
    return _check_encodable(properties, Path(path))


def read_yaml_file(path: Path) -> ConfigProperties:
    """Parse a YAML document whose top level is a mapping of scalars."""

    text = _read_text(path)
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Malformed YAML file {path}: {exc}", path=Path(path)) from exc
    return _flatten(document, Path(path))


def read_toml_file(path: Path) -> ConfigProperties:
    """Parse a TOML document; only top-level key/value pairs are meaningful."""

    text = _read_text(path)
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(f"Malformed TOML file {path}: {exc}", path=Path(path)) from exc
    return _flatten(document, Path(path))


READERS: Dict[PropertyFormat, Callable[[Path], ConfigProperties]] = {
    PropertyFormat.PROPERTIES: read_properties_file,
    PropertyFormat.YAML: read_yaml_file,
    PropertyFormat.TOML: read_toml_file,
}


def read_property_file(path: Path, config: ResolvedConfig) -> ConfigProperties:
    """Read ``path`` with the reader selected by :func:`resolve_format`."""

    return READERS[resolve_format(Path(path).name, config)](Path(path))
