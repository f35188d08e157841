# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.errors",
#   "purpose": "Exception hierarchy and error categories for configuration seeding",
#   "sections": [
#     {
#       "id": "errorkind",
#       "name": "ErrorKind",
#       "anchor": "class-errorkind",
#       "kind": "class"
#     },
#     {
#       "id": "configseederror",
#       "name": "ConfigSeedError",
#       "anchor": "class-configseederror",
#       "kind": "class"
#     },
#     {
#       "id": "configloaderror",
#       "name": "ConfigLoadError",
#       "anchor": "class-configloaderror",
#       "kind": "class"
#     },
#     {
#       "id": "connectionexhausted",
#       "name": "ConnectionExhausted",
#       "anchor": "class-connectionexhausted",
#       "kind": "class"
#     },
#     {
#       "id": "queryerror",
#       "name": "QueryError",
#       "anchor": "class-queryerror",
#       "kind": "class"
#     },
#     {
#       "id": "parseerror",
#       "name": "ParseError",
#       "anchor": "class-parseerror",
#       "kind": "class"
#     },
#     {
#       "id": "missingfile",
#       "name": "MissingFile",
#       "anchor": "class-missingfile",
#       "kind": "class"
#     },
#     {
#       "id": "writeerror",
#       "name": "WriteError",
#       "anchor": "class-writeerror",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared across configuration loading, store access, and import.

The seeding run spans configuration parsing, a health-checked HTTP connection,
key listing/deletion, file parsing, and key writes. Each failure mode maps to a
stable :class:`ErrorKind` so callers can react to a category without matching
on message text.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

__all__ = [
    "ErrorKind",
    "ConfigSeedError",
    "ConfigLoadError",
    "ConnectionExhausted",
    "QueryError",
    "ParseError",
    "MissingFile",
    "WriteError",
]


class ErrorKind(str, Enum):
    """Machine-readable category attached to every :class:`ConfigSeedError`."""

    CONFIG_LOAD = "config_load"
    CONNECTION_EXHAUSTED = "connection_exhausted"
    QUERY = "query"
    PARSE = "parse"
    WRITE = "write"


class ConfigSeedError(RuntimeError):
    """Base exception for configuration seeding failures."""

    kind: ErrorKind


class ConfigLoadError(ConfigSeedError):
    """Raised when the resolved configuration is unreadable or malformed."""

    kind = ErrorKind.CONFIG_LOAD


class ConnectionExhausted(ConfigSeedError):
    """Raised when the store health check never succeeded within the retry budget."""

    kind = ErrorKind.CONNECTION_EXHAUSTED

    def __init__(self, message: str, *, url: str, attempts: int) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts


class QueryError(ConfigSeedError):
    """Raised when listing or deleting keys under a prefix fails."""

    kind = ErrorKind.QUERY


class ParseError(ConfigSeedError):
    """Raised when a configuration file cannot be parsed into flat properties."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class MissingFile(ParseError):
    """Raised when a configuration file or scan root cannot be read."""


class WriteError(ConfigSeedError):
    """Raised when a single key write to the store fails."""

    kind = ErrorKind.WRITE

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key
