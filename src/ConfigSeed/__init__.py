# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed",
#   "purpose": "Package initialization and public API for ConfigSeed",
#   "sections": [
#     {
#       "id": "module",
#       "name": "ConfigSeed",
#       "anchor": "module-module",
#       "kind": "module"
#     }
#   ]
# }
# === /NAVMAP ===

"""Public API for the config-seed importer.

Seeds a Consul key/value store from a directory of ``.properties``, YAML, and
TOML files under a namespaced global prefix, once, unless a reset is
requested.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .connector import connect, store_url
from .controller import SeedOutcome, SeedState, is_config_initialized, remove_stored_config, run, seed
from .errors import (
    ConfigLoadError,
    ConfigSeedError,
    ConnectionExhausted,
    ErrorKind,
    MissingFile,
    ParseError,
    QueryError,
    WriteError,
)
from .formats import PropertyFormat, read_property_file, resolve_format
from .importer import ImportReport, import_directory
from .settings import ResolvedConfig, load_config
from .store import ConsulStoreClient, StoreClient

__all__ = [
    "__version__",
    "ConfigLoadError",
    "ConfigSeedError",
    "ConnectionExhausted",
    "ConsulStoreClient",
    "ErrorKind",
    "ImportReport",
    "MissingFile",
    "ParseError",
    "PropertyFormat",
    "QueryError",
    "ResolvedConfig",
    "SeedOutcome",
    "SeedState",
    "StoreClient",
    "WriteError",
    "connect",
    "import_directory",
    "is_config_initialized",
    "load_config",
    "read_property_file",
    "remove_stored_config",
    "resolve_format",
    "run",
    "seed",
    "store_url",
]
