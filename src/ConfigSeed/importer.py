# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.importer",
#   "purpose": "Walk the scan root and write every parsed property into the store under its namespaced key",
#   "sections": [
#     {
#       "id": "importreport",
#       "name": "ImportReport",
#       "anchor": "class-importreport",
#       "kind": "class"
#     },
#     {
#       "id": "is-acceptable-extension",
#       "name": "is_acceptable_extension",
#       "anchor": "function-is-acceptable-extension",
#       "kind": "function"
#     },
#     {
#       "id": "relative-dir",
#       "name": "relative_dir",
#       "anchor": "function-relative-dir",
#       "kind": "function"
#     },
#     {
#       "id": "namespaced-key",
#       "name": "namespaced_key",
#       "anchor": "function-namespaced-key",
#       "kind": "function"
#     },
#     {
#       "id": "iter-files",
#       "name": "iter_files",
#       "anchor": "function-iter-files",
#       "kind": "function"
#     },
#     {
#       "id": "import-directory",
#       "name": "import_directory",
#       "anchor": "function-import-directory",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Directory importer that seeds the store from a tree of configuration files.

Files are visited depth-first in lexical order. Directories are never written,
only recursed into, and files whose extension is not acceptable are skipped
without side effects. Each accepted file contributes its properties under
``<global_prefix>/<relative_dir><key>`` where ``relative_dir`` is the file's
parent directory relative to the scan root, with a trailing ``/``.

The first parse or write failure aborts the walk unless
``continue_on_error`` is set. Writes already committed are kept; partial
seeding is possible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .errors import MissingFile, ParseError, WriteError
from .formats import file_extension, read_property_file
from .settings import ResolvedConfig
from .store import StoreClient

__all__ = [
    "ImportReport",
    "import_directory",
    "is_acceptable_extension",
    "iter_files",
    "namespaced_key",
    "relative_dir",
]

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Summary of one directory import."""

    files_imported: List[Path] = field(default_factory=list)
    files_skipped: List[Path] = field(default_factory=list)
    keys_written: List[str] = field(default_factory=list)
    failures: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def is_acceptable_extension(filename: str, config: ResolvedConfig) -> bool:
    """Return ``True`` when ``filename`` has one of the acceptable property extensions."""

    return file_extension(filename) in config.acceptable_property_extensions


def relative_dir(path: Path, root: Path) -> str:
    """Return the parent directory of ``path`` relative to ``root`` with a trailing ``/``.

    Files directly under ``root`` yield an empty string.
    """

    relative = Path(path).parent.relative_to(root).as_posix()
    if relative in ("", "."):
        return ""
    return relative + "/"


def namespaced_key(global_prefix: str, directory: str, key: str) -> str:
    """Build the store key ``<global_prefix>/<directory><key>``."""

    return f"{global_prefix}/{directory}{key}"


def iter_files(root: Path) -> Iterator[Path]:
    """Yield every non-directory entry under ``root`` depth-first in lexical order.

    Symlinked directories are not descended into.
    """

    if root.is_file():
        yield root
        return
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise MissingFile(f"Cannot read directory {root}: {exc}", path=root) from exc
    for entry in entries:
        if entry.is_symlink() and entry.is_dir():
            logger.debug("Not following symlinked directory %s", entry)
            continue
        if entry.is_dir():
            yield from iter_files(entry)
        else:
            yield entry


def _import_file(
    path: Path, root: Path, config: ResolvedConfig, client: StoreClient, report: ImportReport
) -> None:
    directory = relative_dir(path, root)
    logger.info("found config file: %s in context %s", path.name, directory or "/")
    properties = read_property_file(path, config)
    for key, value in properties.items():
        store_key = namespaced_key(config.global_prefix, directory, key)
        client.put(store_key, value.encode("utf-8"))
        report.keys_written.append(store_key)
    report.files_imported.append(path)


def import_directory(
    config: ResolvedConfig,
    client: StoreClient,
    *,
    report: Optional[ImportReport] = None,
) -> ImportReport:
    """Seed ``client`` with every property found under ``config.config_path``.

    Args:
        config: Resolved configuration for the run.
        client: Store handle receiving the writes.
        report: Optional report to fill in place, so callers keep the partial
            progress when the walk aborts.

    Returns:
        The filled :class:`ImportReport`.

    Raises:
        MissingFile: If the scan root does not exist or cannot be listed.
        ParseError: If a file is malformed and ``continue_on_error`` is unset.
        WriteError: If a key write fails and ``continue_on_error`` is unset.
    """

    report = report if report is not None else ImportReport()
    root = Path(config.config_path)
    if not root.exists():
        raise MissingFile(f"Configuration root {root} does not exist", path=root)
    base = root if root.is_dir() else root.parent

    for path in iter_files(root):
        if not is_acceptable_extension(path.name, config):
            report.files_skipped.append(path)
            continue
        try:
            _import_file(path, base, config, client, report)
        except (ParseError, WriteError) as exc:
            if not config.continue_on_error:
                raise
            logger.warning("Skipping %s: %s", path, exc)
            report.failures.append((path, str(exc)))

    logger.info(
        "Imported %d keys from %d files under %s",
        len(report.keys_written),
        len(report.files_imported),
        root,
    )
    return report
