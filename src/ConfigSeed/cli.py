# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.cli",
#   "purpose": "Typer entry point that loads the profile configuration and runs the seeder.",
#   "sections": [
#     {
#       "id": "version-callback",
#       "name": "_version_callback",
#       "anchor": "function-version-callback",
#       "kind": "function"
#     },
#     {
#       "id": "load-run-config",
#       "name": "load_run_config",
#       "anchor": "function-load-run-config",
#       "kind": "function"
#     },
#     {
#       "id": "print-banner",
#       "name": "print_banner",
#       "anchor": "function-print-banner",
#       "kind": "function"
#     },
#     {
#       "id": "main",
#       "name": "main",
#       "anchor": "function-main",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Typer entry point that loads the profile configuration and runs the seeder.

Usage:
    config-seed --consul --profile docker
    config-seed --config ./res/configuration.yaml --reset

Without ``--consul`` the run is a dry run: files are parsed and the keys that
would be written are listed, but no store is contacted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .controller import SeedOutcome, run, seed
from .errors import ConfigLoadError, ConnectionExhausted
from .logging_config import mask_sensitive_data, setup_logging
from .settings import (
    DEFAULT_CONFIG_DIR,
    ResolvedConfig,
    get_env_overrides,
    load_config,
    resolve_config_file,
)
from .testing import InMemoryStoreClient

__all__ = ["app", "collect_overrides", "load_run_config", "log_overrides", "main", "print_banner"]

_console = Console()
_err_console = Console(stderr=True)

app = typer.Typer(
    name="config-seed",
    help="Seed a Consul key/value store from local configuration files.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        _console.print(f"config-seed {__version__}")
        raise typer.Exit()


def collect_overrides(
    *, reset: Optional[bool] = None, log_level: Optional[str] = None
) -> Dict[str, object]:
    """Merge ``CONFIGSEED_*`` environment overrides with the CLI flags, CLI last."""

    overrides: Dict[str, object] = dict(get_env_overrides())
    if reset is not None:
        overrides["is_reset"] = reset
    if log_level is not None:
        overrides["log_level"] = log_level
    return overrides


def load_run_config(
    *,
    config_file: Optional[Path],
    profile: Optional[str],
    config_dir: Path,
    overrides: Optional[Mapping[str, object]] = None,
) -> ResolvedConfig:
    """Resolve the configuration file and apply ``overrides`` on top of it.

    ``overrides`` defaults to :func:`collect_overrides` without CLI flags.
    """

    path = config_file if config_file is not None else resolve_config_file(profile, config_dir)
    if overrides is None:
        overrides = collect_overrides()
    return load_config(path, overrides=overrides)


def log_overrides(logger: logging.Logger, overrides: Mapping[str, object]) -> None:
    """Log each applied override once logging is configured, masking secrets."""

    for key, value in mask_sensitive_data(dict(overrides)).items():
        logger.info("Config overridden: %s=%s", key, value)


def print_banner(path: Path) -> None:
    """Print the banner file, or the read error when it is missing."""

    try:
        _console.print(path.read_text(encoding="utf-8"), markup=False, highlight=False)
    except OSError as exc:
        _err_console.print(f"Cannot read banner {path}: {exc}", markup=False)


def _render_dry_run(store: InMemoryStoreClient) -> None:
    table = Table(title="Keys that would be written")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in sorted(store.decoded().items()):
        table.add_row(key, value)
    _console.print(table)


@app.command()
def main(
    consul: bool = typer.Option(
        False, "--consul", "-c", help="Indicates the service should use consul."
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Specify a profile other than default."
    ),
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR, "--config-dir", help="Directory holding configuration profiles."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Explicit configuration file; bypasses profile lookup."
    ),
    reset: Optional[bool] = typer.Option(
        None, "--reset/--no-reset", help="Override the IsReset flag of the configuration."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    banner: Optional[Path] = typer.Option(None, "--banner", help="Banner file printed after the run."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Seed the configured store, or preview the keys without --consul."""

    try:
        overrides = collect_overrides(reset=reset, log_level=log_level)
        config = load_run_config(
            config_file=config_file,
            profile=profile,
            config_dir=config_dir,
            overrides=overrides,
        )
    except ConfigLoadError as exc:
        _err_console.print(f"Error: {exc}", markup=False)
        raise typer.Exit(code=1)

    logger = setup_logging(config.logging)
    log_overrides(logger, overrides)

    outcome: SeedOutcome
    if consul:
        try:
            outcome = run(config)
        except ConnectionExhausted as exc:
            logger.error("%s", exc)
            raise typer.Exit(code=1)
    else:
        store = InMemoryStoreClient()
        outcome = seed(config, store)
        _render_dry_run(store)

    if banner is not None:
        print_banner(banner)

    if not outcome.ok:
        raise typer.Exit(code=1)
