# === NAVMAP v1 ===
# {
#   "module": "tests.config_seed.test_cli",
#   "purpose": "Typer entry point coverage using CliRunner.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Typer entry point coverage using ``typer.testing.CliRunner``."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ConfigSeed import __version__, cli
from ConfigSeed.controller import SeedOutcome, SeedState
from ConfigSeed.logging_config import LOGGER_NAME

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logger_handlers():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_configseed_managed", False):
            logger.removeHandler(handler)
            handler.close()


def _write_config(path: Path, config_path: Path, *extra: str) -> Path:
    lines = [f"ConfigPath: {config_path.as_posix()}", "GlobalPrefix: config", "FailWaittime: 0"]
    lines.extend(extra)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_dry_run_lists_keys(tmp_path: Path, config_root: Path, write_file) -> None:
    write_file("app.properties", "key=value\n")
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)

    result = runner.invoke(cli.app, ["--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "config/key" in result.output
    assert "Keys that would be written" in result.output


def test_profile_lookup_under_config_dir(tmp_path: Path, config_root: Path, write_file) -> None:
    write_file("svc/app.yaml", "port: 8080\n")
    config_dir = tmp_path / "res"
    _write_config(config_dir / "docker" / "configuration.yaml", config_root)

    result = runner.invoke(cli.app, ["--config-dir", str(config_dir), "-p", "docker"])

    assert result.exit_code == 0, result.output
    assert "config/svc/port" in result.output


def test_missing_configuration_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["--config-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "No configuration" in result.output


def test_malformed_property_file_exits_with_error(
    tmp_path: Path, config_root: Path, write_file
) -> None:
    write_file("bad.yaml", "key: [unclosed\n")
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)

    result = runner.invoke(cli.app, ["--config", str(config_file)])

    assert result.exit_code == 1


def test_consul_run_exhausting_retries_exits_with_error(tmp_path: Path, config_root: Path) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root, "FailLimit: 0")

    result = runner.invoke(cli.app, ["--consul", "--config", str(config_file)])

    assert result.exit_code == 1


def test_consul_run_uses_store(
    tmp_path: Path, config_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)
    seen = []

    def fake_run(config):
        seen.append(config)
        return SeedOutcome(state=SeedState.SEEDED)

    monkeypatch.setattr(cli, "run", fake_run)

    result = runner.invoke(cli.app, ["-c", "--config", str(config_file), "--reset"])

    assert result.exit_code == 0, result.output
    assert len(seen) == 1
    assert seen[0].is_reset is True
    assert seen[0].global_prefix == "config"


def test_version_flag() -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert f"config-seed {__version__}" in result.output


def test_banner_is_printed_after_run(tmp_path: Path, config_root: Path) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)
    banner = tmp_path / "banner.txt"
    banner.write_text("CONFIG SEED\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(config_file), "--banner", str(banner)])

    assert result.exit_code == 0, result.output
    assert "CONFIG SEED" in result.output


def test_load_run_config_applies_cli_overrides(tmp_path: Path, config_root: Path) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root, "IsReset: false")

    config = cli.load_run_config(
        config_file=config_file,
        profile=None,
        config_dir=tmp_path,
        overrides=cli.collect_overrides(reset=True, log_level="debug"),
    )

    assert config.is_reset is True
    assert config.logging.level == "DEBUG"
    assert config.config_path == config_root


def test_overrides_are_logged_after_logging_is_configured(
    tmp_path: Path, config_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)
    monkeypatch.setenv("CONFIGSEED_CONSUL_TOKEN", "s3cret")

    result = runner.invoke(cli.app, ["--config", str(config_file), "--reset"])

    assert result.exit_code == 0, result.output
    assert "Config overridden: is_reset=True" in result.output
    assert "Config overridden: consul_token=***masked***" in result.output
    assert "s3cret" not in result.output


def test_invalid_environment_override_exits_with_error(
    tmp_path: Path, config_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = _write_config(tmp_path / "configuration.yaml", config_root)
    monkeypatch.setenv("CONFIGSEED_FAIL_LIMIT", "many")

    result = runner.invoke(cli.app, ["--config", str(config_file)])

    assert result.exit_code == 1
    assert "fail_limit" in result.output


def test_collect_overrides_puts_cli_flags_over_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CONFIGSEED_IS_RESET", "false")

    overrides = cli.collect_overrides(reset=True, log_level="error")

    assert overrides == {"is_reset": True, "log_level": "error"}
