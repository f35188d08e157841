# === NAVMAP v1 ===
# {
#   "module": "tests.config_seed.conftest",
#   "purpose": "Shared fixtures for the config_seed test suite",
#   "sections": [
#     {"id": "fixtures", "name": "Fixtures", "anchor": "FIX", "kind": "fixtures"}
#   ]
# }
# === /NAVMAP ===

"""Shared fixtures for the config_seed test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from ConfigSeed.settings import ResolvedConfig
from ConfigSeed.testing import InMemoryStoreClient


@pytest.fixture
def config_root(tmp_path: Path) -> Path:
    root = tmp_path / "properties"
    root.mkdir()
    return root


@pytest.fixture
def make_config(config_root: Path) -> Callable[..., ResolvedConfig]:
    """Build a ResolvedConfig scanning ``config_root`` with a fast retry policy."""

    def _make(**overrides: object) -> ResolvedConfig:
        values = {
            "config_path": config_root,
            "global_prefix": "config",
            "fail_limit": 3,
            "fail_wait_time": 0,
            "acceptable_property_extensions": [".yaml", ".yml", ".properties", ".toml"],
            "yaml_extensions": [".yaml", ".yml"],
            "toml_extensions": [".toml"],
        }
        values.update(overrides)
        return ResolvedConfig(**values)

    return _make


@pytest.fixture
def write_file(config_root: Path) -> Callable[[str, str], Path]:
    """Write ``text`` to ``config_root/relative``, creating parent directories."""

    def _write(relative: str, text: str) -> Path:
        path = config_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store() -> InMemoryStoreClient:
    return InMemoryStoreClient()
