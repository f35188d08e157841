# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest configuration for the suite",
#   "sections": [
#     {
#       "id": "clear-configseed-env",
#       "name": "clear_configseed_env",
#       "anchor": "function-clear-configseed-env",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Adds ``src`` to ``sys.path`` so the suite runs from a plain checkout and
isolates every test from ``CONFIGSEED_*`` variables set in the developer's
environment.

Usage:
    pytest tests/config_seed
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# --- Globals ---

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


# --- Fixtures ---


@pytest.fixture(autouse=True)
def clear_configseed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ``CONFIGSEED_*`` overrides so configuration tests see only their inputs."""

    for name in list(os.environ):
        if name.upper().startswith("CONFIGSEED_"):
            monkeypatch.delenv(name, raising=False)
