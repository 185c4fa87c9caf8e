from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


_CONFIG_ENV_VARS = (
    "MONTHLY_DUE_AMOUNT",
    "RESTRICT_AFTER_MONTHS",
    "ARCHIVE_AFTER_MONTHS",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's local .env / shell settings out of the tests.
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
