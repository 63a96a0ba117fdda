"""
Shared test configuration.
Puts the repository root on the import path and provides the environment every
settings load expects, so tests never depend on a developer's `.env`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    defaults = {
        "JWT_SECRET": "test-secret",
        "LOG_LEVEL": "INFO",
        "DATABASE_URL": "sqlite:///:memory:",
        "BCRYPT_ROUNDS": "4",
    }

    for key, value in defaults.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)
