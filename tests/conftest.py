"""
Shared fixtures for jsonconfig tests.
"""

import json
import time
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from jsonconfig import reset_registry


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """One QCoreApplication for the whole session; no GUI needed."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def clean_registry():
    yield
    reset_registry()


@pytest.fixture
def write_json():
    """Write a dict (or raw text) to a file and return its path."""
    def _write(path: Path, data) -> Path:
        text = data if isinstance(data, str) else json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def wait_until():
    """Poll a condition until it holds or the timeout expires."""
    def _wait(condition, timeout: float = 5.0, interval: float = 0.05) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if condition():
                return True
            time.sleep(interval)
        return condition()
    return _wait


@pytest.fixture
def fixtures_on_path(monkeypatch):
    """Make the packages under tests/fixtures importable."""
    monkeypatch.syspath_prepend(str(FIXTURES_DIR))
    return FIXTURES_DIR
