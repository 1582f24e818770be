"""
Pytest configuration and fixtures.
"""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from lvm_toolkit.cli.lib.executor import RecordingExecutor
from lvm_toolkit.cli.lib.registry import Dispatcher


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "integration: tests through the HTTP or CLI transport")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for testing."""
    with patch("subprocess.run") as mock:
        yield mock


@pytest.fixture
def recording_executor():
    """Executor double that records every command."""
    return RecordingExecutor()


@pytest.fixture
def dispatcher(recording_executor):
    """Dispatcher running against the recording executor."""
    return Dispatcher(recording_executor)


@pytest.fixture
def isolated_config(monkeypatch, temp_dir):
    """Point the config loader at a file that does not exist."""
    monkeypatch.setenv("LVM_TOOLKIT_CONFIG_PATH", str(temp_dir / "missing.conf"))
    return temp_dir
