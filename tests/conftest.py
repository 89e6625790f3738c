# tests/conftest.py

"""Shared pytest fixtures for all catalog_sync tests."""

import logging
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from catalog_sync.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_logs() -> Generator[Path, None, None]:
    """Send per-run log files to a throwaway ``logs/`` directory."""
    with tempfile.TemporaryDirectory() as tmp:
        logs_dir = Path(tmp) / "logs"
        with patch.object(Settings, "LOGS_DIR", logs_dir):
            yield logs_dir
        # Release the file handler before the directory goes away
        root_logger = logging.getLogger("catalog_sync")
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
