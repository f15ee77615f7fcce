"""
Pytest configuration and fixtures for urlcache tests.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from urlcache.config import clear_settings_cache
from urlcache.logging import ROOT_LOGGER_NAME
from urlcache.store import HttpCache


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def cache(temp_dir: Path) -> HttpCache:
    """Provide an empty cache rooted in the temp directory."""
    return HttpCache(temp_dir / "cache")


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide environment variables pointing the cache at the temp directory."""
    env_vars = {
        "CACHE_DIR": str(temp_dir / "env_cache"),
        "FILE_MODE": "640",
        "LOG_LEVEL": "WARNING",
        "USER_AGENT": "urlcache-tests/1.0",
        "REQUEST_TIMEOUT": "5",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo handlers installed by setup_logging() so caplog keeps working."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
