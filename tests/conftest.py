"""
Root pytest configuration for secretstack.

Bootstraps logging once and provides fixtures that isolate environment
variables and the working directory.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from secretstack.config.logging import bootstrap_logging

bootstrap_logging()


@pytest.fixture
def isolated_env():
    """Save os.environ and restore it after the test."""
    saved = dict(os.environ)
    yield os.environ
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def temp_dir():
    """Create a temporary directory, chdir into it, and clean up afterwards."""
    original_cwd = os.getcwd()
    path = Path(tempfile.mkdtemp(prefix="secretstack-test-"))
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(original_cwd)
        shutil.rmtree(path, ignore_errors=True)
