"""
Unit test conftest.py for secretstack.
"""

import pytest

from .base import opaque_manager


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "e2e: end-to-end pipeline test (collect, prepare, merge, apply)"
    )


@pytest.fixture
def make_manager():
    """Factory for single-connector, single-provider (Opaque) managers."""
    return opaque_manager
