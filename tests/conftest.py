"""
Pytest configuration and shared fixtures for hashtree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Isolates each test from HASHTREE_* environment and process config
3. Provides commonly-used fixtures via pytest's autodiscovery
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import importlib

from core.config import set_config

_trees = importlib.import_module("fixtures.tree_fixtures")

SAMPLE_NAMES = _trees.SAMPLE_NAMES
make_leaves = _trees.make_leaves
make_name_tree = _trees.make_name_tree


# =============================================================================
# Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Clear HASHTREE_* env vars and reset the process-wide config."""
    for key in [k for k in os.environ if k.startswith("HASHTREE_")]:
        monkeypatch.delenv(key, raising=False)
    set_config(None)
    yield
    set_config(None)


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def names():
    """The five sample names (odd leaf count)."""
    return list(SAMPLE_NAMES)


@pytest.fixture
def name_tree():
    """Tree over the five sample names."""
    return make_name_tree()


@pytest.fixture
def leaf_factory():
    """Factory for distinct leaf digests."""
    return make_leaves


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "cli: marks tests that drive the command-line interface"
    )
