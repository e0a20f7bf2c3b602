"""
Pytest configuration and fixtures for dashmath tests.

This module provides:
- A 'crosscheck' marker for tests comparing against scipy and scikit-learn
- Fixtures isolating tests from configuration environment variables
  and from the shared configuration singleton
"""

import pytest
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dashmath.components.config import ConfigManager

CONFIG_ENV_VARS = [
    'DASHMATH_ENV', 'PORT', 'HOST', 'PCA_MAX_ITERATIONS', 'PCA_TOLERANCE',
    'PCA_COMPONENTS', 'DEFAULT_MODEL', 'USE_NORMALIZATION', 'DENSITY_GRID_STEPS',
    'DENSITY_PADDING', 'LOAD_SYNTHETIC', 'SYNTHETIC_SEED', 'CACHE_MAX_ENTRIES',
    'LOG_LEVEL'
]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "crosscheck: compare results with a reference library implementation"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration environment variables and reset the config singleton."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield monkeypatch
    ConfigManager.reset()
