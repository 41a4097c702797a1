"""
Shared pytest configuration and fixtures for all tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to sys.path so tests can import 'core', 'provision', 'sql', etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

PROVISION_ENV_KEYS = (
    'DB_ENGINES',
    'DB_NAME',
    'DB_TEST_NAME',
    'DB_APP_USERNAME',
    'DB_APP_PASSWORD',
    'PROJECT_NAME',
    'DBPROVISION_CREDENTIALS_FILE',
    'DB_CONNECT_TIMEOUT',
    'DB_STATEMENT_TIMEOUT',
)


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "system: System tests - full system behavior tests")


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove provisioning variables from the environment for one test.

    load_dotenv() writes into os.environ, so the whole environment is
    restored afterwards.
    """
    with patch.dict(os.environ):
        for key in PROVISION_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        yield
