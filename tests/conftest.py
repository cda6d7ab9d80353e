"""
Pytest configuration for the brandplot back end.

Adds the project root to sys.path so the tests run without an editable
install, and builds apps whose config never depends on the local .env.
"""

import sys
from pathlib import Path

import pytest

root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from brandplot.app import create_app
from brandplot.services.mock_store import MockBrandStore

BASE_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'brandplot-test-secret-key-0123456789',
    'SUPABASE_URL': None,
    'SUPABASE_KEY': None,
    'SUPABASE_SERVICE_ROLE_KEY': None,
    'MP_ACCESS_TOKEN': 'TEST-access-token',
    'MP_WEBHOOK_SECRET': None,
    'MP_API_URL': None,
    'OPENAI_API_KEY': 'sk-test',
    'OPENAI_MODEL': None,
    'APP_URL': 'menosmais.app',
}


@pytest.fixture
def make_app():
    def _make(**overrides):
        return create_app({**BASE_CONFIG, **overrides})
    return _make


@pytest.fixture
def mock_app(make_app):
    """Prototype mode: every id resolves to a seeded demo record."""
    return make_app(ENABLE_MOCK=True, BRAND_STORE=MockBrandStore())


@pytest.fixture
def brand_store():
    return MockBrandStore(seed=False)


@pytest.fixture
def store_app(make_app, brand_store):
    """Live mode backed by an in-memory store standing in for Supabase."""
    return make_app(ENABLE_MOCK=False, BRAND_STORE=brand_store)


@pytest.fixture
def client(store_app):
    return store_app.test_client()


@pytest.fixture
def mock_client(mock_app):
    return mock_app.test_client()
