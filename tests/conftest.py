"""
pytest configuration and fixtures for Quote Service tests
"""

import pytest
import sys
from pathlib import Path

from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from api.app import create_app
from api.dependencies import QuoteServices
from utils import AuthConfig
from tests.mocks import MockTokenVerifier, create_mock_mongo_manager


@pytest.fixture
def mongo_manager():
    """In-memory MongoManager"""
    return create_mock_mongo_manager()


@pytest.fixture
def token_verifier():
    """Token verifier knowing token-u1 and token-u2"""
    return MockTokenVerifier()


@pytest.fixture
def app(mongo_manager, token_verifier):
    """Application wired to in-memory collaborators"""
    return create_app(mongo_manager=mongo_manager, token_verifier=token_verifier)


@pytest.fixture
def services(app) -> QuoteServices:
    """Store adapters used by the application under test"""
    return app.state.services


@pytest.fixture
def client(app):
    """Create test client"""
    return TestClient(app)


@pytest.fixture
def auth_config():
    return AuthConfig(admin_email="admin@example.com")


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
