"""
Pytest configuration for API tests

Fixtures and configuration for FastAPI endpoint testing.
The contract client and the mint registry are replaced with in-memory mocks,
so no RPC node or MongoDB is needed.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

from objects_api.dependencies.ledger import get_ledger
from objects_api.dependencies.services import get_registry
from objects_api.main import app
from objects_api.services.metrics import get_metrics
from objects_api.services.mint_reconciler import MintReconciler
from objects_api.tests.mocks import MockLedger, MockMintRegistry


# Load test environment variables
@pytest.fixture(scope="session", autouse=True)
def load_env():
    """Load environment variables for testing"""
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    yield


@pytest.fixture
def mock_ledger():
    """Contract client mock, token ids start at 1"""
    return MockLedger()


@pytest.fixture
def mock_registry():
    """Empty in-memory mint registry"""
    return MockMintRegistry()


@pytest.fixture
def reconciler(mock_ledger, mock_registry):
    """MintReconciler wired to the mocks"""
    return MintReconciler(mock_ledger, mock_registry)


@pytest.fixture
def metrics():
    """Process-wide metrics collector, reset for each test"""
    collector = get_metrics()
    collector.reset()
    yield collector
    collector.reset()


@pytest.fixture
def client(mock_ledger, mock_registry, metrics):
    """
    Create FastAPI test client

    Not used as a context manager: the lifespan would connect MongoDB and
    require the ledger settings.
    """
    app.dependency_overrides[get_ledger] = lambda: mock_ledger
    app.dependency_overrides[get_registry] = lambda: mock_registry
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


# Address fixtures
@pytest.fixture
def recipient():
    return "0x" + "1" * 40


@pytest.fixture
def other_address():
    return "0x" + "2" * 40
