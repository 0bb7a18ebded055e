"""Test configuration and shared fixtures."""
import pytest
import pytest_asyncio
from app import create_app
from database.db import DocumentStore
from fastapi.testclient import TestClient
from services.websocket_manager import ConnectionManager


class FakeWebSocket:
    """Records the text frames sent to it."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_text(self, message: str):
        if self.fail:
            raise RuntimeError("socket is closed")
        self.sent.append(message)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "insighthub-test.db")


@pytest_asyncio.fixture
async def store(db_path):
    store = DocumentStore(db_path)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def manager():
    return ConnectionManager()


@pytest.fixture
def client(db_path):
    """TestClient with the lifespan running against a temporary store."""
    with TestClient(create_app(db_path)) as test_client:
        yield test_client


@pytest.fixture
def sample_point():
    return {
        "datasetId": "A",
        "value": 42.5,
        "category": "sales",
        "metadata": {"region": "eu"},
    }
