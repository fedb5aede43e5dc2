"""
Shared fixtures.

Service tests run against the in-memory store; storage and HTTP tests
get a fresh SQLite file per test. bcrypt runs at its minimum cost.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from src.auth import AuthGateway, SessionTokenResolver
from src.config import AppSettings, DatabaseSettings, SecuritySettings, Settings
from src.ledger import CategoryRegistry, TransactionLedger
from src.orchestrator import create_app_components
from src.services.security import PasswordHasher, TokenGenerator
from src.services.storage import (
    MemoryCategoryStorage,
    MemoryClient,
    MemorySessionStorage,
    MemoryTransactionStorage,
    MemoryUserStorage,
)


def make_settings(backend: str = "memory", url: str = "") -> Settings:
    database = {"backend": backend, "connect_attempts": 1}
    if url:
        database["url"] = url
    return Settings(
        app=AppSettings(log_json=False, log_level="WARNING", request_timeout_seconds=5),
        database=DatabaseSettings(**database),
        security=SecuritySettings(bcrypt_rounds=4),
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def sql_settings(tmp_path) -> Settings:
    return make_settings("sql", f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")


# =============================================================================
# IN-MEMORY SERVICES
# =============================================================================

@pytest.fixture
def memory_client() -> MemoryClient:
    return MemoryClient()


@pytest.fixture
def category_storage(memory_client):
    return MemoryCategoryStorage(memory_client)


@pytest.fixture
def transaction_storage(memory_client):
    return MemoryTransactionStorage(memory_client)


@pytest.fixture
def session_storage(memory_client):
    return MemorySessionStorage(memory_client)


@pytest.fixture
def gateway(memory_client, session_storage, settings) -> AuthGateway:
    return AuthGateway(
        user_storage=MemoryUserStorage(memory_client),
        session_storage=session_storage,
        hasher=PasswordHasher(settings.security),
        tokens=TokenGenerator(settings.security),
    )


@pytest.fixture
def resolver(session_storage) -> SessionTokenResolver:
    return SessionTokenResolver(session_storage)


@pytest.fixture
def registry(category_storage) -> CategoryRegistry:
    return CategoryRegistry(category_storage)


@pytest.fixture
def ledger(transaction_storage, category_storage) -> TransactionLedger:
    return TransactionLedger(transaction_storage, category_storage)


# =============================================================================
# SQL STACK
# =============================================================================

@pytest.fixture
async def sql_components(sql_settings):
    components = create_app_components(sql_settings)
    await components.connect()
    yield components
    await components.close()


@pytest.fixture
def client(sql_settings):
    with TestClient(create_app(settings=sql_settings)) as test_client:
        yield test_client


@pytest.fixture
def sign_in(client):
    """Register a user and return Authorization headers for them."""

    def _sign_in(email: str = "ana@example.com", password: str = "secret") -> dict:
        response = client.post(
            "/signUp",
            json={"name": "Ana", "email": email, "password": password},
        )
        assert response.status_code == 201
        response = client.post("/signIn", json={"email": email, "password": password})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _sign_in
