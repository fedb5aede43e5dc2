"""
Main Orchestrator for the Ledger

Ties together all the components. The storage client is the only
process-wide resource: it is built here, opened once at startup and
closed once at shutdown, and every service receives the storages it
needs through its constructor.

    components = create_app_components(settings)
    await components.connect()
    ...
    await components.close()
"""

from dataclasses import dataclass
from typing import Optional, Union

from src.auth import AuthGateway, SessionTokenResolver, TokenResolver
from src.config import Settings, get_settings
from src.ledger import CategoryRegistry, TransactionLedger
from src.logger import get_logger
from src.services.security import PasswordHasher, TokenGenerator
from src.services.storage import (
    MemoryCategoryStorage,
    MemoryClient,
    MemorySessionStorage,
    MemoryTransactionStorage,
    MemoryUserStorage,
    SqlCategoryStorage,
    SqlClient,
    SqlSessionStorage,
    SqlTransactionStorage,
    SqlUserStorage,
)


logger = get_logger(__name__)


@dataclass
class LedgerComponents:
    """Everything a request handler needs, already wired."""

    settings: Settings
    client: Union[SqlClient, MemoryClient]
    auth: AuthGateway
    token_resolver: TokenResolver
    categories: CategoryRegistry
    transactions: TransactionLedger

    async def connect(self) -> None:
        await self.client.connect()
        logger.info(
            "components_ready",
            backend=self.settings.database.backend,
            environment=self.settings.app.app_environment,
        )

    async def close(self) -> None:
        await self.client.close()


def create_app_components(settings: Optional[Settings] = None) -> LedgerComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from. Defaults to the cached
            environment settings.

    Returns:
        Wired components; call connect() before use
    """
    settings = settings or get_settings()

    if settings.database.backend == "memory":
        client = MemoryClient()
        users = MemoryUserStorage(client)
        sessions = MemorySessionStorage(client)
        category_storage = MemoryCategoryStorage(client)
        transaction_storage = MemoryTransactionStorage(client)
    else:
        client = SqlClient(settings)
        users = SqlUserStorage(client)
        sessions = SqlSessionStorage(client)
        category_storage = SqlCategoryStorage(client)
        transaction_storage = SqlTransactionStorage(client)

    auth = AuthGateway(
        user_storage=users,
        session_storage=sessions,
        hasher=PasswordHasher(settings.security),
        tokens=TokenGenerator(settings.security),
    )

    return LedgerComponents(
        settings=settings,
        client=client,
        auth=auth,
        token_resolver=SessionTokenResolver(sessions),
        categories=CategoryRegistry(category_storage),
        transactions=TransactionLedger(transaction_storage, category_storage),
    )
