"""
SQL Storage Implementation

DESIGN DECISION: SQLAlchemy's asyncio extension is the default backend
(aiosqlite out of the box, any async driver via DATABASE_URL) because:
1. Requests await storage without blocking the event loop
2. Unique constraints enforce the uniqueness rules at the store itself
3. Multi-statement work (category delete cascade, session replacement)
   runs inside one database transaction

The engine is created once at startup by SqlClient.connect() and
disposed once at shutdown. Each storage call opens a short-lived
AsyncSession around its own work.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    delete,
    select,
    update,
)
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import Settings
from src.logger import get_logger
from src.models.ledger import (
    Category,
    Session,
    Transaction,
    TransactionType,
    User,
)
from src.services.storage.interface import (
    CategoryStorageInterface,
    DuplicateError,
    SessionStorageInterface,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UserStorageInterface,
)


T = TypeVar("T")

Base = declarative_base()

logger = get_logger(__name__)


# =============================================================================
# TABLES
# =============================================================================

class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)


class SessionRow(Base):
    __tablename__ = "sessions"

    # One row per user: the primary key is the user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    token = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, nullable=False)


class CategoryRow(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", "type", name="uq_categories_owner_name_type"),
    )

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String(50), nullable=False)
    type = Column(String(16), nullable=False)
    icon = Column(String(100), nullable=False)
    description = Column(String(100), nullable=True)


class TransactionRow(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    type = Column(String(16), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime, index=True, nullable=False)
    # Plain string reference, parsed and checked by the ledger on use
    category_id = Column(String(36), index=True, nullable=True)


def _user_from_row(row: UserRow) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
    )


def _session_from_row(row: SessionRow) -> Session:
    return Session(user_id=row.user_id, token=row.token, created_at=row.created_at)


def _category_from_row(row: CategoryRow) -> Category:
    return Category(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        type=TransactionType(row.type),
        icon=row.icon,
        description=row.description,
    )


def _transaction_from_row(row: TransactionRow) -> Transaction:
    return Transaction(
        id=row.id,
        owner_id=row.owner_id,
        type=TransactionType(row.type),
        description=row.description,
        amount=row.amount,
        date=row.date,
        category_id=row.category_id,
    )


# =============================================================================
# CLIENT
# =============================================================================

class SqlClient:
    """
    Owns the engine and session factory.

    Handles connection (with retry) and maps driver failures onto the
    storage exception hierarchy.
    """

    def __init__(self, settings: Settings):
        self._settings = settings.database
        self._timeout = settings.app.request_timeout_seconds
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> None:
        """
        Create the engine and make sure the schema exists.

        Retries with exponential backoff while the database refuses
        connections.
        """
        if self._engine is not None:
            return

        engine = create_async_engine(self._settings.url, echo=self._settings.echo)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.connect_attempts),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                retry=retry_if_exception_type((OperationalError, InterfaceError)),
                reraise=True,
            ):
                with attempt:
                    async with engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
        except (OperationalError, InterfaceError) as e:
            await engine.dispose()
            raise StorageUnavailableError(f"Failed to connect to database: {e}") from e

        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("database_connected", backend="sql")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("database_closed", backend="sql")

    async def run(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Run one unit of work in its own session, bounded by the timeout.

        Anything the work commits is committed together; anything it
        does not is rolled back when the session closes.
        """
        if self._sessionmaker is None:
            raise StorageUnavailableError("Database is not connected")

        try:
            async with self._sessionmaker() as session:
                return await asyncio.wait_for(work(session), timeout=self._timeout)
        except IntegrityError as e:
            raise DuplicateError(str(e.orig)) from e
        except (OperationalError, InterfaceError) as e:
            raise StorageUnavailableError(str(e)) from e
        except asyncio.TimeoutError as e:
            raise StorageUnavailableError(
                f"Storage did not answer within {self._timeout}s"
            ) from e
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e


# =============================================================================
# STORAGES
# =============================================================================

class SqlUserStorage(UserStorageInterface):

    def __init__(self, client: SqlClient):
        self._client = client

    async def add_user(self, user: User) -> User:
        async def work(session: AsyncSession) -> User:
            session.add(UserRow(
                id=user.id,
                name=user.name,
                email=user.email,
                password_hash=user.password_hash,
            ))
            await session.commit()
            return user

        return await self._client.run(work)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async def work(session: AsyncSession) -> Optional[User]:
            row = await session.scalar(select(UserRow).where(UserRow.email == email))
            return _user_from_row(row) if row else None

        return await self._client.run(work)


class SqlSessionStorage(SessionStorageInterface):

    def __init__(self, client: SqlClient):
        self._client = client

    async def replace_session(self, session: Session) -> Session:
        async def work(db: AsyncSession) -> Session:
            await db.execute(delete(SessionRow).where(SessionRow.user_id == session.user_id))
            db.add(SessionRow(
                user_id=session.user_id,
                token=session.token,
                created_at=session.created_at,
            ))
            await db.commit()
            return session

        return await self._client.run(work)

    async def get_session_by_token(self, token: str) -> Optional[Session]:
        async def work(db: AsyncSession) -> Optional[Session]:
            row = await db.scalar(select(SessionRow).where(SessionRow.token == token))
            return _session_from_row(row) if row else None

        return await self._client.run(work)


class SqlCategoryStorage(CategoryStorageInterface):

    def __init__(self, client: SqlClient):
        self._client = client

    async def add_category(self, category: Category) -> Category:
        async def work(session: AsyncSession) -> Category:
            session.add(CategoryRow(
                id=category.id,
                owner_id=category.owner_id,
                name=category.name,
                type=category.type.value,
                icon=category.icon,
                description=category.description,
            ))
            await session.commit()
            return category

        return await self._client.run(work)

    async def get_category(self, category_id: str, owner_id: str) -> Optional[Category]:
        async def work(session: AsyncSession) -> Optional[Category]:
            row = await session.scalar(
                select(CategoryRow).where(
                    CategoryRow.id == category_id,
                    CategoryRow.owner_id == owner_id,
                )
            )
            return _category_from_row(row) if row else None

        return await self._client.run(work)

    async def find_category(
        self,
        owner_id: str,
        name: str,
        type: str,
    ) -> Optional[Category]:
        async def work(session: AsyncSession) -> Optional[Category]:
            row = await session.scalar(
                select(CategoryRow).where(
                    CategoryRow.owner_id == owner_id,
                    CategoryRow.name == name,
                    CategoryRow.type == type,
                )
            )
            return _category_from_row(row) if row else None

        return await self._client.run(work)

    async def list_categories(self, owner_id: str) -> list[Category]:
        async def work(session: AsyncSession) -> list[Category]:
            rows = await session.scalars(
                select(CategoryRow).where(CategoryRow.owner_id == owner_id)
            )
            return [_category_from_row(row) for row in rows]

        return await self._client.run(work)

    async def update_category(self, category: Category) -> bool:
        async def work(session: AsyncSession) -> bool:
            result = await session.execute(
                update(CategoryRow)
                .where(
                    CategoryRow.id == category.id,
                    CategoryRow.owner_id == category.owner_id,
                )
                .values(
                    name=category.name,
                    type=category.type.value,
                    icon=category.icon,
                    description=category.description,
                )
            )
            await session.commit()
            return result.rowcount > 0

        return await self._client.run(work)

    async def delete_category(self, category_id: str, owner_id: str) -> Optional[int]:
        async def work(session: AsyncSession) -> Optional[int]:
            row = await session.scalar(
                select(CategoryRow).where(
                    CategoryRow.id == category_id,
                    CategoryRow.owner_id == owner_id,
                )
            )
            if row is None:
                return None

            unlinked = await session.execute(
                update(TransactionRow)
                .where(
                    TransactionRow.owner_id == owner_id,
                    TransactionRow.category_id == category_id,
                )
                .values(category_id=None)
            )
            await session.delete(row)
            # Unlink and delete land in the same commit
            await session.commit()
            return unlinked.rowcount

        return await self._client.run(work)


class SqlTransactionStorage(TransactionStorageInterface):

    def __init__(self, client: SqlClient):
        self._client = client

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        async def work(session: AsyncSession) -> Transaction:
            session.add(TransactionRow(
                id=transaction.id,
                owner_id=transaction.owner_id,
                type=transaction.type.value,
                description=transaction.description,
                amount=transaction.amount,
                date=transaction.date,
                category_id=transaction.category_id,
            ))
            await session.commit()
            return transaction

        return await self._client.run(work)

    async def get_transaction(
        self,
        transaction_id: str,
        owner_id: str,
    ) -> Optional[Transaction]:
        async def work(session: AsyncSession) -> Optional[Transaction]:
            row = await session.scalar(
                select(TransactionRow).where(
                    TransactionRow.id == transaction_id,
                    TransactionRow.owner_id == owner_id,
                )
            )
            return _transaction_from_row(row) if row else None

        return await self._client.run(work)

    async def list_transactions(self, owner_id: str) -> list[Transaction]:
        async def work(session: AsyncSession) -> list[Transaction]:
            rows = await session.scalars(
                select(TransactionRow)
                .where(TransactionRow.owner_id == owner_id)
                .order_by(TransactionRow.date.desc())
            )
            return [_transaction_from_row(row) for row in rows]

        return await self._client.run(work)

    async def update_transaction(
        self,
        transaction_id: str,
        owner_id: str,
        description: str,
        amount: Decimal,
        category_id: Optional[str],
    ) -> Optional[Transaction]:
        async def work(session: AsyncSession) -> Optional[Transaction]:
            row = await session.scalar(
                select(TransactionRow).where(
                    TransactionRow.id == transaction_id,
                    TransactionRow.owner_id == owner_id,
                )
            )
            if row is None:
                return None
            row.description = description
            row.amount = amount
            row.category_id = category_id
            await session.commit()
            return _transaction_from_row(row)

        return await self._client.run(work)

    async def delete_transaction(self, transaction_id: str, owner_id: str) -> bool:
        async def work(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(TransactionRow).where(
                    TransactionRow.id == transaction_id,
                    TransactionRow.owner_id == owner_id,
                )
            )
            await session.commit()
            return result.rowcount > 0

        return await self._client.run(work)
