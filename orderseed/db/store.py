"""
Data-access façade used by the order generator.

Provides the read operations for reference collections and a single
transactional bulk insert for composed orders.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence

from sqlalchemy import event, func, insert, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import selectinload

from orderseed.data.models import (
    CategoryRecord,
    ComponentRecord,
    EmployeeRecord,
    ItemRecord,
    OrderSpec,
    SellableRecord,
)
from orderseed.db.schema import (
    Base,
    Employee,
    Item,
    ItemFeature,
    JobPosition,
    Order,
    RecentOrder,
    Sellable,
    SellableCategory,
    SellableComponent,
    SoldItem,
    SoldSellable,
)
from orderseed.errors import PersistenceError

logger = logging.getLogger(__name__)


def _money(value: float) -> Decimal:
    return Decimal(str(round(value, 2)))


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Let BEGIN come from _begin_sqlite_transaction so DDL is transactional too
    dbapi_connection.isolation_level = None


def _begin_sqlite_transaction(conn) -> None:
    conn.exec_driver_sql("BEGIN")


class OrderStore:
    """
    Async store over the relational schema.

    Every read opens its own session, so independent reads can be awaited
    concurrently. The bulk write runs in one transaction and either
    commits every row or none.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize the store.

        Args:
            database_url: SQLAlchemy async URL, e.g. sqlite+aiosqlite:///data/orderseed.db
            echo: Log emitted SQL
        """
        self.database_url = database_url
        url = make_url(database_url)

        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_async_engine(database_url, echo=echo)
        if url.get_backend_name() == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _configure_sqlite_connection)
            event.listen(self.engine.sync_engine, "begin", _begin_sqlite_transaction)

        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        # Set only on stores yielded by transaction()
        self.connection: Optional[AsyncConnection] = None
        self._lock: Optional[asyncio.Lock] = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session (no implicit transaction)."""
        if self._lock is None:
            async with self.session_factory() as session:
                yield session
            return

        # One connection serves one statement at a time
        async with self._lock:
            async with self.session_factory() as session:
                yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["OrderStore"]:
        """
        Share one connection and one transaction across several operations.

        Yields a store bound to that connection. Schema changes, reads and
        writes made through it commit together when the block exits, and
        all roll back if it raises.

        Example:
            async with store.transaction() as scoped:
                await scoped.create_schema(drop_existing=True)
                await scoped.bulk_create_orders(specs)
        """
        async with self.engine.begin() as conn:
            scoped = copy.copy(self)
            scoped.connection = conn
            scoped.session_factory = async_sessionmaker(bind=conn, expire_on_commit=False)
            scoped._lock = asyncio.Lock()
            yield scoped

    async def create_schema(self, drop_existing: bool = False) -> None:
        """
        Create all tables.

        Args:
            drop_existing: Drop every table first (full reset)
        """
        if self.connection is not None:
            await self._create_tables(self.connection, drop_existing)
        else:
            async with self.engine.begin() as conn:
                await self._create_tables(conn, drop_existing)
        logger.info(f"Schema ready (reset={drop_existing})")

    @staticmethod
    async def _create_tables(conn: AsyncConnection, drop_existing: bool) -> None:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close pooled connections."""
        await self.engine.dispose()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_categories(
        self, names: Optional[Sequence[str]] = None
    ) -> List[CategoryRecord]:
        """
        Fetch sellable categories with their importance.

        Args:
            names: Restrict to these category names

        Returns:
            List of CategoryRecord
        """
        stmt = select(SellableCategory).order_by(SellableCategory.id)
        if names is not None:
            stmt = stmt.where(SellableCategory.name.in_(list(names)))

        async with self.session() as session:
            rows = (await session.execute(stmt)).scalars().all()

        return [CategoryRecord(id=c.id, name=c.name, importance=c.importance) for c in rows]

    async def fetch_sellables(
        self, category_names: Optional[Sequence[str]] = None
    ) -> List[SellableRecord]:
        """
        Fetch non-deleted sellables with their components.

        Args:
            category_names: Restrict to sellables in any of these categories

        Returns:
            List of SellableRecord
        """
        stmt = (
            select(Sellable)
            .where(Sellable.deleted_at.is_(None))
            .options(
                selectinload(Sellable.categories),
                selectinload(Sellable.components).selectinload(
                    SellableComponent.item_feature
                ),
            )
            .order_by(Sellable.id)
        )
        if category_names is not None:
            stmt = stmt.where(
                Sellable.categories.any(SellableCategory.name.in_(list(category_names)))
            )

        async with self.session() as session:
            rows = (await session.execute(stmt)).scalars().all()

        return [
            SellableRecord(
                id=s.id,
                name=s.name,
                price=float(s.price),
                categories=tuple(c.name for c in s.categories),
                components=tuple(
                    ComponentRecord(feature_name=c.item_feature.name, amount=c.amount)
                    for c in s.components
                ),
            )
            for s in rows
        ]

    async def fetch_items(
        self,
        feature_name: Optional[str] = None,
        names: Optional[Sequence[str]] = None,
    ) -> List[ItemRecord]:
        """
        Fetch items with their feature names.

        Args:
            feature_name: Restrict to items carrying this feature
            names: Restrict to these item names

        Returns:
            List of ItemRecord
        """
        stmt = select(Item).options(selectinload(Item.features)).order_by(Item.id)
        if feature_name is not None:
            stmt = stmt.where(Item.features.any(ItemFeature.name == feature_name))
        if names is not None:
            stmt = stmt.where(Item.name.in_(list(names)))

        async with self.session() as session:
            rows = (await session.execute(stmt)).scalars().all()

        return [
            ItemRecord(
                id=i.id,
                name=i.name,
                additional_price=float(i.additional_price or 0),
                features=tuple(f.name for f in i.features),
            )
            for i in rows
        ]

    async def fetch_employees(self, access_mask: int = 0) -> List[EmployeeRecord]:
        """
        Fetch employees whose job position grants every bit in access_mask.

        Args:
            access_mask: Required permission bits (0 accepts everyone)

        Returns:
            List of EmployeeRecord
        """
        stmt = (
            select(Employee.id, Employee.name, JobPosition.access)
            .join(JobPosition, Employee.job_position_id == JobPosition.id)
            .order_by(Employee.id)
        )
        if access_mask:
            stmt = stmt.where(JobPosition.access.op("&")(access_mask) == access_mask)

        async with self.session() as session:
            rows = (await session.execute(stmt)).all()

        return [EmployeeRecord(id=r.id, name=r.name, access=r.access) for r in rows]

    async def count_orders(self) -> int:
        """Number of persisted orders."""
        async with self.session() as session:
            return int(await session.scalar(select(func.count(Order.id))))

    async def count_recent_orders(self, status: Optional[int] = None) -> int:
        """Number of recent-order markers, optionally by status."""
        stmt = select(func.count(RecentOrder.id))
        if status is not None:
            stmt = stmt.where(RecentOrder.order_status == int(status))
        async with self.session() as session:
            return int(await session.scalar(stmt))

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def bulk_create_orders(self, specs: Sequence[OrderSpec]) -> int:
        """
        Insert composed orders and all their child rows in one transaction.

        Args:
            specs: Order specifications to persist

        Returns:
            Number of orders written

        Raises:
            PersistenceError: If any insert fails; nothing is committed
        """
        if not specs:
            return 0

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await self._insert_orders(session, specs)
        except SQLAlchemyError as e:
            logger.error(f"Bulk insert of {len(specs)} orders rolled back: {e}")
            raise PersistenceError(f"Bulk insert failed and was rolled back: {e}") from e

        logger.info(f"Persisted {len(specs)} orders")
        return len(specs)

    async def _insert_orders(self, session: AsyncSession, specs: Sequence[OrderSpec]) -> None:
        result = await session.execute(
            insert(Order).returning(Order.id, sort_by_parameter_order=True),
            [
                {
                    "customer_name": spec.customer_name,
                    "total_price": _money(spec.total_price),
                    "order_date": spec.order_date,
                    "employee_id": spec.employee_id,
                }
                for spec in specs
            ],
        )
        order_ids = result.scalars().all()

        recent_rows = [
            {"order_id": order_id, "order_status": int(spec.recent.status)}
            for order_id, spec in zip(order_ids, specs)
            if spec.recent is not None
        ]
        if recent_rows:
            await session.execute(insert(RecentOrder), recent_rows)

        sold_rows = []
        sold_specs = []
        for order_id, spec in zip(order_ids, specs):
            for sold in spec.sold_sellables:
                sold_rows.append({"order_id": order_id, "sellable_id": sold.sellable_id})
                sold_specs.append(sold)

        result = await session.execute(
            insert(SoldSellable).returning(SoldSellable.id, sort_by_parameter_order=True),
            sold_rows,
        )
        sold_ids = result.scalars().all()

        item_rows = [
            {"sold_sellable_id": sold_id, "item_id": line.item_id, "amount": line.amount}
            for sold_id, sold in zip(sold_ids, sold_specs)
            for line in sold.sold_items
        ]
        if item_rows:
            await session.execute(insert(SoldItem), item_rows)
