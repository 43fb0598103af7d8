"""
Batch orchestration for the synthetic order history.

A run is linear: fetch reference data, generate the historical batch,
generate today's in-flight batch, persist everything in one transaction.
There is no retry or resume; a failure anywhere aborts the whole run.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import asyncio
import copy
import logging
import time
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

import numpy as np

from orderseed.data.models import OrderSpec, RecentOrderMarker, ReferenceData
from orderseed.db.store import OrderStore
from orderseed.errors import PersistenceError, ReferenceDataError
from orderseed.generation.combos import ComboComposer
from orderseed.generation.config import DEFAULT_GENERATOR_CONFIG, GeneratorConfig
from orderseed.generation.synthesizer import OrderSynthesizer
from orderseed.sampling.calendar import (
    DEFAULT_MAX_ATTEMPTS,
    BusinessCalendar,
    BusinessHoursWindow,
)
from orderseed.sampling.weighted import WeightedSampler

logger = logging.getLogger(__name__)


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


class BatchOrchestrator:
    """
    Drives order synthesis for a full populate run.

    Reference data is fetched once, concurrently, before any sampling.
    Sampling is synchronous and issues no queries. The complete batch is
    handed to the store in a single bulk write.
    """

    def __init__(
        self,
        store: OrderStore,
        config: GeneratorConfig = DEFAULT_GENERATOR_CONFIG,
        seed: Optional[int] = None,
        max_date_attempts: int = DEFAULT_MAX_ATTEMPTS,
        employee_access_mask: int = 0,
        resolve_sold_items: bool = False,
        include_item_surcharges: bool = False,
        fetch_timeout: Optional[float] = None,
        persist_timeout: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Data-access façade for reads and the bulk write
            config: Weight tables, name pool, weekly hours and counts
            seed: Optional seed for a reproducible run
            max_date_attempts: Rejection draws before enumerating open days
            employee_access_mask: Permission bits an employee must hold
            resolve_sold_items: Build SoldItem lines for each component
            include_item_surcharges: Add item surcharges to order totals
            fetch_timeout: Seconds allowed for the reference fetch (None = no limit)
            persist_timeout: Seconds allowed for the bulk write (None = no limit)
            clock: Source of "now"
        """
        self.store = store
        self.config = config
        self.sampler = WeightedSampler(rng=np.random.default_rng(seed))
        self.calendar = BusinessCalendar(
            weekly_hours=config.weekly_hours_by_number(),
            sampler=self.sampler,
            max_attempts=max_date_attempts,
        )
        self.employee_access_mask = employee_access_mask
        self.resolve_sold_items = resolve_sold_items
        self.include_item_surcharges = include_item_surcharges
        self.fetch_timeout = fetch_timeout
        self.persist_timeout = persist_timeout
        self.clock = clock

    @classmethod
    def from_settings(cls, store: OrderStore, settings, config: Optional[GeneratorConfig] = None):
        """
        Build an orchestrator from application settings.

        Batch counts from settings replace those of the generator config.
        """
        if config is None:
            config = (
                GeneratorConfig.from_json_file(settings.generator_config_path)
                if settings.generator_config_path
                else DEFAULT_GENERATOR_CONFIG
            )
        config = config.model_copy(
            update={
                "historical_order_count": settings.historical_order_count,
                "recent_order_count": settings.recent_order_count,
            }
        )
        return cls(
            store,
            config=config,
            seed=settings.random_seed,
            max_date_attempts=settings.max_date_attempts,
            employee_access_mask=settings.employee_access_mask,
            resolve_sold_items=settings.resolve_sold_items,
            include_item_surcharges=settings.include_item_surcharges,
            fetch_timeout=settings.fetch_timeout_seconds,
            persist_timeout=settings.persist_timeout_seconds,
        )

    def with_store(self, store: OrderStore) -> "BatchOrchestrator":
        """Copy of this orchestrator reading and writing through another store."""
        bound = copy.copy(self)
        bound.store = store
        return bound

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    async def fetch_reference(self) -> ReferenceData:
        """
        Fetch every reference collection concurrently.

        Returns:
            ReferenceData snapshot

        Raises:
            ReferenceDataError: If the fetch exceeds fetch_timeout
        """
        category_names = sorted(self.config.sellable_weights)

        try:
            categories, sellables, items, employees = await asyncio.wait_for(
                asyncio.gather(
                    self.store.fetch_categories(category_names),
                    self.store.fetch_sellables(category_names),
                    self.store.fetch_items(),
                    self.store.fetch_employees(self.employee_access_mask),
                ),
                timeout=self.fetch_timeout,
            )
        except asyncio.TimeoutError:
            raise ReferenceDataError(
                f"Reference fetch timed out after {self.fetch_timeout}s"
            )

        reference = ReferenceData(
            categories=tuple(categories),
            sellables=tuple(sellables),
            items=tuple(items),
            employees=tuple(employees),
        )
        logger.info(f"Fetched reference data: {reference.summary()}")
        return reference

    # ------------------------------------------------------------------
    # Date ranges
    # ------------------------------------------------------------------

    def historical_range(self, now: datetime) -> Tuple[datetime, datetime]:
        """
        Range for the historical batch.

        Starts at the opening of the last open day on or before
        history_years ago, and ends at the close of the last open day
        before today.
        """
        start_day = self.calendar.last_open_day(
            _years_before(now.date(), self.config.history_years)
        )
        end_day = self.calendar.last_open_day(now.date() - timedelta(days=1))
        return (
            self.calendar.hours_for(start_day).open,
            self.calendar.hours_for(end_day).close,
        )

    def recent_window(self, now: datetime) -> Optional[BusinessHoursWindow]:
        """Today's opening window, or None when closed today."""
        return self.calendar.hours_for(now)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def build_synthesizer(self, reference: ReferenceData) -> OrderSynthesizer:
        """Bind composer and synthesizer to a reference snapshot."""
        composer = ComboComposer(
            self.config.combos,
            self.config.sellable_weights,
            reference,
            self.sampler,
        )
        return OrderSynthesizer(
            composer,
            reference,
            self.config.customer_names,
            self.sampler,
            item_weights=self.config.item_weights,
            resolve_items=self.resolve_sold_items,
            include_surcharges=self.include_item_surcharges,
        )

    def generate_batch(
        self,
        historical_count: int,
        recent_count: int,
        reference: ReferenceData,
        now: Optional[datetime] = None,
    ) -> List[OrderSpec]:
        """
        Generate historical orders followed by today's recent orders.

        Args:
            historical_count: Orders spread over the historical range
            recent_count: Orders within today's window (none if closed today)
            reference: Pre-fetched reference snapshot
            now: Reference instant (defaults to the clock)

        Returns:
            Historical specs followed by recent specs

        Raises:
            EmptyDistributionError: If a candidate pool is empty
            NoOpenDayInRangeError: If a range contains no open day
            ReferenceDataError: If a configured category has no sellables
        """
        if historical_count < 0 or recent_count < 0:
            raise ValueError("Order counts must not be negative")

        now = now or self.clock()
        synthesizer = self.build_synthesizer(reference)

        start = time.perf_counter()
        historical: List[OrderSpec] = []
        if historical_count:
            range_start, range_end = self.historical_range(now)
            historical = [
                synthesizer.synthesize(self.calendar.random_timestamp(range_start, range_end))
                for _ in range(historical_count)
            ]
        logger.info(
            f"Generated {len(historical)} historical orders "
            f"in {time.perf_counter() - start:.2f}s"
        )

        start = time.perf_counter()
        recent: List[OrderSpec] = []
        window = self.recent_window(now)
        if window is None:
            logger.info("Closed today; skipping recent orders")
        elif recent_count:
            marker = RecentOrderMarker(status=self.config.recent_status)
            recent = [
                synthesizer.synthesize(
                    self.calendar.random_timestamp(window.open, window.close)
                ).with_marker(marker)
                for _ in range(recent_count)
            ]
        logger.info(
            f"Generated {len(recent)} recent orders "
            f"in {time.perf_counter() - start:.2f}s"
        )

        return historical + recent

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def persist(self, specs: List[OrderSpec]) -> int:
        """
        Submit the batch in one transaction.

        Raises:
            PersistenceError: If the write fails or exceeds persist_timeout
        """
        try:
            return await asyncio.wait_for(
                self.store.bulk_create_orders(specs), timeout=self.persist_timeout
            )
        except asyncio.TimeoutError:
            raise PersistenceError(
                f"Bulk insert timed out after {self.persist_timeout}s and was rolled back"
            )

    async def populate(
        self,
        historical_count: Optional[int] = None,
        recent_count: Optional[int] = None,
    ) -> List[OrderSpec]:
        """
        Run fetch -> generate -> persist.

        Args:
            historical_count: Override for the configured historical count
            recent_count: Override for the configured recent count

        Returns:
            The persisted order specs
        """
        if historical_count is None:
            historical_count = self.config.historical_order_count
        if recent_count is None:
            recent_count = self.config.recent_order_count

        started = time.perf_counter()
        reference = await self.fetch_reference()
        specs = self.generate_batch(historical_count, recent_count, reference)
        await self.persist(specs)

        logger.info(
            f"Populated {len(specs)} orders in {time.perf_counter() - started:.2f}s"
        )
        return specs
