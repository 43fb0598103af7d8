"""
Sales reports over persisted orders.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from typing import Dict, List, Sequence

import pandas as pd
from sqlalchemy import delete, select

from orderseed.data.models import OrderSpec, OrderStatus
from orderseed.db.schema import Order, RecentOrder, Sellable, SoldSellable
from orderseed.db.store import OrderStore

logger = logging.getLogger(__name__)

# pandas period aliases per report range
TIME_RANGES = {
    "daily": "D",
    "weekly": "W",
    "monthly": "M",
}


async def _completed_recent_orders(store: OrderStore) -> pd.DataFrame:
    stmt = (
        select(Order.id, Order.order_date, Order.total_price)
        .join(RecentOrder, RecentOrder.order_id == Order.id)
        .where(RecentOrder.order_status == int(OrderStatus.COMPLETED))
    )
    async with store.session() as session:
        rows = (await session.execute(stmt)).all()

    df = pd.DataFrame(
        [tuple(r) for r in rows], columns=["order_id", "order_date", "total_price"]
    )
    df["total_price"] = df["total_price"].astype(float)
    return df


async def x_report(store: OrderStore) -> List[Dict]:
    """
    Completed recent orders grouped by the hour they were placed in.

    Hours are truncated timestamps, so orders left open across days
    stay in separate rows.

    Args:
        store: Source store

    Returns:
        One record per hour with hour, order_count and total, oldest first
    """
    df = await _completed_recent_orders(store)
    if df.empty:
        return []

    df["hour"] = pd.to_datetime(df["order_date"]).dt.floor("h")
    grouped = (
        df.groupby("hour")
        .agg(order_count=("order_id", "count"), total=("total_price", "sum"))
        .reset_index()
    )
    grouped["total"] = grouped["total"].round(2)

    return [
        {
            "hour": r.hour.to_pydatetime(),
            "order_count": int(r.order_count),
            "total": float(r.total),
        }
        for r in grouped.itertuples(index=False)
    ]


async def z_report(store: OrderStore) -> Dict:
    """
    Close the day: total the completed recent orders and clear their markers.

    The totals read and the marker delete share one transaction.

    Args:
        store: Source store

    Returns:
        Dictionary with order_count and total
    """
    completed = RecentOrder.order_status == int(OrderStatus.COMPLETED)
    stmt = (
        select(Order.id, Order.total_price)
        .join(RecentOrder, RecentOrder.order_id == Order.id)
        .where(completed)
    )

    async with store.session_factory() as session:
        async with session.begin():
            rows = (await session.execute(stmt)).all()
            await session.execute(delete(RecentOrder).where(completed))

    report = {
        "order_count": len(rows),
        "total": round(float(sum(r.total_price for r in rows)), 2),
    }
    logger.info(f"Z report closed {report['order_count']} orders")
    return report


async def sales_report(store: OrderStore, time_range: str) -> List[Dict]:
    """
    Units sold and revenue per live sellable per period.

    Args:
        store: Source store
        time_range: "daily", "weekly" or "monthly"

    Returns:
        Records with period, sellable, units_sold and revenue, newest period first

    Raises:
        ValueError: If time_range is not recognised
    """
    if time_range not in TIME_RANGES:
        raise ValueError(
            f"Invalid time range '{time_range}'. Expected one of {sorted(TIME_RANGES)}"
        )

    stmt = (
        select(Order.order_date, Sellable.name, Sellable.price)
        .join(SoldSellable, SoldSellable.order_id == Order.id)
        .join(Sellable, Sellable.id == SoldSellable.sellable_id)
        .where(Sellable.deleted_at.is_(None))
    )
    async with store.session() as session:
        rows = (await session.execute(stmt)).all()

    if not rows:
        return []

    df = pd.DataFrame([tuple(r) for r in rows], columns=["order_date", "sellable", "price"])
    df["price"] = df["price"].astype(float)
    df["period"] = (
        pd.to_datetime(df["order_date"])
        .dt.to_period(TIME_RANGES[time_range])
        .dt.start_time
    )

    grouped = (
        df.groupby(["period", "sellable"])
        .agg(units_sold=("price", "size"), revenue=("price", "sum"))
        .reset_index()
        .sort_values(["period", "revenue"], ascending=[False, False])
    )
    grouped["revenue"] = grouped["revenue"].round(2)

    return [
        {
            "period": r.period.date().isoformat(),
            "sellable": r.sellable,
            "units_sold": int(r.units_sold),
            "revenue": float(r.revenue),
        }
        for r in grouped.itertuples(index=False)
    ]


def summarize_batch(specs: Sequence[OrderSpec]) -> pd.DataFrame:
    """
    Describe a generated batch.

    Used to compare the distribution shape of two runs: the same
    configuration should give similar price statistics and sellable shares.

    Args:
        specs: Generated order specs

    Returns:
        Single-column DataFrame indexed by metric name
    """
    if not specs:
        return pd.DataFrame({"value": pd.Series(dtype=float)})

    prices = pd.Series([s.total_price for s in specs], dtype=float)
    sellables = pd.Series(
        [sold.sellable_name for s in specs for sold in s.sold_sellables]
    )

    metrics = {
        "order_count": float(len(specs)),
        "recent_count": float(sum(1 for s in specs if s.is_recent)),
        "total_price": round(float(prices.sum()), 2),
        "mean_price": float(prices.mean()),
        "price_p25": float(prices.quantile(0.25)),
        "price_p50": float(prices.quantile(0.50)),
        "price_p75": float(prices.quantile(0.75)),
    }
    shares = sellables.value_counts(normalize=True).sort_index()
    for name, share in shares.items():
        metrics[f"share:{name}"] = float(share)

    return pd.DataFrame({"value": pd.Series(metrics)})
