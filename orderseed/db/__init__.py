"""Relational schema, store and demo seed data."""

from orderseed.db.store import OrderStore

__all__ = ["OrderStore"]
