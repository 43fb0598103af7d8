"""
Relational schema for menu, staff and order tables.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


item_features = Table(
    "item_item_features",
    Base.metadata,
    Column("item_id", ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "item_feature_id",
        ForeignKey("item_features.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

sellable_categories = Table(
    "sellable_sellable_categories",
    Base.metadata,
    Column(
        "sellable_id", ForeignKey("sellables.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "sellable_category_id",
        ForeignKey("sellable_categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class JobPosition(Base):
    __tablename__ = "job_positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), unique=True)
    access: Mapped[int] = mapped_column(Integer, default=0)

    employees: Mapped[List["Employee"]] = relationship(back_populates="job_position")


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120))
    start_date: Mapped[Optional[date]] = mapped_column(Date, default=None)
    email: Mapped[Optional[str]] = mapped_column(String(200), default=None)
    job_position_id: Mapped[int] = mapped_column(ForeignKey("job_positions.id"))

    job_position: Mapped[JobPosition] = relationship(back_populates="employees")


class ItemFeature(Base):
    __tablename__ = "item_features"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), unique=True)
    importance: Mapped[int] = mapped_column(Integer, default=0)
    is_primary: Mapped[bool] = mapped_column(default=False)


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True)
    additional_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    calories: Mapped[int] = mapped_column(Integer, default=0)

    features: Mapped[List[ItemFeature]] = relationship(secondary=item_features)


class SellableCategory(Base):
    __tablename__ = "sellable_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), unique=True)
    importance: Mapped[int] = mapped_column(Integer, default=0)


class Sellable(Base):
    __tablename__ = "sellables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)

    categories: Mapped[List[SellableCategory]] = relationship(
        secondary=sellable_categories
    )
    components: Mapped[List["SellableComponent"]] = relationship(
        back_populates="sellable", cascade="all, delete-orphan"
    )


class SellableComponent(Base):
    __tablename__ = "sellable_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sellable_id: Mapped[int] = mapped_column(
        ForeignKey("sellables.id", ondelete="CASCADE")
    )
    item_feature_id: Mapped[int] = mapped_column(ForeignKey("item_features.id"))
    amount: Mapped[int] = mapped_column(Integer, default=1)

    sellable: Mapped[Sellable] = relationship(back_populates="components")
    item_feature: Mapped[ItemFeature] = relationship()


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_name: Mapped[str] = mapped_column(String(120))
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    order_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    employee_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL")
    )


class RecentOrder(Base):
    __tablename__ = "recent_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), unique=True
    )
    order_status: Mapped[int] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class SoldSellable(Base):
    __tablename__ = "sold_sellables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), index=True
    )
    sellable_id: Mapped[int] = mapped_column(ForeignKey("sellables.id"))


class SoldItem(Base):
    __tablename__ = "sold_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sold_sellable_id: Mapped[int] = mapped_column(
        ForeignKey("sold_sellables.id", ondelete="CASCADE"), index=True
    )
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="RESTRICT"))
    amount: Mapped[int] = mapped_column(Integer, default=1)
