"""
SQLAlchemy 2.x ORM models for the bicycle rental data layer.

Models use the Mapped[] type annotation syntax and mapped_column.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, validates

from rental.core.errors import ValidationError
from rental.domain.enums import OrderStatus, UserRole


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class User(Base):
    """Application user. ``login`` doubles as the display name."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.CLIENT.value)

    orders: Mapped[list[Order]] = relationship("Order", back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login={self.login}, role={self.role})>"


class Bicycle(Base):
    """A bicycle available for rent at a rental point."""

    __tablename__ = "bicycles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    model: Mapped[str] = mapped_column(String(128), nullable=False)
    place: Mapped[str | None] = mapped_column(Text, nullable=True)

    orders: Mapped[list[Order]] = relationship("Order", back_populates="bicycle")

    def __repr__(self) -> str:
        return f"<Bicycle(id={self.id}, model={self.model})>"


class Order(Base):
    """
    A rental order: one user renting one bicycle for a number of hours.

    ``status`` is stored as free text; OrderStatus lists the values the
    application writes.
    """

    __tablename__ = "orders"
    __table_args__ = (CheckConstraint("hours > 0", name="chk_orders_hours_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    bicycle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bicycles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    hours: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=OrderStatus.PENDING.value
    )
    rental_date: Mapped[date] = mapped_column("date", Date, nullable=False, default=date.today)

    user: Mapped[User] = relationship("User", back_populates="orders", lazy="raise")
    bicycle: Mapped[Bicycle] = relationship("Bicycle", back_populates="orders", lazy="raise")

    @validates("hours")
    def _validate_hours(self, key: str, value: int) -> int:
        if value is None or value <= 0:
            raise ValidationError(
                "Rental duration must be a positive number of hours", details={"hours": value}
            )
        return value

    @validates("status")
    def _validate_status(self, key: str, value: str | OrderStatus) -> str:
        return normalize_status(value)

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, user_id={self.user_id}, bicycle_id={self.bicycle_id}, "
            f"hours={self.hours}, status={self.status}, date={self.rental_date})>"
        )


def normalize_status(value: str | OrderStatus) -> str:
    """Return the stored text form of an order status."""
    if isinstance(value, OrderStatus):
        return value.value
    if value is None or not str(value).strip():
        raise ValidationError("Order status must not be empty", details={"status": value})
    return str(value).strip().lower()
