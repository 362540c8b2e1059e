"""Base model class for SQLAlchemy ORM."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Compensation inputs are stored exactly; the API and store reject finer amounts
MONEY_SCALE = 4
MONEY = Numeric(18, MONEY_SCALE, asdecimal=True)
# Computed net pay carries rate products, so history keeps more places
NET_PAY_SCALE = 10
NET_PAY = Numeric(28, NET_PAY_SCALE, asdecimal=True)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        Decimal: MONEY,
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Mixin for models with created_at timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
