"""
B-Coin ledger entry model.

Entries are append-only. `amount` is always a positive magnitude and
`type` (earned / redeemed) carries the direction.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, utcnow


class BCoinTransaction(Base):
    __tablename__ = "bcoin_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique ledger entry identifier (UUID)"
    )
    customer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    business_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("businesses.id"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="earned or redeemed"
    )
    source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="purchase, rating_bonus, manual or redemption"
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="B-Coins moved (positive magnitude)"
    )
    bill_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        doc="Purchase amount that produced an earned entry"
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    qr_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(128),
        unique=True,
        nullable=True,
        doc="Client-supplied key; a replay returns the original entry"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<BCoinTransaction(id={self.id}, customer={self.customer_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
