"""
Business and bundle models.
A Bundle groups the businesses of one pincode; at most one active
business per category may sit in a pincode.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow


class Bundle(Base):
    __tablename__ = "bundles"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pincode: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        nullable=False,
        doc="One bundle per pincode"
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    businesses = relationship("Business", back_populates="bundle")

    def __repr__(self) -> str:
        return f"<Bundle(id={self.id}, pincode={self.pincode})>"


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (
        # Backs the exclusivity rule: one active business per (category, pincode)
        Index(
            "uq_active_category_pincode",
            "category",
            "pincode",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique business identifier (UUID)"
    )
    owner_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
        index=True,
        doc="Business-type user that owns this profile"
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        doc="One of BusinessCategory"
    )
    pincode: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    b_coin_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("5.00"),
        nullable=False,
        doc="Percentage of the bill credited as B-Coins"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    bundle_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("bundles.id"),
        nullable=True,
        index=True,
    )
    total_b_coins_issued: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_b_coins_redeemed: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_customers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    bundle = relationship("Bundle", back_populates="businesses")

    def __repr__(self) -> str:
        return (
            f"<Business(id={self.id}, name={self.business_name}, "
            f"category={self.category}, pincode={self.pincode})>"
        )
