"""
Pydantic schemas for ledger entries, earn/redeem requests and ratings.

A ledger entry is a tagged variant on `type`: EarnedEntry or RedeemedEntry.
`amount` is always a positive magnitude.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from app.models.enums import TransactionType
from app.schemas.common import ApiModel

PositiveAmount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class _EntryBase(ApiModel):
    id: str
    customer_id: str
    business_id: str
    source: str
    amount: Decimal = Field(..., description="B-Coins moved (positive)")
    description: Optional[str] = None
    created_at: datetime


class EarnedEntry(_EntryBase):
    type: Literal["earned"] = "earned"
    bill_amount: Optional[Decimal] = None
    qr_code: Optional[str] = None


class RedeemedEntry(_EntryBase):
    type: Literal["redeemed"] = "redeemed"


LedgerEntry = Annotated[Union[EarnedEntry, RedeemedEntry], Field(discriminator="type")]


def entry_from_model(txn) -> Union[EarnedEntry, RedeemedEntry]:
    """Build the tagged variant for an ORM ledger row."""
    if txn.type == TransactionType.REDEEMED.value:
        return RedeemedEntry.model_validate(txn)
    return EarnedEntry.model_validate(txn)


class ScanRequest(ApiModel):
    """Customer scanned a counter code and entered the bill amount."""
    qr_code: str = Field(..., min_length=1)
    customer_id: str
    bill_amount: PositiveAmount
    idempotency_key: Optional[str] = Field(None, max_length=128)


class RedeemRequest(ApiModel):
    customer_id: str
    business_id: str
    amount: PositiveAmount
    idempotency_key: Optional[str] = Field(None, max_length=128)


class TransactionCreate(ApiModel):
    """Direct entry creation: earned credits a fixed amount, redeemed debits."""
    customer_id: str
    business_id: str
    type: TransactionType
    amount: PositiveAmount
    description: Optional[str] = Field(None, max_length=500)
    idempotency_key: Optional[str] = Field(None, max_length=128)


class LedgerOperationResponse(ApiModel):
    transaction: LedgerEntry
    new_balance: Decimal
    business_name: str
    replayed: bool = False


class ScanResponse(LedgerOperationResponse):
    b_coins_earned: Decimal


class TransactionListResponse(ApiModel):
    transactions: list[LedgerEntry]
    total: int


class RatingCreate(ApiModel):
    customer_id: str
    business_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class RatingResponse(ApiModel):
    id: str
    customer_id: str
    business_id: str
    rating: int
    comment: Optional[str] = None
    bonus_b_coins: Decimal
    created_at: datetime


class RatingCreatedResponse(ApiModel):
    rating: RatingResponse
    transaction: LedgerEntry
    new_balance: Decimal


class NotificationResponse(ApiModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime


class WeeklyData(ApiModel):
    transactions: int
    revenue: Decimal
    b_coins_issued: Decimal


class AnalyticsResponse(ApiModel):
    business_id: str
    total_b_coins_issued: Decimal
    total_b_coins_redeemed: Decimal
    total_customers: int
    unique_customers: int
    total_transactions: int
    average_bill_amount: Decimal
    average_rating: float
    total_ratings: int
    weekly_data: WeeklyData
