"""
Accrual / Redemption Engine - the only code that moves B-Coins.

Every operation:
  - runs under a per-customer lock (Redis or in-process),
  - applies balance and running totals with atomic SQL updates,
  - commits once; any failure rolls back the whole unit,
  - honours an optional idempotency key (a replay returns the original
    entry and applies nothing).

Invariant kept: b_coin_balance == total_b_coins_earned - total_b_coins_spent.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterator, Optional

from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.core.exceptions import (
    BusinessInactiveError,
    IdempotencyConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from app.core.redis import cache_delete, customer_lock
from app.models.business import Business
from app.models.enums import TransactionSource, TransactionType
from app.models.rating import Notification, Rating
from app.models.transaction import BCoinTransaction
from app.models.user import CustomerProfile
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()

CENT = Decimal("0.01")


def to_amount(value: Any, field: str = "amount") -> Decimal:
    """Parse a money value into a 2-place Decimal (half-up)."""
    try:
        amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a decimal number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a decimal number")
    return amount


def compute_earning(bill_amount: Decimal, rate: Decimal) -> Decimal:
    """B-Coins earned for a bill: bill * rate / 100, rounded half-up to 0.01."""
    return (Decimal(bill_amount) * Decimal(rate) / Decimal(100)).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def analytics_cache_key(business_id: str) -> str:
    return f"analytics:business:{business_id}"


@dataclass
class LedgerResult:
    """Outcome of one ledger operation."""
    transaction: BCoinTransaction
    business: Business
    balance: Decimal
    replayed: bool = False


@dataclass
class RatingResult:
    rating: Rating
    ledger: LedgerResult


class LedgerEngine:
    """Applies earn / credit / redeem / rating-bonus operations to the store."""

    def __init__(self, store: LedgerStore):
        self.store = store

    # ── public operations ────────────────────────────────────────

    def earn(
        self,
        customer_id: str,
        business_id: str,
        bill_amount: Any,
        qr_code: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> LedgerResult:
        """Credit B-Coins for a purchase at the business's configured rate."""
        bill = to_amount(bill_amount, "billAmount")
        if bill <= 0:
            raise ValidationError("billAmount must be greater than 0")

        business = self._require_active_business(business_id)
        coins = compute_earning(bill, business.b_coin_rate)
        if coins <= 0:
            raise ValidationError(
                f"A bill of {bill} earns no B-Coins at {business.business_name}"
            )

        return self._run_credit(
            customer_id,
            business,
            coins,
            source=TransactionSource.PURCHASE,
            description=f"Earned from {business.business_name}",
            bill_amount=bill,
            qr_code=qr_code,
            idempotency_key=idempotency_key,
        )

    def credit(
        self,
        customer_id: str,
        business_id: str,
        amount: Any,
        description: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> LedgerResult:
        """Credit a fixed number of B-Coins (direct earned-entry creation)."""
        coins = to_amount(amount)
        if coins <= 0:
            raise ValidationError("amount must be greater than 0")

        business = self._require_active_business(business_id)
        return self._run_credit(
            customer_id,
            business,
            coins,
            source=TransactionSource.MANUAL,
            description=description or f"Credited by {business.business_name}",
            idempotency_key=idempotency_key,
        )

    def redeem(
        self,
        customer_id: str,
        business_id: str,
        amount: Any,
        description: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> LedgerResult:
        """Spend B-Coins at a business. Fails without side effects if the balance is short."""
        coins = to_amount(amount)
        if coins <= 0:
            raise ValidationError("amount must be greater than 0")

        business = self._require_active_business(business_id)

        try:
            with self._atomic(customer_id):
                replay = self._find_replay(
                    idempotency_key, customer_id, business.id, TransactionType.REDEEMED
                )
                if replay is not None:
                    return replay

                profile = self._require_customer(customer_id)
                available = profile.b_coin_balance
                if not self.store.apply_customer_delta(customer_id, spent=coins):
                    raise InsufficientBalanceError(
                        f"Insufficient B-Coins balance: {available} available, {coins} requested",
                        extra={"balance": str(available), "requested": str(coins)},
                    )

                txn = self.store.add(BCoinTransaction(
                    customer_id=customer_id,
                    business_id=business.id,
                    type=TransactionType.REDEEMED.value,
                    source=TransactionSource.REDEMPTION.value,
                    amount=coins,
                    description=description or f"Redeemed at {business.business_name}",
                    idempotency_key=idempotency_key,
                ))
                self.store.apply_business_delta(business.id, redeemed=coins)
                self._notify(
                    customer_id,
                    "bcoin_redeemed",
                    "B-Coins Redeemed",
                    f"You redeemed {coins} B-Coins at {business.business_name}",
                )
                self._notify(
                    business.owner_user_id,
                    "bcoin_redeemed",
                    "B-Coins Redeemed",
                    f"A customer redeemed {coins} B-Coins at your store",
                )
        except IntegrityError:
            replay = self._replay_after_race(
                idempotency_key, customer_id, business.id, TransactionType.REDEEMED
            )
            if replay is None:
                raise
            return replay

        cache_delete(analytics_cache_key(business.id))
        logger.info(
            "[REDEEM] customer=%s business=%s amount=%s balance=%s",
            customer_id, business.id, coins, profile.b_coin_balance,
        )
        return LedgerResult(
            transaction=txn,
            business=business,
            balance=profile.b_coin_balance,
        )

    def rate(
        self,
        customer_id: str,
        business_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> RatingResult:
        """Record a 1-5 star rating and award the rating bonus."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("rating must be an integer between 1 and 5")

        business = self._require_active_business(business_id)
        bonus = settings.RATING_BONUS_HIGH if rating >= 4 else settings.RATING_BONUS_LOW
        bonus = to_amount(bonus)

        with self._atomic(customer_id):
            profile = self._require_customer(customer_id)
            record = self.store.add(Rating(
                customer_id=customer_id,
                business_id=business.id,
                rating=rating,
                comment=comment,
                bonus_b_coins=bonus,
            ))
            txn = self._apply_credit(
                customer_id,
                business,
                bonus,
                source=TransactionSource.RATING_BONUS,
                description=f"Bonus for rating {business.business_name}",
            )

        cache_delete(analytics_cache_key(business.id))
        logger.info(
            "[RATING] customer=%s business=%s stars=%d bonus=%s",
            customer_id, business.id, rating, bonus,
        )
        return RatingResult(
            rating=record,
            ledger=LedgerResult(
                transaction=txn,
                business=business,
                balance=profile.b_coin_balance,
            ),
        )

    # ── internals ────────────────────────────────────────────────

    @contextmanager
    def _atomic(self, customer_id: str) -> Iterator[None]:
        """One locked, all-or-nothing unit of work for a customer."""
        with customer_lock(customer_id):
            try:
                yield
                self.store.commit()
            except Exception:
                self.store.rollback()
                raise

    def _run_credit(
        self,
        customer_id: str,
        business: Business,
        coins: Decimal,
        source: TransactionSource,
        description: str,
        bill_amount: Optional[Decimal] = None,
        qr_code: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> LedgerResult:
        try:
            with self._atomic(customer_id):
                replay = self._find_replay(
                    idempotency_key, customer_id, business.id, TransactionType.EARNED
                )
                if replay is not None:
                    return replay

                profile = self._require_customer(customer_id)
                txn = self._apply_credit(
                    customer_id,
                    business,
                    coins,
                    source=source,
                    description=description,
                    bill_amount=bill_amount,
                    qr_code=qr_code,
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            replay = self._replay_after_race(
                idempotency_key, customer_id, business.id, TransactionType.EARNED
            )
            if replay is None:
                raise
            return replay

        cache_delete(analytics_cache_key(business.id))
        logger.info(
            "[EARN] customer=%s business=%s source=%s amount=%s balance=%s",
            customer_id, business.id, source.value, coins, profile.b_coin_balance,
        )
        return LedgerResult(
            transaction=txn,
            business=business,
            balance=profile.b_coin_balance,
        )

    def _apply_credit(
        self,
        customer_id: str,
        business: Business,
        coins: Decimal,
        source: TransactionSource,
        description: str,
        bill_amount: Optional[Decimal] = None,
        qr_code: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> BCoinTransaction:
        """Entry + balance + business totals + notifications, uncommitted."""
        first_visit = not self.store.has_transactions_with(customer_id, business.id)

        txn = self.store.add(BCoinTransaction(
            customer_id=customer_id,
            business_id=business.id,
            type=TransactionType.EARNED.value,
            source=source.value,
            amount=coins,
            bill_amount=bill_amount,
            description=description,
            qr_code=qr_code,
            idempotency_key=idempotency_key,
        ))
        if not self.store.apply_customer_delta(customer_id, earned=coins):
            raise NotFoundError(f"Customer {customer_id} not found")
        self.store.apply_business_delta(business.id, issued=coins, new_customer=first_visit)

        self._notify(
            customer_id,
            "bcoin_earned",
            "B-Coins Earned!",
            f"You earned {coins} B-Coins at {business.business_name}",
        )
        if source == TransactionSource.PURCHASE:
            self._notify(
                business.owner_user_id,
                "qr_scanned",
                "QR Code Scanned!",
                f"A customer scanned your QR code for a bill of {bill_amount}",
            )
        return txn

    def _notify(self, user_id: str, kind: str, title: str, message: str) -> None:
        self.store.add(Notification(user_id=user_id, type=kind, title=title, message=message))

    def _require_active_business(self, business_id: str) -> Business:
        business = self.store.get_business(business_id)
        if business is None:
            raise NotFoundError(f"Business {business_id} not found")
        if not business.is_active:
            raise BusinessInactiveError(f"Business {business.business_name} is not active")
        return business

    def _require_customer(self, customer_id: str) -> CustomerProfile:
        profile = self.store.get_customer_profile(customer_id)
        if profile is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return profile

    def _find_replay(
        self,
        idempotency_key: Optional[str],
        customer_id: str,
        business_id: str,
        kind: TransactionType,
    ) -> Optional[LedgerResult]:
        if not idempotency_key:
            return None
        existing = self.store.get_transaction_by_idempotency_key(idempotency_key)
        if existing is None:
            return None
        if (
            existing.customer_id != customer_id
            or existing.business_id != business_id
            or existing.type != kind.value
        ):
            raise IdempotencyConflictError(
                f"Idempotency key '{idempotency_key}' was already used for a different operation"
            )

        profile = self._require_customer(customer_id)
        logger.info("[REPLAY] idempotency_key=%s transaction=%s", idempotency_key, existing.id)
        return LedgerResult(
            transaction=existing,
            business=self.store.get_business(business_id),
            balance=profile.b_coin_balance,
            replayed=True,
        )

    def _replay_after_race(
        self,
        idempotency_key: Optional[str],
        customer_id: str,
        business_id: str,
        kind: TransactionType,
    ) -> Optional[LedgerResult]:
        """Another worker committed the same key first; return its entry."""
        if not idempotency_key:
            return None
        return self._find_replay(idempotency_key, customer_id, business_id, kind)
