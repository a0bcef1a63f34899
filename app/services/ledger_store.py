"""
Ledger Store - data access for users, businesses, bundles, ledger
entries, QR codes, ratings and notifications.

Thin repository over one SQLAlchemy Session. Lookups that find nothing
return None (or an empty list) and never raise; callers branch on that.
The store holds no business rules: balances and running totals are only
moved through `apply_customer_delta` / `apply_business_delta`, which the
accrual engine calls.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from app.models.user import User, CustomerProfile
from app.models.business import Business, Bundle
from app.models.transaction import BCoinTransaction
from app.models.qr_code import QRCode
from app.models.rating import Rating, Notification

ZERO = Decimal("0.00")


class LedgerStore:
    """Repository bound to a single database session."""

    def __init__(self, db: Session):
        self.db = db

    # ── generic ──────────────────────────────────────────────────

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def update_fields(self, obj, **fields):
        for name, value in fields.items():
            setattr(obj, name, value)
        self.db.flush()
        return obj

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # ── users ────────────────────────────────────────────────────

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(
            select(User).where(User.email == email.strip().lower())
        ).first()

    def count_users(self) -> int:
        return self.db.scalar(select(func.count()).select_from(User)) or 0

    # ── customer profiles ────────────────────────────────────────

    def get_customer_profile(self, user_id: str) -> Optional[CustomerProfile]:
        return self.db.get(CustomerProfile, user_id)

    def apply_customer_delta(
        self,
        user_id: str,
        earned: Decimal = ZERO,
        spent: Decimal = ZERO,
    ) -> bool:
        """
        Atomically move a customer's balance by (earned - spent).

        A debit only applies while the balance covers it; returns False
        when no row matched (unknown customer or insufficient balance).
        """
        stmt = (
            update(CustomerProfile)
            .where(CustomerProfile.user_id == user_id)
            .values(
                b_coin_balance=func.round(CustomerProfile.b_coin_balance + earned - spent, 2),
                total_b_coins_earned=func.round(CustomerProfile.total_b_coins_earned + earned, 2),
                total_b_coins_spent=func.round(CustomerProfile.total_b_coins_spent + spent, 2),
            )
            .execution_options(synchronize_session=False)
        )
        if spent > ZERO:
            stmt = stmt.where(CustomerProfile.b_coin_balance >= spent)
        result = self.db.execute(stmt)
        return result.rowcount == 1

    # ── businesses ───────────────────────────────────────────────

    def get_business(self, business_id: str) -> Optional[Business]:
        return self.db.get(Business, business_id)

    def get_business_by_owner(self, owner_user_id: str) -> Optional[Business]:
        return self.db.scalars(
            select(Business).where(Business.owner_user_id == owner_user_id)
        ).first()

    def list_businesses(
        self,
        category: Optional[str] = None,
        pincode: Optional[str] = None,
        active_only: bool = False,
    ) -> list[Business]:
        query = select(Business)
        if category:
            query = query.where(Business.category == category)
        if pincode:
            query = query.where(Business.pincode == pincode)
        if active_only:
            query = query.where(Business.is_active.is_(True))
        return list(self.db.scalars(query.order_by(Business.created_at)))

    def businesses_by_pincode(self, pincode: str, active_only: bool = False) -> list[Business]:
        return self.list_businesses(pincode=pincode, active_only=active_only)

    def businesses_in_bundle(self, bundle_id: str) -> list[Business]:
        return list(self.db.scalars(
            select(Business)
            .where(Business.bundle_id == bundle_id)
            .order_by(Business.created_at)
        ))

    def apply_business_delta(
        self,
        business_id: str,
        issued: Decimal = ZERO,
        redeemed: Decimal = ZERO,
        new_customer: bool = False,
    ) -> None:
        """Atomically bump a business's running totals."""
        self.db.execute(
            update(Business)
            .where(Business.id == business_id)
            .values(
                total_b_coins_issued=func.round(Business.total_b_coins_issued + issued, 2),
                total_b_coins_redeemed=func.round(Business.total_b_coins_redeemed + redeemed, 2),
                total_customers=Business.total_customers + (1 if new_customer else 0),
            )
            .execution_options(synchronize_session=False)
        )

    # ── bundles ──────────────────────────────────────────────────

    def get_bundle(self, bundle_id: str) -> Optional[Bundle]:
        return self.db.get(Bundle, bundle_id)

    def get_bundle_by_pincode(self, pincode: str) -> Optional[Bundle]:
        return self.db.scalars(select(Bundle).where(Bundle.pincode == pincode)).first()

    def list_bundles(self) -> list[Bundle]:
        return list(self.db.scalars(select(Bundle).order_by(Bundle.created_at)))

    # ── ledger entries ───────────────────────────────────────────

    def get_transaction_by_idempotency_key(self, key: str) -> Optional[BCoinTransaction]:
        return self.db.scalars(
            select(BCoinTransaction).where(BCoinTransaction.idempotency_key == key)
        ).first()

    def transactions_for_customer(self, customer_id: str) -> list[BCoinTransaction]:
        return list(self.db.scalars(
            select(BCoinTransaction)
            .where(BCoinTransaction.customer_id == customer_id)
            .order_by(BCoinTransaction.created_at.desc())
        ))

    def transactions_for_business(self, business_id: str) -> list[BCoinTransaction]:
        return list(self.db.scalars(
            select(BCoinTransaction)
            .where(BCoinTransaction.business_id == business_id)
            .order_by(BCoinTransaction.created_at.desc())
        ))

    def has_transactions_with(self, customer_id: str, business_id: str) -> bool:
        return self.db.scalars(
            select(BCoinTransaction.id)
            .where(
                BCoinTransaction.customer_id == customer_id,
                BCoinTransaction.business_id == business_id,
            )
            .limit(1)
        ).first() is not None

    # ── QR codes ─────────────────────────────────────────────────

    def get_qr_code_by_code(self, code: str) -> Optional[QRCode]:
        return self.db.scalars(select(QRCode).where(QRCode.code == code)).first()

    def qr_codes_for_business(self, business_id: str) -> list[QRCode]:
        return list(self.db.scalars(
            select(QRCode)
            .where(QRCode.business_id == business_id)
            .order_by(QRCode.created_at)
        ))

    # ── ratings ──────────────────────────────────────────────────

    def ratings_for_business(self, business_id: str) -> list[Rating]:
        return list(self.db.scalars(
            select(Rating)
            .where(Rating.business_id == business_id)
            .order_by(Rating.created_at.desc())
        ))

    def ratings_for_customer(self, customer_id: str) -> list[Rating]:
        return list(self.db.scalars(
            select(Rating)
            .where(Rating.customer_id == customer_id)
            .order_by(Rating.created_at.desc())
        ))

    # ── notifications ────────────────────────────────────────────

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def notifications_for_user(self, user_id: str) -> list[Notification]:
        return list(self.db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        ))

    def mark_all_notifications_read(self, user_id: str) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
