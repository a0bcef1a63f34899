"""
Business registration and profile updates.

Creation runs the exclusivity rule, attaches the pincode bundle and mints
the first QR code in a single commit. Updates re-run the rule whenever the
(category, pincode) slot changes or the business is reactivated.
"""

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    CategoryTakenError, ConflictError, NotFoundError, ValidationError,
)
from app.models.business import Business
from app.models.enums import UserType
from app.models.qr_code import QRCode
from app.services.exclusivity import BundleExclusivityRule
from app.services.ledger_store import LedgerStore
from app.services.qr_tokens import QRTokenService

logger = logging.getLogger(__name__)

# Fields a business owner may change; ledger totals are never editable.
UPDATABLE_FIELDS = {
    "business_name",
    "owner_name",
    "category",
    "pincode",
    "address",
    "description",
    "b_coin_rate",
    "is_active",
}

# Columns that are NOT NULL; an update may change them but never clear them.
REQUIRED_FIELDS = {"business_name", "category", "pincode", "b_coin_rate", "is_active"}


class BusinessService:

    def __init__(self, store: LedgerStore):
        self.store = store
        self.rule = BundleExclusivityRule(store)

    def create(self, owner_user_id: str, **fields: Any) -> tuple[Business, QRCode]:
        owner = self.store.get_user(owner_user_id)
        if owner is None:
            raise NotFoundError(f"User {owner_user_id} not found")
        if owner.user_type != UserType.BUSINESS.value:
            raise ValidationError("Only business accounts can register a business")
        if self.store.get_business_by_owner(owner_user_id) is not None:
            raise ConflictError("This account already has a business profile")

        category = fields["category"]
        pincode = fields["pincode"]

        try:
            self.rule.check(category, pincode)
            bundle = self.rule.attach_bundle(pincode)
            business = self.store.add(Business(
                owner_user_id=owner_user_id,
                bundle_id=bundle.id,
                **fields,
            ))
            qr = QRTokenService(self.store).mint(
                business.id, description="Main counter", commit=False
            )
            self.store.commit()
        except IntegrityError:
            self.store.rollback()
            raise self._slot_race(category, pincode)
        except Exception:
            self.store.rollback()
            raise

        logger.info(
            "[BUSINESS] registered %s (%s/%s) in bundle %s",
            business.id, category, pincode, bundle.id,
        )
        return business, qr

    def update(self, business_id: str, changes: dict[str, Any]) -> Business:
        business = self.store.get_business(business_id)
        if business is None:
            raise NotFoundError(f"Business {business_id} not found")

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        cleared = sorted(f for f in REQUIRED_FIELDS if f in changes and changes[f] is None)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")

        category = changes.get("category", business.category)
        pincode = changes.get("pincode", business.pincode)
        is_active = changes.get("is_active", business.is_active)

        slot_changed = category != business.category or pincode != business.pincode
        reactivated = is_active and not business.is_active

        try:
            if is_active and (slot_changed or reactivated):
                self.rule.check(category, pincode, exclude_business_id=business.id)
            if pincode != business.pincode:
                changes["bundle_id"] = self.rule.attach_bundle(pincode).id
            self.store.update_fields(business, **changes)
            self.store.commit()
        except IntegrityError:
            self.store.rollback()
            raise self._slot_race(category, pincode, exclude_business_id=business_id)
        except Exception:
            self.store.rollback()
            raise

        logger.info("[BUSINESS] updated %s: %s", business.id, ", ".join(sorted(changes)))
        return business

    def _slot_race(
        self,
        category: str,
        pincode: str,
        exclude_business_id: Optional[str] = None,
    ) -> Exception:
        """A concurrent registration won the slot between check and commit."""
        conflict = self.rule.find_conflict(category, pincode, exclude_business_id)
        if conflict is None:
            return ConflictError("Business could not be saved due to a conflicting record")
        return CategoryTakenError(category, pincode, conflict.id)
