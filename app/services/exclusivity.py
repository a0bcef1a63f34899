"""
Bundle / Category Exclusivity Rule.

At most one *active* business per (category, pincode). The check runs on
business creation and again whenever an update changes category, pincode
or reactivates the business. Businesses of a pincode share one Bundle,
created lazily the first time a business registers there.
"""

import logging
from typing import Optional

from app.core.exceptions import CategoryTakenError
from app.models.business import Bundle, Business
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def bundle_name_for(pincode: str) -> str:
    return f"{pincode} Business Circle"


class BundleExclusivityRule:
    """Validates (category, pincode) occupancy and resolves pincode bundles."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def find_conflict(
        self,
        category: str,
        pincode: str,
        exclude_business_id: Optional[str] = None,
    ) -> Optional[Business]:
        """Return the active business already holding this slot, if any."""
        for business in self.store.businesses_by_pincode(pincode, active_only=True):
            if business.id == exclude_business_id:
                continue
            if business.category == category:
                return business
        return None

    def check(
        self,
        category: str,
        pincode: str,
        exclude_business_id: Optional[str] = None,
    ) -> None:
        """Raise CategoryTakenError if the slot is occupied."""
        conflict = self.find_conflict(category, pincode, exclude_business_id)
        if conflict is not None:
            logger.info(
                "[EXCLUSIVITY] %s/%s taken by business %s",
                category, pincode, conflict.id,
            )
            raise CategoryTakenError(category, pincode, conflict.id)

    def availability(self, pincode: str, category: str) -> dict:
        """Advisory lookup used by the registration form."""
        conflict = self.find_conflict(category, pincode)
        return {
            "available": conflict is None,
            "existing_business": conflict,
        }

    def attach_bundle(self, pincode: str) -> Bundle:
        """Bundle for the pincode, created on first use (not committed)."""
        bundle = self.store.get_bundle_by_pincode(pincode)
        if bundle is None:
            bundle = self.store.add(Bundle(
                name=bundle_name_for(pincode),
                pincode=pincode,
                description=f"Local business bundle for pincode {pincode}",
            ))
            logger.info("[BUNDLE] created %s for pincode %s", bundle.id, pincode)
        return bundle
