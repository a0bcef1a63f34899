"""
Business Analytics.

Aggregates a business's ledger entries and ratings into dashboard
figures. Results are cached in Redis for ANALYTICS_CACHE_TTL seconds;
the accrual engine drops the cache entry after every mutation.
"""

import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import get_settings
from app.core.database import utcnow
from app.core.exceptions import NotFoundError
from app.core.redis import cache_get, cache_set
from app.models.enums import TransactionType
from app.services.accrual_engine import analytics_cache_key
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()

CENT = Decimal("0.01")


def _money(value: Decimal) -> str:
    return str(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


class BusinessAnalytics:

    def __init__(self, store: LedgerStore):
        self.store = store

    def for_business(self, business_id: str) -> dict:
        cache_key = analytics_cache_key(business_id)
        cached = cache_get(cache_key)
        if cached:
            logger.info("[CACHE HIT] analytics for %s", business_id)
            return cached

        business = self.store.get_business(business_id)
        if business is None:
            raise NotFoundError(f"Business {business_id} not found")

        transactions = self.store.transactions_for_business(business_id)
        ratings = self.store.ratings_for_business(business_id)

        earned = [t for t in transactions if t.type == TransactionType.EARNED.value]
        purchases = [t for t in earned if t.bill_amount is not None]
        revenue = sum((t.bill_amount for t in purchases), Decimal("0"))
        average_bill = revenue / len(purchases) if purchases else Decimal("0")
        average_rating = (
            sum(r.rating for r in ratings) / len(ratings) if ratings else 0.0
        )

        week_ago = utcnow() - timedelta(days=7)
        weekly = [t for t in transactions if t.created_at > week_ago]
        weekly_earned = [t for t in weekly if t.type == TransactionType.EARNED.value]

        result = {
            "business_id": business_id,
            "total_b_coins_issued": _money(business.total_b_coins_issued),
            "total_b_coins_redeemed": _money(business.total_b_coins_redeemed),
            "total_customers": business.total_customers,
            "unique_customers": len({t.customer_id for t in transactions}),
            "total_transactions": len(transactions),
            "average_bill_amount": _money(average_bill),
            "average_rating": round(average_rating, 1),
            "total_ratings": len(ratings),
            "weekly_data": {
                "transactions": len(weekly),
                "revenue": _money(sum(
                    (t.bill_amount for t in weekly_earned if t.bill_amount is not None),
                    Decimal("0"),
                )),
                "b_coins_issued": _money(sum((t.amount for t in weekly_earned), Decimal("0"))),
            },
        }

        cache_set(cache_key, result, ttl=settings.ANALYTICS_CACHE_TTL)
        return result
