"""Business analytics endpoint (Redis cache-aside)."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.transaction import AnalyticsResponse
from app.services.analytics import BusinessAnalytics
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/business/{business_id}", response_model=AnalyticsResponse)
async def get_business_analytics(business_id: str, store: LedgerStore = Depends(get_store)):
    """Totals, customer counts, averages and the trailing 7-day window."""
    return BusinessAnalytics(store).for_business(business_id)
