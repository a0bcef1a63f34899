"""Customer profile endpoints (balance view and preferences)."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.user import CustomerProfileResponse, CustomerProfileUpdate
from app.services.accounts import AccountService
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/{user_id}/profile", response_model=CustomerProfileResponse)
async def get_profile(user_id: str, store: LedgerStore = Depends(get_store)):
    return AccountService(store).get_profile(user_id)


@router.put("/{user_id}/profile", response_model=CustomerProfileResponse)
async def update_profile(
    user_id: str,
    request: CustomerProfileUpdate,
    store: LedgerStore = Depends(get_store),
):
    """Update preferences; balance fields are rejected by the schema."""
    return AccountService(store).update_preferences(
        user_id,
        preferred_pincode=request.preferred_pincode,
        favorite_businesses=request.favorite_businesses,
    )
