"""Rating endpoints. A rating always awards a B-Coin bonus entry."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.schemas.transaction import (
    RatingCreate, RatingCreatedResponse, RatingResponse, entry_from_model,
)
from app.services.accrual_engine import LedgerEngine
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("", response_model=RatingCreatedResponse, status_code=201)
def create_rating(request: RatingCreate, store: LedgerStore = Depends(get_store)):
    result = LedgerEngine(store).rate(
        request.customer_id,
        request.business_id,
        request.rating,
        comment=request.comment,
    )
    return RatingCreatedResponse(
        rating=RatingResponse.model_validate(result.rating),
        transaction=entry_from_model(result.ledger.transaction),
        new_balance=result.ledger.balance,
    )


@router.get("/business/{business_id}", response_model=list[RatingResponse])
async def get_business_ratings(business_id: str, store: LedgerStore = Depends(get_store)):
    if store.get_business(business_id) is None:
        raise NotFoundError(f"Business {business_id} not found")
    return store.ratings_for_business(business_id)


@router.get("/user/{user_id}", response_model=list[RatingResponse])
async def get_user_ratings(user_id: str, store: LedgerStore = Depends(get_store)):
    return store.ratings_for_customer(user_id)
