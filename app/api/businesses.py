"""
Business API endpoints.
Registration (with the category exclusivity check), lookup, updates,
the category list and the availability probe used by the sign-up form.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.models.enums import BusinessCategory, CATEGORY_LABELS
from app.schemas.business import (
    BusinessCreate,
    BusinessCreatedResponse,
    BusinessResponse,
    BusinessUpdate,
    CategoryAvailabilityResponse,
    CategoryResponse,
    QRCodeResponse,
)
from app.services.businesses import BusinessService
from app.services.exclusivity import BundleExclusivityRule
from app.services.ledger_store import LedgerStore

router = APIRouter(tags=["Businesses"])


@router.post("/businesses", response_model=BusinessCreatedResponse, status_code=201)
async def create_business(request: BusinessCreate, store: LedgerStore = Depends(get_store)):
    """
    Register a business for a business-type user.
    Fails with 409 CATEGORY_TAKEN if another active business holds the
    category in this pincode. Returns the business and its first QR code.
    """
    business, qr = BusinessService(store).create(
        request.user_id,
        **request.model_dump(exclude={"user_id"}),
    )
    return BusinessCreatedResponse(
        business=BusinessResponse.model_validate(business),
        qr_code=QRCodeResponse.model_validate(qr),
    )


@router.get("/businesses", response_model=list[BusinessResponse])
async def list_businesses(
    category: Optional[BusinessCategory] = Query(None, description="Filter: category"),
    pincode: Optional[str] = Query(None, description="Filter: pincode"),
    store: LedgerStore = Depends(get_store),
):
    return store.list_businesses(
        category=category.value if category else None,
        pincode=pincode,
    )


@router.get("/businesses/user/{user_id}", response_model=BusinessResponse)
async def get_business_by_owner(user_id: str, store: LedgerStore = Depends(get_store)):
    business = store.get_business_by_owner(user_id)
    if business is None:
        raise NotFoundError(f"No business registered for user {user_id}")
    return business


@router.get("/businesses/{business_id}", response_model=BusinessResponse)
async def get_business(business_id: str, store: LedgerStore = Depends(get_store)):
    business = store.get_business(business_id)
    if business is None:
        raise NotFoundError(f"Business {business_id} not found")
    return business


@router.put("/businesses/{business_id}", response_model=BusinessResponse)
async def update_business(
    business_id: str,
    request: BusinessUpdate,
    store: LedgerStore = Depends(get_store),
):
    """Partial update; changing category/pincode or reactivating re-runs exclusivity."""
    return BusinessService(store).update(business_id, request.model_dump(exclude_unset=True))


@router.get("/business-categories", response_model=list[CategoryResponse])
async def list_categories():
    return [
        CategoryResponse(value=category.value, label=CATEGORY_LABELS[category])
        for category in BusinessCategory
    ]


@router.get(
    "/category-availability/{pincode}/{category}",
    response_model=CategoryAvailabilityResponse,
)
async def category_availability(
    pincode: str,
    category: BusinessCategory,
    store: LedgerStore = Depends(get_store),
):
    """Advisory only; creation re-checks the rule."""
    result = BundleExclusivityRule(store).availability(pincode, category.value)
    existing = result["existing_business"]
    return CategoryAvailabilityResponse(
        available=result["available"],
        existing_business=BusinessResponse.model_validate(existing) if existing else None,
    )
