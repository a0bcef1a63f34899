"""Pydantic schemas for businesses, bundles, categories and QR codes."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.core.config import get_settings
from app.models.enums import BusinessCategory
from app.schemas.common import ApiModel
from app.schemas.user import PINCODE_PATTERN

settings = get_settings()


class BusinessCreate(ApiModel):
    """Registration payload; the owner must be a business-type user."""
    user_id: str = Field(..., description="Owning business user")
    business_name: str = Field(..., min_length=1, max_length=255)
    owner_name: Optional[str] = Field(None, max_length=255)
    category: BusinessCategory
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    address: Optional[str] = None
    description: Optional[str] = None
    b_coin_rate: Decimal = Field(
        settings.DEFAULT_BCOIN_RATE,
        ge=0,
        le=settings.MAX_BCOIN_RATE,
        decimal_places=2,
        description="Percent of the bill credited as B-Coins",
    )


class BusinessUpdate(ApiModel):
    """Partial update; omitted fields are left unchanged."""
    business_name: Optional[str] = Field(None, min_length=1, max_length=255)
    owner_name: Optional[str] = Field(None, max_length=255)
    category: Optional[BusinessCategory] = None
    pincode: Optional[str] = Field(None, pattern=PINCODE_PATTERN)
    address: Optional[str] = None
    description: Optional[str] = None
    b_coin_rate: Optional[Decimal] = Field(None, ge=0, le=settings.MAX_BCOIN_RATE, decimal_places=2)
    is_active: Optional[bool] = None

    model_config = {**ApiModel.model_config, "extra": "forbid"}


class BusinessResponse(ApiModel):
    id: str
    owner_user_id: str
    business_name: str
    owner_name: Optional[str] = None
    category: str
    pincode: str
    address: Optional[str] = None
    description: Optional[str] = None
    b_coin_rate: Decimal
    is_active: bool
    is_verified: bool
    bundle_id: Optional[str] = None
    total_b_coins_issued: Decimal
    total_b_coins_redeemed: Decimal
    total_customers: int
    created_at: datetime


class QRCodeCreate(ApiModel):
    business_id: str
    description: Optional[str] = Field(None, max_length=255, description="e.g. 'Counter 2'")
    expires_at: Optional[datetime] = None


class QRCodeResponse(ApiModel):
    id: str
    code: str
    business_id: str
    description: Optional[str] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: datetime


class QRResolveResponse(ApiModel):
    qr_code: QRCodeResponse
    business: BusinessResponse


class BusinessCreatedResponse(ApiModel):
    business: BusinessResponse
    qr_code: QRCodeResponse


class BundleResponse(ApiModel):
    id: str
    name: str
    pincode: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    businesses: list[BusinessResponse] = Field(default_factory=list)


class CategoryResponse(ApiModel):
    value: str
    label: str


class CategoryAvailabilityResponse(ApiModel):
    available: bool
    existing_business: Optional[BusinessResponse] = None
