"""Pydantic schemas for accounts and customer profiles."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field

from app.models.enums import UserType
from app.schemas.common import ApiModel

PINCODE_PATTERN = r"^\d{6}$"


class RegisterRequest(ApiModel):
    """Sign-up payload for customers and merchants."""
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=6, max_length=72, description="Plain password (hashed on save)")
    name: str = Field(..., min_length=1, max_length=255)
    user_type: UserType = Field(..., description="customer or business")
    phone: Optional[str] = Field(None, max_length=20)
    pincode: Optional[str] = Field(None, pattern=PINCODE_PATTERN)


class LoginRequest(ApiModel):
    email: str
    password: str


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


class UserResponse(ApiModel):
    """User data returned by the API (never includes the password hash)."""
    id: str
    email: str
    user_type: str
    name: str
    phone: Optional[str] = None
    pincode: Optional[str] = None
    is_verified: bool = False
    created_at: datetime


class AuthResponse(ApiModel):
    user: UserResponse
    token: str = Field(..., description="Bearer token for the Authorization header")


class CustomerProfileResponse(ApiModel):
    user_id: str
    b_coin_balance: Decimal
    total_b_coins_earned: Decimal
    total_b_coins_spent: Decimal
    favorite_businesses: list[str] = Field(default_factory=list)
    preferred_pincode: Optional[str] = None


class CustomerProfileUpdate(ApiModel):
    """Preference fields only; balances cannot be written through the API."""
    preferred_pincode: Optional[str] = Field(None, pattern=PINCODE_PATTERN)
    favorite_businesses: Optional[list[str]] = None

    model_config = {**ApiModel.model_config, "extra": "forbid"}
