"""
Auth API endpoints.
Registration, login and password change; tokens are bearer JWTs.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_store
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.user import (
    AuthResponse, ChangePasswordRequest, LoginRequest, RegisterRequest, UserResponse,
)
from app.services.accounts import AccountService
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(request: RegisterRequest, store: LedgerStore = Depends(get_store)):
    """Create a customer or business account and return a token."""
    user, token = AccountService(store).register(
        email=request.email,
        password=request.password,
        name=request.name,
        user_type=request.user_type,
        phone=request.phone,
        pincode=request.pincode,
    )
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, store: LedgerStore = Depends(get_store)):
    user, token = AccountService(store).login(request.email, request.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    store: LedgerStore = Depends(get_store),
):
    AccountService(store).change_password(user, request.current_password, request.new_password)
    return MessageResponse(message="Password updated")
