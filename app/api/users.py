"""
Users API endpoints.
Provides the current user and lookup by id.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_store
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """The user the bearer token belongs to."""
    return user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, store: LedgerStore = Depends(get_store)):
    """Get a specific user by ID."""
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user
