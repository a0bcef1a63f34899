"""Shared FastAPI dependencies: the ledger store and the bearer user."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import decode_access_token
from app.models.user import User
from app.services.ledger_store import LedgerStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: LedgerStore = Depends(get_store),
) -> User:
    """Resolve the Authorization: Bearer token to a user or raise 401."""
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise UnauthorizedError("Invalid or expired token")
    user = store.get_user(user_id)
    if user is None:
        raise UnauthorizedError("User no longer exists")
    return user
