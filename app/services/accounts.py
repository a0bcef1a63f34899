"""
Account registration, login and customer-profile preferences.
Passwords are bcrypt-hashed; login returns a signed bearer token.
"""

import logging
from typing import Optional

from app.core.exceptions import (
    EmailTakenError, NotFoundError, UnauthorizedError, ValidationError,
)
from app.core.security import create_access_token, hash_password, verify_password
from app.models.enums import UserType
from app.models.user import CustomerProfile, User
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def register(
        self,
        email: str,
        password: str,
        name: str,
        user_type: str,
        phone: Optional[str] = None,
        pincode: Optional[str] = None,
    ) -> tuple[User, str]:
        """Create a user (plus an empty B-Coin profile for customers)."""
        email = email.strip().lower()
        if self.store.get_user_by_email(email) is not None:
            raise EmailTakenError("User with this email already exists")

        try:
            user = self.store.add(User(
                email=email,
                password_hash=hash_password(password),
                name=name,
                user_type=user_type,
                phone=phone,
                pincode=pincode,
            ))
            if user_type == UserType.CUSTOMER.value:
                self.store.add(CustomerProfile(
                    user_id=user.id,
                    preferred_pincode=pincode,
                    favorite_businesses=[],
                ))
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info("[AUTH] registered %s user %s", user_type, user.id)
        return user, create_access_token(user.id, user.user_type)

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self.store.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        return user, create_access_token(user.id, user.user_type)

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        self.store.update_fields(user, password_hash=hash_password(new_password))
        self.store.commit()
        logger.info("[AUTH] password changed for %s", user.id)

    def get_profile(self, user_id: str) -> CustomerProfile:
        profile = self.store.get_customer_profile(user_id)
        if profile is None:
            raise NotFoundError("Customer profile not found")
        return profile

    def update_preferences(
        self,
        user_id: str,
        preferred_pincode: Optional[str] = None,
        favorite_businesses: Optional[list[str]] = None,
    ) -> CustomerProfile:
        """Only preference fields are writable; balances move through the ledger."""
        profile = self.get_profile(user_id)
        changes = {}
        if preferred_pincode is not None:
            changes["preferred_pincode"] = preferred_pincode
        if favorite_businesses is not None:
            missing = [b for b in favorite_businesses if self.store.get_business(b) is None]
            if missing:
                raise ValidationError(f"Unknown businesses: {', '.join(missing)}")
            changes["favorite_businesses"] = list(dict.fromkeys(favorite_businesses))
        if changes:
            self.store.update_fields(profile, **changes)
            self.store.commit()
        return profile
