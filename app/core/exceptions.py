"""
Typed errors raised by the ledger services.

Each error carries an HTTP status and a stable machine-readable code;
the API layer renders them as {"detail": ..., "code": ...}.
"""

from typing import Any, Optional


class BaartalError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400
    code: str = "ERROR"

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


class ValidationError(BaartalError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(BaartalError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(BaartalError):
    status_code = 409
    code = "CONFLICT"


class CategoryTakenError(ConflictError):
    code = "CATEGORY_TAKEN"

    def __init__(self, category: str, pincode: str, conflicting_business_id: str):
        super().__init__(
            f"Category '{category}' is already taken in pincode {pincode}",
            extra={"conflictingBusinessId": conflicting_business_id},
        )
        self.conflicting_business_id = conflicting_business_id


class EmailTakenError(ConflictError):
    code = "EMAIL_TAKEN"


class IdempotencyConflictError(ConflictError):
    code = "IDEMPOTENCY_CONFLICT"


class InsufficientBalanceError(BaartalError):
    status_code = 400
    code = "INSUFFICIENT_BALANCE"


class InvalidTokenError(BaartalError):
    status_code = 404
    code = "INVALID_QR_CODE"


class BusinessInactiveError(BaartalError):
    status_code = 400
    code = "BUSINESS_INACTIVE"


class UnauthorizedError(BaartalError):
    status_code = 401
    code = "UNAUTHORIZED"
