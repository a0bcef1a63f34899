"""
QR Token Lifecycle - reusable counter codes.

A business can keep several active codes (one per checkout counter).
Scanning a code resolves it to the business; the customer supplies the
bill amount and the accrual engine computes the credit. A code stays
usable until the business deactivates it or it expires.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from app.core.database import as_naive_utc, utcnow
from app.core.exceptions import InvalidTokenError, NotFoundError
from app.models.business import Business
from app.models.qr_code import QRCode
from app.services.accrual_engine import LedgerEngine, LedgerResult
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

CODE_PREFIX = "BAARTAL-"


def generate_code() -> str:
    return f"{CODE_PREFIX}{secrets.token_hex(8).upper()}"


class QRTokenService:
    """Mint, resolve, deactivate and scan business QR codes."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def mint(
        self,
        business_id: str,
        description: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> QRCode:
        business = self.store.get_business(business_id)
        if business is None:
            raise NotFoundError(f"Business {business_id} not found")

        code = generate_code()
        while self.store.get_qr_code_by_code(code) is not None:
            code = generate_code()

        qr = self.store.add(QRCode(
            code=code,
            business_id=business_id,
            description=description,
            expires_at=as_naive_utc(expires_at),
            is_active=True,
        ))
        if commit:
            self.store.commit()
        logger.info("[QR] minted %s for business %s", code, business_id)
        return qr

    def resolve(self, code: str) -> tuple[QRCode, Business]:
        """Map a scanned code to its business or raise InvalidTokenError."""
        qr = self.store.get_qr_code_by_code(code)
        if qr is None or not qr.is_active:
            raise InvalidTokenError("QR code not found or inactive")
        if qr.expires_at is not None and qr.expires_at <= utcnow():
            raise InvalidTokenError("QR code has expired")

        business = self.store.get_business(qr.business_id)
        if business is None or not business.is_active:
            raise InvalidTokenError("QR code belongs to an inactive business")
        return qr, business

    def deactivate(self, code: str) -> QRCode:
        qr = self.store.get_qr_code_by_code(code)
        if qr is None:
            raise NotFoundError(f"QR code {code} not found")
        if qr.is_active:
            self.store.update_fields(qr, is_active=False)
            self.store.commit()
            logger.info("[QR] deactivated %s", code)
        return qr

    def scan(
        self,
        code: str,
        customer_id: str,
        bill_amount: Any,
        idempotency_key: Optional[str] = None,
    ) -> LedgerResult:
        """Validate the code, then run an earn for the entered bill."""
        qr, business = self.resolve(code)
        return LedgerEngine(self.store).earn(
            customer_id,
            business.id,
            bill_amount,
            qr_code=qr.code,
            idempotency_key=idempotency_key,
        )
