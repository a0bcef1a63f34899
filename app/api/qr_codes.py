"""QR code endpoints: mint, resolve, list and deactivate counter codes."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.schemas.business import (
    BusinessResponse, QRCodeCreate, QRCodeResponse, QRResolveResponse,
)
from app.services.ledger_store import LedgerStore
from app.services.qr_tokens import QRTokenService

router = APIRouter(prefix="/qr-codes", tags=["QR Codes"])


@router.post("", response_model=QRCodeResponse, status_code=201)
async def create_qr_code(request: QRCodeCreate, store: LedgerStore = Depends(get_store)):
    return QRTokenService(store).mint(
        request.business_id,
        description=request.description,
        expires_at=request.expires_at,
    )


@router.get("/business/{business_id}", response_model=list[QRCodeResponse])
async def list_business_qr_codes(business_id: str, store: LedgerStore = Depends(get_store)):
    if store.get_business(business_id) is None:
        raise NotFoundError(f"Business {business_id} not found")
    return store.qr_codes_for_business(business_id)


@router.get("/{code}", response_model=QRResolveResponse)
async def resolve_qr_code(code: str, store: LedgerStore = Depends(get_store)):
    """What the customer app shows after scanning, before the bill is entered."""
    qr, business = QRTokenService(store).resolve(code)
    return QRResolveResponse(
        qr_code=QRCodeResponse.model_validate(qr),
        business=BusinessResponse.model_validate(business),
    )


@router.post("/{code}/deactivate", response_model=QRCodeResponse)
async def deactivate_qr_code(code: str, store: LedgerStore = Depends(get_store)):
    return QRTokenService(store).deactivate(code)
