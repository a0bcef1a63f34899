"""
B-Coin ledger endpoints.
QR scan (earn), direct entry creation, redemption and ledger history.

Mutating routes are plain `def` so FastAPI runs them in its threadpool;
the per-customer lock they take may block.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.models.enums import TransactionType
from app.schemas.transaction import (
    LedgerOperationResponse,
    RedeemRequest,
    ScanRequest,
    ScanResponse,
    TransactionCreate,
    TransactionListResponse,
    entry_from_model,
)
from app.services.accrual_engine import LedgerEngine, LedgerResult
from app.services.ledger_store import LedgerStore
from app.services.qr_tokens import QRTokenService

router = APIRouter(tags=["B-Coin Transactions"])


def _operation_response(result: LedgerResult) -> LedgerOperationResponse:
    return LedgerOperationResponse(
        transaction=entry_from_model(result.transaction),
        new_balance=result.balance,
        business_name=result.business.business_name,
        replayed=result.replayed,
    )


@router.post("/scan-qr", response_model=ScanResponse)
def scan_qr(request: ScanRequest, store: LedgerStore = Depends(get_store)):
    """
    Customer scanned a business QR code and entered the bill.
    Credits bill * rate / 100 B-Coins. Re-sending the same idempotencyKey
    returns the original entry with replayed=true.
    """
    result = QRTokenService(store).scan(
        request.qr_code,
        request.customer_id,
        request.bill_amount,
        idempotency_key=request.idempotency_key,
    )
    return ScanResponse(
        transaction=entry_from_model(result.transaction),
        b_coins_earned=result.transaction.amount,
        new_balance=result.balance,
        business_name=result.business.business_name,
        replayed=result.replayed,
    )


@router.post("/bcoin-transactions", response_model=LedgerOperationResponse, status_code=201)
def create_transaction(request: TransactionCreate, store: LedgerStore = Depends(get_store)):
    """Direct ledger entry: `earned` credits `amount`, `redeemed` debits it."""
    engine = LedgerEngine(store)
    if request.type == TransactionType.REDEEMED.value:
        result = engine.redeem(
            request.customer_id,
            request.business_id,
            request.amount,
            description=request.description,
            idempotency_key=request.idempotency_key,
        )
    else:
        result = engine.credit(
            request.customer_id,
            request.business_id,
            request.amount,
            description=request.description,
            idempotency_key=request.idempotency_key,
        )
    return _operation_response(result)


@router.post("/redeem-bcoins", response_model=LedgerOperationResponse)
def redeem_bcoins(request: RedeemRequest, store: LedgerStore = Depends(get_store)):
    """Spend B-Coins at a business; 400 INSUFFICIENT_BALANCE leaves nothing changed."""
    result = LedgerEngine(store).redeem(
        request.customer_id,
        request.business_id,
        request.amount,
        idempotency_key=request.idempotency_key,
    )
    return _operation_response(result)


@router.get("/bcoin-transactions/user/{user_id}", response_model=TransactionListResponse)
async def get_user_transactions(user_id: str, store: LedgerStore = Depends(get_store)):
    """Customer ledger history, newest first."""
    if store.get_user(user_id) is None:
        raise NotFoundError(f"User {user_id} not found")
    transactions = store.transactions_for_customer(user_id)
    return TransactionListResponse(
        transactions=[entry_from_model(t) for t in transactions],
        total=len(transactions),
    )


@router.get("/bcoin-transactions/business/{business_id}", response_model=TransactionListResponse)
async def get_business_transactions(business_id: str, store: LedgerStore = Depends(get_store)):
    if store.get_business(business_id) is None:
        raise NotFoundError(f"Business {business_id} not found")
    transactions = store.transactions_for_business(business_id)
    return TransactionListResponse(
        transactions=[entry_from_model(t) for t in transactions],
        total=len(transactions),
    )
