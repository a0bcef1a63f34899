"""Bundle endpoints: the per-pincode business circles and their members."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.schemas.business import BundleResponse
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/bundles", tags=["Bundles"])


@router.get("", response_model=list[BundleResponse])
async def list_bundles(store: LedgerStore = Depends(get_store)):
    return store.list_bundles()


@router.get("/{pincode}", response_model=BundleResponse)
async def get_bundle(pincode: str, store: LedgerStore = Depends(get_store)):
    bundle = store.get_bundle_by_pincode(pincode)
    if bundle is None:
        raise NotFoundError(f"No bundle for pincode {pincode}")
    return bundle
