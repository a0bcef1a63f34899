"""Notification endpoints."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import NotFoundError
from app.schemas.transaction import NotificationResponse
from app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/user/{user_id}", response_model=list[NotificationResponse])
async def get_user_notifications(user_id: str, store: LedgerStore = Depends(get_store)):
    return store.notifications_for_user(user_id)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: str, store: LedgerStore = Depends(get_store)):
    notification = store.get_notification(notification_id)
    if notification is None:
        raise NotFoundError(f"Notification {notification_id} not found")
    store.update_fields(notification, is_read=True)
    store.commit()
    return notification


@router.post("/user/{user_id}/read-all")
async def mark_all_read(user_id: str, store: LedgerStore = Depends(get_store)):
    updated = store.mark_all_notifications_read(user_id)
    store.commit()
    return {"updated": updated}
