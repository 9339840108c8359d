"""Notification settings router"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import NotificationSettings, NotificationTestRequest
from .service import NotificationSettingsService

router = APIRouter(prefix="/settings/notifications", tags=["Notification Settings"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationSettingsService:
    return NotificationSettingsService(db)


@router.get("", response_model=NotificationSettings)
async def get_notification_settings(
    service: NotificationSettingsService = Depends(get_notification_service),
):
    return service.get_settings()


@router.put("")
async def update_notification_settings(
    updates: dict[str, Any] = Body(...),
    service: NotificationSettingsService = Depends(get_notification_service),
):
    """Merge a partial settings document onto the stored one"""
    settings = service.update_settings(updates)
    return {"success": True, "message": "Settings updated", "settings": settings}


@router.post("/test")
async def send_test_notification(
    data: Optional[NotificationTestRequest] = None,
    service: NotificationSettingsService = Depends(get_notification_service),
):
    recipient = service.send_test(data.email if data else None)
    return {"success": True, "message": f"Test notification sent to {recipient}"}
