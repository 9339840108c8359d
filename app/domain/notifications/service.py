"""Notification settings service"""

import logging
from datetime import datetime, time
from typing import Any, Optional, Union

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...config import SITE_URL
from ...email_service import EmailService, email_service
from ...email_templates import get_base_layout
from ...settings_store import get_json_setting, set_json_setting
from .schemas import NotificationSettings

logger = logging.getLogger(__name__)

SETTING_KEY = "notification_settings"


def deep_merge(base: dict, updates: dict) -> dict:
    """Recursively merge updates into a copy of base; non-dict values replace"""
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def is_quiet_time(settings: NotificationSettings, at: Union[datetime, time]) -> bool:
    """Whether `at` falls inside the quiet hours window, which may cross midnight"""
    quiet = settings.preferences.quiet_hours
    if not quiet.enabled:
        return False

    current = at.hour * 60 + at.minute
    start, end = _minutes(quiet.start), _minutes(quiet.end)
    if start == end:
        return False
    if start < end:
        return start <= current < end
    return current >= start or current < end


class NotificationSettingsService:
    def __init__(self, db: Session, mailer: Optional[EmailService] = None):
        self.db = db
        self.mailer = mailer or email_service

    def get_settings(self) -> NotificationSettings:
        stored = get_json_setting(self.db, SETTING_KEY, {})
        try:
            return NotificationSettings.model_validate(stored)
        except ValidationError as e:
            logger.error(f"❌ Stored notification settings are invalid, using defaults: {e}")
            return NotificationSettings()

    def update_settings(self, updates: dict[str, Any]) -> NotificationSettings:
        current = self.get_settings().model_dump()
        try:
            settings = NotificationSettings.model_validate(deep_merge(current, updates))
        except ValidationError as e:
            raise HTTPException(
                status_code=422, detail=e.errors(include_url=False, include_context=False)
            ) from e

        set_json_setting(self.db, SETTING_KEY, settings.model_dump())
        logger.info("✅ Notification settings updated")
        return settings

    def send_test(self, to: Optional[str] = None) -> str:
        recipient = to
        if not recipient:
            config = self.mailer.get_config()
            recipient = config.from_email if config else None
        if not recipient:
            raise HTTPException(status_code=400, detail="No recipient for the test notification")

        html = get_base_layout(
            "🔔 Test notification",
            "<p>Notifications are configured correctly. Alerts for orders, payments and "
            "inventory will reach this address.</p>",
        ).replace("{{siteUrl}}", SITE_URL)
        sent = self.mailer.send_email(
            to=recipient,
            subject="Test notification",
            html=html,
            text="Notifications are configured correctly.",
        )
        if not sent:
            raise HTTPException(status_code=502, detail="Could not send the test notification")

        logger.info(f"✅ Test notification sent to {recipient}")
        return recipient
