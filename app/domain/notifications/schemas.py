"""Notification settings schemas"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_phone, validate_time_of_day

Priority = Literal["high", "medium", "low"]


class EmailChannel(BaseModel):
    enabled: bool = True
    new_orders: bool = True
    payment_issues: bool = True
    low_stock: bool = True
    customer_messages: bool = False
    system_alerts: bool = True
    daily_reports: bool = False
    weekly_reports: bool = False


class InAppChannel(BaseModel):
    enabled: bool = True
    new_orders: bool = True
    payment_issues: bool = True
    low_stock: bool = True
    customer_messages: bool = True
    system_alerts: bool = True
    sound: bool = True


class WhatsAppChannel(BaseModel):
    enabled: bool = False
    phone_number: str = ""
    urgent_only: bool = True
    business_hours: bool = True

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) or ""


class QuietHours(BaseModel):
    enabled: bool = False
    start: str = "22:00"
    end: str = "08:00"

    @field_validator("start", "end")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class CategoryPreference(BaseModel):
    priority: Priority = "medium"
    enabled: bool = True


def _default_categories() -> dict[str, CategoryPreference]:
    return {
        "orders": CategoryPreference(priority="high"),
        "payments": CategoryPreference(priority="high"),
        "inventory": CategoryPreference(priority="medium"),
        "customers": CategoryPreference(priority="medium"),
        "system": CategoryPreference(priority="low"),
        "production": CategoryPreference(priority="medium"),
    }


class Preferences(BaseModel):
    frequency: Literal["instant", "hourly", "daily"] = "instant"
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    categories: dict[str, CategoryPreference] = Field(default_factory=_default_categories)


class Thresholds(BaseModel):
    low_stock_threshold: int = Field(10, ge=0)
    high_value_order_threshold: float = Field(500, ge=0)
    payment_failure_threshold: int = Field(3, ge=1)
    response_time_threshold: int = Field(24, ge=1)  # hours


class NotificationSettings(BaseModel):
    email: EmailChannel = Field(default_factory=EmailChannel)
    in_app: InAppChannel = Field(default_factory=InAppChannel)
    whatsapp: WhatsAppChannel = Field(default_factory=WhatsAppChannel)
    preferences: Preferences = Field(default_factory=Preferences)
    thresholds: Thresholds = Field(default_factory=Thresholds)


class NotificationTestRequest(BaseModel):
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)
