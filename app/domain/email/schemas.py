"""Email admin schemas"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

TemplateType = Literal[
    "ORDER_CONFIRMATION",
    "ORDER_SHIPPED",
    "ORDER_DELIVERED",
    "WELCOME",
    "PASSWORD_RESET",
    "CUSTOM",
]


class EmailConfigUpdate(BaseModel):
    smtp_host: str
    smtp_port: int = Field(587, ge=1, le=65535)  # 587 for STARTTLS, 465 for SSL
    smtp_secure: bool = False
    smtp_user: str = ""
    smtp_password: Optional[str] = None  # Blank keeps the stored password
    from_email: EmailStr
    from_name: Optional[str] = None

    @field_validator("smtp_host")
    @classmethod
    def check_host(cls, v):
        if not v.strip():
            raise ValueError("SMTP host is required")
        return v.strip()


class EmailConfigResponse(BaseModel):
    configured: bool
    source: Optional[Literal["database", "environment"]] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: bool = False
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    from_email: Optional[str] = None
    from_name: Optional[str] = None


class EmailTestRequest(BaseModel):
    to: Optional[EmailStr] = None


class SendEmailRequest(BaseModel):
    to: EmailStr
    subject: Optional[str] = None
    html: Optional[str] = None
    text: Optional[str] = None
    template_type: Optional[TemplateType] = None
    variables: dict[str, Any] = {}

    @model_validator(mode="after")
    def check_content(self):
        if not self.template_type and not (self.subject and self.html):
            raise ValueError("Provide subject and html, or a template_type")
        return self


class EmailTemplateCreate(BaseModel):
    name: str
    type: TemplateType
    subject: str
    html_content: str
    text_content: Optional[str] = None
    variables: Optional[list[str]] = None
    is_active: bool = True


class EmailTemplateUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[TemplateType] = None
    subject: Optional[str] = None
    html_content: Optional[str] = None
    text_content: Optional[str] = None
    variables: Optional[list[str]] = None
    is_active: Optional[bool] = None


class EmailTemplateResponse(BaseModel):
    id: int
    name: str
    type: str
    subject: str
    html_content: str
    text_content: Optional[str] = None
    variables: list[str] = []
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DefaultTemplateResponse(BaseModel):
    id: str
    name: str
    type: str
    subject: str
    html_content: str
    text_content: Optional[str] = None
    variables: list[str] = []
    is_active: bool = True

    class Config:
        from_attributes = True
