"""Email admin service - SMTP settings and stored templates"""

import logging
import re
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import (
    EMAIL_FROM,
    EMAIL_FROM_NAME,
    EMAIL_SERVER_HOST,
    EMAIL_SERVER_PORT,
    EMAIL_SERVER_USER,
    SITE_URL,
)
from ...email_service import SMTP_SETTING_KEYS, EmailService, email_service, parse_port
from ...email_templates import DEFAULT_TEMPLATES, test_message_html
from ...models import EmailTemplate, Setting
from ...settings_store import encrypt_password, get_settings_map, set_settings
from .schemas import (
    EmailConfigResponse,
    EmailConfigUpdate,
    EmailTemplateCreate,
    EmailTemplateUpdate,
    SendEmailRequest,
)

logger = logging.getLogger(__name__)

MASKED_PASSWORD = "********"
VARIABLE_PATTERN = re.compile(r"{{(\w+)}}")  # Same exact form process_template replaces


def extract_variables(*contents: Optional[str]) -> list[str]:
    """Distinct {{token}} names in order of first appearance"""
    seen: list[str] = []
    for content in contents:
        for name in VARIABLE_PATTERN.findall(content or ""):
            if name not in seen:
                seen.append(name)
    return seen


class EmailAdminService:
    def __init__(self, db: Session, mailer: Optional[EmailService] = None):
        self.db = db
        self.mailer = mailer or email_service

    # SMTP configuration

    def get_config(self) -> EmailConfigResponse:
        stored = get_settings_map(self.db, SMTP_SETTING_KEYS)
        if stored.get("smtp_host"):
            return EmailConfigResponse(
                configured=True,
                source="database",
                smtp_host=stored["smtp_host"],
                smtp_port=parse_port(stored.get("smtp_port")),
                smtp_secure=stored.get("smtp_secure") == "true",
                smtp_user=stored.get("smtp_user", ""),
                smtp_password=MASKED_PASSWORD if stored.get("smtp_password") else None,
                from_email=stored.get("from_email"),
                from_name=stored.get("from_name") or EMAIL_FROM_NAME,
            )

        if EMAIL_SERVER_HOST:
            return EmailConfigResponse(
                configured=True,
                source="environment",
                smtp_host=EMAIL_SERVER_HOST,
                smtp_port=parse_port(EMAIL_SERVER_PORT),
                smtp_secure=EMAIL_SERVER_PORT == "465",
                smtp_user=EMAIL_SERVER_USER,
                smtp_password=MASKED_PASSWORD,
                from_email=EMAIL_FROM,
                from_name=EMAIL_FROM_NAME,
            )

        return EmailConfigResponse(configured=False)

    def update_config(self, data: EmailConfigUpdate) -> EmailConfigResponse:
        values = {
            "smtp_host": data.smtp_host,
            "smtp_port": str(data.smtp_port),
            "smtp_secure": "true" if data.smtp_secure else "false",
            "smtp_user": data.smtp_user,
            "from_email": data.from_email,
            "from_name": data.from_name or EMAIL_FROM_NAME,
        }
        if data.smtp_password and data.smtp_password != MASKED_PASSWORD:
            values["smtp_password"] = encrypt_password(data.smtp_password)

        set_settings(self.db, values)
        self.mailer.reset_transporter()
        logger.info(f"✅ SMTP configuration saved ({data.smtp_host}:{data.smtp_port})")
        return self.get_config()

    def remove_config(self) -> None:
        """Forget stored SMTP settings; the environment fallback applies again"""
        self.db.query(Setting).filter(Setting.key.in_(SMTP_SETTING_KEYS)).delete(
            synchronize_session=False
        )
        self.db.commit()
        self.mailer.reset_transporter()
        logger.info("🗑️ SMTP configuration removed")

    def test(self, to: Optional[str] = None) -> dict:
        success, message = self.mailer.test_connection()
        result = {"success": success, "message": message}
        if success and to:
            sent = self.mailer.send_email(
                to=to,
                subject="SMTP test",
                html=test_message_html().replace("{{siteUrl}}", SITE_URL),
                text="Your email settings are working.",
            )
            result["test_email_sent"] = sent
            if not sent:
                result["success"] = False
                result["message"] = f"Connection works but the test email to {to} was not sent"
        return result

    def send(self, data: SendEmailRequest) -> None:
        if data.template_type:
            variables = {"siteUrl": SITE_URL, **data.variables}
            sent = self.mailer.send_template_email(data.template_type, data.to, variables)
        else:
            sent = self.mailer.send_email(data.to, data.subject, data.html, data.text)
        if not sent:
            raise HTTPException(status_code=502, detail="The email could not be sent")

    # Templates

    def list_templates(self, template_type: Optional[str] = None) -> list[EmailTemplate]:
        query = self.db.query(EmailTemplate)
        if template_type:
            query = query.filter(EmailTemplate.type == template_type)
        return query.order_by(EmailTemplate.type.asc(), EmailTemplate.updated_at.desc()).all()

    def get_template(self, template_id: int) -> EmailTemplate:
        template = self.db.query(EmailTemplate).filter(EmailTemplate.id == template_id).first()
        if not template:
            raise HTTPException(status_code=404, detail="Email template not found")
        return template

    def create_template(self, data: EmailTemplateCreate) -> EmailTemplate:
        values = data.model_dump()
        if not values["variables"]:
            values["variables"] = extract_variables(data.subject, data.html_content, data.text_content)

        template = EmailTemplate(**values)
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        logger.info(f"✅ Email template '{template.name}' ({template.type}) created")
        return template

    def update_template(self, template_id: int, data: EmailTemplateUpdate) -> EmailTemplate:
        template = self.get_template(template_id)
        updates = data.model_dump(exclude_unset=True)
        for key, value in updates.items():
            setattr(template, key, value)

        content_changed = {"subject", "html_content", "text_content"} & updates.keys()
        if content_changed and "variables" not in updates:
            template.variables = extract_variables(
                template.subject, template.html_content, template.text_content
            )

        self.db.commit()
        self.db.refresh(template)
        return template

    def delete_template(self, template_id: int) -> None:
        template = self.get_template(template_id)
        self.db.delete(template)
        self.db.commit()
        logger.info(f"🗑️ Email template {template_id} deleted")

    @staticmethod
    def default_templates() -> list:
        return list(DEFAULT_TEMPLATES.values())
