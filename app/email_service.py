"""
Email service over SMTP
Configuration comes from the settings table (editable from the dashboard) with the
EMAIL_SERVER_* environment variables as fallback. Templates use {{variable}} placeholders.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass
from datetime import datetime, timedelta
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from .config import (
    EMAIL_FROM,
    EMAIL_FROM_NAME,
    EMAIL_SERVER_HOST,
    EMAIL_SERVER_PASSWORD,
    EMAIL_SERVER_PORT,
    EMAIL_SERVER_USER,
    SITE_URL,
    SMTP_TIMEOUT,
)
from .database import SessionLocal
from .email_templates import (
    DEFAULT_TEMPLATES,
    MailTemplate,
    email_verification_html,
    email_verification_text,
)
from .models import EmailTemplate
from .settings_store import decrypt_password, get_settings_map

logger = logging.getLogger(__name__)

SMTP_SETTING_KEYS = (
    "smtp_host",
    "smtp_port",
    "smtp_secure",
    "smtp_user",
    "smtp_password",
    "from_email",
    "from_name",
)
DEFAULT_SMTP_PORT = 587


@dataclass
class EmailConfig:
    smtp_host: str
    smtp_port: int
    smtp_secure: bool
    smtp_user: str
    smtp_password: str
    from_email: str
    from_name: str


def parse_port(value: Optional[str]) -> int:
    try:
        return int(value) if value else DEFAULT_SMTP_PORT
    except (TypeError, ValueError):
        return DEFAULT_SMTP_PORT


class SMTPTransport:
    """Opens one SMTP connection per operation"""

    def __init__(self, host: str, port: int, secure: bool, user: str = "", password: str = ""):
        self.host = host
        self.port = port
        self.secure = secure
        self.user = user
        self.password = password

    def _context(self) -> ssl.SSLContext:
        # Self-signed certificates are common on small mail hosts
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            server = smtplib.SMTP_SSL(
                self.host, self.port, context=self._context(), timeout=SMTP_TIMEOUT
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT)
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=self._context())
                server.ehlo()

        if self.user:
            server.login(self.user, self.password)
        return server

    def verify(self) -> bool:
        """Connect and authenticate; raises on failure"""
        server = self._connect()
        try:
            server.noop()
        finally:
            server.quit()
        return True

    def send_mail(self, message: MIMEMultipart, sender: str, recipients: list[str]) -> str:
        server = self._connect()
        try:
            server.sendmail(sender, recipients, message.as_string())
        finally:
            server.quit()
        return message["Message-ID"]


class EmailService:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory
        self.transporter: Optional[SMTPTransport] = None
        self.config: Optional[EmailConfig] = None

    def get_config(self) -> Optional[EmailConfig]:
        if self.config:
            return self.config

        try:
            with self.session_factory() as db:
                stored = get_settings_map(db, SMTP_SETTING_KEYS)
            if stored.get("smtp_host"):
                self.config = EmailConfig(
                    smtp_host=stored["smtp_host"],
                    smtp_port=parse_port(stored.get("smtp_port")),
                    smtp_secure=stored.get("smtp_secure") == "true",
                    smtp_user=stored.get("smtp_user", ""),
                    smtp_password=decrypt_password(stored.get("smtp_password")),
                    from_email=stored.get("from_email", ""),
                    from_name=stored.get("from_name") or EMAIL_FROM_NAME,
                )
                return self.config
        except SQLAlchemyError as e:
            logger.error(f"❌ Error reading email configuration from database: {e}")

        if EMAIL_SERVER_HOST:
            self.config = EmailConfig(
                smtp_host=EMAIL_SERVER_HOST,
                smtp_port=parse_port(EMAIL_SERVER_PORT),
                smtp_secure=EMAIL_SERVER_PORT == "465",
                smtp_user=EMAIL_SERVER_USER or "",
                smtp_password=EMAIL_SERVER_PASSWORD or "",
                from_email=EMAIL_FROM,
                from_name=EMAIL_FROM_NAME,
            )
            return self.config

        return None

    def get_transporter(self) -> Optional[SMTPTransport]:
        if self.transporter:
            return self.transporter

        config = self.get_config()
        if not config:
            logger.warning("⚠️ Email configuration not found")
            return None

        transporter = SMTPTransport(
            host=config.smtp_host,
            port=config.smtp_port,
            secure=config.smtp_secure,
            user=config.smtp_user,
            password=config.smtp_password,
        )
        try:
            transporter.verify()
        except (smtplib.SMTPException, ssl.SSLError, OSError) as e:
            logger.error(f"❌ Error configuring email transporter: {e}")
            return None

        logger.info(f"✅ SMTP transporter ready ({config.smtp_host}:{config.smtp_port})")
        self.transporter = transporter
        return self.transporter

    def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        attachments: Optional[list[dict]] = None,
    ) -> bool:
        """
        Send an email.

        Attachments are dicts with "filename", "content" (bytes or str) and an optional
        "content_type" ("application/pdf"...). Returns False instead of raising.
        """
        transporter = self.get_transporter()
        config = self.get_config()
        if not transporter or not config:
            logger.error("❌ Email transporter not available")
            return False

        try:
            message = MIMEMultipart("mixed")
            message["Subject"] = subject
            message["From"] = f'"{config.from_name}" <{config.from_email}>'
            message["To"] = to
            domain = config.from_email.split("@")[-1] or None
            message["Message-ID"] = make_msgid(domain=domain)

            body = MIMEMultipart("alternative")
            if text:
                body.attach(MIMEText(text, "plain", "utf-8"))
            body.attach(MIMEText(html, "html", "utf-8"))
            message.attach(body)

            for attachment in attachments or []:
                maintype, _, subtype = attachment.get(
                    "content_type", "application/octet-stream"
                ).partition("/")
                part = MIMEBase(maintype, subtype or "octet-stream")
                content = attachment["content"]
                part.set_payload(content.encode() if isinstance(content, str) else content)
                encoders.encode_base64(part)
                part.add_header(
                    "Content-Disposition", f'attachment; filename="{attachment["filename"]}"'
                )
                message.attach(part)

            message_id = transporter.send_mail(message, config.from_email, [to])
            logger.info(f"📧 Email sent: {message_id}")
            return True
        except Exception as e:
            logger.error(f"❌ Error sending email to {to}: {e}")
            return False

    def send_template_email(self, template_type: str, to: str, variables: dict[str, Any]) -> bool:
        template = self.get_template(template_type)
        if not template or not template.is_active:
            logger.error(f"❌ Template {template_type} not found or inactive")
            return False

        subject, html, text = self.process_template(template, variables)
        return self.send_email(to, subject, html, text)

    def get_template(self, template_type: str) -> Optional[MailTemplate]:
        """Active database template of the type, otherwise the built-in default"""
        try:
            with self.session_factory() as db:
                stored = (
                    db.query(EmailTemplate)
                    .filter(EmailTemplate.type == template_type, EmailTemplate.is_active.is_(True))
                    .order_by(EmailTemplate.updated_at.desc())
                    .first()
                )
                if stored:
                    return MailTemplate(
                        id=str(stored.id),
                        name=stored.name,
                        type=stored.type,
                        subject=stored.subject,
                        html_content=stored.html_content,
                        text_content=stored.text_content,
                        variables=list(stored.variables or []),
                        is_active=stored.is_active,
                    )
        except SQLAlchemyError as e:
            logger.error(f"❌ Error loading template {template_type}: {e}")

        return DEFAULT_TEMPLATES.get(template_type)

    @staticmethod
    def process_template(
        template: MailTemplate, variables: dict[str, Any]
    ) -> tuple[str, str, Optional[str]]:
        """Replace every literal {{key}} in subject, html and text; unknown tokens stay"""
        subject = template.subject
        html = template.html_content
        text = template.text_content

        for key, value in variables.items():
            token = "{{" + key + "}}"
            replacement = str(value)
            subject = subject.replace(token, replacement)
            html = html.replace(token, replacement)
            if text:
                text = text.replace(token, replacement)

        return subject, html, text

    def test_connection(self) -> tuple[bool, str]:
        transporter = self.get_transporter()
        if not transporter:
            return False, "Could not configure the email transporter"

        try:
            transporter.verify()
            return True, "SMTP connection successful"
        except (smtplib.SMTPException, ssl.SSLError, OSError) as e:
            logger.error(f"SMTP error: {e}")
            return False, f"Connection error: {e}"

    def reset_transporter(self) -> None:
        """Forget cached transporter and configuration after settings change"""
        self.transporter = None
        self.config = None


email_service = EmailService()


def format_date(value: Optional[datetime]) -> str:
    return (value or datetime.utcnow()).strftime("%d/%m/%Y")


def format_money(amount: Optional[float]) -> str:
    return f"€{float(amount or 0):.2f}"


def format_address(address: Optional[dict]) -> str:
    if not address:
        return "Address not specified"
    parts = [
        address.get("street"),
        address.get("city"),
        address.get("state"),
        address.get("postal_code") or address.get("postalCode"),
    ]
    return ", ".join(str(part) for part in parts if part)


def _item_name(item) -> str:
    name = item.product.name if getattr(item, "product", None) else "Product"
    variant = getattr(item, "variant", None)
    if variant:
        name = f"{name} ({variant.display_name})"
    return name


def render_order_items_html(items) -> str:
    rows = "".join(
        f"""
    <div style="border-bottom: 1px solid #e5e7eb; padding: 10px 0;">
      <p style="margin: 0;"><strong>{_item_name(item)}</strong></p>
      <p style="margin: 5px 0; color: #6b7280;">Quantity: {item.quantity} - {format_money(item.total_price)}</p>
    </div>"""
        for item in items
    )
    return rows


def render_order_items_text(items) -> str:
    return "\n".join(
        f"{_item_name(item)} - Quantity: {item.quantity} - {format_money(item.total_price)}"
        for item in items
    )


def send_order_confirmation_email(order) -> bool:
    variables = {
        "orderNumber": order.order_number,
        "orderDate": format_date(order.created_at),
        "orderTotal": format_money(order.total_amount),
        "orderStatus": order.status,
        "orderItems": render_order_items_html(order.items),
        "orderItemsText": render_order_items_text(order.items),
        "shippingAddress": format_address(order.shipping_address),
        "shippingMethod": order.shipping_method or "Standard",
        "orderId": order.id,
        "siteUrl": SITE_URL,
    }
    return email_service.send_template_email("ORDER_CONFIRMATION", order.customer_email, variables)


def send_order_status_update_email(order) -> bool:
    """Shipment notification with tracking details"""
    variables = {
        "orderNumber": order.order_number,
        "trackingNumber": order.tracking_number or "Not available",
        "carrier": order.carrier or "Correos",
        "shippedDate": format_date(datetime.utcnow()),
        "estimatedDelivery": order.estimated_delivery or "2-3 business days",
        "trackingUrl": getattr(order, "tracking_url", None) or "#",
        "shippingAddress": format_address(order.shipping_address),
        "siteUrl": SITE_URL,
    }
    return email_service.send_template_email("ORDER_SHIPPED", order.customer_email, variables)


def send_order_delivered_email(order) -> bool:
    variables = {
        "customerName": order.customer_name,
        "orderNumber": order.order_number,
        "deliveredDate": format_date(datetime.utcnow()),
        "siteUrl": SITE_URL,
    }
    return email_service.send_template_email("ORDER_DELIVERED", order.customer_email, variables)


def send_welcome_email(user) -> bool:
    variables = {
        "customerName": user.name or "Customer",
        "siteUrl": SITE_URL,
        "discountExpiry": format_date(datetime.utcnow() + timedelta(days=30)),
    }
    return email_service.send_template_email("WELCOME", user.email, variables)


def send_password_reset_email(user, reset_token: str) -> bool:
    variables = {
        "customerName": user.name or "Customer",
        "resetLink": f"{SITE_URL}/reset-password?token={reset_token}",
        "siteUrl": SITE_URL,
    }
    return email_service.send_template_email("PASSWORD_RESET", user.email, variables)


def send_email_verification(to: str, name: str, verification_url: str) -> bool:
    return email_service.send_email(
        to=to,
        subject=f"✅ Verify your email - {EMAIL_FROM_NAME}",
        html=email_verification_html(name, verification_url).replace("{{siteUrl}}", SITE_URL),
        text=email_verification_text(name, verification_url),
    )


def verify_email_config() -> bool:
    success, message = email_service.test_connection()
    if success:
        logger.info(f"✅ {message}")
    else:
        logger.error(f"❌ {message}")
    return success


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    return email_service.send_email(to, subject, html, text)
