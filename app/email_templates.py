"""
Built-in email templates
Templates use {{variable}} placeholders that the email service substitutes at send time.
An active template of the same type stored in the database takes precedence.
"""

from dataclasses import dataclass, field
from typing import Optional

from .config import STORE_NAME

TEMPLATE_TYPES = (
    "ORDER_CONFIRMATION",
    "ORDER_SHIPPED",
    "ORDER_DELIVERED",
    "WELCOME",
    "PASSWORD_RESET",
    "CUSTOM",
)

# Storefront colour scheme - Orange/Slate
THEME = {
    "primary": "#ea580c",
    "info": "#0ea5e9",
    "info_dark": "#0369a1",
    "success": "#16a34a",
    "background": "#f8fafc",
    "panel": "#f1f5f9",
    "highlight": "#fef3e2",
    "text_primary": "#374151",
    "text_muted": "#6b7280",
    "border": "#e5e7eb",
}

SUPPORT_EMAIL = "info@storefront.es"


@dataclass
class MailTemplate:
    """A template as the email service consumes it, whether built-in or stored"""

    id: str
    name: str
    type: str
    subject: str
    html_content: str
    text_content: Optional[str] = None
    variables: list[str] = field(default_factory=list)
    is_active: bool = True


def get_base_layout(heading: str, body: str) -> str:
    """Shared HTML wrapper: logo, heading, body, footer"""
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="text-align: center; margin-bottom: 30px;">
    <img src="{{{{siteUrl}}}}/logo.png" alt="{STORE_NAME}" style="height: 60px;" />
    <h1 style="color: {THEME['primary']}; margin: 20px 0;">{heading}</h1>
  </div>
  {body}
  <div style="text-align: center; margin-top: 30px; padding-top: 20px; border-top: 1px solid {THEME['border']}; color: {THEME['text_muted']}; font-size: 14px;">
    <p>Questions? Contact us at <a href="mailto:{SUPPORT_EMAIL}">{SUPPORT_EMAIL}</a></p>
    <p>{STORE_NAME} - Your custom products store</p>
  </div>
</div>
"""


def _button(href: str, label: str, color: str = THEME["primary"]) -> str:
    return (
        f'<a href="{href}" style="background: {color}; color: white; padding: 12px 24px; '
        f'text-decoration: none; border-radius: 6px;">{label}</a>'
    )


ORDER_CONFIRMATION = MailTemplate(
    id="order_confirmation_default",
    name="Order Confirmation",
    type="ORDER_CONFIRMATION",
    subject="✅ Order #{{orderNumber}} confirmed - " + STORE_NAME,
    html_content=get_base_layout(
        "Order Confirmed!",
        f"""
  <div style="background: {THEME['background']}; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
    <h2 style="margin: 0 0 15px 0; color: {THEME['text_primary']};">Order Details</h2>
    <p><strong>Order number:</strong> #{{{{orderNumber}}}}</p>
    <p><strong>Date:</strong> {{{{orderDate}}}}</p>
    <p><strong>Total:</strong> {{{{orderTotal}}}}</p>
    <p><strong>Status:</strong> {{{{orderStatus}}}}</p>
  </div>
  <div style="margin-bottom: 20px;">
    <h3 style="color: {THEME['text_primary']};">Products</h3>
    {{{{orderItems}}}}
  </div>
  <div style="background: {THEME['panel']}; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
    <h3 style="margin: 0 0 15px 0; color: {THEME['text_primary']};">Shipping</h3>
    <p>{{{{shippingAddress}}}}</p>
    <p><strong>Shipping method:</strong> {{{{shippingMethod}}}}</p>
  </div>
  <div style="text-align: center; margin-top: 30px;">
    {_button("{{siteUrl}}/admin/orders/{{orderId}}", "View Order")}
  </div>
""",
    ),
    text_content="""
Order Confirmed!

Order number: #{{orderNumber}}
Date: {{orderDate}}
Total: {{orderTotal}}
Status: {{orderStatus}}

Products:
{{orderItemsText}}

Shipping:
{{shippingAddress}}
Shipping method: {{shippingMethod}}

View order: {{siteUrl}}/admin/orders/{{orderId}}
""",
    variables=[
        "orderNumber",
        "orderDate",
        "orderTotal",
        "orderStatus",
        "orderItems",
        "orderItemsText",
        "shippingAddress",
        "shippingMethod",
        "orderId",
        "siteUrl",
    ],
)

ORDER_SHIPPED = MailTemplate(
    id="order_shipped_default",
    name="Order Shipped",
    type="ORDER_SHIPPED",
    subject="📦 Your order #{{orderNumber}} is on its way - " + STORE_NAME,
    html_content=get_base_layout(
        "Your order is on its way!",
        f"""
  <div style="background: #f0f9ff; padding: 20px; border-radius: 8px; margin-bottom: 20px; border-left: 4px solid {THEME['info']};">
    <h2 style="margin: 0 0 15px 0; color: {THEME['info_dark']};">Shipment</h2>
    <p><strong>Order number:</strong> #{{{{orderNumber}}}}</p>
    <p><strong>Tracking number:</strong> {{{{trackingNumber}}}}</p>
    <p><strong>Carrier:</strong> {{{{carrier}}}}</p>
    <p><strong>Shipped on:</strong> {{{{shippedDate}}}}</p>
    <p><strong>Estimated delivery:</strong> {{{{estimatedDelivery}}}}</p>
  </div>
  <div style="text-align: center; margin-bottom: 20px;">
    {_button("{{trackingUrl}}", "Track Shipment", THEME["info"])}
  </div>
  <div style="background: {THEME['background']}; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
    <h3 style="margin: 0 0 15px 0; color: {THEME['text_primary']};">Delivery Address</h3>
    <p>{{{{shippingAddress}}}}</p>
  </div>
""",
    ),
    text_content="""
Your order is on its way!

Order number: #{{orderNumber}}
Tracking number: {{trackingNumber}}
Carrier: {{carrier}}
Shipped on: {{shippedDate}}
Estimated delivery: {{estimatedDelivery}}

Track shipment: {{trackingUrl}}

Delivery address:
{{shippingAddress}}
""",
    variables=[
        "orderNumber",
        "trackingNumber",
        "carrier",
        "shippedDate",
        "estimatedDelivery",
        "trackingUrl",
        "shippingAddress",
        "siteUrl",
    ],
)

ORDER_DELIVERED = MailTemplate(
    id="order_delivered_default",
    name="Order Delivered",
    type="ORDER_DELIVERED",
    subject="🎁 Order #{{orderNumber}} delivered - " + STORE_NAME,
    html_content=get_base_layout(
        "Your order has arrived!",
        f"""
  <div style="background: {THEME['highlight']}; padding: 20px; border-radius: 8px; margin-bottom: 20px; border-left: 4px solid {THEME['primary']};">
    <p>Hi {{{{customerName}}}}, order <strong>#{{{{orderNumber}}}}</strong> was delivered on {{{{deliveredDate}}}}.</p>
    <p>We hope you love your custom products.</p>
  </div>
  <div style="text-align: center; margin-bottom: 20px;">
    {_button("{{siteUrl}}/perfil/pedidos", "Leave a Review")}
  </div>
""",
    ),
    text_content="""
Your order has arrived!

Hi {{customerName}}, order #{{orderNumber}} was delivered on {{deliveredDate}}.
We hope you love your custom products.

Leave a review: {{siteUrl}}/perfil/pedidos
""",
    variables=["customerName", "orderNumber", "deliveredDate", "siteUrl"],
)

WELCOME = MailTemplate(
    id="welcome_default",
    name="Welcome",
    type="WELCOME",
    subject="🎉 Welcome to " + STORE_NAME + "!",
    html_content=get_base_layout(
        "Welcome, {{customerName}}!",
        f"""
  <div style="background: {THEME['highlight']}; padding: 20px; border-radius: 8px; margin-bottom: 20px; border-left: 4px solid {THEME['primary']};">
    <p style="margin: 0; font-size: 16px; color: #9a3412;">
      Thanks for joining our community! We can't wait to help you create unique, personalised products.
    </p>
  </div>
  <div style="margin-bottom: 20px;">
    <h3 style="color: {THEME['text_primary']};">What can you do now?</h3>
    <ul style="color: {THEME['text_muted']};">
      <li>Browse our catalogue of customisable products</li>
      <li>Create unique designs with our editor</li>
      <li>Place orders quickly and easily</li>
      <li>Track the status of your orders</li>
    </ul>
  </div>
  <div style="text-align: center; margin-bottom: 20px;">
    {_button("{{siteUrl}}", "Explore Products")}
  </div>
  <div style="background: {THEME['panel']}; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
    <h3 style="margin: 0 0 15px 0; color: {THEME['text_primary']};">Welcome Discount</h3>
    <p>As a new customer you get <strong>10% off</strong> your first purchase.</p>
    <p style="text-align: center; margin: 15px 0;">
      <strong style="background: {THEME['primary']}; color: white; padding: 8px 16px; border-radius: 4px; font-size: 18px;">WELCOME10</strong>
    </p>
    <p style="font-size: 14px; color: {THEME['text_muted']};">Valid until {{{{discountExpiry}}}}</p>
  </div>
""",
    ),
    text_content="""
Welcome, {{customerName}}!

Thanks for joining our community! We can't wait to help you create unique, personalised products.

Explore products: {{siteUrl}}

Welcome discount: 10% off your first purchase with code WELCOME10
Valid until {{discountExpiry}}
""",
    variables=["customerName", "siteUrl", "discountExpiry"],
)

PASSWORD_RESET = MailTemplate(
    id="password_reset_default",
    name="Password Reset",
    type="PASSWORD_RESET",
    subject="Reset your password - " + STORE_NAME,
    html_content=get_base_layout(
        "Reset your password",
        f"""
  <p>Hi {{{{customerName}}}},</p>
  <p>We received a request to reset the password of your {STORE_NAME} account.</p>
  <div style="text-align: center; margin: 30px 0;">
    {_button("{{resetLink}}", "Reset Password")}
  </div>
  <p>This link expires in 1 hour.</p>
  <p>If you did not request this change you can ignore this email.</p>
""",
    ),
    text_content="""
Hi {{customerName}},

We received a request to reset your password. Open this link to choose a new one:
{{resetLink}}

This link expires in 1 hour. If you did not request this change you can ignore this email.
""",
    variables=["customerName", "resetLink", "siteUrl"],
)

DEFAULT_TEMPLATES = {
    template.type: template
    for template in (ORDER_CONFIRMATION, ORDER_SHIPPED, ORDER_DELIVERED, WELCOME, PASSWORD_RESET)
}


def email_verification_html(name: str, verification_url: str) -> str:
    """Verification email body; sent directly rather than through a stored template"""
    return get_base_layout(
        "Verify your email!",
        f"""
  <p>Hi <strong>{name}</strong>,</p>
  <p>Welcome to {STORE_NAME}! To activate your account we need to verify your email address.</p>
  <div style="text-align: center; margin: 30px 0;">
    {_button(verification_url, "✅ Verify Email")}
  </div>
  <div style="background: #fef3c7; border: 1px solid #f59e0b; padding: 15px; border-radius: 8px; margin: 20px 0;">
    <p style="margin: 0; color: #92400e;"><strong>⏰ Important:</strong> this link expires in 24 hours.</p>
  </div>
  <p style="font-size: 12px; color: #9ca3af; word-break: break-all;">{verification_url}</p>
""",
    )


def email_verification_text(name: str, verification_url: str) -> str:
    return (
        f"Hi {name},\n\n"
        f"Welcome to {STORE_NAME}! Verify your email address with this link:\n"
        f"{verification_url}\n\n"
        "This link expires in 24 hours.\n"
    )


def test_message_html() -> str:
    return get_base_layout(
        "✅ SMTP Connection Successful!",
        f"""
  <p>Your email settings are working. Order and customer notifications from {STORE_NAME}
  will be delivered through this server.</p>
""",
    )
