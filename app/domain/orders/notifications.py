"""Customer emails triggered by order events, run as background tasks"""

import logging

from ...database import SessionLocal
from ...email_service import (
    send_order_confirmation_email,
    send_order_delivered_email,
    send_order_status_update_email,
)
from ...models import Order

logger = logging.getLogger(__name__)

STATUS_EMAILS = {
    "SHIPPED": send_order_status_update_email,
    "DELIVERED": send_order_delivered_email,
}


def send_order_email(order_id: int, event: str) -> None:
    """
    Load the order in a fresh session and send the email for the event
    ("CREATED" or a status). Failures are logged, never raised.
    """
    sender = send_order_confirmation_email if event == "CREATED" else STATUS_EMAILS.get(event)
    if sender is None:
        return

    db = SessionLocal()
    try:
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            logger.warning(f"⚠️ Order {order_id} disappeared before its {event} email was sent")
            return
        if sender(order):
            logger.info(f"📧 {event} email sent for order {order.order_number}")
        else:
            logger.warning(f"⚠️ {event} email for order {order.order_number} was not sent")
    except Exception as e:
        logger.error(f"❌ Error sending {event} email for order {order_id}: {e}")
    finally:
        db.close()
