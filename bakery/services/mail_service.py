"""
Outbound email notifications for new orders and contact messages.
Sent from FastAPI background tasks after the response; failures are logged only.
"""
import logging
import smtplib
from email.message import EmailMessage

from bakery.config import Settings
from bakery.models import Order

logger = logging.getLogger(__name__)


def is_mail_configured(settings: Settings) -> bool:
    return bool(settings.SMTP_HOST and settings.NOTIFY_EMAIL)


def send_notification(subject: str, body: str, settings: Settings, reply_to: str = "") -> bool:
    """
    Send a plain-text notification to NOTIFY_EMAIL.

    Returns:
        bool: True if the message was handed to the SMTP server
    """
    if not is_mail_configured(settings):
        logger.debug(f"Mail not configured, skipping notification: {subject}")
        return False

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = settings.SMTP_USERNAME or settings.NOTIFY_EMAIL
    message["To"] = settings.NOTIFY_EMAIL
    if reply_to:
        message["Reply-To"] = reply_to
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
            smtp.starttls()
            if settings.SMTP_USERNAME:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(message)
        logger.info(f"Notification sent: {subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send notification {subject!r}: {str(e)}", exc_info=True)
        return False


def order_notification_body(order: Order) -> str:
    lines = [
        f"Order {order.order_id}",
        f"Customer: {order.customer_name}",
        f"Email: {order.email}",
        f"Phone: {order.phone}",
        "",
        "Items:",
    ]
    lines.extend(
        f"  - {item.name} x{item.quantity} @ {item.price:.2f}" for item in order.items
    )
    lines.append("")
    lines.append(f"Total: {order.total_amount:.2f}")
    if order.delivery_date:
        lines.append(f"Delivery date: {order.delivery_date}")
    if order.special_requests:
        lines.append(f"Special requests: {order.special_requests}")
    if order.reference_image:
        lines.append(f"Reference image: {order.reference_image}")
    return "\n".join(lines)


def notify_order(order: Order, settings: Settings) -> None:
    send_notification(f"New order {order.order_id}", order_notification_body(order), settings, reply_to=order.email)


def notify_contact(name: str, email: str, phone: str, message: str, settings: Settings) -> None:
    body = f"From: {name} <{email}>\nPhone: {phone or '-'}\n\n{message}"
    send_notification(f"Contact form message from {name}", body, settings, reply_to=email)
