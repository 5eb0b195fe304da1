import logging
import re
from typing import Dict, List

from ..utils.email_client import EmailClient
from ..core.config import settings

logger = logging.getLogger(__name__)

TEMPLATES: Dict[str, Dict[str, str]] = {
    "verify_email": {
        "subject": "Verify your email address",
        "body": (
            "<h2>Welcome, {first_name}!</h2>"
            "<p>Thank you for registering. Please confirm your email address "
            "by opening the link below.</p>"
            "<p><a href=\"{verify_link}\">{verify_link}</a></p>"
        ),
    },
    "reservation_confirmation": {
        "subject": "Reservation #{reservation_id} confirmed",
        "body": (
            "<h2>Dear {first_name},</h2>"
            "<p>Your reservation for room {room_number} ({room_type}) is confirmed.</p>"
            "<ul>"
            "<li>Check-in: {check_in_date}</li>"
            "<li>Check-out: {check_out_date}</li>"
            "<li>Guests: {number_of_guests}</li>"
            "<li>Total: {total_amount}</li>"
            "</ul>"
            "<p>Complete your payment here: <a href=\"{payment_link}\">{payment_link}</a></p>"
        ),
    },
}


class EmailHelper:
    """Renders the built-in templates and sends them through EmailClient."""

    def __init__(self):
        self.mailer = EmailClient(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_ssl=settings.SMTP_USE_SSL,
        )

    def send_email(self, template_code: str, recipients: List[str], context: dict) -> bool:
        """Send email with template and context replacement."""
        if not settings.EMAIL_ENABLED or not settings.SMTP_HOST:
            logger.info("Email disabled, skipping '%s' to %s",
                        template_code, ", ".join(recipients))
            return False

        template = TEMPLATES[template_code]
        try:
            subject = template["subject"].format(**context)
            html_body = template["body"].format(**context)
        except KeyError as e:
            logger.error("Missing variable %s in context for '%s'", e, template_code)
            return False

        return self.mailer.send_email(
            sender=settings.EMAIL_SENDER,
            recipients=recipients,
            subject=subject,
            text_body=self._strip_html_tags(html_body),
            html_body=html_body,
        )

    @staticmethod
    def _strip_html_tags(html: str) -> str:
        return re.sub("<.*?>", "", html or "")


def send_verification_email(email: str, first_name: str, token: str) -> bool:
    verify_link = f"{settings.FRONTEND_URL}/verify/{token}"
    return EmailHelper().send_email(
        "verify_email", [email],
        {"first_name": first_name, "verify_link": verify_link})


def send_reservation_confirmation(email: str, context: dict) -> bool:
    context = dict(context)
    context.setdefault(
        "payment_link", f"{settings.FRONTEND_URL}/payment/{context.get('reservation_id')}")
    return EmailHelper().send_email("reservation_confirmation", [email], context)
