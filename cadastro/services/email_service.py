"""
cadastro/services/email_service.py

Purpose: Verification code delivery

- Sends the 6-digit email confirmation code through SendGrid
- Never logs the code itself
"""

import asyncio
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from cadastro.core.config import settings
from cadastro.core.exceptions import EmailDeliveryError
from cadastro.core.logging import get_logger, mask_email
from utils.constants import EMAIL_SUBJECT, EMAIL_BODY_TEMPLATE

logger = get_logger(__name__)


class SendGridEmailSender:
    """Sends verification emails via the SendGrid API."""

    def __init__(self, api_key: Optional[str], from_email: str, from_name: str):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _build_message(self, address: str, code: int) -> Mail:
        msg = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(address),
            subject=EMAIL_SUBJECT,
        )
        msg.add_content(Content("text/plain", EMAIL_BODY_TEMPLATE.format(code=code)))
        return msg

    def _send(self, address: str, code: int) -> int:
        client = SendGridAPIClient(self.api_key)
        response = client.send(self._build_message(address, code))
        return response.status_code

    async def send_code(self, address: str, code: int) -> None:
        """
        Sends `code` to `address`.

        Raises:
            EmailDeliveryError: if SendGrid rejects the message or is unreachable
        """
        masked = mask_email(address)

        if not self.is_configured():
            logger.warning(f"SendGrid not configured, verification email to {masked} not sent")
            return

        try:
            status_code = await asyncio.to_thread(self._send, address, code)
        except Exception as e:
            logger.error(f"SendGrid error sending to {masked}: {e}")
            raise EmailDeliveryError(details={"to": masked}) from e

        if status_code not in (200, 202):
            logger.error(f"SendGrid returned status {status_code} for {masked}")
            raise EmailDeliveryError(details={"to": masked, "status_code": status_code})

        logger.info(f"📧 Verification email sent to {masked}")


def build_email_sender() -> SendGridEmailSender:
    return SendGridEmailSender(
        api_key=settings.SENDGRID_API_KEY,
        from_email=settings.MAIL_FROM,
        from_name=settings.MAIL_FROM_NAME,
    )
