"""
cadastro/services/twilio_service.py

Purpose: Twilio WhatsApp transport

- Sends WhatsApp text replies via the Twilio API
- Downloads inbound media (document pictures)
"""

import httpx
from typing import Dict, Any, Optional
from cadastro.core.config import settings
from cadastro.core.exceptions import TransportError
from cadastro.core.logging import get_logger

logger = get_logger(__name__)


class TwilioService:
    """Service for sending WhatsApp messages via Twilio"""

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 whatsapp_number: Optional[str] = None):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.whatsapp_number = whatsapp_number or settings.TWILIO_WHATSAPP_NUMBER
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{self.account_sid}"

    async def send_message(self, to_phone: str, message: str) -> Dict[str, Any]:
        """
        Sends a WhatsApp message via Twilio

        Args:
            to_phone: Recipient phone (+5511999999999)
            message: Message text

        Returns:
            {
                "success": True/False,
                "message_sid": "SMxxx...",
                "error": "Optional error message"
            }
        """
        if not self.is_configured():
            logger.warning("⚠️ Twilio credentials missing, reply not sent")
            return {"success": False, "error": "Twilio not configured"}

        try:
            if not to_phone.startswith("whatsapp:"):
                to_phone = f"whatsapp:{to_phone}"

            url = f"{self.base_url}/Messages.json"

            data = {
                "From": self.whatsapp_number,
                "To": to_phone,
                "Body": message
            }

            logger.info(f"📤 Sending Twilio message to {to_phone}")

            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    data=data,
                    auth=(self.account_sid or "", self.auth_token or ""),
                    timeout=10.0
                )

            if response.status_code in (200, 201):
                result = response.json()
                logger.info(f"✅ Message sent: SID={result.get('sid')}")
                return {
                    "success": True,
                    "message_sid": result.get("sid"),
                    "status": result.get("status")
                }

            logger.error(f"❌ Twilio API error: {response.status_code} - {response.text}")
            return {
                "success": False,
                "error": f"Twilio API error: {response.status_code}"
            }

        except httpx.TimeoutException:
            logger.error("Twilio API timeout")
            return {
                "success": False,
                "error": "Twilio API timeout"
            }
        except httpx.HTTPError as e:
            logger.error(f"Error sending Twilio message: {e}", exc_info=True)
            return {
                "success": False,
                "error": str(e)
            }

    async def download_media(self, media_url: str) -> bytes:
        """
        Fetches an inbound media file. Twilio media URLs require basic auth
        and redirect to the storage host.

        Raises:
            TransportError: if the download fails
        """
        try:
            async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
                response = await client.get(
                    media_url,
                    auth=(self.account_sid or "", self.auth_token or ""),
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Media download failed: {e}")
            raise TransportError("Could not download media", details={"url": media_url}) from e

        return response.content

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured"""
        return bool(self.account_sid and self.auth_token and self.whatsapp_number)


# Singleton instance
twilio_service = TwilioService()
