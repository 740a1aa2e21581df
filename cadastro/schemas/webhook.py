"""
cadastro/schemas/webhook.py

Purpose: WhatsApp webhook payload schemas and parsers

- Validates incoming Twilio messages
- Normalizes them into UnifiedMessage, the controller's inbound event
"""

import uuid
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from datetime import datetime

from utils.time_utils import utcnow


class UnifiedMessage(BaseModel):
    """
    Normalized inbound event: text and/or one attached media file.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "phone": "+5511987654321",
                "name": "Ana",
                "text": "Oi",
                "message_id": "SM1234567890",
                "platform": "twilio"
            }
        }
    )

    phone: str = Field(..., description="User's phone number in E.164 format")
    name: Optional[str] = Field(default=None, description="User's display name")
    text: str = Field(default="", description="Message text content")
    message_id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique message identifier")
    timestamp: datetime = Field(default_factory=utcnow)
    platform: Literal["twilio"] = "twilio"

    media_url: Optional[str] = None
    media_content_type: Optional[str] = None

    @property
    def has_media(self) -> bool:
        return bool(self.media_url)


def parse_twilio_message(
    from_number: str,
    body: Optional[str],
    profile_name: Optional[str] = None,
    message_sid: Optional[str] = None,
    num_media: Optional[str] = None,
    media_url: Optional[str] = None,
    media_content_type: Optional[str] = None,
) -> UnifiedMessage:
    """
    Parses Twilio WhatsApp webhook payload

    Twilio format (form data):
    - From: whatsapp:+5511987654321
    - Body: message text (empty for media-only messages)
    - ProfileName: User's name
    - MessageSid: SM...
    - NumMedia / MediaUrl0 / MediaContentType0: first attachment
    """
    phone = from_number.replace("whatsapp:", "")

    try:
        has_media = int(num_media or 0) > 0
    except ValueError:
        has_media = False

    return UnifiedMessage(
        phone=phone,
        name=profile_name,
        text=body or "",
        message_id=message_sid or f"twilio_{utcnow().timestamp()}",
        media_url=media_url if has_media else None,
        media_content_type=media_content_type if has_media else None,
    )
