"""
cadastro/api/webhook.py

Purpose: WhatsApp webhook endpoint

- Receives incoming messages from Twilio
- Parses and normalizes the form payload
- Passes control to the flow dispatcher
- Returns an empty TwiML response (replies go out through the REST API)
"""

from fastapi import APIRouter, Depends, Form
from fastapi.responses import Response
from typing import Optional

from cadastro.core.logging import get_logger
from cadastro.flow.dispatcher import RegistrationController, dispatch_message, get_controller
from cadastro.schemas.webhook import parse_twilio_message
from cadastro.services.twilio_service import twilio_service

logger = get_logger(__name__)
router = APIRouter()

EMPTY_TWIML = "<?xml version=\"1.0\" encoding=\"UTF-8\"?><Response></Response>"


def get_transport():
    return twilio_service


@router.post("/webhook")
async def webhook_handler(
    From: str = Form(...),
    Body: Optional[str] = Form(None),
    ProfileName: Optional[str] = Form(None),
    MessageSid: Optional[str] = Form(None),
    NumMedia: Optional[str] = Form(None),
    MediaUrl0: Optional[str] = Form(None),
    MediaContentType0: Optional[str] = Form(None),
    controller: RegistrationController = Depends(get_controller),
    transport=Depends(get_transport),
):
    """
    Webhook endpoint for Twilio WhatsApp messages (form data).
    """
    logger.info(f"📱 Twilio webhook received from {From}")

    message = parse_twilio_message(
        from_number=From,
        body=Body,
        profile_name=ProfileName,
        message_sid=MessageSid,
        num_media=NumMedia,
        media_url=MediaUrl0,
        media_content_type=MediaContentType0,
    )

    await dispatch_message(message, controller, transport)

    return Response(content=EMPTY_TWIML, media_type="application/xml")


@router.get("/webhook")
async def webhook_verification():
    """
    Webhook verification endpoint
    """
    return {"status": "ok", "message": "Webhook endpoint is active"}
