"""
cadastro/flow/handlers/email.py

Handles: EMAIL and EMAIL_VERIFY

- Validates the address
- Generates the 6-digit challenge and emails it
- Checks the code typed back by the user
"""

from cadastro.core.exceptions import ValidationError
from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.core.logging import get_logger, mask_email
from utils.constants import (
    INVALID_EMAIL_MESSAGE,
    CODE_SENT_MESSAGE,
    INVALID_CODE_MESSAGE,
    ASK_DOCUMENT_TYPE_MESSAGE,
)
from utils.security_utils import codes_match
from utils.validation_utils import validate_email, parse_verification_code

logger = get_logger(__name__)


async def handle_email_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    """
    Flow:
    1. Validate email syntax
    2. Store email and a fresh challenge
    3. Send the challenge (EmailDeliveryError propagates to the controller)
    4. Ask for the code
    """
    email = message.text.strip()

    if not validate_email(email):
        raise ValidationError(INVALID_EMAIL_MESSAGE, details={"field": "email"})

    code = ctx.code_generator()
    session.collected.email = email
    session.collected.email_verified = False
    session.collected.verification_code = code

    await ctx.email_sender.send_code(email, code)
    logger.info(f"Verification code issued for {mask_email(email)}")

    return StepResult(message=CODE_SENT_MESSAGE, next_state=ConversationState.EMAIL_VERIFY)


async def handle_code_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    received = parse_verification_code(message.text)
    expected = session.collected.verification_code

    if received is None or expected is None or not codes_match(expected, received):
        logger.info("Wrong verification code")
        return StepResult(message=INVALID_CODE_MESSAGE)

    # One-time code: drop it once used
    session.collected.email_verified = True
    session.collected.verification_code = None

    return StepResult(message=ASK_DOCUMENT_TYPE_MESSAGE, next_state=ConversationState.DOCTYPE)
