"""
cadastro/flow/handlers/welcome.py

Handles: NONE and NAME

- Greets a new session and asks for the name
- Stores the name and asks for the email
"""

from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from utils.constants import WELCOME_MESSAGE, ASK_EMAIL_MESSAGE, ASK_NAME_AGAIN_MESSAGE
from utils.validation_utils import sanitize_input
from cadastro.core.logging import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 120


async def handle_welcome(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    """Any first event starts the registration."""
    logger.info("Starting registration")
    return StepResult(message=WELCOME_MESSAGE, next_state=ConversationState.NAME)


async def handle_name_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    name = sanitize_input(message.text, max_length=MAX_NAME_LENGTH)

    # A media-only message has no text to use as a name
    if not name:
        return StepResult(message=ASK_NAME_AGAIN_MESSAGE)

    session.collected.name = name
    return StepResult(message=ASK_EMAIL_MESSAGE, next_state=ConversationState.EMAIL)
