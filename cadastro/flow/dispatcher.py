"""
cadastro/flow/dispatcher.py

Purpose: Central message dispatcher

- Receives normalized messages from the webhook
- Serializes each user's events through the session store lock
- Routes to the handler of the current state
- Applies the transition and owns session teardown
- Sends exactly one reply per inbound message
"""

from typing import Any, Awaitable, Callable, Dict, Optional

from cadastro.core.config import settings
from cadastro.core.exceptions import ExternalServiceError, ValidationError
from cadastro.core.logging import get_logger, LogContext
from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState, get_state_metadata
from cadastro.flow.handlers.welcome import handle_welcome, handle_name_input
from cadastro.flow.handlers.email import handle_email_input, handle_code_input
from cadastro.flow.handlers.tax_id import (
    handle_document_type_selection,
    handle_cpf_input,
    handle_cnpj_input,
)
from cadastro.flow.handlers.document import handle_document_upload
from cadastro.flow.handlers.completion import handle_add_business_id, handle_password_input
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.services.session_service import SessionStore
from utils.constants import GENERIC_ERROR_MESSAGE, RESTART_COMMANDS, SESSION_EXPIRED_PREFIX

logger = get_logger(__name__)

Handler = Callable[[Session, UnifiedMessage, FlowContext], Awaitable[StepResult]]

# State to handler mapping
HANDLERS: Dict[ConversationState, Handler] = {
    ConversationState.NONE: handle_welcome,
    ConversationState.NAME: handle_name_input,
    ConversationState.EMAIL: handle_email_input,
    ConversationState.EMAIL_VERIFY: handle_code_input,
    ConversationState.DOCTYPE: handle_document_type_selection,
    ConversationState.INDIVIDUAL_ID: handle_cpf_input,
    ConversationState.BUSINESS_ID: handle_cnpj_input,
    ConversationState.DOCUMENT_UPLOAD: handle_document_upload,
    ConversationState.ADD_BUSINESS_ID_LATER: handle_add_business_id,
    ConversationState.PASSWORD: handle_password_input,
}


class RegistrationController:
    """
    Owns every in-progress registration. One call to process_message
    handles one inbound event and returns the single reply for it.
    """

    def __init__(self, sessions: SessionStore, context: FlowContext):
        self.sessions = sessions
        self.context = context

    async def process_message(self, message: UnifiedMessage) -> str:
        user_id = message.phone

        async with self.sessions.lock(user_id):
            with LogContext(user_id=user_id):
                return await self._process_locked(user_id, message)

    async def _process_locked(self, user_id: str, message: UnifiedMessage) -> str:
        prefix = ""

        if message.text.strip().lower() in RESTART_COMMANDS:
            logger.info("↩️ Restart command detected")
            self.sessions.delete(user_id, reason="restart command")

        session, expired = self.sessions.get_or_create(user_id)
        if expired:
            prefix = SESSION_EXPIRED_PREFIX
        session.touch()

        state = session.state
        with LogContext(state=state.value):
            try:
                result = await HANDLERS[state](session, message, self.context)

                if result.finished:
                    self.sessions.delete(user_id, reason="registration persisted")
                elif result.next_state is not None:
                    session.advance(result.next_state)
                    if result.next_state != state:
                        logger.info(
                            f"🔄 {get_state_metadata(state).display_name} -> "
                            f"{get_state_metadata(result.next_state).display_name}"
                        )

                return prefix + result.message

            except ValidationError as e:
                logger.info(f"Input rejected: {e.details or e.code}")
                return prefix + e.message

            except ExternalServiceError as e:
                logger.error(f"❌ Collaborator failure ({e.code}): {e.message}")
                self.sessions.delete(user_id, reason=e.code)
                return GENERIC_ERROR_MESSAGE

            except Exception as e:
                logger.error(f"❌ Unexpected error processing message: {e}", exc_info=True)
                self.sessions.delete(user_id, reason="unexpected error")
                return GENERIC_ERROR_MESSAGE


async def dispatch_message(message: UnifiedMessage, controller: RegistrationController,
                           transport: Any) -> Dict[str, Any]:
    """
    Processes one inbound message and sends the reply.

    Args:
        message: Normalized message object
        controller: Registration controller
        transport: Object with async send_message(to_phone, message)

    Returns:
        Response dict
    """
    logger.info(f"📨 Dispatching message from {message.phone}")

    reply = await controller.process_message(message)

    result = await transport.send_message(to_phone=message.phone, message=reply)
    if not result.get("success"):
        logger.error(f"❌ Failed to deliver reply to {message.phone}: {result.get('error')}")
        return {"status": "error", "error": result.get("error")}

    return {"status": "success"}


_controller: Optional[RegistrationController] = None


def build_controller() -> RegistrationController:
    from cadastro.services.document_service import build_document_store, build_document_validator
    from cadastro.services.email_service import build_email_sender
    from cadastro.services.registration_service import MongoRegistrationRepository
    from cadastro.services.twilio_service import twilio_service

    context = FlowContext(
        email_sender=build_email_sender(),
        repository=MongoRegistrationRepository(),
        document_store=build_document_store(),
        document_validator=build_document_validator(),
        media_fetcher=twilio_service,
        require_password=settings.REQUIRE_PASSWORD,
        password_min_length=settings.PASSWORD_MIN_LENGTH,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    return RegistrationController(SessionStore(settings.SESSION_TIMEOUT_MINUTES), context)


def get_controller() -> RegistrationController:
    """Returns the process-wide controller, building it on first use."""
    global _controller
    if _controller is None:
        _controller = build_controller()
    return _controller
