"""
cadastro/flow/handlers/completion.py

Handles: ADD_BUSINESS_ID_LATER and PASSWORD

- "sim" loops back to CNPJ entry
- "não" finalizes, or asks for a password first when passwords are required
- Finalization persists the record exactly once
"""

from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState
from cadastro.models.registration import RegistrationRecord
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.core.logging import get_logger
from utils.constants import (
    YES_ANSWERS,
    NO_ANSWERS,
    ASK_LATER_CNPJ_MESSAGE,
    INVALID_YES_NO_MESSAGE,
    ASK_PASSWORD_TEMPLATE,
    INVALID_PASSWORD_TEMPLATE,
    REGISTRATION_COMPLETED_MESSAGE,
)
from utils.security_utils import hash_password_async

logger = get_logger(__name__)


async def finalize_registration(session: Session, ctx: FlowContext) -> StepResult:
    """
    Persists the collected data. PersistenceError propagates: the controller
    reports it and discards the session either way.
    """
    record = RegistrationRecord.from_collected(session.collected)
    registration_id = await ctx.repository.save(record)

    logger.info(f"🎉 Registration completed: {registration_id}")
    return StepResult(message=REGISTRATION_COMPLETED_MESSAGE, finished=True)


async def handle_add_business_id(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    answer = message.text.strip().lower()

    if answer in YES_ANSWERS:
        return StepResult(message=ASK_LATER_CNPJ_MESSAGE, next_state=ConversationState.BUSINESS_ID)

    if answer in NO_ANSWERS:
        if ctx.require_password:
            return StepResult(
                message=ASK_PASSWORD_TEMPLATE.format(min_length=ctx.password_min_length),
                next_state=ConversationState.PASSWORD,
            )
        return await finalize_registration(session, ctx)

    return StepResult(message=INVALID_YES_NO_MESSAGE)


async def handle_password_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    password = message.text

    if len(password) < ctx.password_min_length:
        return StepResult(message=INVALID_PASSWORD_TEMPLATE.format(min_length=ctx.password_min_length))

    session.collected.password_hash = await hash_password_async(password, ctx.bcrypt_rounds)
    return await finalize_registration(session, ctx)
