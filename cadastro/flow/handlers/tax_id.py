"""
cadastro/flow/handlers/tax_id.py

Handles: DOCTYPE, INDIVIDUAL_ID, BUSINESS_ID

- CPF / CNPJ choice
- Checksum validation of the typed id
- Stores the id digits only
"""

from cadastro.core.exceptions import ValidationError
from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.core.logging import get_logger
from utils.constants import (
    DOCUMENT_TYPE_CPF,
    DOCUMENT_TYPE_CNPJ,
    INVALID_DOCUMENT_TYPE_MESSAGE,
    ASK_TAX_ID_TEMPLATE,
    INVALID_CPF_MESSAGE,
    INVALID_CNPJ_MESSAGE,
    ASK_DOCUMENT_UPLOAD_TEMPLATE,
)
from utils.validation_utils import validate_cpf, validate_cnpj, only_digits

logger = get_logger(__name__)

NEXT_STATE_BY_TYPE = {
    DOCUMENT_TYPE_CPF: ConversationState.INDIVIDUAL_ID,
    DOCUMENT_TYPE_CNPJ: ConversationState.BUSINESS_ID,
}


async def handle_document_type_selection(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    document_type = message.text.strip().upper()

    next_state = NEXT_STATE_BY_TYPE.get(document_type)
    if next_state is None:
        logger.info(f"Invalid document type selection: {document_type[:20]}")
        return StepResult(message=INVALID_DOCUMENT_TYPE_MESSAGE)

    session.collected.document_type = document_type
    return StepResult(
        message=ASK_TAX_ID_TEMPLATE.format(document_type=document_type),
        next_state=next_state,
    )


async def handle_cpf_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    if not validate_cpf(message.text):
        raise ValidationError(INVALID_CPF_MESSAGE, details={"field": "individual_id"})

    session.collected.individual_id = only_digits(message.text)
    return StepResult(
        message=ASK_DOCUMENT_UPLOAD_TEMPLATE.format(document_type=DOCUMENT_TYPE_CPF),
        next_state=ConversationState.DOCUMENT_UPLOAD,
    )


async def handle_cnpj_input(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    """Used both for CNPJ registrations and for a CNPJ added after the CPF."""
    if not validate_cnpj(message.text):
        raise ValidationError(INVALID_CNPJ_MESSAGE, details={"field": "business_id"})

    session.collected.business_id = only_digits(message.text)
    return StepResult(
        message=ASK_DOCUMENT_UPLOAD_TEMPLATE.format(document_type=DOCUMENT_TYPE_CNPJ),
        next_state=ConversationState.DOCUMENT_UPLOAD,
    )
