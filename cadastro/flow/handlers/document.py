"""
cadastro/flow/handlers/document.py

Handles: DOCUMENT_UPLOAD

- Any event counts as the document
- Attached media is downloaded, stored and run through the validator
- A document sent again (after adding a CNPJ) replaces the previous one
"""

from cadastro.flow.context import FlowContext, StepResult
from cadastro.flow.states import ConversationState
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.services.document_service import extension_for
from cadastro.core.logging import get_logger
from utils.constants import DOCUMENT_RECEIVED_MESSAGE

logger = get_logger(__name__)


async def handle_document_upload(session: Session, message: UnifiedMessage, ctx: FlowContext) -> StepResult:
    if message.has_media:
        content = await ctx.media_fetcher.download_media(message.media_url)
        reference = await ctx.document_store.store(content, extension_for(message.media_content_type))

        previous = session.collected.document_ref
        session.collected.document_ref = reference
        session.collected.document_validated = await ctx.document_validator.validate(reference)

        if previous and previous != reference:
            await ctx.document_store.delete(previous)

        logger.info(f"Document received: {reference} (validated={session.collected.document_validated})")
    else:
        logger.info("Document step answered without media")

    return StepResult(message=DOCUMENT_RECEIVED_MESSAGE, next_state=ConversationState.ADD_BUSINESS_ID_LATER)
