import logging

import bcrypt
import pytest

from cadastro.core.exceptions import InvalidTransitionError
from cadastro.flow import dispatcher
from cadastro.flow.dispatcher import RegistrationController
from cadastro.flow.states import ConversationState
from cadastro.models.session import Session
from cadastro.schemas.webhook import UnifiedMessage
from utils.constants import (
    WELCOME_MESSAGE,
    ASK_EMAIL_MESSAGE,
    CODE_SENT_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    INVALID_CODE_MESSAGE,
    ASK_DOCUMENT_TYPE_MESSAGE,
    INVALID_DOCUMENT_TYPE_MESSAGE,
    INVALID_CPF_MESSAGE,
    INVALID_CNPJ_MESSAGE,
    DOCUMENT_RECEIVED_MESSAGE,
    ASK_LATER_CNPJ_MESSAGE,
    INVALID_YES_NO_MESSAGE,
    REGISTRATION_COMPLETED_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    SESSION_EXPIRED_PREFIX,
)

from conftest import USER, VALID_CPF, VALID_CNPJ, FakeEmailSender, FakeRepository


def state_of(sessions):
    return sessions.get(USER).state


async def reach(say, state):
    """Walks the happy path until the session sits in `state`."""
    steps = [
        (ConversationState.NAME, "Oi"),
        (ConversationState.EMAIL, "Ana"),
        (ConversationState.EMAIL_VERIFY, "ana@x.com"),
        (ConversationState.DOCTYPE, "482913"),
        (ConversationState.INDIVIDUAL_ID, "CPF"),
        (ConversationState.DOCUMENT_UPLOAD, VALID_CPF),
        (ConversationState.ADD_BUSINESS_ID_LATER, ""),
    ]
    for target, text in steps:
        await say(text)
        if target == state:
            return
    raise AssertionError(f"{state} is not on the happy path")


async def test_end_to_end_cpf_registration(say, sessions, repository, email_sender):
    assert await say("Olá") == WELCOME_MESSAGE
    assert state_of(sessions) == ConversationState.NAME

    assert await say("Ana") == ASK_EMAIL_MESSAGE
    assert state_of(sessions) == ConversationState.EMAIL

    assert await say("ana@x.com") == CODE_SENT_MESSAGE
    assert state_of(sessions) == ConversationState.EMAIL_VERIFY
    assert email_sender.sent == [("ana@x.com", 482913)]

    assert await say("482913") == ASK_DOCUMENT_TYPE_MESSAGE
    assert state_of(sessions) == ConversationState.DOCTYPE

    await say("CPF")
    assert state_of(sessions) == ConversationState.INDIVIDUAL_ID

    await say(VALID_CPF)
    assert state_of(sessions) == ConversationState.DOCUMENT_UPLOAD

    assert await say("segue o documento") == DOCUMENT_RECEIVED_MESSAGE
    assert state_of(sessions) == ConversationState.ADD_BUSINESS_ID_LATER

    assert await say("não") == REGISTRATION_COMPLETED_MESSAGE

    assert len(repository.saved) == 1
    record = repository.saved[0]
    assert record.name == "Ana"
    assert record.email == "ana@x.com"
    assert record.individual_id == VALID_CPF
    assert record.business_id is None
    assert USER not in sessions


async def test_replayed_no_after_completion_does_not_persist_twice(say, sessions, repository):
    await reach(say, ConversationState.ADD_BUSINESS_ID_LATER)
    await say("não")

    assert await say("não") == WELCOME_MESSAGE
    assert state_of(sessions) == ConversationState.NAME
    assert len(repository.saved) == 1


async def test_code_check(controller, sessions):
    session, _ = sessions.get_or_create(USER)
    session.state = ConversationState.EMAIL_VERIFY
    session.collected.name = "Ana"
    session.collected.email = "ana@x.com"
    session.collected.verification_code = 482913

    reply = await controller.process_message(UnifiedMessage(phone=USER, text="000000"))
    assert reply == INVALID_CODE_MESSAGE
    assert session.state == ConversationState.EMAIL_VERIFY

    reply = await controller.process_message(UnifiedMessage(phone=USER, text="482913"))
    assert reply == ASK_DOCUMENT_TYPE_MESSAGE
    assert session.state == ConversationState.DOCTYPE
    assert session.collected.email_verified
    assert session.collected.verification_code is None


async def test_non_numeric_code_reprompts(say, sessions):
    await reach(say, ConversationState.EMAIL_VERIFY)
    assert await say("abc") == INVALID_CODE_MESSAGE
    assert state_of(sessions) == ConversationState.EMAIL_VERIFY


@pytest.mark.parametrize("text", ["²", "①"])
async def test_non_decimal_digit_code_reprompts(say, sessions, text):
    await reach(say, ConversationState.EMAIL_VERIFY)
    assert await say(text) == INVALID_CODE_MESSAGE
    assert state_of(sessions) == ConversationState.EMAIL_VERIFY
    assert sessions.get(USER).collected.verification_code == 482913


async def test_transitions_are_logged_with_display_names(say, caplog):
    caplog.set_level(logging.INFO)
    await say("Oi")
    await say("Ana")
    assert "Start -> Name" in caplog.text
    assert "Name -> Email" in caplog.text


async def test_invalid_inputs_reprompt_without_losing_data(say, sessions, email_sender):
    await reach(say, ConversationState.EMAIL)

    assert await say("a@b") == INVALID_EMAIL_MESSAGE
    assert await say("a b@c.com") == INVALID_EMAIL_MESSAGE
    assert state_of(sessions) == ConversationState.EMAIL
    assert email_sender.sent == []

    await say("ana@x.com")
    await say("482913")

    assert await say("RG") == INVALID_DOCUMENT_TYPE_MESSAGE
    assert state_of(sessions) == ConversationState.DOCTYPE

    await say("cpf")
    assert state_of(sessions) == ConversationState.INDIVIDUAL_ID

    assert await say("11111111111") == INVALID_CPF_MESSAGE
    assert state_of(sessions) == ConversationState.INDIVIDUAL_ID

    collected = sessions.get(USER).collected
    assert collected.name == "Ana"
    assert collected.email == "ana@x.com"
    assert collected.document_type == "CPF"


async def test_cnpj_registration(say, sessions, repository):
    await reach(say, ConversationState.DOCTYPE)

    await say("Cnpj")
    assert state_of(sessions) == ConversationState.BUSINESS_ID

    assert await say("1122233300018") == INVALID_CNPJ_MESSAGE
    await say("11.222.333/0001-81")
    assert state_of(sessions) == ConversationState.DOCUMENT_UPLOAD

    await say("doc")
    await say("NÃO")

    record = repository.saved[0]
    assert record.business_id == VALID_CNPJ
    assert record.individual_id is None


async def test_add_business_id_later_loop(say, sessions, repository):
    await reach(say, ConversationState.ADD_BUSINESS_ID_LATER)

    assert await say("talvez") == INVALID_YES_NO_MESSAGE
    assert state_of(sessions) == ConversationState.ADD_BUSINESS_ID_LATER

    assert await say("SIM") == ASK_LATER_CNPJ_MESSAGE
    assert state_of(sessions) == ConversationState.BUSINESS_ID

    await say(VALID_CNPJ)
    assert state_of(sessions) == ConversationState.DOCUMENT_UPLOAD

    await say("outro documento")
    await say("nao")

    record = repository.saved[0]
    assert record.individual_id == VALID_CPF
    assert record.business_id == VALID_CNPJ


async def test_document_media_is_stored_and_validated(say, sessions, repository, document_store, media_fetcher):
    await reach(say, ConversationState.DOCUMENT_UPLOAD)

    await say("", media_url="https://api.twilio.com/media/ME1", media_content_type="image/jpeg")
    collected = sessions.get(USER).collected
    assert media_fetcher.urls == ["https://api.twilio.com/media/ME1"]
    assert collected.document_ref == "doc1.jpg"
    assert collected.document_validated is True

    await say("não")
    assert repository.saved[0].document_ref == "doc1.jpg"
    assert repository.saved[0].document_validated is True


async def test_second_document_replaces_first(say, sessions, document_store):
    await reach(say, ConversationState.DOCUMENT_UPLOAD)
    await say("", media_url="https://media/1", media_content_type="image/png")
    first = sessions.get(USER).collected.document_ref

    await say("sim")
    await say(VALID_CNPJ)
    await say("", media_url="https://media/2", media_content_type="image/png")

    second = sessions.get(USER).collected.document_ref
    assert second != first
    assert document_store.deleted == [first]
    assert list(document_store.files) == [second]


async def test_email_failure_resets_session(sessions, flow_context):
    flow_context.email_sender = FakeEmailSender(fail=True)
    controller = RegistrationController(sessions, flow_context)

    async def say(text):
        return await controller.process_message(UnifiedMessage(phone=USER, text=text))

    await say("Oi")
    await say("Ana")
    assert await say("ana@x.com") == GENERIC_ERROR_MESSAGE
    assert USER not in sessions

    # Next message starts over
    assert await say("ana@x.com") == WELCOME_MESSAGE


async def test_persistence_failure_discards_session(sessions, flow_context):
    flow_context.repository = FakeRepository(fail=True)
    controller = RegistrationController(sessions, flow_context)

    async def say(text=""):
        return await controller.process_message(UnifiedMessage(phone=USER, text=text))

    await reach(say, ConversationState.ADD_BUSINESS_ID_LATER)
    assert await say("não") == GENERIC_ERROR_MESSAGE
    assert USER not in sessions


async def test_unexpected_error_resets_session(say, sessions, monkeypatch):
    await reach(say, ConversationState.DOCTYPE)

    async def boom(session, message, ctx):
        raise RuntimeError("boom")

    monkeypatch.setitem(dispatcher.HANDLERS, ConversationState.DOCTYPE, boom)

    assert await say("CPF") == GENERIC_ERROR_MESSAGE
    assert USER not in sessions


async def test_password_required_before_persisting(sessions, flow_context, repository):
    flow_context.require_password = True
    controller = RegistrationController(sessions, flow_context)

    async def say(text=""):
        return await controller.process_message(UnifiedMessage(phone=USER, text=text))

    await reach(say, ConversationState.ADD_BUSINESS_ID_LATER)
    await say("não")
    assert state_of(sessions) == ConversationState.PASSWORD
    assert repository.saved == []

    await say("123")
    assert state_of(sessions) == ConversationState.PASSWORD

    assert await say("segredo123") == REGISTRATION_COMPLETED_MESSAGE
    record = repository.saved[0]
    assert record.password_hash != "segredo123"
    assert bcrypt.checkpw(b"segredo123", record.password_hash.encode())
    assert USER not in sessions


async def test_restart_command(say, sessions):
    await reach(say, ConversationState.DOCTYPE)
    assert await say("/reiniciar") == WELCOME_MESSAGE
    assert state_of(sessions) == ConversationState.NAME
    assert sessions.get(USER).collected.name is None


async def test_expired_session_starts_over(say, sessions):
    await reach(say, ConversationState.EMAIL)
    sessions.get(USER).last_interaction = sessions.get(USER).last_interaction.replace(year=2000)

    reply = await say("ana@x.com")
    assert reply == SESSION_EXPIRED_PREFIX + WELCOME_MESSAGE
    assert state_of(sessions) == ConversationState.NAME


async def test_users_are_independent(controller, sessions):
    other = "+5521900000000"
    await controller.process_message(UnifiedMessage(phone=USER, text="Oi"))
    await controller.process_message(UnifiedMessage(phone=USER, text="Ana"))
    await controller.process_message(UnifiedMessage(phone=other, text="Oi"))

    assert sessions.get(USER).state == ConversationState.EMAIL
    assert sessions.get(other).state == ConversationState.NAME


def test_advance_rejects_skipping_steps():
    session = Session(user_id=USER, state=ConversationState.NAME)
    with pytest.raises(InvalidTransitionError):
        session.advance(ConversationState.DOCTYPE)


def test_advance_rejects_missing_fields():
    session = Session(user_id=USER, state=ConversationState.NAME)
    with pytest.raises(InvalidTransitionError):
        session.advance(ConversationState.EMAIL)

    session.collected.name = "Ana"
    session.advance(ConversationState.EMAIL)
    assert session.state == ConversationState.EMAIL


def test_advance_requires_a_tax_id_before_upload():
    session = Session(user_id=USER, state=ConversationState.INDIVIDUAL_ID)
    session.collected.name = "Ana"
    session.collected.email = "ana@x.com"
    session.collected.email_verified = True
    with pytest.raises(InvalidTransitionError):
        session.advance(ConversationState.DOCUMENT_UPLOAD)
