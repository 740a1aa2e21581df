import pytest

from cadastro.core.exceptions import EmailDeliveryError, PersistenceError
from cadastro.flow.context import FlowContext
from cadastro.flow.dispatcher import RegistrationController
from cadastro.schemas.webhook import UnifiedMessage
from cadastro.services.session_service import SessionStore

VALID_CPF = "52998224725"
VALID_CNPJ = "11222333000181"
USER = "+5511987654321"


class FakeEmailSender:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send_code(self, address, code):
        if self.fail:
            raise EmailDeliveryError()
        self.sent.append((address, code))


class FakeRepository:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []

    async def save(self, record):
        if self.fail:
            raise PersistenceError()
        self.saved.append(record)
        return f"reg-{len(self.saved)}"


class FakeDocumentStore:
    def __init__(self):
        self.files = {}
        self.deleted = []

    async def store(self, content, extension=".bin"):
        reference = f"doc{len(self.files) + len(self.deleted) + 1}{extension}"
        self.files[reference] = content
        return reference

    async def delete(self, reference):
        self.deleted.append(reference)
        return self.files.pop(reference, None) is not None

    async def sweep(self, max_age_seconds):
        return 0


class FakeValidator:
    async def validate(self, reference):
        return True


class FakeMediaFetcher:
    def __init__(self, content=b"\xff\xd8jpeg"):
        self.content = content
        self.urls = []

    async def download_media(self, media_url):
        self.urls.append(media_url)
        return self.content


class FakeTransport:
    def __init__(self, success=True):
        self.success = success
        self.sent = []

    async def send_message(self, to_phone, message):
        self.sent.append((to_phone, message))
        if self.success:
            return {"success": True, "message_sid": "SM-test"}
        return {"success": False, "error": "Twilio API error: 500"}


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def document_store():
    return FakeDocumentStore()


@pytest.fixture
def media_fetcher():
    return FakeMediaFetcher()


@pytest.fixture
def flow_context(email_sender, repository, document_store, media_fetcher):
    return FlowContext(
        email_sender=email_sender,
        repository=repository,
        document_store=document_store,
        document_validator=FakeValidator(),
        media_fetcher=media_fetcher,
        bcrypt_rounds=4,
        code_generator=lambda: 482913,
    )


@pytest.fixture
def sessions():
    return SessionStore(timeout_minutes=30)


@pytest.fixture
def controller(sessions, flow_context):
    return RegistrationController(sessions, flow_context)


@pytest.fixture
def say(controller):
    """Sends text (or media) from the test user and returns the reply."""
    async def _say(text="", **kwargs):
        return await controller.process_message(UnifiedMessage(phone=USER, text=text, **kwargs))
    return _say
