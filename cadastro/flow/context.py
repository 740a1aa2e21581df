"""
cadastro/flow/context.py

Purpose: What state handlers receive and return

- FlowContext: collaborators and flow settings injected into handlers
- StepResult: the reply plus the requested transition
- Collaborator contracts
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from cadastro.flow.states import ConversationState
from cadastro.models.registration import RegistrationRecord
from utils.security_utils import generate_verification_code


class EmailSender(Protocol):
    async def send_code(self, address: str, code: int) -> None: ...


class RegistrationRepository(Protocol):
    async def save(self, record: RegistrationRecord) -> str: ...


class DocumentStore(Protocol):
    async def store(self, content: bytes, extension: str = ".bin") -> str: ...

    async def delete(self, reference: str) -> bool: ...

    async def sweep(self, max_age_seconds: float) -> int: ...


class DocumentValidator(Protocol):
    async def validate(self, reference: str) -> bool: ...


class MediaFetcher(Protocol):
    async def download_media(self, media_url: str) -> bytes: ...


@dataclass
class FlowContext:
    email_sender: EmailSender
    repository: RegistrationRepository
    document_store: DocumentStore
    document_validator: DocumentValidator
    media_fetcher: MediaFetcher
    require_password: bool = False
    password_min_length: int = 6
    bcrypt_rounds: int = 10
    code_generator: Callable[[], int] = field(default=generate_verification_code)


@dataclass
class StepResult:
    """
    Outcome of one handler call.

    next_state None keeps the current state (re-prompt). finished means the
    registration was persisted and the session must be destroyed.
    """
    message: str
    next_state: Optional[ConversationState] = None
    finished: bool = False
