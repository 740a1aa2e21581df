"""
cadastro/models/session.py

Purpose: In-progress registration state

- Session: one per active user, owned by the session store
- RegistrationData: fields collected so far
- Transition enforcement (state table + required fields)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from cadastro.core.exceptions import InvalidTransitionError
from cadastro.flow.states import ConversationState, is_valid_transition, get_state_metadata
from utils.time_utils import utcnow


@dataclass
class RegistrationData:
    """Partial record accumulated while the conversation advances."""
    name: Optional[str] = None
    email: Optional[str] = None
    verification_code: Optional[int] = None
    email_verified: bool = False
    document_type: Optional[str] = None
    individual_id: Optional[str] = None
    business_id: Optional[str] = None
    password_hash: Optional[str] = None
    document_ref: Optional[str] = None
    document_validated: Optional[bool] = None

    def missing_for(self, state: ConversationState) -> list:
        """Returns the fields that must be populated before entering `state`."""
        metadata = get_state_metadata(state)
        missing = [name for name in metadata.required_fields if not getattr(self, name)]
        if metadata.required_any and not any(getattr(self, name) for name in metadata.required_any):
            missing.append(" | ".join(metadata.required_any))
        return missing


@dataclass
class Session:
    user_id: str
    state: ConversationState = ConversationState.NONE
    collected: RegistrationData = field(default_factory=RegistrationData)
    created_at: datetime = field(default_factory=utcnow)
    last_interaction: datetime = field(default_factory=utcnow)

    def advance(self, new_state: ConversationState) -> None:
        """
        Moves the session to `new_state`.

        Raises:
            InvalidTransitionError: if the table forbids the move or a field
                required by the target state has not been collected
        """
        if not is_valid_transition(self.state, new_state):
            raise InvalidTransitionError(
                f"Invalid state transition: {self.state.value} -> {new_state.value}",
                details={"user_id": self.user_id},
            )

        missing = self.collected.missing_for(new_state)
        if missing:
            raise InvalidTransitionError(
                f"Cannot enter {new_state.value}: missing {', '.join(missing)}",
                details={"user_id": self.user_id, "missing": missing},
            )

        self.state = new_state

    def touch(self) -> None:
        self.last_interaction = utcnow()
