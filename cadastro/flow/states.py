"""
cadastro/flow/states.py

Purpose: Defines all conversation states

- Enum for each step in the registration flow
- Single source of truth for flow stages
- State transition validation
- Metadata for each state (fields that must be collected before entering it)
"""

from enum import Enum
from typing import Dict, List, Tuple
from dataclasses import dataclass


class ConversationState(str, Enum):
    """
    Defines all possible states in the registration flow, in the order
    they are traversed.
    """

    NONE = "NONE"
    NAME = "NAME"

    # Email ownership
    EMAIL = "EMAIL"
    EMAIL_VERIFY = "EMAIL_VERIFY"

    # Tax id
    DOCTYPE = "DOCTYPE"
    INDIVIDUAL_ID = "INDIVIDUAL_ID"
    BUSINESS_ID = "BUSINESS_ID"

    # Supporting document and finalization
    DOCUMENT_UPLOAD = "DOCUMENT_UPLOAD"
    ADD_BUSINESS_ID_LATER = "ADD_BUSINESS_ID_LATER"
    PASSWORD = "PASSWORD"


@dataclass(frozen=True)
class StateMetadata:
    """
    Metadata associated with each conversation state.

    required_fields must all be set on the session before the state is
    entered; when required_any is not empty, at least one of those fields
    must be set as well.
    """
    name: ConversationState
    display_name: str
    required_fields: Tuple[str, ...] = ()
    required_any: Tuple[str, ...] = ()


_VERIFIED = ("name", "email", "email_verified")
_TAX_ID = ("individual_id", "business_id")

STATE_METADATA: Dict[ConversationState, StateMetadata] = {
    ConversationState.NONE: StateMetadata(
        name=ConversationState.NONE,
        display_name="Start"
    ),
    ConversationState.NAME: StateMetadata(
        name=ConversationState.NAME,
        display_name="Name"
    ),
    ConversationState.EMAIL: StateMetadata(
        name=ConversationState.EMAIL,
        display_name="Email",
        required_fields=("name",)
    ),
    ConversationState.EMAIL_VERIFY: StateMetadata(
        name=ConversationState.EMAIL_VERIFY,
        display_name="Email code",
        required_fields=("name", "email", "verification_code")
    ),
    ConversationState.DOCTYPE: StateMetadata(
        name=ConversationState.DOCTYPE,
        display_name="Document type",
        required_fields=_VERIFIED
    ),
    ConversationState.INDIVIDUAL_ID: StateMetadata(
        name=ConversationState.INDIVIDUAL_ID,
        display_name="CPF",
        required_fields=_VERIFIED + ("document_type",)
    ),
    ConversationState.BUSINESS_ID: StateMetadata(
        name=ConversationState.BUSINESS_ID,
        display_name="CNPJ",
        required_fields=_VERIFIED + ("document_type",)
    ),
    ConversationState.DOCUMENT_UPLOAD: StateMetadata(
        name=ConversationState.DOCUMENT_UPLOAD,
        display_name="Document upload",
        required_fields=_VERIFIED,
        required_any=_TAX_ID
    ),
    ConversationState.ADD_BUSINESS_ID_LATER: StateMetadata(
        name=ConversationState.ADD_BUSINESS_ID_LATER,
        display_name="Add CNPJ?",
        required_fields=_VERIFIED,
        required_any=_TAX_ID
    ),
    ConversationState.PASSWORD: StateMetadata(
        name=ConversationState.PASSWORD,
        display_name="Password",
        required_fields=_VERIFIED,
        required_any=_TAX_ID
    ),
}


# Valid state transitions - prevents users from skipping steps
STATE_TRANSITIONS: Dict[ConversationState, List[ConversationState]] = {
    ConversationState.NONE: [
        ConversationState.NAME,
    ],
    ConversationState.NAME: [
        ConversationState.EMAIL,
        ConversationState.NAME,  # Retry on empty input
    ],
    ConversationState.EMAIL: [
        ConversationState.EMAIL_VERIFY,
        ConversationState.EMAIL,  # Retry on invalid input
    ],
    ConversationState.EMAIL_VERIFY: [
        ConversationState.DOCTYPE,
        ConversationState.EMAIL_VERIFY,  # Wrong code
    ],
    ConversationState.DOCTYPE: [
        ConversationState.INDIVIDUAL_ID,
        ConversationState.BUSINESS_ID,
        ConversationState.DOCTYPE,
    ],
    ConversationState.INDIVIDUAL_ID: [
        ConversationState.DOCUMENT_UPLOAD,
        ConversationState.INDIVIDUAL_ID,
    ],
    ConversationState.BUSINESS_ID: [
        ConversationState.DOCUMENT_UPLOAD,
        ConversationState.BUSINESS_ID,
    ],
    ConversationState.DOCUMENT_UPLOAD: [
        ConversationState.ADD_BUSINESS_ID_LATER,
    ],
    ConversationState.ADD_BUSINESS_ID_LATER: [
        ConversationState.BUSINESS_ID,  # Loop back to add a CNPJ
        ConversationState.PASSWORD,
        ConversationState.ADD_BUSINESS_ID_LATER,
    ],
    ConversationState.PASSWORD: [
        ConversationState.PASSWORD,
    ],
}

def is_valid_transition(from_state: ConversationState, to_state: ConversationState) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    allowed_transitions = STATE_TRANSITIONS.get(from_state, [])
    return to_state in allowed_transitions


def get_state_metadata(state: ConversationState) -> StateMetadata:
    """
    Retrieves metadata for a given state.
    """
    return STATE_METADATA.get(state, StateMetadata(
        name=state,
        display_name=state.value,
    ))
