from typing import Optional, Any


class CadastroError(Exception):
    """
    Base exception for the registration service.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(CadastroError):
    """
    Raised when user input fails a validator.
    The controller replies with `message` and leaves the session untouched.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class InvalidTransitionError(CadastroError):
    """
    Raised when a handler asks for a transition the state table forbids,
    or enters a state without the fields it requires.
    """
    def __init__(self, message: str = "Invalid state transition", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TRANSITION", status_code=500, details=details)


class ExternalServiceError(CadastroError):
    """
    Raised when a collaborator (email, database, storage, transport) fails.
    """
    def __init__(self, message: str = "External service error", code: str = "EXTERNAL_SERVICE_ERROR", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=502, details=details)


class EmailDeliveryError(ExternalServiceError):
    def __init__(self, message: str = "Could not send verification email", details: Optional[Any] = None):
        super().__init__(message, code="EMAIL_DELIVERY_FAILED", details=details)


class PersistenceError(ExternalServiceError):
    def __init__(self, message: str = "Could not save registration", details: Optional[Any] = None):
        super().__init__(message, code="PERSISTENCE_FAILED", details=details)


class DocumentStorageError(ExternalServiceError):
    def __init__(self, message: str = "Could not store document", details: Optional[Any] = None):
        super().__init__(message, code="DOCUMENT_STORAGE_FAILED", details=details)


class TransportError(ExternalServiceError):
    def __init__(self, message: str = "Messaging transport error", details: Optional[Any] = None):
        super().__init__(message, code="TRANSPORT_ERROR", details=details)
