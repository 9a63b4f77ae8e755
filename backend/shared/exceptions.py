"""
Base exception classes for the Defy backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class DefyError(Exception):
    """
    Base exception for all Defy errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(DefyError):
    """Resource not found."""

    pass


class ValidationError(DefyError):
    """Input validation failed."""

    pass


class ConflictError(DefyError):
    """Resource already exists or conflicts with existing state."""

    pass


class AuthenticationError(DefyError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(DefyError):
    """Authorization failed (insufficient permissions)."""

    pass


class ConfigurationError(DefyError):
    """A required external service is missing or misconfigured."""

    pass


class ExternalServiceError(DefyError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class NetworkError(ExternalServiceError):
    """The external service could not be reached."""

    def __init__(
        self,
        service: str,
        message: str = "Network connection failed. Please check your internet connection.",
    ):
        super().__init__(message, service=service, code="NETWORK_ERROR")


class DocumentNotFoundError(NotFoundError):
    """Raised when a field update targets a document that doesn't exist."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(
            f"Document not found: {collection}/{document_id}",
            code="DOCUMENT_NOT_FOUND",
            details={"collection": collection, "document_id": document_id},
        )


class DecodingError(DefyError):
    """A stored record could not be mapped to its schema."""

    def __init__(
        self,
        collection: str,
        document_id: Optional[str],
        errors: Optional[list[str]] = None,
    ):
        super().__init__(
            f"Malformed record in '{collection}': {document_id or '<unknown>'}",
            code="DECODING_FAILED",
            details={
                "collection": collection,
                "document_id": document_id,
                "errors": errors or [],
            },
        )
        self.collection = collection
        self.document_id = document_id


class ArraySizeLimitError(ValidationError):
    """An array union was rejected because the array would grow past its cap."""

    def __init__(self, collection: str, document_id: str, field: str, max_size: int):
        super().__init__(
            f"Array '{field}' of {collection}/{document_id} is limited to {max_size} values",
            code="ARRAY_SIZE_LIMIT",
            details={
                "collection": collection,
                "document_id": document_id,
                "field": field,
                "max_size": max_size,
            },
        )
        self.field = field
        self.max_size = max_size
