"""
Profiles module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class ProfileNotFoundError(NotFoundError):
    """Raised when a user has no profile document."""

    def __init__(self, user_id: str):
        super().__init__(
            f"Profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class LimitExceededError(ValidationError):
    """Raised when adding an id would exceed a per-profile limit."""

    def __init__(self, field: str, limit: int):
        super().__init__(
            f"Limit reached for {field}: at most {limit} allowed",
            code="LIMIT_EXCEEDED",
            details={"field": field, "limit": limit},
        )
