"""
Profiles module.

Stores per-user profile documents (follows, bookmarks, onboarding) and
reading progress.

Public API:
- IProfileService: Interface for profile operations
- UserProfile, ReadingProgress: Document models
- Profile exceptions: ProfileNotFoundError, LimitExceededError
"""

from .interfaces import IProfileService
from .models import UserProfile, ReadingProgress
from .exceptions import ProfileNotFoundError, LimitExceededError

__all__ = [
    # Interface
    "IProfileService",
    # Models
    "UserProfile",
    "ReadingProgress",
    # Exceptions
    "ProfileNotFoundError",
    "LimitExceededError",
]
