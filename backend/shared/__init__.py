"""
Shared infrastructure for Defy backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- documents: Document store abstraction over Supabase tables
- repository: Base repository with record decoding
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, get_supabase_auth_client, reset_client_cache
from .documents import (
    ArrayRemove,
    ArrayUnion,
    IDocumentStore,
    InMemoryDocumentStore,
    SupabaseDocumentStore,
)
from .exceptions import (
    DefyError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ExternalServiceError,
    NetworkError,
    DocumentNotFoundError,
    DecodingError,
    ArraySizeLimitError,
)
from .models import Identity
from .repository import BaseRepository

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_supabase_auth_client",
    "reset_client_cache",
    "ArrayRemove",
    "ArrayUnion",
    "IDocumentStore",
    "InMemoryDocumentStore",
    "SupabaseDocumentStore",
    "DefyError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "ExternalServiceError",
    "NetworkError",
    "DocumentNotFoundError",
    "DecodingError",
    "ArraySizeLimitError",
    "Identity",
    "BaseRepository",
]
