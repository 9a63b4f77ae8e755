"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Optional
from pydantic import BaseModel, Field


class Identity(BaseModel):
    """
    The principal issued by the identity provider.

    The id is opaque and owned by the provider; it is also the key of the
    user's profile document.
    """

    id: str = Field(..., min_length=1, description="Provider-issued user ID")
    email: Optional[str] = Field(None, description="User's email address")
    display_name: Optional[str] = Field(None, description="Display name")
    photo_url: Optional[str] = Field(None, description="Avatar URL")
    provider: str = Field(default="email", description="Sign-in method")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }
