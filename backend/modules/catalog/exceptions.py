"""
Catalog module exceptions.
"""

from shared.exceptions import NotFoundError


class CatalogItemNotFoundError(NotFoundError):
    """Raised when a topic, publication or article doesn't exist."""

    def __init__(self, kind: str, key: str):
        super().__init__(
            f"{kind.capitalize()} not found: {key}",
            code=f"{kind.upper()}_NOT_FOUND",
            details={"kind": kind, "key": key},
        )
