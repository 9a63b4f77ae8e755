"""
Session-based authentication dependencies.

Routes that act on the signed-in user depend on get_current_identity,
which reads the process session owned by the session manager.
"""

from fastapi import Depends

from modules.auth.exceptions import NoActiveSessionError
from modules.auth.interfaces import ISessionManager
from shared.models import Identity

from ..dependencies import get_session_manager


async def get_current_identity(
    manager: ISessionManager = Depends(get_session_manager),
) -> Identity:
    """
    Dependency that requires a signed-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(identity: Identity = Depends(get_current_identity)):
            return {"user_id": identity.id}

    Raises:
        NoActiveSessionError: If the session is not authenticated (401)
    """
    identity = manager.session.identity
    if identity is None:
        raise NoActiveSessionError()
    return identity
