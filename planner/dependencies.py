"""Dependency injection for FastAPI endpoints.

Controllers reach the storage backend, the session store and the caller's
identity through these dependencies instead of touching ``state`` directly.

Usage in controllers:
    from planner.dependencies import AuthenticatedUser, Store

    @router.get("/api/events")
    async def list_events(user: AuthenticatedUser, storage: Store):
        return await storage.get_user_events(user.id)
"""

from typing import Annotated

from fastapi import Depends, Request

from planner import state
from planner.config import get_settings
from planner.errors import ServiceUnavailableError, UnauthorizedError
from planner.models.users import UserRecord
from planner.sessions import SessionStore
from planner.storage import Storage


def get_storage() -> Storage:
    """Get the storage backend.

    Raises:
        ServiceUnavailableError: If no backend has been initialized.
    """
    if state.storage is None:
        raise ServiceUnavailableError(detail="Storage not initialized")
    return state.storage


def get_session_store() -> SessionStore:
    """Get the session store.

    Raises:
        ServiceUnavailableError: If Redis is not connected.
    """
    if state.session_store is None:
        raise ServiceUnavailableError(detail="Session store not initialized")
    return state.session_store


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(get_settings().session.cookie_name)


async def get_current_user(
    token: Annotated[str | None, Depends(get_session_token)],
) -> UserRecord | None:
    """The logged-in user, or None. Sessions for deleted users resolve to None."""
    if not token:
        return None
    user_id = await get_session_store().get(token)
    if user_id is None:
        return None
    return await get_storage().get_user(user_id)


async def require_user(
    user: Annotated[UserRecord | None, Depends(get_current_user)],
) -> UserRecord:
    """Reject the request with 401 unless a session is attached."""
    if user is None:
        raise UnauthorizedError()
    return user


Store = Annotated[Storage, Depends(get_storage)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
AuthenticatedUser = Annotated[UserRecord, Depends(require_user)]
