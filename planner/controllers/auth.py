import logging

from fastapi import APIRouter, Response

from planner.config import get_settings
from planner.dependencies import AuthenticatedUser, Sessions, SessionToken, Store
from planner.errors import UnauthorizedError
from planner.models.users import Credentials, User
from planner.security import hash_password, verify_password

logger = logging.getLogger("planner.auth")
router = APIRouter(prefix="/api", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings().session
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.ttl_sec,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.post("/register", response_model=User)
async def register(creds: Credentials, response: Response, storage: Store, sessions: Sessions) -> User:
    logger.info("POST /api/register username=%s", creds.username)
    user = await storage.create_user(creds.username, hash_password(creds.password))
    _set_session_cookie(response, await sessions.create(user.id))
    return user.public()


@router.post("/login", response_model=User)
async def login(creds: Credentials, response: Response, storage: Store, sessions: Sessions) -> User:
    logger.info("POST /api/login username=%s", creds.username)
    user = await storage.get_user_by_username(creds.username)
    if user is None or not verify_password(creds.password, user.password):
        logger.warning("Failed login for username=%s", creds.username)
        raise UnauthorizedError(detail="Invalid username or password")
    _set_session_cookie(response, await sessions.create(user.id))
    return user.public()


@router.post("/logout")
async def logout(token: SessionToken, sessions: Sessions) -> Response:
    await sessions.delete(token)
    response = Response(status_code=200)
    response.delete_cookie(get_settings().session.cookie_name)
    return response


@router.get("/user", response_model=User)
async def current_user(user: AuthenticatedUser) -> User:
    return user.public()
