"""
FastAPI dependencies: storage client, settings, image store and the
authenticated actor, all taken from `app.state` set up by `create_app`.
"""

import logging
from typing import Generator, Optional, Union

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .auth import AuthContext, AuthService
from .config import Settings
from .db.session import Database
from .errors import AuthenticationFailed, PermissionDenied
from .uploads import ImageStore
from .validation import is_blank

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database session.

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = database.session()
    try:
        yield db
    finally:
        db.close()


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AuthContext:
    """Resolve the actor from `Authorization: Bearer <jwt>`"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthenticationFailed("Authentication required.")

    token = authorization.split(" ", 1)[1].strip()
    auth = AuthService(db).get_auth_context_from_token(token, settings)
    if not auth:
        raise AuthenticationFailed("Invalid or expired token, or user no longer exists.")
    return auth


def check_actor_claim(
    auth: AuthContext,
    user_id: Optional[Union[int, str]] = None,
    user_role: Optional[str] = None,
) -> None:
    """
    Reject requests whose body claims a different identity than the token.

    Absent claims are fine; identity always comes from the token.
    """
    if not is_blank(user_id) and str(user_id).strip() != str(auth.user_id):
        logger.warning(f"Identity claim mismatch: token user {auth.user_id}, body user_id {user_id!r}")
        raise PermissionDenied("user_id does not match the authenticated user.")

    if not is_blank(user_role) and user_role.strip().lower() != auth.role.value:
        logger.warning(f"Role claim mismatch: token user {auth.user_id} is {auth.role.value}, body claims {user_role!r}")
        raise PermissionDenied("user_role does not match the authenticated user.")
