"""
Authentication & Access Rules
=============================

Roles:
- user: citizen account - may create reports and comments, delete its own
- government: municipal staff - may also update report status and delete any
  report or comment

Authorization Flow:
1. Login/signup issues a signed JWT (`sub` = user id)
2. Each request presents `Authorization: Bearer <token>`
3. The user row is reloaded so role and existence are always current
4. Mutating operations are checked with `is_allowed` / `require_permission`

Identity is never taken from request bodies; `user_id` / `user_role` fields
sent by older clients are only compared against the verified identity.
"""

import logging
from typing import Optional, Union
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import Settings
from .db.models import User, UserRole
from .errors import PermissionDenied

logger = logging.getLogger(__name__)


# =============================================================================
# ACTIONS & ACCESS RULES
# =============================================================================

class Action(str, Enum):
    """Operations subject to access rules"""
    CREATE_REPORT = "report:create"
    UPDATE_REPORT_STATUS = "report:update_status"
    DELETE_REPORT = "report:delete"
    CREATE_COMMENT = "comment:create"
    DELETE_COMMENT = "comment:delete"


# Allowed by role alone
ROLE_PERMISSIONS = {
    UserRole.GOVERNMENT: {
        Action.CREATE_REPORT, Action.UPDATE_REPORT_STATUS, Action.DELETE_REPORT,
        Action.CREATE_COMMENT, Action.DELETE_COMMENT,
    },
    UserRole.USER: {
        Action.CREATE_REPORT,
        Action.CREATE_COMMENT,
    },
}

# Allowed to the resource owner regardless of role
OWNER_PERMISSIONS = {
    Action.DELETE_REPORT,
    Action.DELETE_COMMENT,
}

DENIAL_MESSAGES = {
    Action.UPDATE_REPORT_STATUS: "Only government users can update report status.",
    Action.DELETE_REPORT: "You do not have permission to delete this report.",
    Action.DELETE_COMMENT: "You do not have permission to delete this comment.",
}


def _coerce_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    try:
        return UserRole(getattr(role, "value", role))
    except ValueError:
        return None


def is_allowed(
    action: Action,
    actor_id: Optional[int],
    actor_role: Union[UserRole, str, None],
    owner_id: Optional[int] = None,
) -> bool:
    """
    Decide whether an actor may perform an action on a resource.

    Args:
        action: Operation being attempted
        actor_id: Id of the authenticated user
        actor_role: Role of the authenticated user
        owner_id: user_id of the target resource (None for anonymous/unowned)

    Returns:
        True if allowed
    """
    if actor_id is None:
        return False

    role = _coerce_role(actor_role)
    if role is None:
        return False

    if action in ROLE_PERMISSIONS.get(role, set()):
        return True

    return action in OWNER_PERMISSIONS and owner_id is not None and owner_id == actor_id


def require_permission(
    action: Action,
    actor_id: Optional[int],
    actor_role: Union[UserRole, str, None],
    owner_id: Optional[int] = None,
) -> None:
    """Raise PermissionDenied unless `is_allowed`"""
    if not is_allowed(action, actor_id, actor_role, owner_id):
        raise PermissionDenied(DENIAL_MESSAGES.get(action, "You do not have permission to perform this action."))


# =============================================================================
# PASSWORD HASHING
# =============================================================================

# bcrypt truncates passwords at 72 bytes; enforce to avoid 500s.
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def configure_password_hashing(rounds: int) -> None:
    """Set bcrypt work factor (tests use the minimum)"""
    pwd_context.update(bcrypt__rounds=rounds)


def is_password_too_long(password: str) -> bool:
    """Return True if password exceeds bcrypt 72-byte limit."""
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    if is_password_too_long(plain_password):
        logger.warning("Auth failed: password exceeds bcrypt 72-byte limit")
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.warning(f"Auth failed: invalid password format ({e})")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password"""
    if is_password_too_long(password):
        raise ValueError("Password exceeds bcrypt 72-byte limit")
    return pwd_context.hash(password)


# =============================================================================
# JWT TOKEN HANDLING
# =============================================================================

def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and validate a JWT token"""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.warning(f"Invalid JWT token: {e}")
        return None


def token_for_user(user: User, settings: Settings) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role}, settings)


# =============================================================================
# AUTH CONTEXT
# =============================================================================

@dataclass
class AuthContext:
    """Verified identity for a request"""
    user_id: int
    email: str
    name: str
    role: UserRole

    def require(self, action: Action, owner_id: Optional[int] = None) -> None:
        require_permission(action, self.user_id, self.role, owner_id)

    def public_user(self) -> dict:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}


def public_user(user: User) -> dict:
    """Safe user projection (never includes the password hash)"""
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


# =============================================================================
# AUTH SERVICE (SQLAlchemy-based)
# =============================================================================

class AuthService:
    """Credential checks and identity loading"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user for valid credentials, else None (no hint which part failed)"""
        user = self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def get_auth_context(self, user_id: int) -> Optional[AuthContext]:
        user = self.db.get(User, user_id)
        if not user:
            return None
        role = _coerce_role(user.role)
        if role is None:
            logger.warning(f"User {user_id} has unknown role {user.role!r}")
            return None
        return AuthContext(user_id=user.id, email=user.email, name=user.name, role=role)

    def get_auth_context_from_token(self, token: str, settings: Settings) -> Optional[AuthContext]:
        payload = decode_token(token, settings)
        if not payload or payload.get("type") != "access":
            return None
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            return None
        return self.get_auth_context(user_id)
