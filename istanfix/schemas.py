"""
Pydantic Schemas for Istanfix
=============================

Request bodies accept loosely-typed optional fields: the handlers validate
them explicitly so clients get the documented 400 messages rather than
framework validation dumps.
"""

from typing import Optional, Union
from pydantic import BaseModel


# =============================================================================
# REQUESTS
# =============================================================================

class SignupRequest(BaseModel):
    """Account registration"""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    gov_verification_code: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ActorClaim(BaseModel):
    """
    Identity fields sent by older clients.

    Never trusted; only compared with the token's identity.
    """
    user_id: Optional[Union[int, str]] = None
    user_role: Optional[str] = None


class StatusUpdateRequest(ActorClaim):
    status: Optional[str] = None


class CommentCreateRequest(BaseModel):
    content: Optional[str] = None
    user_id: Optional[Union[int, str]] = None


# =============================================================================
# RESPONSES
# =============================================================================

class UserOut(BaseModel):
    """Safe user projection"""
    id: int
    name: str
    email: str
    role: str


class SignupResponse(BaseModel):
    message: str = "User registered successfully"
    userId: int
    email: str
    role: str
    access_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserOut
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user: UserOut


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
