"""Authentication schemas"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, EmailStr


class AuthEvent(str, Enum):
    """Session transitions delivered to listeners"""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class SessionUser(BaseModel):
    id: str
    email: str


class Session(BaseModel):
    """Authenticated terminal session"""
    access_token: str
    token_type: str = "bearer"
    expires_at: int  # Unix timestamp
    user: SessionUser


class SignUpRequest(BaseModel):
    """Create operator account request"""
    email: EmailStr
    password: str
    full_name: str


class Profile(BaseModel):
    """Operator profile"""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    avatar_url: Optional[str] = None
