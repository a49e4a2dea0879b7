"""Authentication backends"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from jose import jwt
from passlib.context import CryptContext
import structlog

from foodpos.config import settings
from foodpos.gateway.base import BaseGateway
from foodpos.schemas.auth import Session, SessionUser

logger = structlog.get_logger()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Sign-in, sign-up or sign-out rejected by the backend"""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password"""
    return pwd_context.hash(password)


class BaseAuthBackend(ABC):
    """Issues sessions for operator credentials"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Return a session or raise AuthError"""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        """Create the account, return a session or raise AuthError"""
        pass

    @abstractmethod
    async def sign_out(self, session: Session) -> None:
        """Revoke the session"""
        pass

    async def close(self) -> None:
        """Release connections"""


class LocalAuthBackend(BaseAuthBackend):
    """
    Credentials kept in the profiles table, sessions as signed JWTs.
    Used with the SQL gateway.
    """

    def __init__(self, gateway: BaseGateway):
        self.gateway = gateway

    def create_access_token(self, user_id: str, email: str) -> Session:
        """Create JWT access token"""
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
        payload = {
            "sub": user_id,
            "email": email,
            "exp": expire,
            "type": "access",
        }
        token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        return Session(
            access_token=token,
            expires_at=int(expire.timestamp()),
            user=SessionUser(id=user_id, email=email),
        )

    async def sign_in(self, email: str, password: str) -> Session:
        result = await self.gateway.select("profiles", eq={"email": email.lower()}, limit=1)
        if not result.ok:
            raise AuthError(result.error.message)

        profile = result.data[0] if result.data else None
        if not profile or not profile.get("hashed_password") or not verify_password(
            password, profile["hashed_password"]
        ):
            raise AuthError("Incorrect email or password")

        return self.create_access_token(profile["id"], profile["email"])

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        email = email.lower()
        existing = await self.gateway.select("profiles", eq={"email": email}, limit=1)
        if not existing.ok:
            raise AuthError(existing.error.message)
        if existing.data:
            raise AuthError("Email already registered")

        result = await self.gateway.insert(
            "profiles",
            {
                "email": email,
                "hashed_password": get_password_hash(password),
                "full_name": full_name,
            },
        )
        if not result.ok:
            raise AuthError(result.error.message)

        return self.create_access_token(result.data["id"], email)

    async def sign_out(self, session: Session) -> None:
        # Stateless tokens: nothing to revoke server-side
        return None


class RemoteAuthBackend(BaseAuthBackend):
    """Hosted auth service (GoTrue API)"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            headers={"apikey": api_key},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _to_session(data: dict) -> Session:
        user = data.get("user") or {}
        expires_at = data.get("expires_at")
        if expires_at is None:
            expires_at = int(datetime.now(timezone.utc).timestamp()) + int(data.get("expires_in", 3600))
        return Session(
            access_token=data["access_token"],
            token_type=data.get("token_type", "bearer"),
            expires_at=expires_at,
            user=SessionUser(id=str(user.get("id", "")), email=user.get("email", "")),
        )

    async def _post(self, path: str, payload: Optional[dict] = None, token: Optional[str] = None, params=None) -> dict:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self._client.post(path, json=payload, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise AuthError(str(e)) from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = (
                body.get("error_description")
                or body.get("msg")
                or body.get("message")
                or f"HTTP {response.status_code}"
            )
            raise AuthError(message)

        return response.json() if response.content else {}

    async def sign_in(self, email: str, password: str) -> Session:
        data = await self._post(
            "/token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        return self._to_session(data)

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        data = await self._post(
            "/signup",
            {"email": email, "password": password, "data": {"nome": full_name}},
        )
        if "access_token" not in data:
            # Email confirmation pending: no session yet
            raise AuthError("Check your email to confirm the account")
        return self._to_session(data)

    async def sign_out(self, session: Session) -> None:
        await self._post("/logout", token=session.access_token, params={"scope": "global"})

    async def close(self) -> None:
        await self._client.aclose()
