"""Session/identity provider"""

import time
from typing import Awaitable, Callable, List, Optional

import structlog

from foodpos.auth.backends import AuthError, BaseAuthBackend
from foodpos.gateway.base import BaseGateway
from foodpos.notifications import NotificationCode, Notifier
from foodpos.schemas.auth import AuthEvent, Profile, Session

logger = structlog.get_logger()

SessionListener = Callable[[AuthEvent, Optional[Session]], Awaitable[None]]


class SessionProvider:
    """
    Holds the terminal's current session and tells subscribers about
    every transition.
    """

    def __init__(self, backend: BaseAuthBackend, gateway: BaseGateway, notifier: Notifier):
        self.backend = backend
        self.gateway = gateway
        self.notifier = notifier
        self.current_session: Optional[Session] = None
        self.profile: Optional[Profile] = None
        self._listeners: List[SessionListener] = []

    def on_change(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to session transitions; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_valid(self, token: str) -> bool:
        """True if the token belongs to the current, unexpired session"""
        session = self.current_session
        if session is None or session.access_token != token:
            return False
        return session.expires_at > time.time()

    async def sign_in(self, email: str, password: str) -> Optional[Session]:
        try:
            session = await self.backend.sign_in(email, password)
        except AuthError as e:
            logger.warning("Sign-in rejected", email=email, error=str(e))
            self.notifier.error(str(e), NotificationCode.AUTH_FAILED)
            return None

        await self._set_session(AuthEvent.SIGNED_IN, session)
        self.notifier.success("Signed in")
        return session

    async def sign_up(self, email: str, password: str, full_name: str) -> Optional[Session]:
        try:
            session = await self.backend.sign_up(email, password, full_name)
        except AuthError as e:
            logger.warning("Sign-up rejected", email=email, error=str(e))
            self.notifier.error(str(e), NotificationCode.AUTH_FAILED)
            return None

        await self._set_session(AuthEvent.SIGNED_IN, session)
        self.notifier.success("Account created")
        return session

    async def sign_out(self) -> None:
        session = self.current_session
        if session is not None:
            try:
                await self.backend.sign_out(session)
            except AuthError as e:
                # Local state is cleared regardless
                logger.error("Sign-out failed on backend", error=str(e))

        await self._set_session(AuthEvent.SIGNED_OUT, None)
        self.notifier.success("Signed out")

    async def _fetch_profile(self, user_id: str) -> Optional[Profile]:
        result = await self.gateway.select_single("profiles", eq={"id": user_id})
        if not result.ok:
            logger.error("Failed to fetch profile", user_id=user_id, error=result.error.message)
            return None
        return Profile(**result.data)

    async def _set_session(self, event: AuthEvent, session: Optional[Session]) -> None:
        logger.info("Auth state changed", auth_event=event.value)
        self.current_session = session
        self.gateway.set_access_token(session.access_token if session else None)
        self.profile = await self._fetch_profile(session.user.id) if session else None

        for listener in list(self._listeners):
            await listener(event, session)
