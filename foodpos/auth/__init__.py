"""Session and identity"""

from foodpos.auth.backends import (
    AuthError,
    BaseAuthBackend,
    LocalAuthBackend,
    RemoteAuthBackend,
)
from foodpos.auth.session import SessionProvider

__all__ = [
    "AuthError",
    "BaseAuthBackend",
    "LocalAuthBackend",
    "RemoteAuthBackend",
    "SessionProvider",
]
