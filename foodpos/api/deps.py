"""Shared API dependencies"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from foodpos.notifications import NotificationCode
from foodpos.schemas.auth import Session
from foodpos.terminal import PosTerminal

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

STATUS_BY_CODE = {
    NotificationCode.SHIFT_NOT_ACTIVE: status.HTTP_409_CONFLICT,
    NotificationCode.SHIFT_ALREADY_ACTIVE: status.HTTP_409_CONFLICT,
    NotificationCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    NotificationCode.WRITE_FAILED: status.HTTP_502_BAD_GATEWAY,
    NotificationCode.READ_FAILED: status.HTTP_502_BAD_GATEWAY,
    NotificationCode.AUTH_FAILED: status.HTTP_401_UNAUTHORIZED,
}


def get_terminal(request: Request) -> PosTerminal:
    """Terminal created at startup"""
    return request.app.state.terminal


def notification_mark(terminal: PosTerminal = Depends(get_terminal)) -> int:
    """Notifier position before the endpoint runs"""
    return terminal.notifier.count


async def require_session(
    token: str = Depends(oauth2_scheme),
    terminal: PosTerminal = Depends(get_terminal),
) -> Session:
    """Only the terminal's current session token is accepted"""
    if not terminal.session.is_valid(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return terminal.session.current_session


def failure(terminal: PosTerminal, mark: int, detail: str) -> HTTPException:
    """HTTP error for the failure the services just reported"""
    notification = terminal.notifier.last_error(since=mark)
    if notification is None:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

    status_code = STATUS_BY_CODE.get(notification.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=status_code, detail=notification.message, headers=headers)
