"""User-facing notifications (the terminal's toasts)"""

from collections import deque
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationCode(str, Enum):
    """Failure categories, used by the API to choose a status code"""
    SHIFT_NOT_ACTIVE = "shift_not_active"
    SHIFT_ALREADY_ACTIVE = "shift_already_active"
    NOT_FOUND = "not_found"
    WRITE_FAILED = "write_failed"
    READ_FAILED = "read_failed"
    AUTH_FAILED = "auth_failed"


class Notification(BaseModel):
    """One message shown to the operator"""
    level: NotificationLevel
    message: str
    code: Optional[NotificationCode] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Notifier:
    """Bounded history of notifications published by stores and services"""

    def __init__(self, max_history: int = 50):
        self._history = deque(maxlen=max_history)
        # Total published, used as a marker by callers
        self.count = 0

    def publish(
        self,
        level: NotificationLevel,
        message: str,
        code: Optional[NotificationCode] = None,
    ) -> Notification:
        notification = Notification(level=level, message=message, code=code)
        self._history.append(notification)
        self.count += 1
        return notification

    def success(self, message: str) -> Notification:
        return self.publish(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.publish(NotificationLevel.INFO, message)

    def warning(self, message: str, code: Optional[NotificationCode] = None) -> Notification:
        return self.publish(NotificationLevel.WARNING, message, code)

    def error(self, message: str, code: Optional[NotificationCode] = None) -> Notification:
        return self.publish(NotificationLevel.ERROR, message, code)

    def history(self) -> List[Notification]:
        """Newest first"""
        return list(reversed(self._history))

    def last_error(self, since: int = 0) -> Optional[Notification]:
        """Newest error, only among those published after the ``since`` marker"""
        recent = list(self._history)[-(self.count - since):] if self.count > since else []
        for notification in reversed(recent):
            if notification.level == NotificationLevel.ERROR:
                return notification
        return None

    def clear(self) -> None:
        self._history.clear()
