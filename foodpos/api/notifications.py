"""Operator notification feed"""

from typing import List

from fastapi import APIRouter, Depends, status

from foodpos.api.deps import get_terminal, require_session
from foodpos.notifications import Notification
from foodpos.terminal import PosTerminal

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("", response_model=List[Notification])
async def list_notifications(terminal: PosTerminal = Depends(get_terminal)):
    """Recent notifications, newest first"""
    return terminal.notifier.history()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_notifications(terminal: PosTerminal = Depends(get_terminal)):
    terminal.notifier.clear()
