"""Shift API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, status

from foodpos.api.deps import failure, get_terminal, notification_mark, require_session
from foodpos.schemas.shift import Shift, ShiftClose, ShiftOpen, ShiftState
from foodpos.terminal import PosTerminal

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("", response_model=List[Shift])
async def list_shifts(terminal: PosTerminal = Depends(get_terminal)):
    """All shifts, oldest first"""
    await terminal.shifts.refresh()
    return terminal.shifts.shifts


@router.get("/current", response_model=ShiftState)
async def current_shift(
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """The active shift, if any"""
    if not await terminal.shifts.refresh_current():
        raise failure(terminal, mark, "Failed to load the current shift")
    return ShiftState(active=terminal.shifts.is_shift_active(), shift=terminal.shifts.current_shift)


@router.post("/open", response_model=Shift, status_code=status.HTTP_201_CREATED)
async def open_shift(
    request: ShiftOpen,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Open a shift; only one may be active"""
    shift = await terminal.shifts.open_shift(request.operator_name, request.initial_amount)
    if shift is None:
        raise failure(terminal, mark, "Failed to open shift")
    return shift


@router.post("/close", response_model=Shift)
async def close_shift(
    request: ShiftClose,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Close the active shift with its closing breakdown"""
    shift = await terminal.shifts.close_shift(request)
    if shift is None:
        raise failure(terminal, mark, "Failed to close shift")
    return shift
