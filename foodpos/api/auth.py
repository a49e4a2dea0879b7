"""Authentication API endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from foodpos.api.deps import failure, get_terminal, notification_mark, require_session
from foodpos.schemas.auth import Profile, Session, SignUpRequest
from foodpos.terminal import PosTerminal

router = APIRouter()


@router.post("/login", response_model=Session)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Sign the terminal in and return its session"""
    session = await terminal.session.sign_in(form_data.username, form_data.password)
    if session is None:
        raise failure(terminal, mark, "Incorrect email or password")
    return session


@router.post("/signup", response_model=Session, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignUpRequest,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Create an operator account and sign in with it"""
    session = await terminal.session.sign_up(request.email, request.password, request.full_name)
    if session is None:
        raise failure(terminal, mark, "Sign-up failed")
    return session


@router.get("/me", response_model=Profile)
async def me(
    session: Session = Depends(require_session),
    terminal: PosTerminal = Depends(get_terminal),
):
    """Profile of the signed-in operator"""
    if terminal.session.profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return terminal.session.profile


@router.post("/logout")
async def logout(
    session: Session = Depends(require_session),
    terminal: PosTerminal = Depends(get_terminal),
):
    """Sign the terminal out"""
    await terminal.session.sign_out()
    return {"message": "Successfully logged out"}
