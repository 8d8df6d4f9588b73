from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth_utils import create_token, get_current_user, hash_password, verify_password
from ..logging import get_logger
from ..models import User
from ..schemas import AuthResponse, LoginRequest, SignupRequest, UserOut

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_out(user: User) -> UserOut:
    return UserOut(id=str(user.id), username=user.username)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(req: SignupRequest):
    if await User.filter(username=req.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    if req.email and await User.filter(email=req.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    user = await User.create(
        username=req.username,
        email=req.email,
        password_hash=hash_password(req.password),
    )
    logger.info("New account %s", user.username)
    return AuthResponse(token=create_token(str(user.id)), user=_user_out(user))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest):
    user = await User.filter(username=req.username).first()
    if not user or not verify_password(req.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return AuthResponse(token=create_token(str(user.id)), user=_user_out(user))


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return _user_out(current_user)
