import logging

from fastapi import APIRouter, HTTPException, Depends, Body, Request
from tortoise.exceptions import IntegrityError

from albumvault.config import settings
from albumvault.core.rate_limit import limiter
from albumvault.models.user import User
from albumvault.schemas.auth import RegisterPayload, LoginPayload, AuthOut, UserOut
from albumvault.services.security import (
    AuthUser,
    TokenIssuer,
    get_token_issuer,
    hash_password,
    require_user,
    verify_password,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


@router.post("/register", response_model=AuthOut, status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterPayload = Body(...),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    if await User.filter(email=payload.email).exists():
        raise HTTPException(status_code=409, detail="Email already registered")

    try:
        user = await User.create(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
    except IntegrityError:
        # Lost a race against a concurrent registration with the same email
        raise HTTPException(status_code=409, detail="Email already registered")

    log.info("Registered user %s", user.id)
    return AuthOut(message="User created successfully", token=issuer.issue(user), user=_user_out(user))


@router.post("/login", response_model=AuthOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginPayload = Body(...),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = await User.filter(email=payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return AuthOut(message="Login successful", token=issuer.issue(user), user=_user_out(user))


@router.get("/profile", response_model=UserOut)
async def profile(auth: AuthUser = Depends(require_user)):
    user = await User.filter(id=auth.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_out(user)


@router.get("/validate")
async def validate_token(auth: AuthUser = Depends(require_user)):
    return {
        "message": "Token is valid",
        "user": {"userId": auth.user_id, "email": auth.email, "name": auth.name},
    }
