import datetime as dt
import logging
import uuid
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from albumvault.config import settings
from albumvault.models.user import User

log = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-jwt-secret-change-me-very-long-32-chars-minimum"

bearer = HTTPBearer(auto_error=False)
ph = PasswordHasher()


class AuthUser:
    def __init__(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None):
        self.user_id = user_id
        self.email = email
        self.name = name


class TokenIssuer:
    """Signs and verifies the bearer tokens handed out at login."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24 * 7):
        if not secret:
            raise ValueError("Token signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user: User) -> str:
        now = dt.datetime.now(dt.timezone.utc)
        exp = now + dt.timedelta(minutes=self.expires_minutes)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        return jwt.decode(token, self.secret, algorithms=[self.algorithm], options={"leeway": 30})


def get_token_issuer() -> TokenIssuer:
    secret = (settings.JWT_SECRET or "").strip()
    if len(secret) < 32:
        # Outside production fall back to the dev secret so local runs and tests work
        if (settings.APP_ENV or "").strip().lower() == "production":
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        secret = DEV_JWT_SECRET
    return TokenIssuer(secret, settings.JWT_ALGORITHM, settings.ACCESS_TOKEN_EXPIRES_MIN)


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return ph.verify(pw_hash, pw)
    except (VerificationError, InvalidHashError):
        return False


def hash_password(pw: str) -> str:
    return ph.hash(pw)


async def require_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthUser:
    if not creds or creds.scheme.lower() != "bearer" or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied. No token provided.")

    try:
        payload = issuer.decode(creds.credentials)
        user_id = str(uuid.UUID(str(payload["sub"])))
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except (JWTError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    db_user = await User.filter(id=user_id).first()
    if not db_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return AuthUser(str(db_user.id), db_user.email, db_user.name)
