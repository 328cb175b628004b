import os
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from authentication.errors import TokenExpired, TokenInvalid
from models.users import User

load_dotenv()

PWD_CONTEXT = CryptContext(schemes=["bcrypt"], deprecated="auto")
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))


def hash_password(password: str) -> str:
    return PWD_CONTEXT.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return PWD_CONTEXT.verify(password, password_hash)
    except (ValueError, UnknownHashError):
        return False


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    secret: str | None = None,
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, secret or JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str | None = None) -> dict:
    """Verify signature and expiry; raises TokenExpired or TokenInvalid."""
    try:
        return jwt.decode(token, secret or JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except JWTError as exc:
        raise TokenInvalid("Invalid token") from exc


def issue_token(
    user: User,
    expires_delta: timedelta | None = None,
    secret: str | None = None,
) -> str:
    """Session token identifying ``user``.

    The role claim records the stored role at issue time and is informational
    only; verification recomputes the effective role.
    """
    return create_access_token(
        {
            "sub": user.id,
            "email": user.email,
            "role": user.role,
            "affiliation": user.affiliation,
        },
        expires_delta=expires_delta,
        secret=secret,
    )
