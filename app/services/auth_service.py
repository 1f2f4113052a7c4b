import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt

from app.config import settings

PROFESSIONAL_ROLE = "professional"


def create_access_token(claims: dict, expires_delta: timedelta | None = None) -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not configured")
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    )
    to_encode = {**claims, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the token claims; raises ``jose.JWTError`` if invalid or expired."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])


def authenticate_professional(name: str | None, password: str | None) -> dict | None:
    expected_name = settings.PROFESSIONAL_NAME
    expected_password = settings.PROFESSIONAL_PASSWORD
    if not (expected_name and expected_password and name and password):
        return None

    name_ok = secrets.compare_digest(name.encode(), expected_name.encode())
    password_ok = secrets.compare_digest(password.encode(), expected_password.encode())
    if not (name_ok and password_ok):
        return None
    return {"name": expected_name, "role": PROFESSIONAL_ROLE}
