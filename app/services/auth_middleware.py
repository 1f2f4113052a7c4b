from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from app.config import settings
from app.services.auth_service import PROFESSIONAL_ROLE, decode_access_token


def _get_claims(credentials: HTTPAuthorizationCredentials | None) -> dict:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )
    try:
        return decode_access_token(credentials.credentials)
    except Exception:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(settings.bearer_scheme),
) -> dict:
    return _get_claims(credentials)


def get_current_professional(claims: dict = Depends(get_current_claims)) -> dict:
    # Moderation rights come from the session role only, not from users.csv userType
    if claims.get("role") != PROFESSIONAL_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return claims
