from fastapi import APIRouter, Depends, HTTPException, status

from app.database import Database, get_db
from app.schemas.user import ProfileUpdate
from app.services import user_service
from app.services.auth_middleware import get_current_claims
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api/user", tags=["Profile"])


@router.get("/profile")
def get_profile(
    claims: dict = Depends(get_current_claims),
    db: Database = Depends(get_db),
):
    try:
        user = user_service.get_by_phone(db, claims.get("phone"))
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        return create_response(user.model_dump())
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch user profile")


@router.put("/profile")
def update_profile(
    update: ProfileUpdate,
    claims: dict = Depends(get_current_claims),
    db: Database = Depends(get_db),
):
    try:
        update_data = update.model_dump(exclude_unset=True)
        user = user_service.update_profile(db, claims.get("phone"), update_data)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        return create_response(user.model_dump())
    except Exception as exc:
        return handle_exception(exc, "Failed to update user profile")
