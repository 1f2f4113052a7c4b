import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.database import Database, get_db
from app.schemas.user import ProfessionalLogin, RequestOtp, VerifyOtp
from app.services import user_service
from app.services.auth_service import authenticate_professional, create_access_token
from app.services.otp_service import OtpCheck, OtpStore, deliver_otp, get_otp_store, is_valid_phone
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post("/send-otp")
def send_otp(body: RequestOtp, otp_store: OtpStore = Depends(get_otp_store)):
    try:
        if not is_valid_phone(body.phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Valid 10-digit phone number is required",
            )

        code = otp_store.issue(body.phone)
        deliver_otp(body.phone, code)

        return create_response({"success": True, "message": "OTP sent successfully"})
    except Exception as exc:
        return handle_exception(exc, "Failed to send OTP")


def _raise_for_check(check: OtpCheck) -> None:
    if check == OtpCheck.missing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="OTP expired or invalid")
    if check == OtpCheck.mismatch:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OTP")


@router.post("/verify-otp")
def verify_otp(
    body: VerifyOtp,
    db: Database = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
):
    try:
        phone = body.phone or ""
        _raise_for_check(otp_store.verify(phone, body.otp))

        # Eligibility comes from the allow-list; the challenge stays usable on refusal
        if body.userType == "pharmacist" and not user_service.is_pharmacist_allowed(db, phone):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Phone number not registered as pharmacist",
            )

        # A concurrent request may have redeemed the code since the check above
        _raise_for_check(otp_store.redeem(phone, body.otp))

        user = user_service.upsert_on_verify(
            db,
            phone=phone,
            name=body.name,
            state=body.state,
            city=body.city,
            user_type=body.userType,
        )

        token = create_access_token({"phone": phone})
        return create_response(
            {
                "success": True,
                "message": "OTP verified successfully",
                "token": token,
                "user": user.model_dump(),
            }
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to verify OTP")


@router.post("/professional-login")
def professional_login(body: ProfessionalLogin):
    try:
        profile = authenticate_professional(body.name, body.password)
        if profile is None:
            logger.warning("Rejected professional login for name=%s", body.name)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        token = create_access_token(profile)
        return create_response({"token": token, "user": profile})
    except Exception as exc:
        return handle_exception(exc, "Login failed")
