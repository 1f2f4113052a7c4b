from pydantic import BaseModel


class RequestOtp(BaseModel):
    phone: str | None = None


class VerifyOtp(BaseModel):
    phone: str | None = None
    otp: str | None = None
    name: str | None = None
    state: str | None = None
    city: str | None = None
    userType: str | None = None


class ProfileUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    address: str | None = None
    state: str | None = None
    city: str | None = None


class ProfessionalLogin(BaseModel):
    name: str | None = None
    password: str | None = None
