from pydantic import BaseModel, Field


class User(BaseModel):
    """Row of users.csv, keyed by phone."""

    phone: str = Field(min_length=1)
    name: str = ""
    email: str = ""
    address: str = ""
    state: str = ""
    city: str = ""
    userType: str = ""
    isVerified: str = "true"


class Pharmacist(BaseModel):
    """Allow-list entry; only provisioned phones may register as pharmacists."""

    phone: str = Field(min_length=1)
    name: str = ""
    email: str = ""
