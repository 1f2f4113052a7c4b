from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ListingStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Listing(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    expiry: str = ""
    condition: str = ""
    price: str = "0"
    timestamp: str = ""
    image: str = ""  # stored filename, not a path
    status: ListingStatus = ListingStatus.pending

    @field_validator("status", mode="before")
    @classmethod
    def _blank_status_is_pending(cls, value):
        # rows written before the status column existed
        return value or ListingStatus.pending
