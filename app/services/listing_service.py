import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from app.database import Database
from app.models.listing import Listing, ListingStatus
from app.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)


class ListingValidationError(ValueError):
    pass


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _normalize_price(price: str | None) -> str:
    if price is None or not price.strip():
        return "0"
    price = price.strip()
    try:
        value = Decimal(price)
    except InvalidOperation as exc:
        raise ListingValidationError("Price must be a number") from exc
    if not value.is_finite() or value < 0:
        raise ListingValidationError("Price must be a non-negative number")
    return price


def to_public(listing: Listing, images: ImageStorage) -> dict:
    payload = listing.model_dump(mode="json")
    if listing.image:
        payload["image"] = images.public_path(listing.image)
    return payload


def submit(
    db: Database,
    images: ImageStorage,
    name: str | None,
    expiry: str | None,
    condition: str | None,
    price: str | None,
    image: str | None,
) -> Listing:
    """Record a new listing awaiting pharmacist review.

    ``image`` is the name of an already-stored upload. It is removed again if
    the listing cannot be recorded, so a failed submission leaves no file behind.
    """
    try:
        if not (name and expiry and condition and image):
            raise ListingValidationError("Missing required fields")

        listing = Listing(
            id=secrets.token_hex(8),
            name=name,
            expiry=expiry,
            condition=condition,
            price=_normalize_price(price),
            timestamp=_utc_timestamp(),
            image=image,
            status=ListingStatus.pending,
        )
        db.listings.append(listing)
    except Exception:
        images.discard(image)
        raise

    logger.info("Listing %s submitted (%s), pending approval", listing.id, listing.name)
    return listing


def _list_by_status(db: Database, status: ListingStatus) -> list[Listing]:
    return [listing for listing in db.listings.load() if listing.status == status]


def list_approved(db: Database) -> list[Listing]:
    return _list_by_status(db, ListingStatus.approved)


def list_pending(db: Database) -> list[Listing]:
    return _list_by_status(db, ListingStatus.pending)


def set_status(db: Database, listing_id: str, status: ListingStatus) -> bool:
    with db.listings.transaction() as listings:
        found = False
        for index, listing in enumerate(listings):
            if listing.id == listing_id:
                listings[index] = listing.model_copy(update={"status": status})
                found = True

    if found:
        logger.info("Listing %s marked %s", listing_id, status.value)
    else:
        logger.info("Listing %s not found for status %s", listing_id, status.value)
    return found


def approve(db: Database, listing_id: str) -> bool:
    return set_status(db, listing_id, ListingStatus.approved)


def reject(db: Database, listing_id: str) -> bool:
    return set_status(db, listing_id, ListingStatus.rejected)
