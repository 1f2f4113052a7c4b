import logging
import os

from app.database import Database, get_db
from app.models.user import Pharmacist
from app.services.otp_service import is_valid_phone

logger = logging.getLogger(__name__)


def seed_pharmacists(db: Database) -> None:
    # Read values from .env
    phone = os.getenv("SEED_PHARMACIST_PHONE")
    name = os.getenv("SEED_PHARMACIST_NAME", "")
    email = os.getenv("SEED_PHARMACIST_EMAIL", "")

    if not phone:
        return
    if not is_valid_phone(phone):
        logger.warning("SEED_PHARMACIST_PHONE must be 10 digits, skipping allow-list seed.")
        return

    # Only provision when the allow-list is empty
    if db.pharmacists.load():
        logger.info("Pharmacist allow-list already present, skipping seeding.")
        return

    db.pharmacists.append(Pharmacist(phone=phone, name=name, email=email))
    logger.info("Seeded pharmacist allow-list with %s", phone)


def run_seed(db: Database | None = None) -> None:
    db = db or get_db()
    db.create_all()
    seed_pharmacists(db)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_seed()
