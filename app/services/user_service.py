import logging

from app.database import Database
from app.models.user import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "email", "address", "state", "city")


def get_by_phone(db: Database, phone: str | None) -> User | None:
    if not phone:
        return None
    return next((user for user in db.users.load() if user.phone == phone), None)


def is_pharmacist_allowed(db: Database, phone: str) -> bool:
    return any(entry.phone == phone for entry in db.pharmacists.load())


def upsert_on_verify(
    db: Database,
    phone: str,
    name: str | None,
    state: str | None,
    city: str | None,
    user_type: str | None,
) -> User:
    """Create the user on first verification, or refresh the registration fields.

    An existing record is only touched when name, state, city and user type are
    all supplied; otherwise the stored record is returned as-is.
    """
    with db.users.transaction() as users:
        index = next((i for i, user in enumerate(users) if user.phone == phone), None)

        if index is None:
            user = User(
                phone=phone,
                name=name or "",
                state=state or "",
                city=city or "",
                userType=user_type or "",
                isVerified="true",
            )
            users.append(user)
            logger.info("Registered new user phone=%s type=%s", phone, user.userType)
            return user

        existing = users[index]
        if not (name and state and city and user_type):
            return existing

        updated = existing.model_copy(
            update={
                "name": name,
                "state": state,
                "city": city,
                "userType": user_type,
                "isVerified": "true",
            }
        )
        users[index] = updated
        logger.info("Updated registration for phone=%s", phone)
        return updated


def update_profile(db: Database, phone: str | None, updates: dict) -> User | None:
    if not phone:
        return None

    changes = {
        field: value
        for field, value in updates.items()
        if field in PROFILE_FIELDS and value
    }

    with db.users.transaction() as users:
        index = next((i for i, user in enumerate(users) if user.phone == phone), None)
        if index is None:
            return None
        users[index] = users[index].model_copy(update=changes)
        logger.info("Profile updated for phone=%s fields=%s", phone, sorted(changes))
        return users[index]
