import logging
from datetime import datetime, timezone

from app.database import Database
from app.models.engagement import Feedback, NewsletterSubscription

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def record_feedback(db: Database, name: str, email: str, feedback: str) -> Feedback:
    entry = Feedback(name=name, email=email, feedback=feedback, timestamp=_utc_timestamp())
    db.feedback.append(entry)
    logger.info("Feedback received from %s", email)
    return entry


def subscribe_newsletter(db: Database, email: str) -> NewsletterSubscription:
    entry = NewsletterSubscription(email=email, timestamp=_utc_timestamp())
    db.newsletter.append(entry)
    logger.info("Newsletter subscription added for %s", email)
    return entry
