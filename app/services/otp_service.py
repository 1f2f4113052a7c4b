import logging
import re
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from app.config import settings

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")


def is_valid_phone(phone: str | None) -> bool:
    return bool(phone) and PHONE_PATTERN.fullmatch(phone) is not None


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpCheck(str, Enum):
    ok = "ok"
    missing = "missing"  # never issued, already consumed, or expired
    mismatch = "mismatch"


@dataclass
class OtpChallenge:
    code: str
    expires_at: datetime


class OtpStore:
    """Outstanding OTP challenges, one per phone.

    Challenges live in process memory only: a restart drops every pending
    code, and separate worker processes do not share them.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
        code_factory: Callable[[], str] = generate_code,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.ttl = ttl
        self.code_factory = code_factory
        self.clock = clock
        self._challenges: dict[str, OtpChallenge] = {}
        self._lock = threading.RLock()

    def issue(self, phone: str) -> str:
        code = self.code_factory()
        with self._lock:
            self._challenges[phone] = OtpChallenge(code=code, expires_at=self.clock() + self.ttl)
        return code

    def verify(self, phone: str, code: str | None) -> OtpCheck:
        with self._lock:
            challenge = self._challenges.get(phone)
            if challenge is None:
                return OtpCheck.missing
            if challenge.expires_at < self.clock():
                del self._challenges[phone]
                return OtpCheck.missing
            if code is None or not secrets.compare_digest(challenge.code.encode(), str(code).encode()):
                return OtpCheck.mismatch
            return OtpCheck.ok

    def redeem(self, phone: str, code: str | None) -> OtpCheck:
        """Check and consume in one step; only one caller can redeem a code."""
        with self._lock:
            check = self.verify(phone, code)
            if check == OtpCheck.ok:
                del self._challenges[phone]
            return check

    def __len__(self) -> int:
        return len(self._challenges)


def deliver_otp(phone: str, code: str) -> None:
    # SMS gateway not wired up; the code only reaches the server log
    logger.info("OTP for %s: %s", phone, code)


otp_store = OtpStore()


def get_otp_store() -> OtpStore:
    return otp_store
