import os
from pathlib import Path
from dotenv import load_dotenv
from fastapi.security import HTTPBearer

BASE_DIR = Path(__file__).resolve().parent.parent  # -> project root

# Load .env explicitly from project root
load_dotenv(BASE_DIR / ".env")


def _resolve_dir(value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else BASE_DIR / path


class Settings:
    PROJECT_NAME = "Medicine Exchange Backend"

    DATA_DIR = _resolve_dir(os.getenv("DATA_DIR", "data"))
    MEDICINE_IMAGES_DIR = _resolve_dir(os.getenv("MEDICINE_IMAGES_DIR", "public/images/medicines"))
    MEDICINE_IMAGES_URL = "/images/medicines"
    MAX_IMAGE_SIZE_BYTES = int(os.getenv("MAX_IMAGE_SIZE_BYTES", 5 * 1024 * 1024))

    JWT_SECRET = os.getenv("JWT_SECRET")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", 7))
    OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", 5))

    # Single professional account allowed to moderate listings
    PROFESSIONAL_NAME = os.getenv("PROFESSIONAL_NAME")
    PROFESSIONAL_PASSWORD = os.getenv("PROFESSIONAL_PASSWORD")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    bearer_scheme = HTTPBearer(auto_error=False)
    cors_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


settings = Settings()
