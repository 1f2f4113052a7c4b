import logging
import secrets
from pathlib import Path

from app.config import settings

logger = logging.getLogger(__name__)


class ImageRejected(ValueError):
    """Upload refused before it reached disk."""


class ImageStorage:
    def __init__(self, directory: Path, max_bytes: int = settings.MAX_IMAGE_SIZE_BYTES,
                 public_url: str = settings.MEDICINE_IMAGES_URL):
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.public_url = public_url.rstrip("/")
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, contents: bytes, original_name: str | None, content_type: str | None) -> str:
        """Store an uploaded image under a random name and return that name."""
        reason = None
        if not content_type or not content_type.startswith("image/"):
            reason = "Only image files are allowed!"
        elif not contents:
            reason = "Empty file upload"
        elif len(contents) > self.max_bytes:
            reason = f"Image exceeds the {self.max_bytes // (1024 * 1024)}MB limit"
        if reason:
            logger.info("Rejected upload %s (%s): %s", original_name, content_type, reason)
            raise ImageRejected(reason)

        extension = Path(original_name or "").suffix.lower()
        filename = f"{secrets.token_hex(16)}{extension}"
        (self.directory / filename).write_bytes(contents)
        logger.debug("Stored image %s (%s bytes)", filename, len(contents))
        return filename

    def discard(self, filename: str | None) -> None:
        if not filename:
            return
        # only ever delete inside the images directory
        (self.directory / Path(filename).name).unlink(missing_ok=True)
        logger.info("Discarded image %s", filename)

    def exists(self, filename: str) -> bool:
        return (self.directory / Path(filename).name).is_file()

    def public_path(self, filename: str) -> str:
        return f"{self.public_url}/{filename.strip()}"


image_storage = ImageStorage(settings.MEDICINE_IMAGES_DIR)


def get_image_storage() -> ImageStorage:
    return image_storage
