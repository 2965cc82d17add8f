# app/core/storage.py
import logging
from pathlib import Path

import aiofiles

from core.config import settings
from core.exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)


class FileStorage:
    """Bucket/path blob store backed by a local directory."""

    def __init__(self, root: str = None, public_url: str = None):
        self.root = Path(root or settings.FILE_STORAGE_PATH)
        self.public_url = (public_url or settings.PUBLIC_STORAGE_URL).rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        bucket_root = (self.root / bucket).resolve()
        if bucket_root not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}")
        return target

    async def upload(self, bucket: str, path: str, content: bytes) -> str:
        if len(content) > settings.MAX_FILE_SIZE:
            raise ValidationError(
                f"File too large: {len(content)} bytes (max {settings.MAX_FILE_SIZE})"
            )

        target = self._resolve(bucket, path)
        if target.exists():
            raise ValidationError(f"File already exists: {bucket}/{path}")

        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {bucket}/{path}: {e}")
            raise StoreError(f"Upload failed for {bucket}/{path}: {e}", code="STORAGE_WRITE")

        logger.info(f"Stored {len(content)} bytes at {bucket}/{path}")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/{bucket}/{path}"


def get_storage() -> FileStorage:
    return FileStorage()
