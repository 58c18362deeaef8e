"""
Local object storage for user uploads.

Files live under ``<UPLOAD_DIR>/<bucket>/<owner id>/<random name>`` and are
served by the app under ``UPLOAD_URL_PREFIX``. A bucket is a directory that
must already exist; a missing one means storage was never set up.
"""

import mimetypes
from functools import lru_cache
from pathlib import Path
from uuid import UUID, uuid4

import aiofiles
import aiofiles.os
from fastapi import UploadFile
from loguru import logger
from PIL import Image, UnidentifiedImageError

from config import get_settings
from utilities.exceptions import InvalidUploadError, StorageNotConfiguredError, UploadTooLargeError


ALLOWED_IMAGE_EXT = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
CHUNK_SIZE = 1024 * 1024  # 1MB


def _guess_extension(filename: str | None, content_type: str | None) -> str:
    """Determine the file extension from filename or content-type."""
    ext = Path(filename or "").suffix.lower()
    if ext:
        return ext
    guessed = mimetypes.guess_extension(content_type or "")
    return (guessed or "").lower()


def _is_image(path: Path) -> bool:
    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError):
        return False


class LocalObjectStorage:
    def __init__(self, root: Path, url_prefix: str, max_size: int):
        self.root = root
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size

    def bucket_path(self, bucket: str) -> Path:
        path = self.root / bucket
        if not path.is_dir():
            raise StorageNotConfiguredError(bucket)
        return path

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.url_prefix}/{bucket}/{key}"

    async def upload_image(self, bucket: str, owner_id: UUID | str, file: UploadFile) -> str:
        """
        Store an uploaded image and return its public URL.

        Raises:
            StorageNotConfiguredError: the bucket directory does not exist
            InvalidUploadError: not an image, or an extension outside ALLOWED_IMAGE_EXT
            UploadTooLargeError: more than ``max_size`` bytes
        """
        bucket_dir = self.bucket_path(bucket)

        if not file.content_type or not file.content_type.startswith("image/"):
            raise InvalidUploadError("File must be an image (image/*).")

        ext = _guess_extension(file.filename, file.content_type)
        if ext not in ALLOWED_IMAGE_EXT:
            raise InvalidUploadError(
                f"File extension not allowed. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXT))}"
            )

        owner_dir = bucket_dir / str(owner_id)
        await aiofiles.os.makedirs(owner_dir, exist_ok=True)

        key = f"{owner_id}/{uuid4().hex}{ext}"
        dest_path = bucket_dir / key

        size = 0
        too_large = False
        try:
            async with aiofiles.open(dest_path, "wb") as out_file:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        too_large = True
                        break
                    await out_file.write(chunk)
        finally:
            await file.close()

        if too_large:
            dest_path.unlink(missing_ok=True)
            raise UploadTooLargeError(f"File too large. Limit is {self.max_size} bytes.")

        if not _is_image(dest_path):
            dest_path.unlink(missing_ok=True)
            raise InvalidUploadError("Uploaded file is not a valid image.")

        logger.info(f"Stored {size} bytes in bucket '{bucket}' as {key}")
        return self.public_url(bucket, key)

    async def delete_by_url(self, url: str | None) -> bool:
        """Remove a previously stored object; False when the URL is not ours or already gone."""
        if not url or not url.startswith(f"{self.url_prefix}/"):
            return False
        relative = url[len(self.url_prefix) + 1:]
        path = (self.root / relative).resolve()
        if self.root.resolve() not in path.parents:
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        return True


@lru_cache()
def get_storage() -> LocalObjectStorage:
    settings = get_settings()
    return LocalObjectStorage(
        root=Path(settings.UPLOAD_DIR),
        url_prefix=settings.UPLOAD_URL_PREFIX,
        max_size=settings.MAX_UPLOAD_SIZE,
    )
