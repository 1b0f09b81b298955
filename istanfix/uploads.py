"""
Report photo storage on local disk.

Files are stored as `<timestamp-ms>-<random>.<ext>` under the upload
directory and referenced from reports by the relative path
`uploads/<name>`, which is also the URL they are served under.
"""

import logging
import mimetypes
import os
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from .errors import ValidationFailed

logger = logging.getLogger(__name__)

URL_PREFIX = "uploads"
READ_CHUNK_BYTES = 64 * 1024

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass
class StoredImage:
    """Metadata for a saved upload"""
    filename: str
    relative_path: str
    size_bytes: int
    content_type: str


def is_image_content_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


def _extension_for(original_filename: Optional[str], content_type: str) -> str:
    ext = os.path.splitext(original_filename or "")[1].lower()
    if _EXTENSION_RE.match(ext):
        return ext
    guessed = mimetypes.guess_extension(content_type or "") or ""
    return guessed if _EXTENSION_RE.match(guessed) else ".img"


class ImageStore:
    """Local-disk store for report images"""

    def __init__(self, base_dir: str, max_bytes: int):
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes

    @property
    def max_megabytes(self) -> int:
        return max(1, self.max_bytes // (1024 * 1024))

    def ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def generate_filename(self, original_filename: Optional[str], content_type: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{_extension_for(original_filename, content_type)}"

    async def read_upload(self, upload: UploadFile) -> bytes:
        """
        Read an uploaded image into memory, enforcing type and size.

        Never reads more than `max_bytes + 1` bytes. The multipart parser has
        already spooled the request body, so this bounds what is held and
        stored, not what is received.
        """
        if not is_image_content_type(upload.content_type):
            raise ValidationFailed("Only image files are allowed.")

        chunks = []
        total = 0
        while True:
            chunk = await upload.read(min(READ_CHUNK_BYTES, self.max_bytes + 1 - total))
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_bytes:
                raise ValidationFailed(f"Image is too large. Maximum size is {self.max_megabytes} MB.")
            chunks.append(chunk)
        return b"".join(chunks)

    def save(self, data: bytes, original_filename: Optional[str], content_type: str) -> StoredImage:
        if not is_image_content_type(content_type):
            raise ValidationFailed("Only image files are allowed.")
        if len(data) > self.max_bytes:
            raise ValidationFailed(f"Image is too large. Maximum size is {self.max_megabytes} MB.")

        self.ensure_dir()
        filename = self.generate_filename(original_filename, content_type)
        (self.base_dir / filename).write_bytes(data)
        return StoredImage(
            filename=filename,
            relative_path=f"{URL_PREFIX}/{filename}",
            size_bytes=len(data),
            content_type=content_type,
        )

    def path_for(self, relative_path: str) -> Optional[Path]:
        """Resolve a stored relative path, refusing anything outside the upload dir"""
        name = relative_path.split("/", 1)[1] if relative_path.startswith(f"{URL_PREFIX}/") else relative_path
        candidate = (self.base_dir / name).resolve()
        if candidate.parent != self.base_dir.resolve():
            return None
        return candidate

    def delete(self, relative_path: Optional[str]) -> bool:
        """Remove a stored image; failures are logged, never raised"""
        if not relative_path:
            return False
        path = self.path_for(relative_path)
        if path is None:
            logger.warning(f"Refusing to delete image outside upload dir: {relative_path}")
            return False
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete image {relative_path}: {e}")
            return False
