"""
Image Storage - uploaded token artwork on local disk.

Images are written under the uploads directory with random file names and
referenced by their public URL path. The registry only ever sees that
reference, never the bytes.
"""

import logging
import os
import re
import uuid
from pathlib import Path

from drawyourmeme.core.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024

_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,8}$")


class ImageStore:
    """
    Local image store.

    Manages the uploads directory:
    - accepts image/* payloads up to max_bytes
    - writes each payload to a fresh UUID-named file
    - returns the /uploads/<name> reference served by the API
    """

    def __init__(self, root: Path, max_bytes: int = DEFAULT_MAX_BYTES):
        """Initialize the store, creating the directory if needed."""
        self._root = Path(root)
        self._max_bytes = max_bytes
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, data: bytes, content_type: str | None) -> None:
        """
        Check that a payload is an acceptable image.

        Raises:
            InvalidImageError: If the payload is empty, too large or not an image
        """
        if not content_type or not content_type.startswith("image/"):
            raise InvalidImageError(
                "Only image files are allowed",
                content_type=content_type,
            )
        if not data:
            raise InvalidImageError("Image file is empty", content_type=content_type, size=0)
        if len(data) > self._max_bytes:
            raise InvalidImageError(
                f"Image exceeds maximum size of {self._max_bytes} bytes",
                content_type=content_type,
                size=len(data),
            )

    def save(self, data: bytes, content_type: str | None, filename: str | None = None) -> str:
        """
        Validate and persist an image.

        Args:
            data: Raw image bytes
            content_type: MIME type reported by the uploader
            filename: Original file name, used only for its extension

        Returns:
            Public URL path of the stored image

        Raises:
            InvalidImageError: If the payload is rejected
        """
        self.validate(data, content_type)

        stored_name = uuid.uuid4().hex
        suffix = Path(filename or "").suffix.lstrip(".")
        if suffix and _EXTENSION_RE.match(suffix):
            stored_name = f"{stored_name}.{suffix.lower()}"

        final_path = self._root / stored_name
        temp_path = self._root / f"{stored_name}.tmp"
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, final_path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info(f"Stored image {stored_name} ({len(data)} bytes)")
        return f"{PUBLIC_PREFIX}/{stored_name}"

    def path_for(self, image_url: str) -> Path | None:
        """Resolve a /uploads/<name> reference to its file, if stored here."""
        prefix = f"{PUBLIC_PREFIX}/"
        if not image_url.startswith(prefix):
            return None
        name = image_url[len(prefix):]
        if not name or "/" in name or name in (".", ".."):
            return None
        path = self._root / name
        return path if path.is_file() else None

    def discard(self, image_url: str) -> bool:
        """Delete a stored image; returns False if there was nothing to delete."""
        path = self.path_for(image_url)
        if path is None:
            return False
        path.unlink(missing_ok=True)
        logger.info(f"Discarded image {path.name}")
        return True
