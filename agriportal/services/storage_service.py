import logging
import os
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from agriportal.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}
PUBLIC_PREFIX = "/uploads"


@dataclass
class UploadedImage:
    content: bytes
    content_type: str | None
    filename: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


def get_uploads_dir() -> str:
    """Absolute uploads directory; relative paths resolve against the working directory"""
    return os.path.abspath(settings.FILE_UPLOAD_DIR)


def validate_image(image: UploadedImage) -> None:
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValueError("Chỉ chấp nhận ảnh JPG, PNG, WEBP hoặc GIF")
    if image.size > settings.max_image_size_bytes:
        raise ValueError(f"Kích thước ảnh không được vượt quá {settings.MAX_IMAGE_SIZE_MB}MB")
    if image.size == 0:
        raise ValueError("Tệp ảnh rỗng")


class StorageService:
    """Stores uploaded images on local disk under <upload dir>/<bucket>/<user id>/"""

    def __init__(self, base_dir: str | None = None) -> None:
        self._base = Path(base_dir or get_uploads_dir())

    def _build_key(self, bucket: str, user_id: int, image: UploadedImage) -> str:
        ext = ALLOWED_IMAGE_TYPES.get(image.content_type or "")
        if not ext and image.filename and "." in image.filename:
            ext = image.filename.rsplit(".", 1)[-1].lower()
        return f"{bucket.strip('/')}/{user_id}/{uuid4().hex}.{ext or 'bin'}"

    def upload_image(self, *, bucket: str, user_id: int, image: UploadedImage) -> str:
        validate_image(image)
        key = self._build_key(bucket, user_id, image)
        path = self._base / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(image.content)
        logger.info("Stored image %s (%d bytes)", key, image.size)
        return f"{PUBLIC_PREFIX}/{key}"

    def delete_file(self, file_url: str | None) -> None:
        """Remove a previously stored file; URLs not served from /uploads are ignored"""
        if not file_url or not file_url.startswith(PUBLIC_PREFIX + "/"):
            return
        path = (self._base / file_url[len(PUBLIC_PREFIX) + 1:]).resolve()
        if self._base.resolve() not in path.parents:
            logger.warning("Refusing to delete file outside uploads dir: %s", file_url)
            return
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Stored file already missing: %s", file_url)
