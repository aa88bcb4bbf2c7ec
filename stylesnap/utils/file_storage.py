"""File storage utilities for public uploads and generated images"""
import asyncio
import hashlib
import logging
import os
import time
import uuid
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional, Tuple

from stylesnap.core.config import settings
from stylesnap.errors.exceptions import ValidationException, NotFoundException

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    "jpeg": ".jpg",
    "png": ".png",
    "gif": ".gif",
    "webp": ".webp",
    "bmp": ".bmp",
}

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}

# Pending automatic deletions, keyed by absolute file path
_pending_deletions: Dict[str, asyncio.TimerHandle] = {}


def public_dir() -> Path:
    return Path(settings.PUBLIC_DIR)


def detect_image_type(content: bytes) -> Optional[str]:
    """Detect the image format from magic bytes; None for anything else"""
    if content.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if content[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "webp"
    if content.startswith(b"BM"):
        return "bmp"
    return None


def guess_mime_type(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), "image/jpeg")


def generate_unique_filename(original_filename: str, extension: Optional[str] = None) -> str:
    """
    Generate a unique, sanitized filename using timestamp and UUID
    Format: YYYYMMDD_HHMMSS_uuid_originalname.ext
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    unique_id = str(uuid.uuid4())[:8]

    name = Path(original_filename or "image").stem
    safe_name = "".join(c for c in name if c.isalnum() or c in ('-', '_'))[:50] or "image"
    ext = extension or Path(original_filename or "").suffix.lower()
    ext = "".join(c for c in ext if c.isalnum() or c == ".")

    return f"{timestamp}_{unique_id}_{safe_name}{ext}"


def save_uploaded_file(file_content: bytes, original_filename: str, extension: str) -> Tuple[str, Path]:
    """
    Save an uploaded image under PUBLIC_DIR/uploads

    Returns:
        (public_url, file_path), e.g. ('/uploads/20260219_123456_abc123_selfie.jpg', Path(...))
    """
    upload_dir = public_dir() / settings.UPLOAD_SUBDIR
    upload_dir.mkdir(parents=True, exist_ok=True)

    unique_filename = generate_unique_filename(original_filename, extension)
    file_path = upload_dir / unique_filename

    with open(file_path, 'wb') as f:
        f.write(file_content)

    return f"/{settings.UPLOAD_SUBDIR}/{unique_filename}", file_path


def save_generated_image(content: bytes, prompt: str, extension: str = ".jpg") -> str:
    """Write a generated image under PUBLIC_DIR/generated and return its public URL"""
    generated_dir = public_dir() / settings.GENERATED_SUBDIR
    generated_dir.mkdir(parents=True, exist_ok=True)

    digest = hashlib.sha256(f"{prompt}{time.time_ns()}{uuid.uuid4()}".encode()).hexdigest()[:16]
    file_name = f"{digest}{extension}"
    with open(generated_dir / file_name, 'wb') as f:
        f.write(content)

    return f"/{settings.GENERATED_SUBDIR}/{file_name}"


def resolve_public_path(image_url: str) -> Path:
    """
    Map a public URL path (e.g. '/uploads/x.jpg') to a file inside PUBLIC_DIR.

    Rejects absolute URLs, data URIs and directory traversal; raises
    NotFoundException when the file does not exist.
    """
    if not isinstance(image_url, str) or not image_url.strip():
        raise ValidationException(detail="Missing image_url")

    image_url = image_url.strip()
    if image_url.startswith(("http://", "https://", "data:")):
        raise ValidationException(detail="Invalid image_url: must be a file under the public directory")

    relative = image_url.lstrip("/")
    if ".." in Path(relative).parts or "\\" in relative:
        raise ValidationException(detail="Invalid file path")

    root = public_dir().resolve()
    file_path = (root / relative).resolve()
    if root not in file_path.parents:
        raise ValidationException(detail="Invalid file path")
    if not file_path.is_file():
        raise NotFoundException(detail=f"File not found in public folder: {relative}")

    return file_path


def delete_uploaded_file(file_path: Path) -> bool:
    """
    Delete a file from disk and cancel its pending automatic deletion

    Returns:
        bool: True if file was deleted, False otherwise
    """
    handle = _pending_deletions.pop(str(file_path), None)
    if handle is not None:
        handle.cancel()
    try:
        if file_path and os.path.exists(file_path):
            os.remove(file_path)
            return True
        return False
    except OSError as e:
        logger.error(f"Failed to delete file {file_path}: {str(e)}")
        return False


def _expire_file(file_path: Path) -> None:
    _pending_deletions.pop(str(file_path), None)
    if delete_uploaded_file(file_path):
        logger.info(f"File deleted after timeout: {file_path}")


def schedule_file_deletion(file_path: Path, delay_seconds: Optional[int] = None) -> None:
    """Fire-and-forget deletion of *file_path* after *delay_seconds*"""
    delay = settings.UPLOAD_TTL_SECONDS if delay_seconds is None else delay_seconds
    loop = asyncio.get_running_loop()
    _pending_deletions[str(file_path)] = loop.call_later(delay, _expire_file, file_path)


def delete_upload_by_name(file_name: str) -> str:
    """
    Manually delete an upload by its file name.
    A name without extension matches the first known image extension.

    Returns the deleted file's name.
    """
    name = (file_name or "").strip().lstrip("/")
    if name.startswith(f"{settings.UPLOAD_SUBDIR}/"):
        name = name[len(settings.UPLOAD_SUBDIR) + 1:]
    if not name or name != os.path.basename(name) or name in (".", ".."):
        raise ValidationException(detail="Invalid fileName")

    upload_dir = public_dir() / settings.UPLOAD_SUBDIR
    candidates = [upload_dir / name]
    if not Path(name).suffix:
        candidates = [upload_dir / f"{name}{ext}" for ext in MIME_TYPES]

    for candidate in candidates:
        if candidate.is_file():
            delete_uploaded_file(candidate)
            return candidate.name

    raise NotFoundException(detail="File not found")
