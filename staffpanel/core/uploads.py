import os
import re
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from staffpanel.core.config import settings
from staffpanel.core.exceptions import bad_request

ALLOWED_MEDIA = re.compile(r"jpeg|jpg|png|gif|webp|mp4|webm|mov")
PUBLIC_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024


def upload_root() -> Path:
    return Path(settings.upload_dir).resolve()


def ensure_upload_dir() -> Path:
    root = upload_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def is_allowed_media(filename: str, content_type: Optional[str]) -> bool:
    ext = os.path.splitext(filename or "")[1].lower()
    subtype = (content_type or "").split("/")[-1].lower()
    return bool(ALLOWED_MEDIA.search(ext) or ALLOWED_MEDIA.search(subtype))


def _stored_name(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


async def save_media(file: UploadFile) -> str:
    """Store an image/video upload and return its public path (/uploads/<name>)."""
    if not is_allowed_media(file.filename, file.content_type):
        raise bad_request("Only images and videos are allowed")

    root = ensure_upload_dir()
    target = root / _stored_name(file.filename)
    written = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.max_upload_bytes:
                    raise bad_request(
                        f"File too large (limit {settings.max_upload_bytes // (1024 * 1024)}MB)"
                    )
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise
    finally:
        await file.close()
    return f"{PUBLIC_PREFIX}/{target.name}"


def media_type_for(content_type: Optional[str]) -> Optional[str]:
    """Guess the message type tag (image/video) from an upload's MIME type."""
    if not content_type:
        return None
    major = content_type.split("/")[0].lower()
    if major in ("image", "video"):
        return major
    return None


def discard_media(public_path: Optional[str]) -> None:
    """Remove a file stored by save_media when the request using it fails."""
    if not public_path or not public_path.startswith(f"{PUBLIC_PREFIX}/"):
        return
    name = os.path.basename(public_path)
    (upload_root() / name).unlink(missing_ok=True)
