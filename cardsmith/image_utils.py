import base64
import mimetypes
import re
import time
from pathlib import Path
from typing import List, Optional, Sequence

from .config import SUPPORTED_IMAGE_EXTENSIONS

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def mime_type_for(image_path: Path) -> str:
    suffix = image_path.suffix.lower()
    if suffix in MIME_TYPES:
        return MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(image_path.name)
    return guessed or "image/jpeg"


def bytes_to_data_url(payload: bytes, mime_type: str) -> str:
    """Return a base64 data URL for raw image bytes."""

    b64 = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{b64}"


def list_images(
    directory: Path,
    limit: int,
    supported: Sequence[str] = SUPPORTED_IMAGE_EXTENSIONS,
) -> List[Path]:
    """Sorted image files in ``directory`` (case-insensitive extension match), at most ``limit``."""

    image_files = [
        p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in supported
    ]
    image_files.sort()
    return image_files[:limit]


def art_filename(name: str, timestamp_ms: Optional[int] = None) -> str:
    """File name for a free-running art loop image: ``art_<name>_<ms>.png``."""

    safe = re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"art_{safe}_{stamp}.png"
