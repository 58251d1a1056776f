# services/compression.py
import base64
import logging
import math
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 8
INITIAL_QUALITY = 82
QUALITY_STEP = 10
MIN_QUALITY = 28
INITIAL_MAX_DIMENSION = 1800
DIMENSION_RATIO = 0.82
MIN_DIMENSION = 520


class CompressionError(ValueError):
    pass


def to_data_url(data: bytes, mime: str) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{b64}"


def estimate_data_url_bytes(data_url: str) -> int:
    """Decoded size of a base64 data URL, estimated from the payload length."""
    _, _, payload = data_url.partition(",")
    return math.ceil(len(payload) * 3 / 4)


WIRE_TYPES = ("image/jpeg", "image/png")


def wire_mime(mime: Optional[str]) -> str:
    """Map a detected or declared type onto one the upstream accepts; MPO and friends are JPEG."""
    mime = (mime or "").lower()
    if mime == "image/jpg":
        return "image/jpeg"
    return mime if mime in WIRE_TYPES else "image/jpeg"


def sniff_mime(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            return wire_mime(Image.MIME.get(img.format or ""))
    except (UnidentifiedImageError, OSError) as e:
        raise CompressionError(f"not a readable image: {e}") from e


def compress_once(data: bytes, quality: int, max_width: int, max_height: int) -> bytes:
    """Re-encode as JPEG at ``quality``, shrunk to fit within max_width x max_height."""
    try:
        with Image.open(BytesIO(data)) as img:
            # JPEG has no alpha or palette
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
            buf = BytesIO()
            img.save(buf, format="JPEG", quality=quality, optimize=True)
            return buf.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise CompressionError(f"could not re-encode image: {e}") from e


def compress_to_data_url(data: bytes, max_bytes: int, content_type: Optional[str] = None) -> str:
    """
    Shrink an image until its data URL fits ``max_bytes`` or attempts run out.

    Each attempt re-encodes the previous attempt's output with lower quality and
    smaller bounds. Sizes do not always fall monotonically, so the smallest
    candidate seen is what comes back when the budget is never met.
    An image already under budget keeps its declared ``content_type``.
    """
    detected = sniff_mime(data)
    best_url = to_data_url(data, wire_mime(content_type) if content_type else detected)
    best_bytes = estimate_data_url_bytes(best_url)
    if best_bytes <= max_bytes:
        return best_url

    current = data
    quality = INITIAL_QUALITY
    max_width = max_height = INITIAL_MAX_DIMENSION

    for attempt in range(MAX_ATTEMPTS):
        current = compress_once(current, quality, max_width, max_height)
        url = to_data_url(current, "image/jpeg")
        size = estimate_data_url_bytes(url)
        logger.debug(
            "compress.attempt n=%d quality=%d max_dim=%dx%d bytes=%d target=%d",
            attempt + 1, quality, max_width, max_height, size, max_bytes,
        )
        if size < best_bytes:
            best_bytes = size
            best_url = url
        if size <= max_bytes:
            return url
        quality = max(MIN_QUALITY, quality - QUALITY_STEP)
        max_width = max(MIN_DIMENSION, round(max_width * DIMENSION_RATIO))
        max_height = max(MIN_DIMENSION, round(max_height * DIMENSION_RATIO))

    logger.info("compress.budget_missed best_bytes=%d target=%d", best_bytes, max_bytes)
    return best_url

