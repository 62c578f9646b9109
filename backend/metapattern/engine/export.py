"""Export the current surface as an upscaled PNG."""

from __future__ import annotations

import io
import logging

from PIL import Image

from metapattern.config import settings

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "pattern.png"


def export_image(image: Image.Image, scale: int | None = None, fmt: str = "PNG") -> bytes:
    """Upscale ``image`` by ``scale`` (default from settings) and encode it."""
    if scale is None:
        scale = settings.export_scale
    if scale < 1:
        raise ValueError(f"Export scale must be >= 1, got {scale}")
    size = (image.width * scale, image.height * scale)
    upscaled = image.resize(size, Image.Resampling.LANCZOS) if scale > 1 else image
    buf = io.BytesIO()
    upscaled.save(buf, format=fmt)
    logger.info("Exported %dx%d %s (%d bytes)", size[0], size[1], fmt, buf.tell())
    return buf.getvalue()
