"""exiftool runner and reshaping of its JSON output.

The binary is an external collaborator driven through PyExifTool; it is
run on the stored upload and its first metadata object is reshaped into the
service payload. Classification here is deterministic; the randomized
lens guesses live in :mod:`metapattern.engine.heuristics`.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Any

import exiftool
from exiftool.exceptions import (
    ExifToolException,
    ExifToolExecuteError,
    ExifToolJSONInvalidError,
    ExifToolOutputEmptyError,
)

from metapattern.config import Settings, settings as default_settings
from metapattern.engine.exif import hour_of, parse_dms_string, split_exif_datetime
from metapattern.engine.heuristics import time_of_day
from metapattern.errors import MetadataExtractionError
from metapattern.models.metadata import UNKNOWN_PHONE

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"(\d+\.?\d*)")
_FLASH_ON = re.compile(r"\bon\b")

# Focal length thresholds (mm): physical, then 35 mm equivalent.
_ULTRA_WIDE_FOCAL_MM = 3.0
_TELEPHOTO_FOCAL_MM = 6.0
_ULTRA_WIDE_35MM = 20.0
_TELEPHOTO_35MM = 50.0

# exiftool's human-readable Orientation values → EXIF codes.
_ORIENTATION_CODES = {
    "horizontal (normal)": 1,
    "mirror horizontal": 2,
    "rotate 180": 3,
    "mirror vertical": 4,
    "mirror horizontal and rotate 270 cw": 5,
    "rotate 90 cw": 6,
    "mirror horizontal and rotate 90 cw": 7,
    "rotate 270 cw": 8,
}


def stored_upload_path(filename: str, settings: Settings | None = None) -> Path:
    """``<upload_dir>/<epoch ms>-<basename>``; creates the directory."""
    settings = settings or default_settings
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    safe_name = Path(filename or "upload").name or "upload"
    return upload_dir / f"{int(time.time() * 1000)}-{safe_name}"


async def extract_file_metadata(
    content: bytes,
    filename: str,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Store the upload, run exiftool on it, and reshape the result.

    The stored file is removed whether or not extraction succeeds.
    """
    path = stored_upload_path(filename, settings)
    path.write_bytes(content)
    logger.info("Processing image: %s", path)
    try:
        raw = await run_exiftool(str(path), settings)
    finally:
        try:
            path.unlink()
        except OSError as e:
            logger.error("Error deleting %s: %s", path, e)
    return reshape_exiftool(raw)


def _read_tags(path: str, executable: str) -> list[dict[str, Any]]:
    # Empty common_args keeps exiftool's plain, human-readable tag names.
    with exiftool.ExifToolHelper(executable=executable, common_args=[]) as et:
        return et.get_metadata(path)


async def run_exiftool(path: str, settings: Settings | None = None) -> dict[str, Any]:
    """Run exiftool on ``path`` and return its first metadata object."""
    settings = settings or default_settings
    try:
        records = await asyncio.wait_for(
            asyncio.to_thread(_read_tags, path, settings.exiftool_path),
            timeout=settings.exiftool_timeout_s,
        )
    except asyncio.TimeoutError as e:
        logger.error("exiftool timed out after %.1fs", settings.exiftool_timeout_s)
        raise MetadataExtractionError("Failed to extract metadata") from e
    except (ExifToolJSONInvalidError, ExifToolOutputEmptyError) as e:
        logger.error("exiftool printed malformed JSON: %s", e)
        raise MetadataExtractionError("Failed to parse metadata") from e
    except (ExifToolExecuteError, ExifToolException, OSError) as e:
        logger.error("exiftool failed (%s): %s", settings.exiftool_path, e)
        raise MetadataExtractionError("Failed to extract metadata") from e

    if not records or not isinstance(records[0], dict):
        raise MetadataExtractionError("Failed to parse metadata")
    return records[0]


def detect_phone_type(make: str | None, model: str | None) -> str:
    if not make or not model:
        return UNKNOWN_PHONE
    make_l, model_l = make.lower(), model.lower()

    if "apple" in make_l or "iphone" in model_l:
        for generation in ("15", "14"):
            if generation in model_l and "pro" in model_l:
                return f"iPhone {generation} Pro"
            if generation in model_l:
                return f"iPhone {generation}"
        return "iPhone"
    if "samsung" in make_l or "galaxy" in model_l:
        return "Samsung Galaxy"
    if "google" in make_l or "pixel" in model_l:
        return "Google Pixel"
    return f"{make} {model}"


def _first_number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.search(str(value))
    return float(match.group(1)) if match else None


def detect_lens_type(raw: dict[str, Any]) -> str:
    lens_model = str(raw.get("LensModel") or "").lower()
    if lens_model:
        if "ultra wide" in lens_model or "ultrawide" in lens_model:
            return "Ultra Wide"
        if "telephoto" in lens_model:
            return "Telephoto"
        if "wide" in lens_model:
            return "Wide"

    focal = _first_number(raw.get("FocalLength"))
    if focal is not None:
        if focal < _ULTRA_WIDE_FOCAL_MM:
            return "Ultra Wide"
        if focal > _TELEPHOTO_FOCAL_MM:
            return "Telephoto"
        return "Wide"

    focal_35 = _first_number(raw.get("FocalLengthIn35mmFormat"))
    if focal_35 is not None:
        if focal_35 < _ULTRA_WIDE_35MM:
            return "Ultra Wide"
        if focal_35 > _TELEPHOTO_35MM:
            return "Telephoto"
        return "Wide"

    return "Wide"


def detect_flash(value: Any) -> bool:
    if not value:
        return False
    text = str(value).lower()
    if "did not fire" in text or ("off" in text and "fired" not in text):
        return False
    return "fired" in text or _FLASH_ON.search(text) is not None


def orientation_code(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return int(text)
    return _ORIENTATION_CODES.get(text)


def parse_gps(lat: Any, lon: Any) -> dict[str, float] | None:
    latitude = parse_dms_string(lat)
    longitude = parse_dms_string(lon)
    if latitude is None or longitude is None:
        return None
    return {"latitude": latitude, "longitude": longitude}


def _int_or_none(value: Any) -> int | None:
    number = _first_number(value)
    return int(number) if number is not None else None


def reshape_exiftool(raw: dict[str, Any]) -> dict[str, Any]:
    """Reshape one exiftool JSON object into the service payload."""
    make, model = raw.get("Make"), raw.get("Model")
    stamp = raw.get("DateTimeOriginal")
    split = split_exif_datetime(str(stamp)) if stamp else None
    hour = hour_of(split[1]) if split else None

    return {
        "phoneType": detect_phone_type(make, model),
        "lensType": detect_lens_type(raw),
        "lens": f"{make} {model}" if make and model else None,
        "iso": _int_or_none(raw.get("ISO") or raw.get("ISOSpeedRatings")),
        "aperture": _first_number(raw.get("FNumber")),
        "flash": detect_flash(raw.get("Flash")),
        "orientation": orientation_code(raw.get("Orientation")),
        "date": split[0] if split else None,
        "time": split[1] if split else None,
        "timeOfDay": time_of_day(hour) if hour is not None else None,
        "gps": parse_gps(raw.get("GPSLatitude"), raw.get("GPSLongitude")),
        "width": _int_or_none(raw.get("ImageWidth")),
        "height": _int_or_none(raw.get("ImageHeight")),
        "rawMetadata": raw,
    }
