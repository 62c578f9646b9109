"""Embedded EXIF tag reading and GPS conversion."""

from __future__ import annotations

import io
import logging
import random
import re
from typing import Any

from PIL import ExifTags, Image, UnidentifiedImageError

from metapattern.engine.heuristics import detect_device, time_of_day
from metapattern.models.metadata import GPSCoordinates

logger = logging.getLogger(__name__)

_NEGATIVE_REFS = {"S", "W"}

# exiftool prints coordinates as: 40 deg 40' 39.25" N
_DMS_STRING = re.compile(r"(\d+(?:\.\d+)?) deg (\d+(?:\.\d+)?)' ([\d.]+)\"\s*([NSEW])")

# Flash tag bit 0: the flash fired.
_FLASH_FIRED_BIT = 0x1


def dms_to_decimal(
    degrees: float,
    minutes: float,
    seconds: float,
    ref: str | None,
) -> float:
    """Degrees/minutes/seconds to signed decimal degrees.

    Negative iff the hemisphere reference is S or W.
    """
    dd = float(degrees) + float(minutes) / 60 + float(seconds) / 3600
    if ref and ref.strip().upper() in _NEGATIVE_REFS:
        dd = -dd
    return dd


def dms_triple_to_decimal(dms: Any, ref: str | None) -> float | None:
    """Convert an EXIF rational triple; ``None`` when malformed."""
    try:
        if dms is None or len(dms) != 3:
            return None
        return dms_to_decimal(float(dms[0]), float(dms[1]), float(dms[2]), ref)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def parse_dms_string(value: str | None) -> float | None:
    if not value:
        return None
    match = _DMS_STRING.search(str(value))
    if not match:
        return None
    deg, minutes, seconds, ref = match.groups()
    return dms_to_decimal(float(deg), float(minutes), float(seconds), ref)


def split_exif_datetime(value: str) -> tuple[str, str] | None:
    """``"2023:06:15 14:30:00"`` -> ``("2023-06-15", "14:30:00")``."""
    parts = str(value).strip().split(" ")
    if len(parts) < 2:
        return None
    date_part, time_part = parts[0], parts[1]
    if len(date_part) != 10 or ":" not in time_part:
        return None
    return date_part.replace(":", "-"), time_part


def hour_of(time_str: str | None) -> int | None:
    if not time_str:
        return None
    try:
        return int(time_str.split(":")[0])
    except ValueError:
        return None


def read_embedded_tags(content: bytes, rng: random.Random) -> dict[str, Any]:
    """Read capture tags from the file's EXIF block.

    Returns only the fields present; an unreadable file yields ``{}``.
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            exif = img.getexif()
            exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
            gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.debug("No readable EXIF block: %s", e)
        return {}

    tags: dict[str, Any] = {}

    make = _text(exif.get(ExifTags.Base.Make))
    model = _text(exif.get(ExifTags.Base.Model))
    if make and model:
        phone_type, lens_type = detect_device(make, model, rng)
        tags["phone_type"] = phone_type
        tags["lens_type"] = lens_type
        tags["lens"] = f"{make} {model}"
    elif make or model:
        tags["phone_type"] = make or model
        tags["lens"] = make or model

    iso = exif_ifd.get(ExifTags.Base.ISOSpeedRatings)
    if isinstance(iso, (tuple, list)):
        iso = iso[0] if iso else None
    if iso:
        tags["iso"] = int(iso)

    f_number = exif_ifd.get(ExifTags.Base.FNumber)
    if f_number:
        tags["aperture"] = round(float(f_number), 2)

    flash = exif_ifd.get(ExifTags.Base.Flash)
    if flash is not None:
        tags["flash"] = bool(int(flash) & _FLASH_FIRED_BIT)

    orientation = exif.get(ExifTags.Base.Orientation)
    if orientation:
        tags["orientation"] = int(orientation)

    stamp = exif_ifd.get(ExifTags.Base.DateTimeOriginal) or exif.get(ExifTags.Base.DateTime)
    split = split_exif_datetime(_text(stamp)) if stamp else None
    if split:
        tags["date"], tags["time"] = split
        hour = hour_of(split[1])
        if hour is not None:
            tags["time_of_day"] = time_of_day(hour)

    lat = dms_triple_to_decimal(
        gps_ifd.get(ExifTags.GPS.GPSLatitude), _text(gps_ifd.get(ExifTags.GPS.GPSLatitudeRef))
    )
    lon = dms_triple_to_decimal(
        gps_ifd.get(ExifTags.GPS.GPSLongitude), _text(gps_ifd.get(ExifTags.GPS.GPSLongitudeRef))
    )
    if lat is not None and lon is not None:
        tags["gps"] = GPSCoordinates(latitude=lat, longitude=lon)

    return tags


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).strip("\x00 ").strip()
