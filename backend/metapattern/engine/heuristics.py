"""Best-effort guesses of capture conditions.

None of this is measurement. Pixel statistics, filenames and file sizes are
mapped onto plausible camera settings, and where nothing is known a value is
drawn from a fixed distribution. Every random draw goes through an explicit
``random.Random`` handle so callers can seed the whole cascade.

The probability weights below are tuning constants carried over unchanged;
they encode no deeper model of real devices.
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Any

import numpy as np
from PIL import Image

# ── Time helpers ──

# Daylight window, inclusive start / exclusive end, in local hours.
_DAY_START_HOUR = 6
_DAY_END_HOUR = 18


def time_of_day(hour: int) -> str:
    return "day" if _DAY_START_HOUR <= hour < _DAY_END_HOUR else "night"


def season_for_month(month: int) -> str:
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "autumn"
    return "winter"


# ── Pixel analysis ──

# Sample every 10th pixel.
_PIXEL_STRIDE = 10

# Colour-variance → ISO buckets: (upper bound, iso).
_VARIANCE_ISO_BUCKETS = ((20.0, 32), (40.0, 100), (60.0, 200))
_VARIANCE_ISO_MAX = 400

_BRIGHT_NO_FLASH = 200.0
_DARK_FLASH = 100.0
_BRIGHT_DAY = 150.0
_DARK_NIGHT = 80.0

# Flash probability for mid-brightness images; day probability when unsure.
_FLASH_PROBABILITY = 0.2
_DAY_PROBABILITY = 0.7

_PORTRAIT_ASPECT = (0.7, 0.8)
_HIGH_RES_MEGAPIXELS = 10.0

_MB = 1_000_000


def pixel_statistics(image: Image.Image) -> tuple[float, float]:
    """Mean brightness and mean colour variance over a strided pixel sample."""
    rgb = np.asarray(image.convert("RGB")).reshape(-1, 3)
    sample = rgb[::_PIXEL_STRIDE].astype(np.float64)
    if len(sample) == 0:
        return 0.0, 0.0
    avg = sample.mean(axis=1, keepdims=True)
    brightness = float(avg.mean())
    variance = float(np.abs(sample - avg).sum(axis=1).mean())
    return brightness, variance


def iso_for_variance(variance: float) -> int:
    for upper, iso in _VARIANCE_ISO_BUCKETS:
        if variance < upper:
            return iso
    return _VARIANCE_ISO_MAX


def analyze_pixels(
    image: Image.Image,
    file_size: int,
    rng: random.Random,
) -> dict[str, Any]:
    """Guess exposure and time of day from pixel statistics.

    Device, lens and aperture are only guessed for high-resolution portrait
    frames; anything else is left for the filename heuristics.
    """
    width, height = image.size
    result: dict[str, Any] = {"width": width, "height": height}
    if width <= 0 or height <= 0:
        return result

    brightness, variance = pixel_statistics(image)

    aspect = width / height
    megapixels = width * height / _MB
    if _PORTRAIT_ASPECT[0] < aspect < _PORTRAIT_ASPECT[1] and megapixels > _HIGH_RES_MEGAPIXELS:
        result["phone_type"] = "iPhone 15 Pro"
        if _MB < file_size < 2 * _MB:
            result["lens_type"] = "Ultra Wide"
            result["aperture"] = 2.2
        elif file_size > 2 * _MB:
            result["lens_type"] = "Wide"
            result["aperture"] = 1.8
        else:
            result["lens_type"] = "Front"
            result["aperture"] = 1.8

    result["iso"] = iso_for_variance(variance)

    if brightness > _BRIGHT_NO_FLASH:
        result["flash"] = False
    elif brightness < _DARK_FLASH:
        result["flash"] = True
    else:
        result["flash"] = rng.random() < _FLASH_PROBABILITY

    if brightness > _BRIGHT_DAY:
        result["time_of_day"] = "day"
    elif brightness < _DARK_NIGHT:
        result["time_of_day"] = "night"
    else:
        result["time_of_day"] = "day" if rng.random() < _DAY_PROBABILITY else "night"

    return result


# ── Device detection from make/model ──

_PRO_LENSES = (("Wide", 0.4), ("Ultra Wide", 0.3), ("Telephoto", 0.2), ("Front", 0.1))
_ULTRA_LENSES = (("Wide", 0.3), ("Ultra Wide", 0.3), ("Telephoto", 0.4))


def weighted_choice(options: tuple[tuple[str, float], ...], rng: random.Random) -> str:
    """Pick from ``(value, weight)`` pairs by walking the cumulative weights."""
    roll = rng.random()
    cumulative = 0.0
    for value, weight in options:
        cumulative += weight
        if roll < cumulative:
            return value
    return options[-1][0]


def _wide_or_ultra(rng: random.Random, ultra_probability: float) -> str:
    return "Ultra Wide" if rng.random() < ultra_probability else "Wide"


def detect_device(make: str, model: str, rng: random.Random) -> tuple[str, str]:
    """Map EXIF make/model to ``(device class, lens class)``."""
    make_l = (make or "").lower()
    model_l = (model or "").lower()

    if "apple" in make_l or "iphone" in model_l:
        for generation in ("15", "14", "13", "12"):
            if generation in model_l and "pro" in model_l:
                name = f"iPhone {generation} Pro"
                return name, weighted_choice(_PRO_LENSES, rng)
            if generation in model_l:
                return f"iPhone {generation}", _wide_or_ultra(rng, 0.2)
        return "iPhone", _wide_or_ultra(rng, 0.3)

    if "samsung" in make_l or "galaxy" in model_l:
        for generation in ("s24", "s23"):
            label = f"Samsung Galaxy {generation.upper()}"
            if generation in model_l and "ultra" in model_l:
                return f"{label} Ultra", weighted_choice(_ULTRA_LENSES, rng)
            if generation in model_l:
                return label, _wide_or_ultra(rng, 0.3)
        return "Samsung Galaxy", _wide_or_ultra(rng, 0.4)

    if "google" in make_l or "pixel" in model_l:
        for generation in ("8", "7"):
            if generation in model_l and "pro" in model_l:
                return f"Google Pixel {generation} Pro", "Ultra Wide"
            if generation in model_l:
                return f"Google Pixel {generation}", "Wide"
        return "Google Pixel", "Wide"

    if "oneplus" in make_l:
        return "OnePlus", "Wide"
    if "xiaomi" in make_l or "mi" in model_l:
        return "Xiaomi", "Wide"
    return "Smartphone", "Wide"


# ── Filename / file-size heuristics ──

# IMG_20230615_143000, PXL_20230615_143000123, 20230615_143000, VID-20230615-143000
_FILENAME_TIMESTAMP = re.compile(
    r"(?:^|[^0-9])(\d{4})(\d{2})(\d{2})[_-]?(\d{2})(\d{2})(\d{2})"
)

_LENSES_WIDE_ULTRA_TELE = ("Wide", "Ultra Wide", "Telephoto")
_LENSES_ULTRA_TELE = ("Ultra Wide", "Telephoto")
_MIDSIZE_IPHONE_LENSES = (("Wide", 0.4), ("Ultra Wide", 0.4), ("Telephoto", 0.15), ("Front", 0.05))
_MEDIUM_FILE_LENSES = (("Wide", 0.6), ("Ultra Wide", 0.2), ("Telephoto", 0.2))
_SMALL_FILE_LENSES = (("Wide", 0.7), ("Front", 0.2), ("Ultra Wide", 0.1))
_SMALL_FILE_ISOS = (32, 64, 100, 200, 400)


def _is_iphone_name(name: str) -> bool:
    return "img_" in name or "iphone" in name


def device_from_file(filename: str, file_size: int) -> str:
    name = filename.lower()
    if _is_iphone_name(name):
        if file_size > 8 * _MB:
            return "iPhone 15 Pro"
        if file_size > 6 * _MB:
            return "iPhone 15"
        if file_size > 4 * _MB:
            return "iPhone 14 Pro"
        return "iPhone 15 Pro"
    if "samsung" in name or "galaxy" in name:
        if file_size > 10 * _MB:
            return "Samsung Galaxy S24 Ultra"
        if file_size > 6 * _MB:
            return "Samsung Galaxy S24"
        return "Samsung Galaxy"
    if "pixel" in name:
        return "Google Pixel 8 Pro" if file_size > 8 * _MB else "Google Pixel 8"
    if "oneplus" in name:
        return "OnePlus"
    if "xiaomi" in name or "mi" in name:
        return "Xiaomi"
    if file_size > 10 * _MB:
        return "Professional DSLR"
    if file_size > 5 * _MB:
        return "Smartphone"
    return "Basic Camera"


def lens_from_file(filename: str, file_size: int, aspect: float, rng: random.Random) -> str:
    name = filename.lower()
    if _is_iphone_name(name):
        if any(hint in name for hint in ("front", "selfie", "portrait")):
            return "Front"
        if file_size > 10 * _MB:
            return "Telephoto" if rng.random() > 0.6 else "Ultra Wide"
        if file_size > 8 * _MB:
            return rng.choice(_LENSES_WIDE_ULTRA_TELE)
        if file_size > 6 * _MB:
            return "Ultra Wide" if rng.random() > 0.8 else "Wide"
        if file_size > 4 * _MB:
            return rng.choice(_LENSES_WIDE_ULTRA_TELE)
        if file_size < 2 * _MB:
            return "Front" if rng.random() > 0.7 else "Wide"
        return weighted_choice(_MIDSIZE_IPHONE_LENSES, rng)

    if "samsung" in name or "galaxy" in name:
        if file_size > 10 * _MB:
            return rng.choice(_LENSES_ULTRA_TELE)
        if file_size > 6 * _MB:
            return "Ultra Wide" if rng.random() > 0.7 else "Wide"
        return "Ultra Wide" if rng.random() > 0.8 else "Wide"

    if "pixel" in name:
        if file_size > 8 * _MB:
            return rng.choice(_LENSES_ULTRA_TELE)
        return "Wide" if rng.random() > 0.6 else "Ultra Wide"

    if aspect > 1.5:
        return "Ultra Wide" if rng.random() > 0.3 else "Wide"
    if aspect < 0.7:
        return "Telephoto" if rng.random() > 0.4 else "Front"
    if file_size > 8 * _MB:
        return rng.choice(_LENSES_ULTRA_TELE)
    if file_size > 5 * _MB:
        return weighted_choice(_MEDIUM_FILE_LENSES, rng)
    return weighted_choice(_SMALL_FILE_LENSES, rng)


def iso_from_file(file_size: int, rng: random.Random) -> int:
    if file_size > 8 * _MB:
        return 32 if rng.random() > 0.5 else 64
    if file_size > 4 * _MB:
        return 100 if rng.random() > 0.5 else 200
    return rng.choice(_SMALL_FILE_ISOS)


def aperture_for(phone_type: str | None, lens_type: str | None, rng: random.Random) -> float:
    coin = rng.random() > 0.5
    if phone_type and "iPhone" in phone_type:
        if lens_type == "Wide":
            return 1.5 if coin else 1.8
        if lens_type == "Ultra Wide":
            return 2.2 if coin else 2.4
        if lens_type == "Telephoto":
            return 2.8 if coin else 3.0
        return 1.8
    if phone_type and "Samsung" in phone_type:
        return 1.8 if coin else 2.4
    return 1.8 if coin else 2.2


def orientation_for_aspect(aspect: float) -> int:
    # EXIF codes: 1 landscape, 6 rotated 90° CW (portrait).
    if aspect < 0.8:
        return 6
    return 1


def timestamp_from_filename(filename: str) -> datetime | None:
    match = _FILENAME_TIMESTAMP.search(filename)
    if not match:
        return None
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def guess_from_file(
    filename: str,
    file_size: int,
    aspect: float,
    known: dict[str, Any],
    rng: random.Random,
    last_modified: datetime | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Fill capture settings from the file's name and size.

    ``known`` is the record accumulated by earlier stages; it steers the
    aperture and season guesses but is never overwritten here.
    """
    now = now or datetime.now()
    guess: dict[str, Any] = {}

    phone_type = known.get("phone_type") or device_from_file(filename, file_size)
    lens_type = known.get("lens_type") or lens_from_file(filename, file_size, aspect, rng)
    guess["phone_type"] = phone_type
    guess["lens_type"] = lens_type
    guess["lens"] = f"{phone_type} {lens_type}"

    guess["iso"] = iso_from_file(file_size, rng)
    guess["aperture"] = aperture_for(phone_type, lens_type, rng)
    guess["flash"] = rng.random() < _FLASH_PROBABILITY
    guess["orientation"] = orientation_for_aspect(aspect)

    captured = timestamp_from_filename(filename) or last_modified
    if captured is not None:
        guess["date"] = captured.strftime("%Y-%m-%d")
        guess["time"] = captured.strftime("%H:%M:%S")
        guess["time_of_day"] = time_of_day(captured.hour)
    else:
        guess["time_of_day"] = "day" if rng.random() < _DAY_PROBABILITY else "night"

    date = known.get("date") or guess.get("date")
    month = _month_of(date) or now.month
    guess["season"] = season_for_month(month)
    return guess


def _month_of(date: str | None) -> int | None:
    if not date:
        return None
    try:
        return datetime.strptime(date[:10], "%Y-%m-%d").month
    except ValueError:
        return None
