"""ImageMetadata: the per-upload guess of capture conditions.

Every field is optional and independently filled; nothing here enforces
consistency between fields (an aperture need not match its lens class).
Extraction stages exchange *partial records*: plain dicts holding only the
fields they could determine, keyed by the attribute names below.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass(frozen=True)
class GPSCoordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ImageMetadata:
    phone_type: str | None = None
    lens_type: str | None = None
    lens: str | None = None
    iso: int | None = None
    aperture: float | None = None
    flash: bool | None = None
    orientation: int | None = None
    date: str | None = None
    time: str | None = None
    time_of_day: str | None = None
    season: str | None = None
    gps: GPSCoordinates | None = None
    width: int | None = None
    height: int | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_partial(cls, partial: dict[str, Any]) -> ImageMetadata:
        """Build a record from a partial dict, ignoring unknown keys."""
        known = set(cls.field_names())
        values = {k: v for k, v in partial.items() if k in known and v is not None}
        gps = values.get("gps")
        if isinstance(gps, dict):
            lat, lon = gps.get("latitude"), gps.get("longitude")
            values["gps"] = (
                GPSCoordinates(float(lat), float(lon))
                if lat is not None and lon is not None
                else None
            )
        return cls(**values)

    def to_partial(self) -> dict[str, Any]:
        """Only the fields that are set."""
        return {
            name: getattr(self, name)
            for name in self.field_names()
            if getattr(self, name) is not None
        }

    def to_api(self) -> dict[str, Any]:
        """camelCase shape used by the HTTP API."""
        return {
            "phoneType": self.phone_type,
            "lensType": self.lens_type,
            "lens": self.lens,
            "iso": self.iso,
            "aperture": self.aperture,
            "flash": self.flash,
            "orientation": self.orientation,
            "date": self.date,
            "time": self.time,
            "timeOfDay": self.time_of_day,
            "season": self.season,
            "gps": asdict(self.gps) if self.gps else None,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ImageMetadata:
        """Inverse of :meth:`to_api`; tolerant of missing keys."""
        return cls.from_partial(api_to_partial(data))


_API_KEYS = {
    "phoneType": "phone_type",
    "lensType": "lens_type",
    "lens": "lens",
    "iso": "iso",
    "aperture": "aperture",
    "flash": "flash",
    "orientation": "orientation",
    "date": "date",
    "time": "time",
    "timeOfDay": "time_of_day",
    "season": "season",
    "gps": "gps",
    "width": "width",
    "height": "height",
}


# Placeholder phone type the service reports when Make/Model are missing.
UNKNOWN_PHONE = "Unknown"

# Raw exiftool tags behind each service field that has a default.
_RAW_SOURCES = {
    "lens_type": ("LensModel", "FocalLength", "FocalLengthIn35mmFormat"),
    "flash": ("Flash",),
}


def api_to_partial(data: dict[str, Any]) -> dict[str, Any]:
    """Convert a camelCase service payload into a partial record.

    Service placeholders (``"Unknown"`` phone, the default lens and flash
    when the raw tags are absent) are dropped so later stages can fill them.
    """
    partial: dict[str, Any] = {}
    for api_key, name in _API_KEYS.items():
        value = data.get(api_key)
        if value is None:
            continue
        if name == "gps":
            if not isinstance(value, dict):
                continue
            lat, lon = value.get("latitude"), value.get("longitude")
            if lat is None or lon is None:
                continue
            value = GPSCoordinates(float(lat), float(lon))
        partial[name] = value

    if partial.get("phone_type") == UNKNOWN_PHONE:
        del partial["phone_type"]
    raw = data.get("rawMetadata")
    if isinstance(raw, dict):
        for name, tags in _RAW_SOURCES.items():
            if name in partial and not any(raw.get(tag) is not None for tag in tags):
                del partial[name]
    return partial
