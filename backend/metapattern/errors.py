"""Errors surfaced to HTTP callers.

Everything else (extraction stages, frame rendering) recovers locally and
never raises past its own boundary.
"""

from __future__ import annotations


class MetapatternError(Exception):
    """Base class carrying a user-facing message and an HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MetadataExtractionError(MetapatternError):
    """exiftool missing, timed out, failed, or printed malformed JSON."""

    status_code = 500


class InvalidImageError(MetapatternError):
    """The selected upload is not an image."""

    status_code = 400


class InvalidParameterError(MetapatternError):
    """A render control value that cannot be applied."""

    status_code = 400
