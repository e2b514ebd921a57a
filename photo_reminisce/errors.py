"""Exception hierarchy for Photo Reminisce."""

from __future__ import annotations


class PhotoReminisceError(Exception):
    """Base class for all custom errors raised by Photo Reminisce."""


class UnsupportedInput(PhotoReminisceError):
    """Raised when an uploaded file is neither an image nor a convertible format."""


class MetadataReadError(PhotoReminisceError):
    """Raised when the byte buffer cannot be read as an image/tag container."""


class DecodeError(PhotoReminisceError):
    """Raised when image bytes cannot be rasterized."""


class EncodeError(PhotoReminisceError):
    """Raised when a rendered surface cannot be serialized to the target format."""


class SaveError(PhotoReminisceError):
    """Raised when the save sink fails to persist an exported file."""


class ExportInProgressError(PhotoReminisceError):
    """Raised when an export is started while another one is still running."""


class StyleNotFoundError(PhotoReminisceError):
    """Raised when a style preset file cannot be located."""


class ConversionError(DecodeError):
    """Raised when an exotic format (HEIC/HEIF) cannot be converted to JPEG."""
