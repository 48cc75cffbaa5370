"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class PaperSize(_EnumMixin):
    """Named page size presets."""

    A4 = "a4"
    A3 = "a3"
    A5 = "a5"
    LETTER = "letter"
    LEGAL = "legal"
    TABLOID = "tabloid"


class LengthUnit(_EnumMixin):
    """Units accepted for custom sizes and absolute margins."""

    INCH = "inch"
    MM = "mm"
    PT = "pt"


class CropMode(_EnumMixin):
    """How crop margins are interpreted."""

    ABSOLUTE = "absolute"
    PERCENTAGE = "percentage"


class NUpDirection(_EnumMixin):
    """Orientation of the N-up grid."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class CompressionMode(_EnumMixin):
    """Compression strategy."""

    VECTOR = "vector"
    BITMAP = "bitmap"


class CompressionPreset(_EnumMixin):
    """Bitmap compression quality presets."""

    HIGH_STRENGTH = "high-strength"
    QUALITY_FIRST = "quality-first"


class ImageFormat(_EnumMixin):
    """Encoded raster formats."""

    JPEG = "jpeg"
    PNG = "png"


class OperationStatus(_EnumMixin):
    """Lifecycle of a long-running operation."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
