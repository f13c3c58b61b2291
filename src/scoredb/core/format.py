"""
Data Format - small value helpers for building compact documents.

Stateless: used by schemas and application code, never by the storage layer.
"""

import math
import uuid as _uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any


class DataFormat:
    """Generators, normalizers and compact encoders for document values."""

    @staticmethod
    def uuid(existing: str | None = None) -> str:
        """Return existing when it is a non-empty string, else a new UUID4."""
        if existing and isinstance(existing, str):
            return existing
        return str(_uuid.uuid4())

    @staticmethod
    def timestamp(value: datetime | int | float | None = None) -> int | float:
        """Milliseconds since the epoch. Numbers pass through; anything else means now."""
        if isinstance(value, datetime):
            return int(value.timestamp() * 1000)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return int(datetime.now().timestamp() * 1000)

    @staticmethod
    def vector3(x: Any = 0, y: float | None = None, z: float | None = None) -> dict[str, float]:
        """
        Coordinates rounded to two decimals.

        Accepts three numbers, a mapping with x/y/z keys, or any object with
        x/y/z attributes (a location).
        """
        if isinstance(x, Mapping) and "x" in x:
            x, y, z = x.get("x"), x.get("y"), x.get("z")
        elif all(hasattr(x, axis) for axis in ("x", "y", "z")):
            x, y, z = x.x, x.y, x.z
        return {
            "x": round(float(x or 0), 2),
            "y": round(float(y or 0), 2),
            "z": round(float(z or 0), 2),
        }

    @staticmethod
    def clamp_number(
        value: Any,
        fallback: float = 0,
        minimum: float = -math.inf,
        maximum: float = math.inf,
    ) -> float:
        """Coerce value to a number (fallback when it isn't one) and clamp it."""
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = fallback
        if math.isnan(number):
            number = fallback
        clamped = max(minimum, min(maximum, number))
        if isinstance(clamped, float) and clamped.is_integer():
            return int(clamped)
        return clamped

    # =========================
    # Converters
    # =========================

    @staticmethod
    def to_binary(value: str | int) -> str:
        """Binary form of a number, or 8 bits per character of a string."""
        if isinstance(value, int) and not isinstance(value, bool):
            return format(value, "b")
        if isinstance(value, str):
            return "".join(format(ord(char), "08b") for char in value)
        return "0"

    @staticmethod
    def to_hex(value: str | int) -> str:
        """Hex form of a number, or 2 hex digits per character of a string."""
        if isinstance(value, int) and not isinstance(value, bool):
            return format(value, "x")
        if isinstance(value, str):
            return "".join(format(ord(char), "02x") for char in value)
        return "0"

    @staticmethod
    def to_bit(flag: Any) -> int:
        return 1 if flag else 0

    @staticmethod
    def to_csv(values: Any) -> str:
        """Join a list without JSON brackets and quotes: ["a", "b"] -> "a,b"."""
        if not isinstance(values, (list, tuple)):
            return ""
        return ",".join("" if value is None else str(value) for value in values)
