"""Exception types raised by ninjanet."""

from __future__ import annotations


class NinjaError(Exception):
    """Base class for all ninjanet errors."""


class DimensionMismatchError(NinjaError, ValueError):
    """Raised when operand shapes are incompatible."""


class OutOfRangeError(NinjaError, IndexError):
    """Raised when an element index falls outside a matrix."""


class _LineError(NinjaError, ValueError):
    def __init__(self, message: str, lineno: int | None = None) -> None:
        self.lineno = lineno
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


class ModelFormatError(_LineError):
    """Raised when model text cannot be parsed."""


class ExampleFormatError(_LineError):
    """Raised when a sparse example line cannot be parsed."""


__all__ = [
    "NinjaError",
    "DimensionMismatchError",
    "OutOfRangeError",
    "ModelFormatError",
    "ExampleFormatError",
]
