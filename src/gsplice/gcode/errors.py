"""Exceptions raised while tokenizing and segmenting G-code."""

from __future__ import annotations

__all__ = [
    "GCodeError",
    "ParseError",
    "SegmentationError",
    "ToolNumberError",
]


class GCodeError(ValueError):
    """Base class for every structural G-code failure."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class ParseError(GCodeError):
    """Raised when a command word or a parameter cannot be parsed."""

    def __init__(self, message: str, *, line: str, line_number: int | None = None) -> None:
        super().__init__(message, line_number=line_number)
        self.line = line


class ToolNumberError(ParseError):
    """Raised when the digits of a ``T<n>`` toolchange are unusable."""


class SegmentationError(GCodeError):
    """Raised when layer or purge markers appear out of sequence."""
