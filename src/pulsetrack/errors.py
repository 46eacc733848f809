"""Exceptions raised by the pulsetrack engine and loaders."""

from __future__ import annotations


class PulsetrackError(Exception):
    """Base class for all pulsetrack errors."""


class ValidationError(PulsetrackError, ValueError):
    """An input value is invalid (bad config, unsorted samples, ...)."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class TelemetryFormatError(PulsetrackError):
    """A telemetry export could not be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
