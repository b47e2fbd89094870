"""Engine exceptions.

Insufficient data and degenerate risk are reported through the result
(NO_DATA / quantity 0), not raised. Only malformed input structure is an error.
"""

from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base exception for engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class StructuralInputError(EngineError):
    """Input is not shaped like a bar sequence (e.g. an object where a list was expected)."""
    pass
