"""
Exception hierarchy raised by the extraction engine.

All failures are deterministic for a given input and configuration, so none
of them is retried internally; callers decide what a failure means for the
item they were reading.
"""

from __future__ import annotations

from typing import Optional


class ReaderError(Exception):
    """Base class for every failure surfaced by pocketreader."""


class ParseError(ReaderError):
    """The input bytes could not be decoded as text.

    This is the only parser-level failure: malformed markup is recovered,
    never rejected. The fetched bytes may have been truncated upstream, so
    callers may choose to re-fetch the source page.
    """

    def __init__(self, message: str, encoding: Optional[str] = None) -> None:
        super().__init__(message)
        self.encoding = encoding


class ExtractionError(ReaderError):
    """No candidate reached the minimum score; treat as "content unavailable"."""

    def __init__(self, message: str, best_score: float = 0.0, min_score: float = 0.0) -> None:
        super().__init__(message)
        self.best_score = best_score
        self.min_score = min_score


class Cancelled(ReaderError):
    """The cancellation signal or deadline fired between two phases."""

    def __init__(self, phase: str) -> None:
        super().__init__(f"Extraction cancelled before phase '{phase}'")
        self.phase = phase
