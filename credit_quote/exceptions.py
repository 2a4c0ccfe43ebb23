"""Exceptions raised by the credit quote engine."""

from __future__ import annotations

from typing import Dict, Mapping


class QuoteError(Exception):
    """Base class for errors reported by the engine."""


class InvalidQuoteInput(QuoteError, ValueError):
    """The quote inputs or settings were rejected before any computation.

    ``errors`` maps each offending field to a human-readable reason, so that
    callers can report every problem at once rather than one per attempt.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        detail = "; ".join(f"{name}: {reason}" for name, reason in self.errors.items())
        super().__init__(f"Invalid quote input: {detail}")
