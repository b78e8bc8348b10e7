"""
Exception hierarchy for the illustration engine.

Business-rule violations are never raised; they come back as data on
``PolicyValidation`` / ``BatchOutcome``. The exceptions below signal broken
contracts between the engine and its caller.
"""

from __future__ import annotations


class IllustrationError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidPolicyError(IllustrationError):
    """The projector was handed something other than a ValidatedPolicy."""
    pass


class ArithmeticDegenerateError(IllustrationError):
    """A maturity figure divided by zero total premiums."""
    pass


class BatchConfigurationError(IllustrationError):
    """Batch projection was called with an unusable chunk size."""
    pass
