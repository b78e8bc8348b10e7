"""Benefit illustration engine: policy validation and year-by-year projection."""

from illustration_engine.core.batch import iter_batch, project_batch
from illustration_engine.core.projection import annual_premium, illustrate, maturity_details, project
from illustration_engine.domain.validation import (
    PolicyLimits,
    calculate_age,
    validate_policy,
    validate_registration,
)
from illustration_engine.errors import (
    ArithmeticDegenerateError,
    BatchConfigurationError,
    IllustrationError,
    InvalidPolicyError,
)
from illustration_engine.models import PolicyInput, PremiumFrequency, ValidatedPolicy

__all__ = [
    "ArithmeticDegenerateError",
    "BatchConfigurationError",
    "IllustrationError",
    "InvalidPolicyError",
    "PolicyInput",
    "PolicyLimits",
    "PremiumFrequency",
    "ValidatedPolicy",
    "annual_premium",
    "calculate_age",
    "illustrate",
    "iter_batch",
    "maturity_details",
    "project",
    "project_batch",
    "validate_policy",
    "validate_registration",
]
