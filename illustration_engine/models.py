from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from illustration_engine.schemas.illustration import Money


class PremiumFrequency(str, Enum):
    YEARLY = "Yearly"
    HALF_YEARLY = "Half-Yearly"
    MONTHLY = "Monthly"

    @property
    def installments(self) -> int:
        """Number of modal premiums paid in one policy year."""
        return _INSTALLMENTS[self]


_INSTALLMENTS = {
    PremiumFrequency.YEARLY: 1,
    PremiumFrequency.HALF_YEARLY: 2,
    PremiumFrequency.MONTHLY: 12,
}


class PolicyInput(BaseModel):
    """Caller-supplied policy parameters, before business rules are applied."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date_of_birth: date = Field(validation_alias=AliasChoices("date_of_birth", "dob"))
    sum_assured: Decimal
    modal_premium: Decimal
    premium_frequency: PremiumFrequency
    policy_term: int
    premium_paying_term: int


class ValidatedPolicy(BaseModel):
    """Policy parameters plus the derived age.

    Built by ``validate_policy`` (or the batch path) once every rule has
    passed; the projector accepts nothing else.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    date_of_birth: Optional[date] = None
    sum_assured: Money = Field(gt=0, allow_inf_nan=False)
    modal_premium: Money = Field(gt=0, allow_inf_nan=False)
    premium_frequency: PremiumFrequency
    policy_term: int = Field(ge=1)
    premium_paying_term: int = Field(ge=1)
    age: int = Field(ge=0)


class RegistrationInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=2, max_length=100)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6, max_length=50)
    mobile: str = Field(pattern=r"^[0-9]{10}$")
    date_of_birth: date = Field(validation_alias=AliasChoices("date_of_birth", "dob"))
    gender: Literal["M", "F", "Other"]
