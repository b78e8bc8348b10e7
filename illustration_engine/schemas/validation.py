"""Results returned by the policy and registration validators."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from illustration_engine.models import ValidatedPolicy


class PolicyValidation(BaseModel):
    """Outcome of ``validate_policy``.

    ``age`` is filled whenever the date of birth parses, even when other rules
    fail. ``policy`` is only present when ``is_valid`` is true.
    """

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    age: Optional[int] = None
    policy: Optional[ValidatedPolicy] = None


class RegistrationValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    age: Optional[int] = None
