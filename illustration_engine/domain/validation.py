"""
Policy and registration input validation.

Every rule is evaluated and every violation collected; bad input never raises.
Both rule sets derive age through ``calculate_age``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import Field, TypeAdapter, ValidationError

from illustration_engine.logs import get_logger
from illustration_engine.models import (
    PolicyInput,
    PremiumFrequency,
    RegistrationInput,
    ValidatedPolicy,
)
from illustration_engine.schemas.validation import PolicyValidation, RegistrationValidation

logger = get_logger("domain.validation")

MIN_REGISTRATION_AGE = 18


@dataclass(frozen=True)
class PolicyLimits:
    min_age: int = 23
    max_age: int = 56
    min_premium_paying_term: int = 5
    max_premium_paying_term: int = 10
    min_policy_term: int = 10
    max_policy_term: int = 20
    min_modal_premium: Decimal = Decimal("10000")
    max_modal_premium: Decimal = Decimal("100000")
    min_sum_assured: Decimal = Decimal("500000")
    sum_assured_premium_multiple: int = 10

    def minimum_sum_assured(self, modal_premium: Optional[Decimal] = None) -> Decimal:
        """Higher of the absolute floor and ``multiple x modal premium``."""
        if modal_premium is None:
            return self.min_sum_assured
        return max(modal_premium * self.sum_assured_premium_multiple, self.min_sum_assured)


DEFAULT_LIMITS = PolicyLimits()

FREQUENCY_CHOICES = ", ".join(frequency.value for frequency in PremiumFrequency)


@dataclass(frozen=True)
class FieldSpec:
    keys: Tuple[str, ...]
    adapter: TypeAdapter
    label: str
    invalid: str


_AMOUNT = TypeAdapter(Annotated[Decimal, Field(allow_inf_nan=False)])
_WHOLE = TypeAdapter(int)

FIELDS: Dict[str, FieldSpec] = {
    "date_of_birth": FieldSpec(
        ("date_of_birth", "dob"), TypeAdapter(date), "Date of birth", "must be a valid date"
    ),
    "age": FieldSpec(("age", "calculated_age"), _WHOLE, "Age", "must be a whole number"),
    "sum_assured": FieldSpec(("sum_assured",), _AMOUNT, "Sum assured", "must be a number"),
    "modal_premium": FieldSpec(("modal_premium",), _AMOUNT, "Premium", "must be a number"),
    "premium_frequency": FieldSpec(
        ("premium_frequency",),
        TypeAdapter(PremiumFrequency),
        "Premium frequency",
        f"must be one of {FREQUENCY_CHOICES}",
    ),
    "policy_term": FieldSpec(("policy_term",), _WHOLE, "Policy term (PT)", "must be a whole number"),
    "premium_paying_term": FieldSpec(
        ("premium_paying_term",), _WHOLE, "Premium paying term (PPT)", "must be a whole number"
    ),
}

_REGISTRATION_LABELS = {
    "name": "Name",
    "email": "Email",
    "password": "Password",
    "mobile": "Mobile number",
    "date_of_birth": "Date of birth",
    "dob": "Date of birth",
    "gender": "Gender",
}

_REGISTRATION_MESSAGES = {
    ("email", "string_pattern_mismatch"): "Email must be a valid email address",
    ("mobile", "string_pattern_mismatch"): "Mobile number must be 10 digits",
}


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def read_field(data: Mapping[str, Any], name: str) -> Tuple[Any, Optional[str]]:
    """Parse one field from a raw mapping.

    Returns ``(value, None)`` on success or ``(None, message)`` when the field
    is missing or cannot be parsed.
    """
    spec = FIELDS[name]
    raw = next((data[key] for key in spec.keys if is_present(data.get(key))), None)
    if raw is None:
        return None, f"{spec.label} is required"
    if isinstance(raw, datetime):
        raw = raw.date()
    try:
        return spec.adapter.validate_python(raw), None
    except ValidationError:
        return None, f"{spec.label} {spec.invalid}"


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Age in completed years: the birthday must have been reached this year."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _plain(value: Union[int, Decimal]) -> str:
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def _range_error(
    value: Union[int, Decimal],
    low: Union[int, Decimal],
    high: Union[int, Decimal],
    label: str,
) -> Optional[str]:
    if value < low:
        return f"{label} must be minimum {_plain(low)}"
    if value > high:
        return f"{label} must be maximum {_plain(high)}"
    return None


def check_policy_rules(
    data: Mapping[str, Any],
    age: Optional[int],
    limits: PolicyLimits = DEFAULT_LIMITS,
) -> Tuple[List[str], Dict[str, Any]]:
    """Apply the age, term, premium, sum assured and frequency rules.

    ``age`` is skipped when None (the caller already reported why it is
    unknown). Returns the violations in rule order plus every field value that
    parsed, keyed by field name.
    """
    errors: List[str] = []
    values: Dict[str, Any] = {}

    def collect(name: str) -> Any:
        value, problem = read_field(data, name)
        if problem:
            errors.append(problem)
        else:
            values[name] = value
        return value

    if age is not None:
        problem = _range_error(age, limits.min_age, limits.max_age, "Age")
        if problem:
            errors.append(problem)

    premium_paying_term = collect("premium_paying_term")
    if premium_paying_term is not None:
        problem = _range_error(
            premium_paying_term,
            limits.min_premium_paying_term,
            limits.max_premium_paying_term,
            FIELDS["premium_paying_term"].label,
        )
        if problem:
            errors.append(problem)

    policy_term = collect("policy_term")
    if policy_term is not None:
        problem = _range_error(
            policy_term,
            limits.min_policy_term,
            limits.max_policy_term,
            FIELDS["policy_term"].label,
        )
        if problem:
            errors.append(problem)

    if policy_term is not None and premium_paying_term is not None and policy_term <= premium_paying_term:
        errors.append("Policy Term (PT) must be greater than Premium Paying Term (PPT)")

    modal_premium = collect("modal_premium")
    if modal_premium is not None:
        problem = _range_error(
            modal_premium,
            limits.min_modal_premium,
            limits.max_modal_premium,
            FIELDS["modal_premium"].label,
        )
        if problem:
            errors.append(problem)

    sum_assured = collect("sum_assured")
    if sum_assured is not None:
        minimum = limits.minimum_sum_assured(modal_premium)
        if sum_assured < minimum:
            errors.append(
                f"Sum assured must be minimum of {_plain(minimum)} "
                f"({limits.sum_assured_premium_multiple} times premium or "
                f"{_plain(limits.min_sum_assured)}, whichever is higher)"
            )

    collect("premium_frequency")

    return errors, values


def validate_policy(
    data: Union[Mapping[str, Any], PolicyInput],
    *,
    today: Optional[date] = None,
    limits: PolicyLimits = DEFAULT_LIMITS,
) -> PolicyValidation:
    """Check a candidate policy and derive the policyholder's age."""
    if isinstance(data, PolicyInput):
        data = data.model_dump()
    today = today or date.today()

    errors: List[str] = []
    age: Optional[int] = None

    date_of_birth, problem = read_field(data, "date_of_birth")
    if problem:
        errors.append(problem)
    else:
        age = calculate_age(date_of_birth, today)
        if date_of_birth > today:
            errors.append("Date of birth cannot be in the future")

    checkable_age = age if date_of_birth is not None and date_of_birth <= today else None
    rule_errors, values = check_policy_rules(data, checkable_age, limits)
    errors.extend(rule_errors)

    if errors:
        logger.debug("Policy validation failed", error_count=len(errors), age=age)
        return PolicyValidation(is_valid=False, errors=errors, age=age)

    policy = ValidatedPolicy(date_of_birth=date_of_birth, age=age, **values)
    return PolicyValidation(is_valid=True, errors=[], age=age, policy=policy)


def _describe(error: Mapping[str, Any]) -> str:
    field = str(error["loc"][0]) if error.get("loc") else "input"
    custom = _REGISTRATION_MESSAGES.get((field, error["type"]))
    if custom:
        return custom
    label = _REGISTRATION_LABELS.get(field, field)
    if error["type"] == "missing":
        return f"{label} is required"
    return f"{label}: {error['msg']}"


def validate_registration(
    data: Mapping[str, Any],
    *,
    today: Optional[date] = None,
) -> RegistrationValidation:
    """Check identity registration fields and the minimum registration age."""
    today = today or date.today()
    errors: List[str] = []

    try:
        registration = RegistrationInput.model_validate(data)
    except ValidationError as exc:
        errors.extend(_describe(error) for error in exc.errors())
        date_of_birth, _ = read_field(data, "date_of_birth") if isinstance(data, Mapping) else (None, None)
    else:
        date_of_birth = registration.date_of_birth

    age: Optional[int] = None
    if date_of_birth is not None:
        age = calculate_age(date_of_birth, today)
        if date_of_birth > today:
            errors.append("Date of birth cannot be in the future")
        elif age < MIN_REGISTRATION_AGE:
            errors.append(f"User must be at least {MIN_REGISTRATION_AGE} years old")

    if errors:
        logger.debug("Registration validation failed", error_count=len(errors))
    return RegistrationValidation(is_valid=not errors, errors=errors, age=age)
