from __future__ import annotations

from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    localcontext,
)
from typing import List, Union

from illustration_engine.errors import ArithmeticDegenerateError, InvalidPolicyError
from illustration_engine.logs import get_logger
from illustration_engine.models import PremiumFrequency, ValidatedPolicy
from illustration_engine.schemas.illustration import (
    Illustration,
    IllustrationSummary,
    MaturityDetails,
    ProjectionResult,
    YearEntry,
)

logger = get_logger("core.projection")

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Significant digits for currency arithmetic; quantizing beyond it signals InvalidOperation.
MONEY_PRECISION = 100
MONEY_CONTEXT = Context(prec=MONEY_PRECISION, rounding=ROUND_HALF_UP)

# 5% of sum assured accrues each year of the premium paying term.
GUARANTEED_ADDITION_RATE = Decimal("0.05")
# Surrender pays 80% of premiums paid, from the third policy year onward.
SURRENDER_VALUE_FACTOR = Decimal("0.8")
SURRENDER_MIN_YEAR = 3


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Quantize to two fraction digits (ROUND_HALF_UP)."""
    with localcontext(MONEY_CONTEXT):
        return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def annual_premium(modal_premium: Decimal, frequency: PremiumFrequency) -> Decimal:
    """Modal premium times the number of installments in a year.

    No discount or loading applies to Half-Yearly or Monthly modes.
    """
    with localcontext(MONEY_CONTEXT):
        return to_money(Decimal(str(modal_premium)) * PremiumFrequency(frequency).installments)


def _require_validated(policy: object) -> ValidatedPolicy:
    if not isinstance(policy, ValidatedPolicy):
        raise InvalidPolicyError(
            "projection requires a ValidatedPolicy; run validate_policy first",
            details={"received": type(policy).__name__},
        )
    return policy


def project(policy: ValidatedPolicy) -> ProjectionResult:
    """
    Build the benefit illustration for years 1..policy_term (inclusive).

    Per year:
      1) Premium is paid only while year <= premium_paying_term.
      2) Guaranteed addition accrues on the same schedule.
      3) Total benefit = sum assured + cumulative guaranteed additions.
      4) Surrender value is available from year 3.
      5) Death benefit never drops below the sum assured.

    Amounts too large to carry two fraction digits within ``MONEY_PRECISION``
    raise ``ArithmeticDegenerateError``.
    """
    policy = _require_validated(policy)

    with localcontext(MONEY_CONTEXT):
        try:
            result = _build_schedule(policy)
        except InvalidOperation as exc:
            raise ArithmeticDegenerateError(
                "amounts exceed the supported currency precision",
                details={"sum_assured": str(policy.sum_assured), "precision": MONEY_PRECISION},
            ) from exc

    logger.debug(
        "Projection built",
        policy_term=policy.policy_term,
        premium_paying_term=policy.premium_paying_term,
        annual_premium=str(result.annual_premium),
    )
    return result


def _build_schedule(policy: ValidatedPolicy) -> ProjectionResult:
    premium = annual_premium(policy.modal_premium, policy.premium_frequency)
    sum_assured = to_money(policy.sum_assured)
    yearly_addition = to_money(sum_assured * GUARANTEED_ADDITION_RATE)
    paying_term = policy.premium_paying_term

    rows: List[YearEntry] = []
    for year in range(1, policy.policy_term + 1):
        paying = year <= paying_term
        years_paid = min(year, paying_term)

        cumulative_premium = premium * years_paid
        # Exact product; rounded only when stored on the row.
        cumulative_addition = sum_assured * GUARANTEED_ADDITION_RATE * years_paid
        total_benefit = sum_assured + cumulative_addition
        surrender_value = cumulative_premium * SURRENDER_VALUE_FACTOR if year >= SURRENDER_MIN_YEAR else ZERO

        rows.append(
            YearEntry(
                year=year,
                age=policy.age + year - 1,
                premium_paid=premium if paying else ZERO,
                cumulative_premium=to_money(cumulative_premium),
                guaranteed_addition=yearly_addition if paying else ZERO,
                cumulative_guaranteed_addition=to_money(cumulative_addition),
                total_benefit=to_money(total_benefit),
                surrender_value=to_money(surrender_value),
                death_benefit=to_money(max(sum_assured, total_benefit)),
            )
        )

    final = rows[-1]
    summary = IllustrationSummary(
        total_premiums_paid=to_money(premium * paying_term),
        maturity_benefit=final.total_benefit,
        total_guaranteed_additions=final.cumulative_guaranteed_addition,
    )
    return ProjectionResult(annual_premium=premium, illustrations=rows, summary=summary)


def _maturity_from(result: ProjectionResult) -> MaturityDetails:
    final = result.illustrations[-1]
    total_paid = result.summary.total_premiums_paid

    with localcontext(MONEY_CONTEXT):
        net_gain = final.total_benefit - total_paid
        try:
            return_percentage = net_gain / total_paid * 100
        except (DivisionByZero, InvalidOperation) as exc:
            raise ArithmeticDegenerateError(
                "return percentage is undefined when total premiums paid is zero",
                details={"total_premiums_paid": str(total_paid)},
            ) from exc

    return MaturityDetails(
        maturity_age=final.age,
        maturity_benefit=final.total_benefit,
        total_premiums_paid=total_paid,
        net_gain=to_money(net_gain),
        return_percentage=to_money(return_percentage),
    )


def maturity_details(policy: ValidatedPolicy) -> MaturityDetails:
    """Maturity age, benefit, net gain and return taken from the final policy year.

    Total premiums paid is never zero for a policy built by the validator; a
    zero here means the invariants were bypassed and raises
    ``ArithmeticDegenerateError``.
    """
    return _maturity_from(project(policy))


def illustrate(policy: ValidatedPolicy) -> Illustration:
    """Projection plus maturity figures from a single schedule."""
    result = project(policy)
    return Illustration(calculation=result, maturity_details=_maturity_from(result))


__all__ = [
    "GUARANTEED_ADDITION_RATE",
    "SURRENDER_MIN_YEAR",
    "SURRENDER_VALUE_FACTOR",
    "annual_premium",
    "illustrate",
    "maturity_details",
    "project",
    "to_money",
]
