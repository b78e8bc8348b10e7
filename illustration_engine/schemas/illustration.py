"""Data contracts for the projector, the batch runner and the bulk endpoint."""

from decimal import Decimal
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Currency amounts stay Decimal in Python and become plain numbers in JSON.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class YearEntry(BaseModel):
    """Single policy year of a benefit illustration."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1)
    age: int
    premium_paid: Money
    cumulative_premium: Money
    guaranteed_addition: Money
    cumulative_guaranteed_addition: Money
    total_benefit: Money
    surrender_value: Money
    death_benefit: Money


class IllustrationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_premiums_paid: Money
    maturity_benefit: Money
    total_guaranteed_additions: Money


class ProjectionResult(BaseModel):
    """Full year-by-year schedule for one policy."""

    model_config = ConfigDict(frozen=True)

    annual_premium: Money
    illustrations: List[YearEntry]
    summary: IllustrationSummary


class MaturityDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    maturity_age: int
    maturity_benefit: Money
    total_premiums_paid: Money
    net_gain: Money
    return_percentage: Money = Field(..., description="Net gain as a percentage of premiums paid.")


class Illustration(BaseModel):
    """Projection and maturity figures computed from one schedule."""

    model_config = ConfigDict(frozen=True)

    calculation: ProjectionResult
    maturity_details: MaturityDetails


class BatchOutcome(BaseModel):
    """Per-record result of a batch run."""

    model_config = ConfigDict(frozen=True)

    id: Union[int, str, None]
    success: bool
    data: Optional[ProjectionResult] = None
    errors: List[str] = Field(default_factory=list)


class BulkRequest(BaseModel):
    """Body of the bulk illustration endpoint."""

    policies: List[Any] = Field(..., min_length=1)
