"""HTTP routes for the Flask API."""

from datetime import date
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from illustration_engine.core.batch import project_batch
from illustration_engine.core.projection import (
    GUARANTEED_ADDITION_RATE,
    SURRENDER_MIN_YEAR,
    SURRENDER_VALUE_FACTOR,
    illustrate,
)
from illustration_engine.domain.validation import (
    DEFAULT_LIMITS,
    validate_policy,
    validate_registration,
)
from illustration_engine.errors import IllustrationError
from illustration_engine.logs import get_logger
from illustration_engine.models import PremiumFrequency
from illustration_engine.schemas.illustration import BulkRequest

api_bp = Blueprint("api", __name__)
logger = get_logger("api.routes")


class PayloadError(ValueError):
    """Request body is not a JSON object."""


@api_bp.errorhandler(PayloadError)
def _handle_payload_error(exc: PayloadError):
    return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify({"error": "Invalid request", "detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.BAD_REQUEST,
    )


@api_bp.errorhandler(IllustrationError)
def _handle_engine_error(exc: IllustrationError):
    logger.error("Calculation failed", error=str(exc), details=exc.details)
    return (
        jsonify({"error": "Calculation failed", "message": str(exc)}),
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )


def _json_object() -> Dict[str, Any]:
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")
    return payload


def _today() -> date:
    return current_app.config["TODAY_PROVIDER"]()


@api_bp.post("/calc/validate")
def validate_inputs() -> Any:
    """Run the policy rules without projecting."""
    validation = validate_policy(_json_object(), today=_today())
    return jsonify(
        {
            "is_valid": validation.is_valid,
            "errors": validation.errors,
            "calculated_age": validation.age,
            "message": "All validations passed" if validation.is_valid else "Validation failed",
        }
    )


@api_bp.post("/calc/illustration")
def calculate_illustration() -> Any:
    """Validate, then return the full illustration and maturity figures."""
    validation = validate_policy(_json_object(), today=_today())
    if not validation.is_valid:
        return (
            jsonify({"error": "Validation failed", "details": validation.errors}),
            HTTPStatus.BAD_REQUEST,
        )

    policy = validation.policy
    illustration = illustrate(policy)
    inputs = policy.model_dump(mode="json", exclude={"date_of_birth", "age"})
    inputs["calculated_age"] = policy.age

    return jsonify(
        {
            "message": "Illustration calculated successfully",
            "inputs": inputs,
            **illustration.model_dump(mode="json"),
        }
    )


@api_bp.get("/calc/rules")
def calculation_rules() -> Any:
    """Validation limits and the methodology behind each figure."""
    limits = DEFAULT_LIMITS
    return jsonify(
        {
            "validation_rules": {
                "premium_paying_term": {
                    "min": limits.min_premium_paying_term,
                    "max": limits.max_premium_paying_term,
                },
                "policy_term": {"min": limits.min_policy_term, "max": limits.max_policy_term},
                "modal_premium": {
                    "min": float(limits.min_modal_premium),
                    "max": float(limits.max_modal_premium),
                },
                "age": {"min": limits.min_age, "max": limits.max_age},
                "custom_rules": [
                    "Policy Term (PT) must be greater than Premium Paying Term (PPT)",
                    f"Sum assured must be minimum of {limits.sum_assured_premium_multiple} times premium "
                    f"or {limits.min_sum_assured}, whichever is higher",
                ],
            },
            "premium_frequencies": [frequency.value for frequency in PremiumFrequency],
            "gender_options": ["M", "F", "Other"],
            "calculation_methodology": {
                "annual_premium": "Modal Premium x Frequency Multiplier",
                "guaranteed_addition": (
                    f"{(GUARANTEED_ADDITION_RATE * 100).normalize():f}% of Sum Assured annually "
                    "during premium paying term"
                ),
                "total_benefit": "Sum Assured + Cumulative Guaranteed Additions",
                "surrender_value": (
                    f"{(SURRENDER_VALUE_FACTOR * 100).normalize():f}% of cumulative premiums paid "
                    f"(available from year {SURRENDER_MIN_YEAR})"
                ),
                "death_benefit": "Higher of Sum Assured or Total Benefit",
            },
        }
    )


@api_bp.post("/calc/bulk")
def bulk_calculation() -> Any:
    """Project many policies; failures are reported per policy."""
    bulk = BulkRequest.model_validate(_json_object())

    max_policies = current_app.config["BULK_MAX_POLICIES"]
    if len(bulk.policies) > max_policies:
        return (
            jsonify({"error": f"Batch size too large. Maximum allowed: {max_policies}"}),
            HTTPStatus.BAD_REQUEST,
        )

    results = project_batch(bulk.policies, today=_today())
    successful = [result for result in results if result.success]
    failed = [result for result in results if not result.success]

    return jsonify(
        {
            "message": "Bulk calculation completed",
            "summary": {
                "total_processed": len(results),
                "successful_count": len(successful),
                "failed_count": len(failed),
                "success_rate": f"{len(successful) / len(results) * 100:.2f}%",
            },
            "results": {
                "successful": [
                    {
                        "policy_id": result.id,
                        "annual_premium": float(result.data.annual_premium),
                        "maturity_benefit": float(result.data.summary.maturity_benefit),
                        "total_premiums_paid": float(result.data.summary.total_premiums_paid),
                    }
                    for result in successful
                ],
                "failed": [{"policy_id": result.id, "errors": result.errors} for result in failed],
            },
        }
    )


@api_bp.post("/auth/validate-registration")
def registration_check() -> Any:
    """Validate identity registration fields (no account is created)."""
    validation = validate_registration(_json_object(), today=_today())
    return jsonify(validation.model_dump(mode="json"))
