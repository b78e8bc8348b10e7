"""
Chunked batch projection over raw policy records.

Each record is checked and projected on its own; one bad record never stops
the run. Output order always matches input order.
"""

from __future__ import annotations

from concurrent.futures import Executor
from datetime import date
from functools import partial
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from illustration_engine.config import settings
from illustration_engine.core.projection import project
from illustration_engine.domain.validation import (
    DEFAULT_LIMITS,
    PolicyLimits,
    calculate_age,
    check_policy_rules,
    is_present,
    read_field,
)
from illustration_engine.errors import BatchConfigurationError, IllustrationError
from illustration_engine.logs import get_logger
from illustration_engine.models import ValidatedPolicy
from illustration_engine.schemas.illustration import BatchOutcome

logger = get_logger("core.batch")

REQUIRED_FIELDS = (
    "sum_assured",
    "modal_premium",
    "premium_frequency",
    "policy_term",
    "premium_paying_term",
)
AGE_KEYS = ("age", "calculated_age", "date_of_birth", "dob")


def check_completeness(record: Mapping[str, Any]) -> List[str]:
    """Presence-only check: every required field plus some source of age."""
    missing = [name for name in REQUIRED_FIELDS if not is_present(record.get(name))]
    if not any(is_present(record.get(key)) for key in AGE_KEYS):
        missing.append("calculated_age")
    if missing:
        return [f"Missing required fields: {', '.join(missing)}"]
    return []


def _resolve_age(record: Mapping[str, Any], today: date) -> Tuple[Optional[int], Optional[str]]:
    if any(is_present(record.get(key)) for key in ("age", "calculated_age")):
        return read_field(record, "age")
    date_of_birth, problem = read_field(record, "date_of_birth")
    if problem:
        return None, problem
    if date_of_birth > today:
        return None, "Date of birth cannot be in the future"
    return calculate_age(date_of_birth, today), None


def _describe(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
        for error in exc.errors()
    ]


def project_record(
    index: int,
    record: Mapping[str, Any],
    *,
    strict: bool,
    today: date,
    limits: PolicyLimits = DEFAULT_LIMITS,
) -> BatchOutcome:
    """Check and project one record, reporting any failure as data."""
    if not isinstance(record, Mapping):
        return BatchOutcome(id=index, success=False, errors=["Record must be an object"])

    record_id = record.get("id")
    if record_id is None:
        record_id = index
    elif not isinstance(record_id, (int, str)):
        record_id = str(record_id)

    errors = check_completeness(record)
    if errors:
        return BatchOutcome(id=record_id, success=False, errors=errors)

    age, problem = _resolve_age(record, today)
    if problem:
        return BatchOutcome(id=record_id, success=False, errors=[problem])

    if strict:
        errors, values = check_policy_rules(record, age, limits)
        if errors:
            return BatchOutcome(id=record_id, success=False, errors=errors)
    else:
        values = {name: record.get(name) for name in REQUIRED_FIELDS}

    try:
        policy = ValidatedPolicy.model_validate({**values, "age": age})
        data = project(policy)
    except ValidationError as exc:
        return BatchOutcome(id=record_id, success=False, errors=_describe(exc))
    except (IllustrationError, ArithmeticError) as exc:
        return BatchOutcome(id=record_id, success=False, errors=[str(exc)])

    return BatchOutcome(id=record_id, success=True, data=data)


def iter_batch(
    records: Sequence[Mapping[str, Any]],
    chunk_size: Optional[int] = None,
    *,
    strict: Optional[bool] = None,
    today: Optional[date] = None,
    executor: Optional[Executor] = None,
    limits: PolicyLimits = DEFAULT_LIMITS,
) -> Iterator[List[BatchOutcome]]:
    """Yield one list of outcomes per chunk, in input order.

    Returning control to the caller between chunks lets a host interleave
    other work; stopping iteration early leaves an ordered prefix.
    With ``executor`` the records of a chunk run in parallel through
    ``Executor.map``, which keeps input order. A non-positive ``chunk_size``
    raises ``BatchConfigurationError`` here, before any chunk is produced.
    """
    chunk_size = settings.BATCH_CHUNK_SIZE if chunk_size is None else chunk_size
    if chunk_size < 1:
        raise BatchConfigurationError(
            "chunk_size must be a positive integer", details={"chunk_size": chunk_size}
        )
    strict = settings.BATCH_STRICT_VALIDATION if strict is None else strict
    run = partial(project_record, strict=strict, today=today or date.today(), limits=limits)
    log = logger.bind(total=len(records), chunk_size=chunk_size, strict=strict)
    return _run_chunks(records, chunk_size, run, executor, log)


def _run_chunks(
    records: Sequence[Mapping[str, Any]],
    chunk_size: int,
    run: Callable[[int, Mapping[str, Any]], BatchOutcome],
    executor: Optional[Executor],
    log: Any,
) -> Iterator[List[BatchOutcome]]:
    for start in range(0, len(records), chunk_size):
        chunk = records[start:start + chunk_size]
        indices = range(start, start + len(chunk))
        if executor is not None:
            outcomes = list(executor.map(run, indices, chunk))
        else:
            outcomes = [run(index, record) for index, record in zip(indices, chunk)]

        log.debug(
            "Batch chunk processed",
            start=start,
            size=len(outcomes),
            failed=sum(1 for outcome in outcomes if not outcome.success),
        )
        yield outcomes


def project_batch(
    records: Sequence[Mapping[str, Any]],
    chunk_size: Optional[int] = None,
    *,
    strict: Optional[bool] = None,
    today: Optional[date] = None,
    executor: Optional[Executor] = None,
    limits: PolicyLimits = DEFAULT_LIMITS,
) -> List[BatchOutcome]:
    """Project every record; the result has one outcome per record, in order."""
    results: List[BatchOutcome] = []
    for outcomes in iter_batch(
        records,
        chunk_size,
        strict=strict,
        today=today,
        executor=executor,
        limits=limits,
    ):
        results.extend(outcomes)

    failed = sum(1 for outcome in results if not outcome.success)
    logger.info(
        "Batch projection completed",
        total=len(results),
        successful=len(results) - failed,
        failed=failed,
    )
    return results
