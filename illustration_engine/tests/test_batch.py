from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from illustration_engine.core.batch import check_completeness, iter_batch, project_batch
from illustration_engine.errors import BatchConfigurationError

TODAY = date(2025, 6, 15)


def record(**overrides) -> dict:
    data = {
        "sum_assured": 1200000,
        "modal_premium": 80000,
        "premium_frequency": "Yearly",
        "policy_term": 18,
        "premium_paying_term": 10,
        "calculated_age": 30,
    }
    data.update(overrides)
    return data


def test_missing_field_fails_only_that_record():
    incomplete = record(id="B")
    del incomplete["policy_term"]
    records = [record(id="A"), incomplete, record(id="C")]

    results = project_batch(records, today=TODAY)

    assert [result.id for result in results] == ["A", "B", "C"]
    assert [result.success for result in results] == [True, False, True]
    assert results[1].errors == ["Missing required fields: policy_term"]
    assert results[1].data is None
    assert results[0].data.summary.maturity_benefit == Decimal("1800000")


def test_ids_default_to_input_position():
    results = project_batch([record(), record(id="x"), record()], chunk_size=2, today=TODAY)

    assert [result.id for result in results] == [0, "x", 2]


def test_completeness_requires_an_age_source():
    data = record()
    del data["calculated_age"]

    assert check_completeness(data) == ["Missing required fields: calculated_age"]
    assert check_completeness(record()) == []
    assert check_completeness({**data, "dob": "1995-01-10"}) == []


def test_dob_is_accepted_in_place_of_age():
    data = record(dob="1995-01-10")
    del data["calculated_age"]

    [result] = project_batch([data], today=TODAY)

    assert result.success
    assert result.data.illustrations[0].age == 30


def test_strict_mode_applies_business_rules():
    results = project_batch([record(premium_paying_term=3)], today=TODAY, strict=True)

    assert not results[0].success
    assert "Premium paying term (PPT) must be minimum 5" in results[0].errors


def test_legacy_mode_checks_presence_only():
    [result] = project_batch([record(premium_paying_term=3)], today=TODAY, strict=False)

    assert result.success
    assert result.data.summary.total_premiums_paid == Decimal("240000")


def test_unparseable_record_is_reported_not_raised():
    results = project_batch(
        [record(modal_premium="abc"), "not a record", record()],
        today=TODAY,
        strict=False,
    )

    assert [result.success for result in results] == [False, False, True]
    assert results[0].errors
    assert results[1].errors == ["Record must be an object"]


def test_chunks_are_yielded_in_order():
    records = [record(id=index) for index in range(7)]

    chunks = list(iter_batch(records, chunk_size=3, today=TODAY))

    assert [len(chunk) for chunk in chunks] == [3, 3, 1]
    assert [outcome.id for chunk in chunks for outcome in chunk] == list(range(7))


def test_stopping_early_leaves_ordered_prefix():
    records = [record(id=index) for index in range(10)]

    batches = iter_batch(records, chunk_size=4, today=TODAY)
    first = next(batches)

    assert [outcome.id for outcome in first] == [0, 1, 2, 3]


def test_parallel_execution_matches_sequential():
    records = [
        record(id=index, premium_paying_term=5 + index % 6, policy_term=11 + index % 9)
        for index in range(25)
    ]
    records[7] = {"id": 7, "sum_assured": 1200000}

    sequential = project_batch(records, chunk_size=4, today=TODAY)
    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = project_batch(records, chunk_size=4, today=TODAY, executor=executor)

    assert len(parallel) == len(records)
    assert parallel == sequential
    assert [outcome.id for outcome in parallel] == list(range(25))


def test_default_chunk_size_comes_from_settings():
    records = [record() for _ in range(3)]

    chunks = list(iter_batch(records, today=TODAY))

    assert len(chunks) == 1


def test_chunk_size_must_be_positive():
    with pytest.raises(BatchConfigurationError):
        project_batch([record()], chunk_size=0)


def test_iter_batch_rejects_chunk_size_before_iteration():
    with pytest.raises(BatchConfigurationError):
        iter_batch([record()], chunk_size=0, today=TODAY)


def test_precision_overflow_fails_only_that_record():
    results = project_batch([record(id="huge", sum_assured=10**200), record(id="ok")], today=TODAY)

    assert [result.success for result in results] == [False, True]
    assert results[0].errors == ["amounts exceed the supported currency precision"]
