from __future__ import annotations

from datetime import date

import pytest
from flask.testing import FlaskClient

from illustration_engine.app import create_app

TODAY = date(2025, 6, 15)


@pytest.fixture()
def client() -> FlaskClient:
    flask_app = create_app(today_provider=lambda: TODAY)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def policy_payload() -> dict:
    return {
        "dob": "1995-01-10",
        "sum_assured": 1200000,
        "modal_premium": 80000,
        "premium_frequency": "Yearly",
        "policy_term": 18,
        "premium_paying_term": 10,
    }
