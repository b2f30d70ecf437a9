"""Pytest configuration and shared fixtures."""

import copy

import pytest

from schemas.anomaly import IdentityForm
from schemas.source import Bureau


SUBMITTED_FORM = {
    "firstName": "Jane",
    "lastName": "Smith",
    "middleName": "",
    "ssn": "123-45-6789",
    "birthDate": "1990-04-12",
    "addressLine1": "42 Elm Street",
    "city": "Springfield",
    "state": "IL",
    "postalCode": "62704",
    "phone": "217-555-0100",
    "email": "jane@example.com",
}


def make_payload(
    ssn="123456789",
    first_name="JANE",
    last_name="SMITH",
    birth_date="1990-04-12",
    score=720,
    tradelines=None,
    **extra,
):
    """Build a bureau payload in the common CRS standard shape."""
    payload = {
        "requestData": {
            "firstName": first_name,
            "lastName": last_name,
            "ssn": ssn,
            "birthDate": birth_date,
            "addresses": [
                {"addressLine1": "42 ELM STREET", "city": "SPRINGFIELD", "state": "IL", "postalCode": "62704"}
            ],
        },
        "scores": [{"scoreValue": score}],
        "tradelines": tradelines if tradelines is not None else [
            {"subscriberName": "CHASE BANK USA", "accountNumber": "4266841200001111", "accountType": "Revolving",
             "currentBalanceAmount": 2000, "creditLimitAmount": 10000, "dateOpened": "2018-01-01"},
            {"subscriberName": "ALLY FINANCIAL", "accountType": "Installment",
             "currentBalanceAmount": 12000, "highCreditAmount": 20000, "dateOpened": "2021-05-20"},
        ],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def form():
    return IdentityForm.model_validate(SUBMITTED_FORM)


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def tri_bureau():
    """Three clean, agreeing bureau payloads."""
    return {
        Bureau.EXPERIAN: make_payload(score=720),
        Bureau.TRANSUNION: make_payload(score=710),
        Bureau.EQUIFAX: make_payload(score=705),
    }


@pytest.fixture
def copy_payload():
    return copy.deepcopy
