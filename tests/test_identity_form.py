"""Tests for the submitted identity form and corrections."""

import pytest
from pydantic import ValidationError

from pipeline import build_verification
from pipeline.anomaly_detector import detect_anomalies
from pipeline.source_normalizer import normalize_sources
from schemas.anomaly import IdentityForm, merge_corrections
from schemas.source import Bureau

from conftest import SUBMITTED_FORM, make_payload


class TestIdentityForm:

    def test_camel_and_snake_keys(self):
        camel = IdentityForm.model_validate({"firstName": "Jane", "birthDate": "1990-04-12"})
        snake = IdentityForm.model_validate({"first_name": "Jane", "birth_date": "1990-04-12"})
        assert camel == snake

    def test_numeric_values_coerced(self):
        form = IdentityForm.model_validate({"ssn": 123456789, "postalCode": 62704})
        assert form.ssn == "123456789"
        assert form.postal_code == "62704"

    def test_unknown_keys_ignored(self):
        form = IdentityForm.model_validate({**SUBMITTED_FORM, "favouriteColour": "green"})
        assert form.first_name == "Jane"

    def test_form_is_frozen(self, form):
        with pytest.raises(ValidationError):
            form.ssn = "000000000"


class TestMergeCorrections:

    def test_returns_new_form(self, form):
        corrected = merge_corrections(form, {"ssn": "123-45-6780"})
        assert corrected.ssn == "123-45-6780"
        assert form.ssn == "123-45-6789"
        assert corrected.first_name == form.first_name

    def test_camel_case_keys(self, form):
        corrected = merge_corrections(form, {"birthDate": "1990-04-21", "postal_code": "62701"})
        assert corrected.birth_date == "1990-04-21"
        assert corrected.postal_code == "62701"

    def test_none_clears_field(self, form):
        assert merge_corrections(form, {"middleName": None}).middle_name == ""

    def test_unknown_field_rejected(self, form):
        with pytest.raises(ValueError, match="Unknown form field"):
            merge_corrections(form, {"nickname": "JJ"})

    def test_empty_corrections_is_equal_copy(self, form):
        assert merge_corrections(form, {}) == form

    def test_resubmission_clears_anomaly(self, form):
        payloads = {source: make_payload(ssn="123456780") for source in (Bureau.EXPERIAN, Bureau.TRANSUNION)}
        records = {source: result.record for source, result in normalize_sources(payloads).items()}

        first = detect_anomalies(form, records).get("ssn")
        corrected = merge_corrections(form, {"ssn": first.suggested_value})

        assert detect_anomalies(corrected, records).get("ssn") is None
        assert detect_anomalies(form, records).get("ssn") is not None


class TestNullFields:

    def test_null_values_read_as_blank(self):
        form = IdentityForm.model_validate({**SUBMITTED_FORM, "middleName": None, "phone": None})
        assert form.middle_name == ""
        assert form.phone == ""
        assert form.first_name == "Jane"

    def test_verification_accepts_null_form_values(self):
        form = {**SUBMITTED_FORM, "middleName": None, "addressLine2": None}
        result = build_verification({Bureau.EXPERIAN: make_payload()}, form)
        assert not result.anomaly_report.has_anomalies
        assert result.readiness is not None
