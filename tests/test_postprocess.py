"""Tests for value post-processing helpers."""

import pytest

from formfill.postprocess import (
    choose_select_option,
    feedback_tag,
    format_phone,
    format_value_for_slot,
    is_valid_email,
    should_check_box,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("5551234567", "(555) 123-4567"),
        ("(555) 123-4567", "(555) 123-4567"),
        ("555.123.4567", "(555) 123-4567"),
        ("1-555-123-4567", "+1 (555) 123-4567"),
        ("2-555-123-4567", "2-555-123-4567"),
        ("123-4567", "123-4567"),
        ("", ""),
    ],
)
def test_format_phone(value, expected):
    assert format_phone(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("jane@hosp.org", True),
        ("j.smith+irb@med.example.edu", True),
        ("jane@hosp", False),
        ("jane smith@hosp.org", False),
        ("", False),
    ],
)
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected


class TestChooseSelectOption:
    OPTIONS = [("", "Select a state"), ("MA", "Massachusetts"), ("ME", "Maine"), ("NY", "New York")]

    def test_exact_value(self):
        assert choose_select_option(self.OPTIONS, "ma") == "MA"

    def test_exact_text(self):
        assert choose_select_option(self.OPTIONS, "new york") == "NY"

    def test_partial_text(self):
        assert choose_select_option(self.OPTIONS, "Massachusetts (US)") == "MA"

    def test_exact_beats_partial(self):
        options = [("maine-north", "Maine North"), ("maine", "Maine")]
        assert choose_select_option(options, "Maine") == "maine"

    def test_plain_strings(self):
        assert choose_select_option(["Oncology", "Cardiology"], "cardiology") == "Cardiology"

    def test_no_match(self):
        assert choose_select_option(self.OPTIONS, "Ontario") is None

    def test_blank_value(self):
        assert choose_select_option(self.OPTIONS, "  ") is None


class TestShouldCheckBox:
    @pytest.mark.parametrize("value", ["Yes", "true", "1", "I agree", "Accepted", "confirmed"])
    def test_positive(self, value):
        assert should_check_box(value)

    @pytest.mark.parametrize("value", ["No", "false", "", "maybe"])
    def test_negative(self, value):
        assert not should_check_box(value)

    def test_agreement_context(self):
        assert should_check_box("yes", label="I agree to the terms")


class TestFormatValueForSlot:
    def test_email_slot(self):
        assert format_value_for_slot("email", "jane@hosp.org") == "jane@hosp.org"
        assert format_value_for_slot("email", "Dr. Jane Smith") is None

    def test_tel_slot(self):
        assert format_value_for_slot("tel", "555.123.4567") == "(555) 123-4567"

    def test_other_slots_unchanged(self):
        assert format_value_for_slot("text", "555.123.4567") == "555.123.4567"
        assert format_value_for_slot("", "Boston") == "Boston"


@pytest.mark.parametrize(
    "value, invalid, expected",
    [("", False, "cleared"), ("  ", True, "cleared"), ("x", True, "invalid"), ("x", False, "accepted")],
)
def test_feedback_tag(value, invalid, expected):
    assert feedback_tag(value, invalid) == expected
