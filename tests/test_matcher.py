"""Tests for slot matching."""

import pytest

from formfill.errors import InvalidSlotDescriptorError
from formfill.extractor import extract_entities
from formfill.matcher import SlotMatcher
from formfill.signature import build_signature
from formfill.types import ExtractedValue, SlotDescriptor

SCENARIO_PROFILE = (
    "Principal Investigator: Dr. Jane Smith\n"
    "Email: jane@hosp.org\n"
    "Phone: (555) 123-4567"
)


@pytest.fixture
def extracted():
    return extract_entities(SCENARIO_PROFILE)


@pytest.fixture
def matcher():
    return SlotMatcher()


class TestMatch:
    def test_email_slot(self, matcher, extracted):
        slot = SlotDescriptor(id="contact_email", name="contact_email", declared_type="email")
        assignment = matcher.match(slot, extracted)
        assert assignment is not None
        assert assignment.entity_type == "email"
        assert assignment.value == "jane@hosp.org"
        assert assignment.confidence >= 0.9
        assert assignment.slot_id == "contact_email"

    def test_date_slot_gets_nothing(self, matcher, extracted):
        slot = SlotDescriptor(id="dob", name="dob", declared_type="date")
        assert matcher.match(slot, extracted) is None

    def test_phone_slot(self, matcher, extracted):
        slot = SlotDescriptor(id="tel1", name="tel1", declared_type="tel", label="Phone")
        assignment = matcher.match(slot, extracted)
        assert assignment.entity_type == "phone"
        assert assignment.value == "(555) 123-4567"

    def test_investigator_slot(self, matcher, extracted):
        slot = SlotDescriptor(id="pi_name", name="pi_name", label="Principal Investigator")
        assignment = matcher.match(slot, extracted)
        assert assignment.entity_type == "principalInvestigator"
        assert assignment.extraction_confidence == pytest.approx(0.75)
        assert assignment.method == "strict"

    def test_nothing_extracted(self, matcher):
        slot = SlotDescriptor(id="email", name="email", declared_type="email")
        assert matcher.match(slot, {}) is None

    def test_invalid_slot(self, matcher, extracted):
        with pytest.raises(InvalidSlotDescriptorError):
            matcher.match(SlotDescriptor(id="", name="email"), extracted)

    def test_threshold_is_strict(self, extracted):
        """A score equal to the threshold is not enough."""
        slot = SlotDescriptor(id="contact_email", name="contact_email", declared_type="email")
        assert SlotMatcher(min_match_score=0.99).match(slot, extracted) is not None
        assert SlotMatcher(min_match_score=1.0).match(slot, extracted) is None

    def test_first_type_wins_ties(self, matcher):
        """phone and fax score the same here; phone comes first in the library."""
        extracted = {
            "phone": ExtractedValue("phone", "555-123-4567", 0.8),
            "fax": ExtractedValue("fax", "555-987-6543", 0.8),
        }
        slot = SlotDescriptor(id="a", name="a", declared_type="tel")
        scores = matcher.scores(slot, extracted)
        assert scores["phone"] == scores["fax"]
        assert matcher.match(slot, extracted).entity_type == "phone"

    def test_unknown_entity_types_ignored(self, matcher):
        extracted = {"favoriteColor": ExtractedValue("favoriteColor", "blue", 1.0)}
        slot = SlotDescriptor(id="favorite_color", name="favorite_color")
        assert matcher.scores(slot, extracted) == {}
        assert matcher.match(slot, extracted) is None

    def test_match_all_skips_unmatched(self, matcher, extracted):
        slots = [
            SlotDescriptor(id="contact_email", name="contact_email", declared_type="email"),
            SlotDescriptor(id="dob", name="dob", declared_type="date"),
        ]
        assignments = matcher.match_all(slots, extracted)
        assert [a.slot_id for a in assignments] == ["contact_email"]

    def test_uncached_signatures(self, extracted):
        slot = SlotDescriptor(id="contact_email", name="contact_email", declared_type="email")
        cached = SlotMatcher().match(slot, extracted)
        uncached = SlotMatcher(cache_signatures=False).match(slot, extracted)
        assert cached == uncached


class TestScore:
    @pytest.mark.parametrize(
        "slot",
        [
            SlotDescriptor(id="email", name="email", declared_type="email", label="Email address"),
            SlotDescriptor(id="phone", name="phone", declared_type="tel", label="Phone telephone mobile"),
            SlotDescriptor(id="notes", name="notes", declared_type="textarea"),
            SlotDescriptor(id="x", name="x", declared_type="weird"),
        ],
    )
    def test_scores_bounded(self, matcher, extracted, slot):
        for score in matcher.scores(slot, extracted).values():
            assert 0.0 <= score <= 1.0

    def test_type_name_in_one_word_slot(self, matcher):
        """keyword "npi" (0.4) plus type name "npinumber" (0.6), times the text factor."""
        signature = build_signature(SlotDescriptor(id="npinumber", name="npinumber"))
        assert signature.category == "general"
        assert matcher.score(signature, "text", "npiNumber") == pytest.approx(0.9)

    def test_type_name_in_split_slot(self, matcher):
        signature = build_signature(SlotDescriptor(id="npi_number", name="npi_number"))
        assert matcher.score(signature, "text", "npiNumber") >= 0.9

    def test_one_word_zipcode_slot(self, matcher):
        extracted = {
            "city": ExtractedValue("city", "Boston", 0.8),
            "zipCode": ExtractedValue("zipCode", "02115", 0.8),
        }
        slot = SlotDescriptor(id="zipcode", name="zipcode")
        assert matcher.scores(slot, extracted)["zipCode"] == pytest.approx(1.0)
        assert matcher.match(slot, extracted).entity_type == "zipCode"


class TestTypeCompatibility:
    def test_exact_entry(self, matcher):
        assert matcher.type_compatibility("email", "email") == 1.0
        assert matcher.type_compatibility("tel", "fax") == 0.9

    def test_wildcard(self, matcher):
        assert matcher.type_compatibility("text", "taxId") == 0.9
        assert matcher.type_compatibility("date", "email") == 0.2

    def test_missing_entry(self, matcher):
        assert matcher.type_compatibility("email", "phone") == SlotMatcher.INCOMPATIBLE_TYPE_FACTOR

    def test_unknown_declared_type(self, matcher):
        assert matcher.type_compatibility("color", "email") == SlotMatcher.UNKNOWN_TYPE_FACTOR

    def test_blank_declared_type(self, matcher):
        assert matcher.type_compatibility("", "email") == 0.8

    def test_case_insensitive(self, matcher):
        assert matcher.type_compatibility("EMAIL", "email") == 1.0
