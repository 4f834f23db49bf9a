"""Tests for the pattern library."""

import re

import pytest

from formfill.errors import MalformedPatternError
from formfill.patterns import DEFAULT_PATTERNS, ENTITY_TYPES, PatternLibrary, default_library


class TestDefaultLibrary:
    """The built-in catalog."""

    def test_compiles(self):
        """Every default pattern compiles with at most one capture group."""
        library = PatternLibrary()
        for entity_type in library.all_entity_types():
            for pattern in library.patterns_for(entity_type):
                assert pattern.regex.groups <= 1

    def test_declaration_order_preserved(self):
        library = PatternLibrary()
        assert library.all_entity_types() == ENTITY_TYPES
        assert library.all_entity_types()[0] == "principalInvestigator"

    def test_pattern_names(self):
        library = PatternLibrary()
        names = [p.name for p in library.patterns_for("email")]
        assert names == ["email:0", "email:1"]

    def test_pattern_count_matches_table(self):
        library = PatternLibrary()
        for entity_type, specs in DEFAULT_PATTERNS.items():
            assert len(library.patterns_for(entity_type)) == len(specs)

    def test_unknown_type_has_no_patterns(self):
        library = PatternLibrary()
        assert library.patterns_for("favoriteColor") == []
        assert not library.is_known("favoriteColor")

    def test_default_library_is_shared(self):
        assert default_library() is default_library()

    def test_state_code_is_case_sensitive(self):
        """Two-letter state codes must be uppercase to match."""
        library = PatternLibrary()
        state_code = library.patterns_for("state")[2].regex
        assert state_code.search("Boston, MA 02115").group(1) == "MA"
        assert state_code.search("Boston, ma 02115") is None


class TestFlexibleAliases:
    def test_lookup_is_case_insensitive(self):
        library = PatternLibrary()
        assert library.flexible_alias("Tax ID") == "taxId"
        assert library.flexible_alias("  EMAIL ") == "email"

    def test_inner_whitespace_collapsed(self):
        library = PatternLibrary()
        assert library.flexible_alias("Principal   Investigator") == "principalInvestigator"

    def test_unknown_key(self):
        library = PatternLibrary()
        assert library.flexible_alias("Favorite color") is None
        assert library.flexible_alias("") is None


class TestMalformedPatterns:
    """Broken entries fail when the library is built, not during extraction."""

    def test_bad_regex(self):
        with pytest.raises(MalformedPatternError) as exc:
            PatternLibrary(patterns={"email": [r"email[:\s]*(unclosed"]}, aliases={})
        assert exc.value.entity_type == "email"

    def test_too_many_groups(self):
        with pytest.raises(MalformedPatternError) as exc:
            PatternLibrary(patterns={"phone": [r"(\d{3})-(\d{4})"]}, aliases={})
        assert "capture group" in exc.value.reason

    def test_alias_to_unknown_type(self):
        with pytest.raises(MalformedPatternError):
            PatternLibrary(patterns={"email": [r"(\S+@\S+)"]}, aliases={"mail": "emailAddress"})

    def test_custom_library(self):
        library = PatternLibrary(
            patterns={"badge": [(r"badge\s*#?(\d+)", re.IGNORECASE)]},
            aliases={"badge": "badge"},
        )
        assert library.all_entity_types() == ("badge",)
        assert library.flexible_alias("Badge") == "badge"
