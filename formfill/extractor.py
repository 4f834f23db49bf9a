"""Extraction of typed candidate values from free-text profiles.

Two passes run over the text:

1. A strict pass applies the pattern library, entity type by entity type, and
   keeps the first pattern that matches for each type.
2. A flexible pass scans ``Key: Value`` lines and maps known keys onto entity
   types, then picks up stray email addresses and phone numbers. It only fills
   types the strict pass left empty.

The first matching pattern wins, not the longest or most plausible match. This
keeps extraction fast and predictable at some cost in precision.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from .confidence import pattern_confidence
from .patterns import PatternLibrary, default_library
from .types import ExtractedValue
from .utils import digits_only

logger = logging.getLogger(__name__)

_KEY_VALUE_RE = re.compile(r"^([^:]+):\s*(.+)$")
_STANDALONE_EMAIL_RE = re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
_STANDALONE_PHONE_RE = re.compile(r"(\(?[\d\s\-.()]{10,})")

# Fixed policy values: below a specific strict match, above a weak heuristic.
FLEXIBLE_COLON_CONFIDENCE = 0.7
STANDALONE_EMAIL_CONFIDENCE = 0.9
STANDALONE_PHONE_CONFIDENCE = 0.8
MIN_PHONE_DIGITS = 10


class Extractor:
    """Turns profile text into at most one :class:`ExtractedValue` per entity type.

    Extraction holds no state between calls; one instance can be shared freely.

    Example:
        >>> extractor = Extractor()
        >>> values = extractor.extract("Email: jane@hosp.org")
        >>> values["email"].value
        'jane@hosp.org'
    """

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        flexible: bool = True,
        max_flexible_value_length: int = 200,
    ):
        self.library = library or default_library()
        self.flexible = flexible
        self.max_flexible_value_length = max_flexible_value_length

    def extract(self, text: str) -> Dict[str, ExtractedValue]:
        """Extract candidate values from profile text.

        Args:
            text: Free-text profile

        Returns:
            Mapping of entity type to extracted value, ordered by the pattern
            library's declaration order. Empty for blank input.
        """
        found: Dict[str, ExtractedValue] = {}
        if not text or not text.strip():
            return found

        self._strict_pass(text, found)
        if self.flexible:
            self._flexible_pass(text, found)

        ordered = {t: found[t] for t in self.library.all_entity_types() if t in found}
        logger.debug("Extracted %d entity types: %s", len(ordered), ", ".join(ordered))
        return ordered

    def _strict_pass(self, text: str, found: Dict[str, ExtractedValue]) -> None:
        for entity_type in self.library.all_entity_types():
            for pattern in self.library.patterns_for(entity_type):
                match = pattern.regex.search(text)
                if not match:
                    continue
                raw = match.group(1) if pattern.regex.groups else match.group(0)
                value = (raw or "").strip()
                if not value:
                    continue
                found[entity_type] = ExtractedValue(
                    entity_type=entity_type,
                    value=value,
                    confidence=pattern_confidence(pattern.regex, match),
                    method="strict",
                    source_pattern=pattern.name,
                )
                break

    def _flexible_pass(self, text: str, found: Dict[str, ExtractedValue]) -> None:
        lines = [line.strip() for line in text.split("\n")]
        for line in (l for l in lines if l):
            kv = _KEY_VALUE_RE.match(line)
            if kv:
                key = kv.group(1)
                value = kv.group(2).strip()
                if value and len(value) < self.max_flexible_value_length:
                    entity_type = self.library.flexible_alias(key)
                    if entity_type and entity_type not in found:
                        found[entity_type] = ExtractedValue(
                            entity_type, value, FLEXIBLE_COLON_CONFIDENCE, "flexible", "flexible_colon"
                        )

            if "email" not in found and self.library.is_known("email"):
                email = _STANDALONE_EMAIL_RE.search(line)
                if email:
                    found["email"] = ExtractedValue(
                        "email", email.group(1), STANDALONE_EMAIL_CONFIDENCE, "flexible", "standalone_email"
                    )

            if "phone" not in found and self.library.is_known("phone"):
                phone = _STANDALONE_PHONE_RE.search(line)
                if phone and len(digits_only(phone.group(1))) >= MIN_PHONE_DIGITS:
                    found["phone"] = ExtractedValue(
                        "phone", phone.group(1).strip(), STANDALONE_PHONE_CONFIDENCE, "flexible", "standalone_phone"
                    )


def extract_entities(text: str) -> Dict[str, ExtractedValue]:
    """Extract candidate values using the default pattern library.

    Args:
        text: Free-text profile

    Returns:
        Mapping of entity type to :class:`ExtractedValue`

    Examples:
        >>> extract_entities("Tax ID: 12-3456789")["taxId"].value
        '12-3456789'
    """
    return Extractor().extract(text)
