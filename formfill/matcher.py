"""Scoring of extracted values against target slots."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .confidence import clamp_confidence
from .patterns import PatternLibrary, default_library
from .signature import build_signature, cached_signature
from .types import Assignment, ExtractedValue, SlotDescriptor, SlotSignature
from .utils import contains_word, normalize_search_text

logger = logging.getLogger(__name__)


class SlotMatcher:
    """
    Picks the best extracted value for a slot.

    Each candidate entity type is scored against the slot's signature:

    1. +0.4 per keyword found in the search text, +0.2 more for a whole word
    2. +0.6 if the entity type's own name appears
    3. +0.3 per known abbreviation
    4. multiplied by how well the slot's declared type accepts the entity type
    5. +0.2 and +0.3 when the slot category maps to the entity type
    6. clamped to [0, 1]

    Candidates are visited in pattern-library order and the first one to reach
    the top score wins ties.
    """

    KEYWORDS = {
        "principalInvestigator": ["investigator", "pi", "principal", "doctor", "dr", "physician", "md", "phd"],
        "firstName": ["first", "fname", "given", "forename"],
        "lastName": ["last", "lname", "surname", "family", "lastname"],
        "fullName": ["name", "fullname", "contact", "person", "individual"],
        "phone": ["phone", "tel", "telephone", "contact", "mobile", "cell", "number"],
        "email": ["email", "mail", "contact"],
        "fax": ["fax", "facsimile"],
        "address": ["address", "street", "location", "addr", "avenue", "road", "drive", "lane"],
        "city": ["city", "town", "municipality"],
        "state": ["state", "province", "region"],
        "zipCode": ["zip", "postal", "code", "postcode"],
        "country": ["country", "nation"],
        "institutionName": ["institution", "hospital", "center", "clinic", "organization", "org", "company", "university", "college"],
        "department": ["department", "dept", "division", "unit", "section"],
        "coordinator": ["coordinator", "manager", "admin", "assistant"],
        "licenseNumber": ["license", "licence", "lic", "permit", "certification", "cert"],
        "deaNumber": ["dea", "drug", "enforcement"],
        "taxId": ["tax", "ein", "federal", "employer"],
        "npiNumber": ["npi", "provider", "national"],
        "title": ["title", "position", "role", "job", "designation"],
        "specialty": ["specialty", "specialization", "focus", "area"],
        "website": ["website", "url", "site", "web", "http"],
        "irbContact": ["irb", "review", "board", "ethics", "committee"],
        "subInvestigator": ["sub", "co", "associate", "assistant", "secondary"],
    }

    ABBREVIATIONS = {
        "firstName": ["fn", "f_name", "firstname"],
        "lastName": ["ln", "l_name", "lastname"],
        "email": ["e_mail", "email_address", "mail_address"],
        "phone": ["ph", "tel_no", "phone_no", "contact_no"],
        "address": ["addr", "address_1", "address1", "street_addr"],
        "zipCode": ["zip_code", "postal_code", "postcode"],
        "institutionName": ["inst", "hosp", "org_name", "company_name"],
    }

    CATEGORY_ENTITY_TYPES = {
        "email": ("email",),
        "phone": ("phone", "fax"),
        "name": ("firstName", "lastName", "fullName", "principalInvestigator"),
        "address": ("address", "city", "state", "zipCode", "country"),
        "organization": ("institutionName", "department"),
        "title": ("title", "specialty"),
        "identifier": ("licenseNumber", "deaNumber", "taxId", "npiNumber"),
    }

    # Declared slot type -> entity type -> factor. "*" covers any entity type.
    TYPE_COMPATIBILITY = {
        "email": {"email": 1.0, "fullName": 0.3},
        "tel": {"phone": 1.0, "fax": 0.9, "npiNumber": 0.7, "licenseNumber": 0.6},
        "text": {"*": 0.9},
        "textarea": {"address": 1.0, "specialty": 0.9, "*": 0.7},
        "number": {"zipCode": 1.0, "npiNumber": 0.9, "licenseNumber": 0.8, "taxId": 0.8, "deaNumber": 0.7},
        "url": {"website": 1.0, "email": 0.3},
        "date": {"*": 0.2},
        "input": {"*": 0.8},
    }

    KEYWORD_SCORE = 0.4
    WHOLE_WORD_BONUS = 0.2
    TYPE_NAME_BONUS = 0.6
    ABBREVIATION_SCORE = 0.3
    CATEGORY_BONUS = 0.2
    CATEGORY_SELECTION_BONUS = 0.3
    UNKNOWN_TYPE_FACTOR = 0.6
    INCOMPATIBLE_TYPE_FACTOR = 0.4

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        min_match_score: float = 0.15,
        cache_signatures: bool = True,
    ):
        self.library = library or default_library()
        self.min_match_score = min_match_score
        self._signature = cached_signature if cache_signatures else build_signature

        # Table entries are compared against normalized search text, so they
        # go through the same normalization ("f_name" -> "f name").
        self._keywords = self._normalize_table(self.KEYWORDS)
        self._abbreviations = self._normalize_table(self.ABBREVIATIONS)
        # Type names are compared against the search text with its spaces
        # removed, so "npinumber" and "npi number" both carry "npinumber".
        self._type_names = {t: t.lower() for t in self.library.all_entity_types()}

    @staticmethod
    def _normalize_table(table: Mapping[str, List[str]]) -> Dict[str, Tuple[str, ...]]:
        normalized = {}
        for entity_type, entries in table.items():
            cleaned = (normalize_search_text(e) for e in entries)
            normalized[entity_type] = tuple(e for e in cleaned if e)
        return normalized

    def type_compatibility(self, declared_type: str, entity_type: str) -> float:
        """Factor describing how well a declared slot type accepts an entity type."""
        declared = (declared_type or "input").strip().lower()
        row = self.TYPE_COMPATIBILITY.get(declared)
        if row is None:
            return self.UNKNOWN_TYPE_FACTOR
        if entity_type in row:
            return row[entity_type]
        return row.get("*", self.INCOMPATIBLE_TYPE_FACTOR)

    def category_matches(self, category: str, entity_type: str) -> bool:
        return entity_type in self.CATEGORY_ENTITY_TYPES.get(category, ())

    def score(self, signature: SlotSignature, declared_type: str, entity_type: str) -> float:
        """Compatibility score of one entity type for one slot.

        Args:
            signature: The slot's search signature
            declared_type: The slot's declared input type
            entity_type: Candidate entity type

        Returns:
            Score between 0.0 and 1.0
        """
        text = signature.normalized_search_text
        score = 0.0

        for keyword in self._keywords.get(entity_type, ()):
            if keyword in text:
                score += self.KEYWORD_SCORE
                if contains_word(text, keyword):
                    score += self.WHOLE_WORD_BONUS

        type_name = self._type_names.get(entity_type) or entity_type.lower()
        if type_name in text.replace(" ", ""):
            score += self.TYPE_NAME_BONUS

        for abbrev in self._abbreviations.get(entity_type, ()):
            if abbrev in text:
                score += self.ABBREVIATION_SCORE

        score *= self.type_compatibility(declared_type, entity_type)

        if self.category_matches(signature.category, entity_type):
            score += self.CATEGORY_BONUS + self.CATEGORY_SELECTION_BONUS

        return clamp_confidence(score)

    def scores(self, slot: SlotDescriptor, extracted: Mapping[str, ExtractedValue]) -> Dict[str, float]:
        """Score every known extracted entity type for a slot, in library order."""
        signature = self._signature(slot)
        return {
            entity_type: self.score(signature, slot.declared_type, entity_type)
            for entity_type in self.library.all_entity_types()
            if entity_type in extracted
        }

    def match(self, slot: SlotDescriptor, extracted: Mapping[str, ExtractedValue]) -> Optional[Assignment]:
        """Choose the best extracted value for a slot.

        Args:
            slot: Target slot
            extracted: Output of :meth:`Extractor.extract`

        Returns:
            An :class:`Assignment`, or None when no entity type scores above
            ``min_match_score``

        Raises:
            InvalidSlotDescriptorError: If the slot has no ``id`` or ``name``
        """
        best_type: Optional[str] = None
        best_score = 0.0

        for entity_type, score in self.scores(slot, extracted).items():
            if score > best_score and score > self.min_match_score:
                best_type, best_score = entity_type, score

        if best_type is None:
            logger.debug("No match above %.2f for slot %r", self.min_match_score, slot.id)
            return None

        value = extracted[best_type]
        logger.debug("Slot %r -> %s (%.2f)", slot.id, best_type, best_score)
        return Assignment(
            slot_id=slot.id,
            entity_type=best_type,
            value=value.value,
            confidence=best_score,
            extraction_confidence=value.confidence,
            method=value.method,
        )

    def match_all(
        self, slots: Iterable[SlotDescriptor], extracted: Mapping[str, ExtractedValue]
    ) -> List[Assignment]:
        """Match every slot; unmatched slots are simply left out."""
        assignments = []
        for slot in slots:
            assignment = self.match(slot, extracted)
            if assignment is not None:
                assignments.append(assignment)
        return assignments
