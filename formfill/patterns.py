"""Catalog of entity types and the text patterns that extract them.

Each entity type owns an ordered tuple of patterns. Within a type the first
pattern that matches wins, so specific multi-word phrasings are listed ahead of
short generic ones ("principal investigator" before a bare "dr." prefix).

Entries are either a pattern string (compiled case-insensitive) or a
``(pattern, flags)`` pair for the few patterns that must stay case-sensitive,
such as two-letter state codes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import MalformedPatternError
from .utils import normalize_text

logger = logging.getLogger(__name__)

PatternSpec = Union[str, Tuple[str, int]]

_I = re.IGNORECASE
_LINE = re.IGNORECASE | re.MULTILINE

_EMAIL = r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"
_PHONE_RUN = r"\(?[\d \-.()]{10,}"
_ZIP = r"\d{5}(?:-\d{4})?"
_LINE_VALUE = r"([^,:\s][^,\n]*)"
_ADDRESS_VALUE = r"([^,:\s][^,\n]*(?:,[ \t]*[^,\n]+)*)"
_CODE_VALUE = r"([A-Z0-9\-]*\d[A-Z0-9\-]*)"
_NUMBER_SUFFIX = r"(?:[ \t]+(?:number|no\.?|#))?"


DEFAULT_PATTERNS: Dict[str, Tuple[PatternSpec, ...]] = {
    # Contact information
    "principalInvestigator": (
        r"principal\s+investigator[: \t]*" + _LINE_VALUE,
        r"\bpi\b[: \t]*" + _LINE_VALUE,
        r"\bdr\.?[ \t]+" + _LINE_VALUE,
        r"(?<!sub )(?<!sub-)(?<!co )(?<!co-)\binvestigator[: \t]*" + _LINE_VALUE,
        r"\bphysician[: \t]*" + _LINE_VALUE,
        r"\bdoctor[: \t]*" + _LINE_VALUE,
    ),
    "firstName": (
        r"first\s+name[: \t]*" + _LINE_VALUE,
        r"\bfname[: \t]*" + _LINE_VALUE,
        r"given\s+name[: \t]*" + _LINE_VALUE,
    ),
    "lastName": (
        r"last\s+name[: \t]*" + _LINE_VALUE,
        r"\blname[: \t]*" + _LINE_VALUE,
        r"\bsurname[: \t]*" + _LINE_VALUE,
        r"family\s+name[: \t]*" + _LINE_VALUE,
    ),
    "fullName": (
        (r"^[ \t]*(?:full\s+|contact\s+)?name\b[: \t]*" + _LINE_VALUE, _LINE),
        (r"^[ \t]*contact(?:\s+person)?[ \t]*:[ \t]*" + _LINE_VALUE, _LINE),
    ),
    "phone": (
        r"\b(?:tele)?phone(?:\s+number)?[: \t]*(" + _PHONE_RUN + ")",
        r"\btel\b\.?[: \t]*(" + _PHONE_RUN + ")",
        r"\bmobile[: \t]*(" + _PHONE_RUN + ")",
        r"\bcell[: \t]*(" + _PHONE_RUN + ")",
        (r"(\(\d{3}\)\s*\d{3}-\d{4})", 0),
        (r"(\d{3}[-.\s]?\d{3}[-.\s]?\d{4})", 0),
    ),
    "email": (
        r"\be-?mail(?:\s+address)?[: \t]*(" + _EMAIL + ")",
        (r"(" + _EMAIL + ")", 0),
    ),
    "fax": (
        r"\bfax(?:\s+number)?[: \t]*(" + _PHONE_RUN + ")",
        r"\bfacsimile[: \t]*(" + _PHONE_RUN + ")",
    ),
    # Address information
    "address": (
        r"(?<!mail )(?<!mail-)\b(?:street\s+)?address(?:\s+line\s*1)?[: \t]*" + _ADDRESS_VALUE,
        r"\bstreet[: \t]*" + _ADDRESS_VALUE,
        r"\blocation[: \t]*" + _ADDRESS_VALUE,
        r"(\d+[ \t]+[^,\n]+(?:,[ \t]*[^,\n]+)*)",
    ),
    "city": (
        r"\bcity[: \t]*" + _LINE_VALUE,
        r"\btown[: \t]*" + _LINE_VALUE,
        (r",[ \t]*([A-Za-z ]+),[ \t]*[A-Z]{2}\b", 0),
        r"address[^,\n]*,[ \t]*([^,\n]+),",
    ),
    "state": (
        r"\bstate\b[: \t]*([A-Z]{2}\b|[A-Za-z ]+)",
        r"\bprovince\b[: \t]*([A-Z]{2}\b|[A-Za-z ]+)",
        (r",[ \t]*([A-Z]{2})[ \t]+\d{5}", 0),
        (r",[ \t]*([A-Za-z ]+)[ \t]+\d{5}", 0),
    ),
    "zipCode": (
        r"\bzip(?:\s*code)?[: \t]*(" + _ZIP + ")",
        r"\bpostal(?:\s+code)?[: \t]*(" + _ZIP + ")",
        (r"\b(" + _ZIP + r")\b", 0),
    ),
    "country": (
        r"\bcountry[: \t]*" + _LINE_VALUE,
        r"\bnation\b[: \t]*" + _LINE_VALUE,
    ),
    # Institution information
    "institutionName": (
        r"\binstitution(?:\s+name)?[: \t]*" + _LINE_VALUE,
        r"\bhospital[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\bcent(?:er|re)[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\bclinic[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\buniversity[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\bcollege[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\borgani[sz]ation(?:\s+name)?[: \t]*" + _LINE_VALUE,
        r"\bcompany(?:\s+name)?[ \t]*:[ \t]*" + _LINE_VALUE,
    ),
    "department": (
        r"\bdepartment[: \t]*" + _LINE_VALUE,
        r"\bdept\b\.?[: \t]*" + _LINE_VALUE,
        r"\bdivision[: \t]*" + _LINE_VALUE,
        r"\bunit[ \t]*:[ \t]*" + _LINE_VALUE,
        r"\bsection[ \t]*:[ \t]*" + _LINE_VALUE,
    ),
    # Regulatory information
    "irbContact": (
        r"institutional\s+review\s+board[: \t]*" + _LINE_VALUE,
        r"\birb\b(?:\s+contact)?[: \t]*" + _LINE_VALUE,
        r"\bethics(?:\s+committee)?[: \t]*" + _LINE_VALUE,
        r"review\s+board[: \t]*" + _LINE_VALUE,
    ),
    "licenseNumber": (
        r"\blicen[cs]e\b" + _NUMBER_SUFFIX + r"[: \t]*" + _CODE_VALUE,
        r"\blic\b\.?[: \t]*" + _CODE_VALUE,
        r"\bpermit\b" + _NUMBER_SUFFIX + r"[: \t]*" + _CODE_VALUE,
    ),
    "deaNumber": (
        r"\bdea\b" + _NUMBER_SUFFIX + r"[: \t]*" + _CODE_VALUE,
        r"drug\s+enforcement(?:\s+administration)?" + _NUMBER_SUFFIX + r"[: \t]*" + _CODE_VALUE,
    ),
    "taxId": (
        r"\bein\b[: \t#]*(\d[\d\-]+)",
        r"federal\s+(?:tax\s+)?id(?:entification)?" + _NUMBER_SUFFIX + r"[: \t]*(\d[\d\-]+)",
        r"tax\s+(?:identification\s+)?number[: \t]*(\d[\d\-]+)",
    ),
    "npiNumber": (
        r"\bnpi\b" + _NUMBER_SUFFIX + r"[: \t]*(\d+)",
        r"national\s+provider(?:\s+identifier)?" + _NUMBER_SUFFIX + r"[: \t]*(\d+)",
    ),
    # Personnel
    "coordinator": (
        r"(?:study|research|clinical|trial)\s+coordinator[: \t]*" + _LINE_VALUE,
        r"\bcoordinator[: \t]*" + _LINE_VALUE,
    ),
    "subInvestigator": (
        r"\bsub[ \t-]*investigator[: \t]*" + _LINE_VALUE,
        r"\bco[ \t-]*investigator[: \t]*" + _LINE_VALUE,
        r"\bassociate\s+investigator[: \t]*" + _LINE_VALUE,
        r"\bassistant\s+investigator[: \t]*" + _LINE_VALUE,
    ),
    "title": (
        r"\b(?:job\s+)?title[: \t]*" + _LINE_VALUE,
        r"\bposition[: \t]*" + _LINE_VALUE,
        r"\brole\b[: \t]*" + _LINE_VALUE,
        r"\bdesignation[: \t]*" + _LINE_VALUE,
    ),
    # Additional common fields
    "website": (
        r"\bwebsite[: \t]*([^\s:]\S*)",
        r"\burl\b[: \t]*([^\s:]\S*)",
        r"(https?://\S+)",
    ),
    "specialty": (
        r"\bspeciali[sz]ation[: \t]*" + _LINE_VALUE,
        r"\bspecialty[: \t]*" + _LINE_VALUE,
        r"therapeutic\s+areas?[: \t]*" + _LINE_VALUE,
        r"\bfocus[: \t]*" + _LINE_VALUE,
    ),
}

# Canonical iteration order for extraction and matching.
ENTITY_TYPES: Tuple[str, ...] = tuple(DEFAULT_PATTERNS)

# Keys seen on "Key: Value" lines, mapped to entity types for the flexible pass.
FLEXIBLE_KEY_ALIASES: Dict[str, str] = {
    "name": "fullName",
    "full name": "fullName",
    "contact name": "fullName",
    "contact person": "fullName",
    "first name": "firstName",
    "fname": "firstName",
    "given name": "firstName",
    "last name": "lastName",
    "lname": "lastName",
    "surname": "lastName",
    "family name": "lastName",
    "email": "email",
    "e-mail": "email",
    "email address": "email",
    "mail": "email",
    "phone": "phone",
    "phone number": "phone",
    "telephone": "phone",
    "tel": "phone",
    "mobile": "phone",
    "cell": "phone",
    "fax": "fax",
    "fax number": "fax",
    "address": "address",
    "street": "address",
    "street address": "address",
    "location": "address",
    "city": "city",
    "town": "city",
    "state": "state",
    "province": "state",
    "zip": "zipCode",
    "zip code": "zipCode",
    "postal": "zipCode",
    "postal code": "zipCode",
    "country": "country",
    "institution": "institutionName",
    "institution name": "institutionName",
    "hospital": "institutionName",
    "organization": "institutionName",
    "organisation": "institutionName",
    "company": "institutionName",
    "site": "institutionName",
    "department": "department",
    "dept": "department",
    "division": "department",
    "title": "title",
    "job title": "title",
    "position": "title",
    "role": "title",
    "coordinator": "coordinator",
    "study coordinator": "coordinator",
    "research coordinator": "coordinator",
    "investigator": "principalInvestigator",
    "principal investigator": "principalInvestigator",
    "pi": "principalInvestigator",
    "doctor": "principalInvestigator",
    "sub-investigator": "subInvestigator",
    "sub investigator": "subInvestigator",
    "co-investigator": "subInvestigator",
    "irb": "irbContact",
    "irb contact": "irbContact",
    "license": "licenseNumber",
    "license number": "licenseNumber",
    "medical license": "licenseNumber",
    "dea": "deaNumber",
    "dea number": "deaNumber",
    "tax id": "taxId",
    "tax number": "taxId",
    "ein": "taxId",
    "federal id": "taxId",
    "npi": "npiNumber",
    "npi number": "npiNumber",
    "website": "website",
    "url": "website",
    "specialty": "specialty",
    "specialization": "specialty",
}


@dataclass(frozen=True)
class ExtractionPattern:
    """One compiled pattern belonging to an entity type."""
    entity_type: str
    name: str
    regex: re.Pattern


class PatternLibrary:
    """Compiled, validated pattern catalog.

    All patterns are compiled up front; a pattern that fails to compile or
    captures more than one group raises :class:`MalformedPatternError` here
    rather than silently disabling its entity type at extraction time.

    Example:
        >>> library = PatternLibrary()
        >>> library.patterns_for("email")[0].name
        'email:0'
    """

    def __init__(
        self,
        patterns: Optional[Mapping[str, Iterable[PatternSpec]]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        table = DEFAULT_PATTERNS if patterns is None else patterns
        self._patterns: Dict[str, Tuple[ExtractionPattern, ...]] = {}
        for entity_type, specs in table.items():
            self._patterns[entity_type] = tuple(
                self._compile(entity_type, index, spec) for index, spec in enumerate(specs)
            )

        alias_table = FLEXIBLE_KEY_ALIASES if aliases is None else aliases
        self._aliases: Dict[str, str] = {}
        for key, entity_type in alias_table.items():
            if entity_type not in self._patterns:
                raise MalformedPatternError(entity_type, key, "alias points at unknown entity type")
            self._aliases[normalize_text(key)] = entity_type

        logger.debug(
            "Loaded pattern library: %d entity types, %d patterns, %d aliases",
            len(self._patterns),
            sum(len(p) for p in self._patterns.values()),
            len(self._aliases),
        )

    @staticmethod
    def _compile(entity_type: str, index: int, spec: PatternSpec) -> ExtractionPattern:
        if isinstance(spec, tuple):
            source, flags = spec
        else:
            source, flags = spec, re.IGNORECASE
        try:
            regex = re.compile(source, flags)
        except (re.error, TypeError) as e:
            raise MalformedPatternError(entity_type, str(source), str(e)) from e
        if regex.groups > 1:
            raise MalformedPatternError(
                entity_type, source, f"expected at most one capture group, found {regex.groups}"
            )
        return ExtractionPattern(entity_type, f"{entity_type}:{index}", regex)

    def patterns_for(self, entity_type: str) -> List[ExtractionPattern]:
        """Ordered patterns for an entity type (empty for unknown types)."""
        return list(self._patterns.get(entity_type, ()))

    def all_entity_types(self) -> Tuple[str, ...]:
        """All entity types, in declaration order."""
        return tuple(self._patterns)

    def is_known(self, entity_type: str) -> bool:
        return entity_type in self._patterns

    def flexible_alias(self, key: str) -> Optional[str]:
        """Map a ``Key:`` label from a profile line to an entity type."""
        return self._aliases.get(normalize_text(key))


@lru_cache(maxsize=1)
def default_library() -> PatternLibrary:
    """Return a shared library built from the default tables."""
    return PatternLibrary()
