"""formfill - Fill form fields from free-text profiles.

Extracts typed values (names, phones, emails, identifiers, ...) from
unstructured contact sheets, matches them onto form fields by their
metadata, and learns from the corrections users make afterwards.
Deterministic, rule-based, zero dependencies.

Example:
    >>> from formfill import FormFiller, SlotDescriptor
    >>>
    >>> filler = FormFiller()
    >>> slots = [SlotDescriptor(id="contact_email", name="contact_email", declared_type="email")]
    >>> report = filler.fill("Email: jane@hosp.org", slots)
    >>> print(report.assignments[0].value)  # jane@hosp.org
"""

__version__ = "1.0.0"

from .types import (
    ExtractedValue,
    SlotDescriptor,
    SlotSignature,
    Assignment,
    FeedbackRecord,
    ValuePattern,
    FillReport,
)
from .errors import (
    FormFillError,
    MalformedPatternError,
    InvalidSlotDescriptorError,
    FeedbackRecordInvalidError,
)
from .config import FillConfig
from .patterns import PatternLibrary, default_library
from .extractor import Extractor, extract_entities
from .signature import build_signature
from .matcher import SlotMatcher
from .confidence import pattern_confidence, overall_confidence
from .feedback import FeedbackLearner
from .filler import FormFiller

__all__ = [
    "FormFiller",
    "FillConfig",
    "ExtractedValue",
    "SlotDescriptor",
    "SlotSignature",
    "Assignment",
    "FeedbackRecord",
    "ValuePattern",
    "FillReport",
    "FormFillError",
    "MalformedPatternError",
    "InvalidSlotDescriptorError",
    "FeedbackRecordInvalidError",
    "PatternLibrary",
    "default_library",
    "Extractor",
    "extract_entities",
    "build_signature",
    "SlotMatcher",
    "pattern_confidence",
    "overall_confidence",
    "FeedbackLearner",
]
