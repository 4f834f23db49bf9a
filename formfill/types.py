"""Type definitions for the formfill library."""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ExtractedValue:
    """A typed candidate value pulled out of profile text.

    Attributes:
        entity_type: The entity type this value belongs to (e.g. "email")
        value: The extracted text, trimmed
        confidence: Extraction confidence between 0.0 and 1.0
        method: "strict" for pattern-library matches, "flexible" for line scanning
        source_pattern: Identifier of the pattern that produced the value
    """
    entity_type: str
    value: str
    confidence: float
    method: str = "strict"
    source_pattern: str = ""


@dataclass(frozen=True)
class SlotDescriptor:
    """A fillable target (form field) as described by the collaborator.

    Attributes:
        id: Unique identifier of the slot
        name: Field name; required alongside ``id``
        declared_type: Declared input type ("text", "email", "tel", ...)
        label: Human-readable label text
        context: Surrounding text near the slot
        placeholder: Placeholder text
        class_names: CSS class names attached to the slot
        raw_attributes: Any other attributes, as (name, value) pairs
    """
    id: str
    name: str
    declared_type: str = "text"
    label: str = ""
    context: str = ""
    placeholder: str = ""
    class_names: Tuple[str, ...] = ()
    raw_attributes: Tuple[Tuple[str, str], ...] = ()

    @property
    def attributes(self) -> Dict[str, str]:
        return dict(self.raw_attributes)

    @classmethod
    def from_dict(cls, data: Dict) -> "SlotDescriptor":
        """Build a descriptor from a loosely-shaped mapping.

        Accepts ``type`` as an alias of ``declared_type`` and ``classList`` /
        ``attributes`` in the shape a browser-side scanner emits them.
        """
        attrs = data.get("raw_attributes", data.get("attributes")) or {}
        if isinstance(attrs, dict):
            attrs = attrs.items()
        classes = data.get("class_names", data.get("classList")) or ()
        if isinstance(classes, str):
            classes = classes.split()
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            declared_type=str(data.get("declared_type") or data.get("type") or "text"),
            label=str(data.get("label") or ""),
            context=str(data.get("context") or ""),
            placeholder=str(data.get("placeholder") or ""),
            class_names=tuple(str(c) for c in classes),
            raw_attributes=tuple((str(k), str(v)) for k, v in attrs),
        )


@dataclass(frozen=True)
class SlotSignature:
    """Normalized search text plus a coarse category for one slot."""
    normalized_search_text: str
    category: str = "general"


@dataclass(frozen=True)
class Assignment:
    """A value chosen for a slot.

    Attributes:
        slot_id: The slot being filled
        entity_type: Entity type the value came from
        value: Plain string value to write into the slot
        confidence: Match score between 0.0 and 1.0
        extraction_confidence: Confidence of the underlying extracted value
        method: Extraction method of the underlying value
    """
    slot_id: str
    entity_type: str
    value: str
    confidence: float
    extraction_confidence: float = 0.0
    method: str = "strict"


@dataclass(frozen=True)
class FeedbackRecord:
    """Outcome of a previously applied value, as reported by the user's edits.

    Attributes:
        profile_id: Profile the predicted value came from
        slot_id: Slot that was filled
        predicted_value: Value the filler wrote
        actual_value: Value the slot held after the user was done
        was_correct: True if the user kept the predicted value
        confidence: Match confidence at fill time
        timestamp: Unix timestamp (seconds since epoch)
        user_feedback: Free-form outcome tag ("accepted", "cleared", "invalid", ...)
    """
    profile_id: str
    slot_id: str
    predicted_value: str
    actual_value: str
    was_correct: bool
    confidence: float = 0.0
    timestamp: float = field(default_factory=time.time)
    user_feedback: str = "accepted"


@dataclass(frozen=True)
class ValuePattern:
    """A recurring prefix or suffix across accepted values for one slot."""
    kind: str
    pattern: str
    frequency: int


@dataclass
class FillReport:
    """Results of one fill request.

    Attributes:
        assignments: One assignment per matched slot, in slot order
        overall_confidence: Mean assignment confidence (0.0 when empty)
        extracted: Everything the extractor produced, keyed by entity type
        skipped_slots: Slot ids rejected as invalid descriptors
        unmatched_slots: Slot ids for which no entity type cleared the threshold
        auto_apply: Assignments at or above the configured confidence threshold
    """
    assignments: List[Assignment] = field(default_factory=list)
    overall_confidence: float = 0.0
    extracted: Dict[str, ExtractedValue] = field(default_factory=dict)
    skipped_slots: List[str] = field(default_factory=list)
    unmatched_slots: List[str] = field(default_factory=list)
    auto_apply: List[Assignment] = field(default_factory=list)

    def assignment_for(self, slot_id: str) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.slot_id == slot_id:
                return assignment
        return None
