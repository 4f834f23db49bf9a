"""Search signatures for target slots.

A signature is the slot's metadata flattened into one normalized string plus a
coarse category. The category only biases scoring; it never filters.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Tuple

from .errors import InvalidSlotDescriptorError
from .types import SlotDescriptor, SlotSignature
from .utils import contains_word, normalize_search_text

# Attributes that carry human-readable label text, read in this order.
LABEL_ATTRIBUTES: Tuple[str, ...] = ("aria-label", "title", "data-label", "alt")

DATE_INPUT_TYPES = {"date", "datetime-local", "datetime", "month", "week", "time"}

# (category, declared types, substring tokens, whole-word tokens), first match wins.
CATEGORY_RULES: Tuple[Tuple[str, frozenset, Tuple[str, ...], Tuple[str, ...]], ...] = (
    ("email", frozenset({"email"}), ("mail",), ()),
    ("phone", frozenset({"tel"}), ("phone", "mobile", "fax", "facsimile"), ("tel", "cell")),
    ("name", frozenset(), (
        "first name", "last name", "full name", "given name", "family name",
        "firstname", "lastname", "fullname", "surname", "investigator",
    ), ("fname", "lname", "pi", "person")),
    ("address", frozenset(), ("address", "street", "postal", "country", "province"), (
        "addr", "city", "town", "state", "zip", "zipcode", "postcode",
    )),
    ("organization", frozenset(), (
        "institution", "organization", "organisation", "hospital", "company",
        "department", "university", "clinic", "college",
    ), ("org", "dept", "site", "center", "centre", "division")),
    ("title", frozenset(), ("title", "position", "designation", "specialty", "specialization"), (
        "role", "job",
    )),
    ("identifier", frozenset(), ("license", "licence", "identifier", "certification"), (
        "dea", "npi", "ein", "tax", "tin", "lic", "permit",
    )),
    ("date", DATE_INPUT_TYPES, ("date", "birth"), ("dob", "day", "month", "year")),
)

_ORGANIZATION_RULE = next(rule for rule in CATEGORY_RULES if rule[0] == "organization")


def validate_slot(slot: SlotDescriptor) -> None:
    """Raise :class:`InvalidSlotDescriptorError` if ``id`` or ``name`` is blank."""
    missing = [f for f in ("id", "name") if not str(getattr(slot, f, "") or "").strip()]
    if missing:
        raise InvalidSlotDescriptorError(str(getattr(slot, "id", "") or ""), missing)


def _search_parts(slot: SlotDescriptor) -> Iterable[str]:
    yield slot.name
    yield slot.id
    yield slot.placeholder
    yield slot.label
    yield slot.context
    yield from slot.class_names
    attributes = slot.attributes
    for attr in LABEL_ATTRIBUTES:
        if attributes.get(attr):
            yield attributes[attr]


def build_search_text(slot: SlotDescriptor) -> str:
    """Concatenate slot metadata in a fixed order and normalize it."""
    return normalize_search_text(" ".join(part for part in _search_parts(slot) if part))


def _has_token(text: str, substrings: Tuple[str, ...], words: Tuple[str, ...]) -> bool:
    if any(token in text for token in substrings):
        return True
    return any(contains_word(text, word) for word in words)


def classify(search_text: str, declared_type: str = "") -> str:
    """Assign a coarse category to normalized search text.

    Args:
        search_text: Output of :func:`build_search_text`
        declared_type: The slot's declared input type

    Returns:
        One of email, phone, name, address, organization, title,
        identifier, date or general
    """
    declared = (declared_type or "").strip().lower()
    for category, declared_types, substrings, words in CATEGORY_RULES:
        if declared in declared_types:
            return category
        if category == "name" and _is_person_name(search_text):
            return category
        if _has_token(search_text, substrings, words):
            return category
    return "general"


def _is_person_name(search_text: str) -> bool:
    # A bare "name" counts only when nothing marks it as an organization's name.
    if not contains_word(search_text, "name"):
        return False
    return not _has_token(search_text, _ORGANIZATION_RULE[2], _ORGANIZATION_RULE[3])


def build_signature(slot: SlotDescriptor) -> SlotSignature:
    """Build the search signature for one slot.

    Args:
        slot: Slot metadata from the collaborator

    Returns:
        :class:`SlotSignature` for the slot

    Raises:
        InvalidSlotDescriptorError: If the slot has no ``id`` or ``name``
    """
    validate_slot(slot)
    text = build_search_text(slot)
    return SlotSignature(normalized_search_text=text, category=classify(text, slot.declared_type))


@lru_cache(maxsize=2048)
def cached_signature(slot: SlotDescriptor) -> SlotSignature:
    """:func:`build_signature`, memoized per unchanged descriptor."""
    return build_signature(slot)
