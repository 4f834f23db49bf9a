"""Helpers for collaborators that write assigned values into real slots.

None of these affect matching. They cover the last step, where an assigned
value has to fit the slot's declared type, plus the outcome tag recorded
when the user is done with the slot.
"""

import re
from typing import Optional, Sequence, Tuple, Union

from .utils import digits_only

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

POSITIVE_INDICATORS = ("yes", "true", "1", "agree", "accept", "confirm")

# An option is either a plain string or a (value, text) pair.
Option = Union[str, Tuple[str, str]]


def is_valid_email(value: str) -> bool:
    """
    >>> is_valid_email("jane@hosp.org")
    True
    >>> is_valid_email("jane at hosp.org")
    False
    """
    return bool(value) and bool(_EMAIL_RE.match(value))


def format_phone(value: str) -> str:
    """Format North American phone numbers; anything else is returned as is.

    Examples:
        >>> format_phone("555.123.4567")
        '(555) 123-4567'
        >>> format_phone("1-555-123-4567")
        '+1 (555) 123-4567'
        >>> format_phone("+44 20 7946 0958")
        '+44 20 7946 0958'
    """
    digits = digits_only(value)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits[0] == "1":
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return value


def _option_pair(option: Option) -> Tuple[str, str]:
    if isinstance(option, str):
        return option, option
    value, text = option
    return str(value), str(text)


def choose_select_option(options: Sequence[Option], value: str) -> Optional[str]:
    """Pick the option a value refers to.

    An exact, case-insensitive match on option value or text wins. Failing
    that, the first option whose text contains the value (or is contained in
    it) is used.

    Args:
        options: Option strings or (value, text) pairs, in display order
        value: The assigned value

    Returns:
        The chosen option's value, or None
    """
    wanted = value.strip().lower()
    if not wanted:
        return None
    pairs = [_option_pair(o) for o in options]

    for opt_value, text in pairs:
        if opt_value.lower() == wanted or text.lower() == wanted:
            return opt_value

    for opt_value, text in pairs:
        label = text.strip().lower()
        if label and (wanted in label or label in wanted):
            return opt_value
    return None


def should_check_box(value: str, label: str = "", context: str = "") -> bool:
    """Decide whether a checkbox should be ticked for an assigned value."""
    lowered = value.lower()
    agreement = "agree" in f"{label} {context}".lower() and lowered == "yes"
    return agreement or any(indicator in lowered for indicator in POSITIVE_INDICATORS)


def format_value_for_slot(declared_type: str, value: str) -> Optional[str]:
    """Adapt a value to a slot's declared type.

    Returns None when the value cannot be written into that kind of slot,
    e.g. a non-address for an ``email`` input.
    """
    declared = (declared_type or "text").strip().lower()
    if declared == "email":
        return value if is_valid_email(value) else None
    if declared == "tel":
        return format_phone(value) or None
    return value


def feedback_tag(current_value: str, marked_invalid: bool = False) -> str:
    """Outcome tag for a slot after the user is done editing it.

    >>> feedback_tag("  ")
    'cleared'
    >>> feedback_tag("x", marked_invalid=True)
    'invalid'
    """
    if not (current_value or "").strip():
        return "cleared"
    if marked_invalid:
        return "invalid"
    return "accepted"
