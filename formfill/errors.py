"""Exceptions raised by the formfill library.

A slot that receives no assignment is a normal outcome and is reported as
``None``; the exceptions here are reserved for configuration and input defects.
"""


class FormFillError(Exception):
    """Base class for formfill errors."""


class MalformedPatternError(FormFillError):
    """A pattern library entry failed to compile or is structurally invalid."""

    def __init__(self, entity_type: str, pattern: str, reason: str):
        self.entity_type = entity_type
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Malformed pattern for {entity_type!r}: {pattern!r} ({reason})")


class InvalidSlotDescriptorError(FormFillError):
    """A slot descriptor is missing its identifying fields."""

    def __init__(self, slot_id: str, missing: list):
        self.slot_id = slot_id
        self.missing = list(missing)
        super().__init__(
            f"Slot {slot_id or '<unnamed>'!r} is missing required field(s): {', '.join(self.missing)}"
        )


class FeedbackRecordInvalidError(FormFillError):
    """A feedback record cannot be attributed to a profile and slot."""
