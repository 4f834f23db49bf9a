"""formfill MCP Server - exposes profile storage, field filling and feedback via Model Context Protocol.

Usage:
    formfill-mcp --db .formfill/profiles.db
    formfill-mcp --db .formfill/profiles.db --threshold 0.2

    # Or via Python:
    python -m formfill_mcp.server --db .formfill/profiles.db
"""

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server import FastMCP

from formfill import FeedbackRecord, FillConfig, FillReport, FormFiller, FormFillError
from formfill.postprocess import feedback_tag, format_value_for_slot
from .storage import ProfileStore

logger = logging.getLogger("formfill-mcp")

# Global state
_store: Optional[ProfileStore] = None
_filler: Optional[FormFiller] = None
_config: FillConfig = FillConfig()

# Create the FastMCP server
mcp = FastMCP(
    "formfill",
    instructions=(
        "formfill maps stored free-text profiles onto form fields. "
        "Store a site or contact profile once with ff_store_profile, then call "
        "ff_fill_fields with the form's field descriptors (id, name, type, label, "
        "placeholder, context) to get a value and confidence per field. "
        "Only write values listed under auto_apply without asking the user. "
        "After the user has reviewed the form, report what they kept or changed "
        "with ff_record_feedback so accuracy can be tracked per profile."
    ),
)


def _get_store() -> ProfileStore:
    global _store
    if _store is None:
        _store = ProfileStore(":memory:")
    return _store


def _get_filler() -> FormFiller:
    global _filler
    if _filler is None:
        _filler = FormFiller(_config)
    return _filler


def _error(message: str) -> str:
    return json.dumps({"error": message}, indent=2)


def _report_to_dict(report: FillReport, declared: Dict[str, str]) -> dict:
    """Convert a FillReport to a JSON-serializable dict."""
    return {
        "assignments": [
            {
                "slot_id": a.slot_id,
                "entity_type": a.entity_type,
                "value": a.value,
                "formatted_value": format_value_for_slot(declared.get(a.slot_id, "text"), a.value),
                "confidence": round(a.confidence, 4),
                "method": a.method,
            }
            for a in report.assignments
        ],
        "overall_confidence": round(report.overall_confidence, 4),
        "auto_apply": [a.slot_id for a in report.auto_apply],
        "unmatched_slots": report.unmatched_slots,
        "skipped_slots": report.skipped_slots,
        "extracted": {k: v.value for k, v in report.extracted.items()},
    }


@mcp.tool()
def ff_store_profile(name: str, text: str, profile_id: str = "") -> str:
    """Store a free-text profile (contact sheet, site details) for later filling.

    Passing an existing profile_id replaces that profile's name and text.
    Returns the stored profile and the entity values found in it.

    Args:
        name: Display name for the profile (e.g. 'Cityview Research Center')
        text: The profile text, typically 'Key: Value' lines
        profile_id: Existing profile to update. Leave empty to create a new one.
    """
    if not text.strip():
        return _error("Profile text is empty")

    store = _get_store()
    profile = store.save_profile(name=name, text=text, profile_id=profile_id or None)
    extracted = _get_filler().extractor.extract(text)

    result = {
        "stored": True,
        "profile_id": profile["id"],
        "name": profile["name"],
        "extracted": {k: v.value for k, v in extracted.items()},
        "entity_count": len(extracted),
    }
    return json.dumps(result, indent=2)


@mcp.tool()
def ff_list_profiles() -> str:
    """List stored profiles, most recently used first."""
    profiles = _get_store().list_profiles()
    return json.dumps({"count": len(profiles), "profiles": profiles}, indent=2)


@mcp.tool()
def ff_fill_fields(profile_id: str, slots: List[Dict[str, Any]]) -> str:
    """Compute values for form fields from a stored profile.

    Each slot needs 'id' and 'name'; 'type', 'label', 'placeholder',
    'context', 'classList' and 'attributes' improve matching. Slots missing
    id or name are reported under skipped_slots.

    Args:
        profile_id: Profile returned by ff_store_profile
        slots: Field descriptors, in form order
    """
    store = _get_store()
    profile = store.get_profile(profile_id)
    if profile is None:
        return _error(f"Unknown profile: {profile_id}")

    filler = _get_filler()
    try:
        report = filler.fill(profile["text"], slots)
    except FormFillError as e:
        logger.exception("Fill failed for profile %s", profile_id)
        return _error(str(e))

    store.touch_profile(profile_id)
    declared = {str(s.get("id") or ""): str(s.get("type") or s.get("declared_type") or "text") for s in slots}

    result = _report_to_dict(report, declared)
    result["profile_id"] = profile_id
    result["auto_fill_enabled"] = filler.config.auto_fill_enabled
    return json.dumps(result, indent=2)


@mcp.tool()
def ff_record_feedback(
    profile_id: str,
    slot_id: str,
    predicted_value: str,
    actual_value: str,
    confidence: float = 0.0,
    marked_invalid: bool = False,
) -> str:
    """Report what the user did with a filled field.

    The value counts as correct when the user left it unchanged.

    Args:
        profile_id: Profile the value came from
        slot_id: The field that was filled
        predicted_value: Value that was written
        actual_value: Value the field held once the user was done
        confidence: Confidence reported by ff_fill_fields
        marked_invalid: True if the form flagged the field as invalid
    """
    store = _get_store()
    if store.get_profile(profile_id) is None:
        return _error(f"Unknown profile: {profile_id}")

    record = FeedbackRecord(
        profile_id=profile_id,
        slot_id=slot_id,
        predicted_value=predicted_value,
        actual_value=actual_value,
        was_correct=actual_value == predicted_value,
        confidence=confidence,
        user_feedback=feedback_tag(actual_value, marked_invalid),
    )

    filler = _get_filler()
    try:
        accuracy = filler.record_feedback(record)
    except FormFillError as e:
        return _error(str(e))

    if accuracy is not None:
        store.add_feedback(record)

    result = {
        "recorded": accuracy is not None,
        "profile_id": profile_id,
        "slot_id": slot_id,
        "was_correct": record.was_correct,
        "user_feedback": record.user_feedback,
        "accuracy": accuracy,
    }
    return json.dumps(result, indent=2)


@mcp.tool()
def ff_profile_accuracy(profile_id: str) -> str:
    """Show how often values from a profile were kept, plus recurring value patterns per field.

    Args:
        profile_id: Profile to report on
    """
    profile = _get_store().get_profile(profile_id)
    if profile is None:
        return _error(f"Unknown profile: {profile_id}")

    learner = _get_filler().learner
    stats = learner.profile_stats(profile_id)
    stats["name"] = profile["name"]
    stats["usage_count"] = profile["usage_count"]
    stats["patterns"] = {
        slot_id: [
            {"kind": p.kind, "pattern": p.pattern, "frequency": p.frequency}
            for p in learner.summarize_patterns(profile_id, slot_id)
        ]
        for slot_id in stats["slots"]
    }
    return json.dumps(stats, indent=2)


@mcp.tool()
def ff_delete_profile(profile_id: str) -> str:
    """Delete a stored profile together with its feedback history.

    Args:
        profile_id: Profile to delete
    """
    deleted = _get_store().delete_profile(profile_id)
    if deleted:
        _get_filler().learner.forget_profile(profile_id)
    return json.dumps({"deleted": deleted, "profile_id": profile_id}, indent=2)


def _restore_feedback(store: ProfileStore, filler: FormFiller) -> int:
    """Replay stored feedback into the learner so accuracy survives restarts."""
    count = 0
    for profile in store.list_profiles():
        count += filler.learner.load(store.feedback_for(profile["id"]))
    return count


def main():
    """Entry point for the formfill-mcp command."""
    parser = argparse.ArgumentParser(description="formfill MCP Server")
    parser.add_argument(
        "--db",
        default=".formfill/profiles.db",
        help="Path to SQLite database for profiles and feedback (default: .formfill/profiles.db)",
    )
    parser.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help="Minimum match score a field must exceed (default: 0.15)",
    )
    parser.add_argument(
        "--no-learning",
        action="store_true",
        help="Validate but do not record feedback",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    # Initialize global store and filler
    global _store, _filler, _config
    overrides = {"learning_enabled": not args.no_learning}
    if args.threshold is not None:
        overrides["min_match_score"] = args.threshold
    _config = FillConfig().with_overrides(**overrides)
    _store = ProfileStore(args.db)
    _filler = FormFiller(_config)
    restored = _restore_feedback(_store, _filler)
    logger.info(
        "formfill MCP server started with db=%s, threshold=%.2f, %d feedback record(s) restored",
        args.db, _config.min_match_score, restored,
    )

    # Run via stdio (standard for MCP)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
