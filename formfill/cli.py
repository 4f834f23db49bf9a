"""formfill CLI - extract profile values and match them to slots from the command line.

Usage:
    formfill extract "Principal Investigator: Dr. Jane Smith"
    formfill extract --file profile.txt
    formfill match --profile profile.txt --slots slots.json --threshold 0.2
    formfill version
"""

import argparse
import json
import logging
import sys
import time
from typing import List

from . import __version__
from .config import FillConfig
from .errors import FormFillError
from .extractor import Extractor
from .filler import FormFiller
from .postprocess import format_value_for_slot
from .types import SlotDescriptor


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _load_slots(path: str) -> List[SlotDescriptor]:
    """Load slot descriptors from a JSON file.

    Accepts either a list of objects or a dict with a ``slots`` (or
    ``fields``) key. Each object needs ``id`` and ``name``; everything else
    is optional.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("slots", data.get("fields", []))

    slots: List[SlotDescriptor] = []
    for i, item in enumerate(data):
        if isinstance(item, dict):
            slots.append(SlotDescriptor.from_dict(item))
        else:
            print(f"Warning: skipping unrecognised slot entry at index {i}", file=sys.stderr)
    return slots


def cmd_extract(args: argparse.Namespace) -> int:
    """Extract entity values from a profile and print them."""
    if args.file:
        text = _read_text(args.file)
    elif args.text:
        text = args.text
    else:
        print("Error: provide TEXT or --file", file=sys.stderr)
        return 1

    values = Extractor().extract(text)
    output = {
        entity_type: {
            "value": v.value,
            "confidence": round(v.confidence, 4),
            "method": v.method,
            "pattern": v.source_pattern,
        }
        for entity_type, v in values.items()
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Fill slots from a profile and print the report."""
    config = FillConfig()
    if args.threshold is not None:
        config = config.with_overrides(min_match_score=args.threshold)

    text = _read_text(args.profile)
    slots = _load_slots(args.slots)
    if not slots:
        print("Warning: no slots loaded from file", file=sys.stderr)
    declared = {s.id: s.declared_type for s in slots}

    t0 = time.perf_counter()
    report = FormFiller(config).fill(text, slots)
    elapsed_ms = (time.perf_counter() - t0) * 1000

    assignments = []
    for a in report.assignments:
        value = a.value
        if args.format:
            value = format_value_for_slot(declared.get(a.slot_id, "text"), value)
        assignments.append({
            "slot_id": a.slot_id,
            "entity_type": a.entity_type,
            "value": value,
            "confidence": round(a.confidence, 4),
        })

    output = {
        "assignments": assignments,
        "overall_confidence": round(report.overall_confidence, 4),
        "auto_apply": [a.slot_id for a in report.auto_apply],
        "unmatched_slots": report.unmatched_slots,
        "skipped_slots": report.skipped_slots,
        "latency_ms": round(elapsed_ms, 2),
        "slots_count": len(slots),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_version(_args: argparse.Namespace) -> int:
    """Print the version."""
    print(f"formfill {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formfill",
        description="formfill - map free-text profiles onto form fields",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # formfill extract
    p_extract = sub.add_parser("extract", help="Extract entity values from profile text")
    p_extract.add_argument("text", nargs="?", help="Profile text (omit when using --file)")
    p_extract.add_argument("--file", "-f", help="Read the profile from a text file")
    p_extract.set_defaults(func=cmd_extract)

    # formfill match
    p_match = sub.add_parser("match", help="Assign profile values to slots")
    p_match.add_argument("--profile", "-p", required=True, help="Path to the profile text file")
    p_match.add_argument(
        "--slots", "-s",
        required=True,
        help="Path to a JSON file containing slots (list of {id, name, type?, label?, ...})",
    )
    p_match.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help="Minimum match score a slot must exceed (default: 0.15)",
    )
    p_match.add_argument(
        "--format",
        action="store_true",
        default=False,
        help="Format values for their slot type (phones, emails)",
    )
    p_match.set_defaults(func=cmd_match)

    # formfill version
    p_version = sub.add_parser("version", help="Show version")
    p_version.set_defaults(func=cmd_version)

    return parser


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        code = args.func(args)
    except (FormFillError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
