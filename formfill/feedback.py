"""Feedback history and accuracy tracking per profile.

The learner records what happened to previously applied values and derives a
running accuracy plus simple value statistics. It never touches matcher
scoring; callers decide whether and how to use the statistics.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import FeedbackRecordInvalidError
from .types import FeedbackRecord, ValuePattern

logger = logging.getLogger(__name__)

MIN_VALUES_FOR_PATTERNS = 3
MIN_PATTERN_FREQUENCY = 2
PATTERN_WINDOW = 3


def validate_record(record: FeedbackRecord) -> None:
    """Raise :class:`FeedbackRecordInvalidError` for unattributable or out-of-range records."""
    if not isinstance(record, FeedbackRecord):
        raise FeedbackRecordInvalidError(f"Expected FeedbackRecord, got {type(record).__name__}")
    missing = [f for f in ("profile_id", "slot_id") if not str(getattr(record, f) or "").strip()]
    if missing:
        raise FeedbackRecordInvalidError(f"Feedback record is missing {', '.join(missing)}")
    confidence = record.confidence
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise FeedbackRecordInvalidError(f"Feedback confidence must be a number, got {confidence!r}")
    if not 0.0 <= confidence <= 1.0:
        raise FeedbackRecordInvalidError(f"Feedback confidence must be within [0, 1], got {confidence!r}")


def common_affixes(values: Iterable[str], window: int = PATTERN_WINDOW,
                   min_frequency: int = MIN_PATTERN_FREQUENCY) -> List[ValuePattern]:
    """Find prefixes and suffixes shared by several values.

    Args:
        values: Accepted values for one slot
        window: Length of the prefix/suffix to compare
        min_frequency: Minimum number of values that must share it

    Returns:
        Prefix patterns first, then suffix patterns, each in first-seen order

    Examples:
        >>> [p.pattern for p in common_affixes(["ML-123", "ML-456", "XX-123"])]
        ['ML-', '123']
    """
    prefixes: Counter = Counter()
    suffixes: Counter = Counter()
    for value in values:
        if isinstance(value, str) and len(value) > window:
            prefixes[value[:window]] += 1
            suffixes[value[-window:]] += 1

    patterns = [ValuePattern("prefix", p, n) for p, n in prefixes.items() if n >= min_frequency]
    patterns += [ValuePattern("suffix", s, n) for s, n in suffixes.items() if n >= min_frequency]
    return patterns


class FeedbackLearner:
    """Append-only feedback store with per-profile accuracy.

    Appends for the same profile are serialized; different profiles never
    contend with each other.

    Example:
        >>> learner = FeedbackLearner()
        >>> learner.record_outcome(FeedbackRecord("site-1", "email", "a@b.org", "a@b.org", True))
        1.0
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._history: Dict[str, List[FeedbackRecord]] = defaultdict(list)
        self._accuracy: Dict[str, float] = {}
        self._accepted: Dict[Tuple[str, str], List[str]] = defaultdict(list)

    def _lock_for(self, profile_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(profile_id)
            if lock is None:
                lock = self._locks[profile_id] = threading.Lock()
            return lock

    def _existing_lock(self, profile_id: str) -> Optional[threading.Lock]:
        # Reads never register a lock; only record_outcome does.
        with self._registry_lock:
            return self._locks.get(profile_id)

    def record_outcome(self, record: FeedbackRecord) -> float:
        """Append a feedback record and recompute the profile's accuracy.

        Args:
            record: Outcome reported by the collaborator

        Returns:
            The profile's updated accuracy

        Raises:
            FeedbackRecordInvalidError: If the record lacks a profile or slot id,
                or its confidence is outside [0, 1]. Nothing is recorded then.
        """
        validate_record(record)
        with self._lock_for(record.profile_id):
            history = self._history[record.profile_id]
            history.append(record)
            if record.was_correct:
                self._accepted[(record.profile_id, record.slot_id)].append(record.actual_value)
            correct = sum(1 for r in history if r.was_correct)
            accuracy = correct / len(history)
            self._accuracy[record.profile_id] = accuracy

        logger.debug(
            "Feedback for %s/%s (correct=%s); accuracy now %.3f",
            record.profile_id, record.slot_id, record.was_correct, accuracy,
        )
        return accuracy

    def load(self, records: Iterable[FeedbackRecord]) -> int:
        """Replay persisted records, e.g. after a restart. Returns the count loaded."""
        count = 0
        for record in records:
            self.record_outcome(record)
            count += 1
        return count

    def accuracy(self, profile_id: str) -> float:
        """Fraction of correct outcomes for a profile (0.0 with no history)."""
        return self._accuracy.get(profile_id, 0.0)

    def history(self, profile_id: str) -> List[FeedbackRecord]:
        lock = self._existing_lock(profile_id)
        if lock is None:
            return []
        with lock:
            return list(self._history.get(profile_id, ()))

    def accepted_values(self, profile_id: str, slot_id: str) -> List[str]:
        lock = self._existing_lock(profile_id)
        if lock is None:
            return []
        with lock:
            return list(self._accepted.get((profile_id, slot_id), ()))

    def summarize_patterns(self, profile_id: str, slot_id: str) -> List[ValuePattern]:
        """Shared 3-character prefixes/suffixes among a slot's accepted values.

        Returns an empty list until at least three values have been accepted.
        """
        values = self.accepted_values(profile_id, slot_id)
        if len(values) < MIN_VALUES_FOR_PATTERNS:
            return []
        return common_affixes(values)

    def profile_stats(self, profile_id: str) -> Dict[str, object]:
        history = self.history(profile_id)
        correct = sum(1 for r in history if r.was_correct)
        return {
            "profile_id": profile_id,
            "interactions": len(history),
            "correct": correct,
            "accuracy": self.accuracy(profile_id),
            "slots": sorted({r.slot_id for r in history}),
        }

    def forget_profile(self, profile_id: str) -> None:
        """Drop all history for a profile that has been deleted.

        The profile's lock stays registered so writers that already hold or
        wait on it keep serializing with later ones.
        """
        lock = self._existing_lock(profile_id)
        if lock is None:
            return
        with lock:
            self._history.pop(profile_id, None)
            self._accuracy.pop(profile_id, None)
            for key in [k for k in self._accepted if k[0] == profile_id]:
                del self._accepted[key]