"""Tests for feedback recording and accuracy tracking."""

import threading

import pytest

from formfill.errors import FeedbackRecordInvalidError
from formfill.feedback import FeedbackLearner, common_affixes
from formfill.types import FeedbackRecord


def _record(profile_id="site-1", slot_id="email", correct=True, actual="jane@hosp.org", **kwargs):
    return FeedbackRecord(
        profile_id=profile_id,
        slot_id=slot_id,
        predicted_value="jane@hosp.org",
        actual_value=actual,
        was_correct=correct,
        **kwargs,
    )


class TestAccuracy:
    def test_two_of_three(self):
        learner = FeedbackLearner()
        for correct in (True, True, False):
            accuracy = learner.record_outcome(_record(correct=correct))
        assert accuracy == pytest.approx(2 / 3)
        assert learner.accuracy("site-1") == pytest.approx(2 / 3)

    def test_no_history(self):
        assert FeedbackLearner().accuracy("never-seen") == 0.0

    def test_profiles_are_independent(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record(profile_id="a", correct=True))
        learner.record_outcome(_record(profile_id="b", correct=False))
        assert learner.accuracy("a") == 1.0
        assert learner.accuracy("b") == 0.0

    def test_history_is_a_copy(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record())
        learner.history("site-1").clear()
        assert len(learner.history("site-1")) == 1


class TestValidation:
    @pytest.mark.parametrize("profile_id, slot_id", [("", "email"), ("site-1", ""), ("  ", "email")])
    def test_rejects_unattributable(self, profile_id, slot_id):
        learner = FeedbackLearner()
        with pytest.raises(FeedbackRecordInvalidError):
            learner.record_outcome(_record(profile_id=profile_id, slot_id=slot_id))
        assert learner.history(profile_id) == []
        assert learner.accuracy(profile_id) == 0.0

    def test_rejects_non_records(self):
        with pytest.raises(FeedbackRecordInvalidError):
            FeedbackLearner().record_outcome({"profile_id": "site-1", "slot_id": "email"})

    def test_invalid_record_leaves_history_untouched(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record())
        with pytest.raises(FeedbackRecordInvalidError):
            learner.record_outcome(_record(slot_id=""))
        assert len(learner.history("site-1")) == 1
        assert learner.accuracy("site-1") == 1.0

    @pytest.mark.parametrize("confidence", [5.0, -0.1, float("nan"), "high"])
    def test_rejects_out_of_range_confidence(self, confidence):
        learner = FeedbackLearner()
        with pytest.raises(FeedbackRecordInvalidError):
            learner.record_outcome(_record(confidence=confidence))
        assert learner.history("site-1") == []
        assert learner.accuracy("site-1") == 0.0

    @pytest.mark.parametrize("confidence", [0.0, 1.0, 1])
    def test_accepts_confidence_bounds(self, confidence):
        assert FeedbackLearner().record_outcome(_record(confidence=confidence)) == 1.0


class TestConcurrency:
    def test_no_lost_updates(self):
        """Concurrent appends for one profile all land."""
        learner = FeedbackLearner()
        per_thread = 200

        def worker(correct):
            for _ in range(per_thread):
                learner.record_outcome(_record(correct=correct))

        threads = [threading.Thread(target=worker, args=(i % 2 == 0,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(learner.history("site-1")) == 8 * per_thread
        assert learner.accuracy("site-1") == pytest.approx(0.5)

    def test_many_profiles(self):
        learner = FeedbackLearner()

        def worker(profile_id):
            for _ in range(50):
                learner.record_outcome(_record(profile_id=profile_id))

        threads = [threading.Thread(target=worker, args=(f"site-{i}",)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(10):
            assert len(learner.history(f"site-{i}")) == 50


class TestPatterns:
    def test_needs_three_values(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record(slot_id="license", actual="ML-1001"))
        learner.record_outcome(_record(slot_id="license", actual="ML-2002"))
        assert learner.summarize_patterns("site-1", "license") == []

    def test_prefix_and_suffix(self):
        learner = FeedbackLearner()
        for value in ("ML-1001", "ML-2001", "XX-3456"):
            learner.record_outcome(_record(slot_id="license", actual=value))
        patterns = learner.summarize_patterns("site-1", "license")
        assert [(p.kind, p.pattern, p.frequency) for p in patterns] == [
            ("prefix", "ML-", 2),
            ("suffix", "001", 2),
        ]

    def test_only_accepted_values_count(self):
        learner = FeedbackLearner()
        for value in ("ML-1001", "ML-2001", "ML-3001"):
            learner.record_outcome(_record(slot_id="license", actual=value, correct=False))
        assert learner.accepted_values("site-1", "license") == []
        assert learner.summarize_patterns("site-1", "license") == []

    def test_short_values_ignored(self):
        assert common_affixes(["abc", "abc", "abc"]) == []


class TestProfileLifecycle:
    def test_stats(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record(slot_id="email"))
        learner.record_outcome(_record(slot_id="phone", correct=False))
        stats = learner.profile_stats("site-1")
        assert stats["interactions"] == 2
        assert stats["correct"] == 1
        assert stats["accuracy"] == 0.5
        assert stats["slots"] == ["email", "phone"]

    def test_forget(self):
        learner = FeedbackLearner()
        learner.record_outcome(_record())
        learner.forget_profile("site-1")
        assert learner.history("site-1") == []
        assert learner.accuracy("site-1") == 0.0
        assert learner.accepted_values("site-1", "email") == []

    def test_reads_do_not_register_locks(self):
        learner = FeedbackLearner()
        assert learner.history("ghost") == []
        assert learner.accepted_values("ghost", "email") == []
        assert learner.profile_stats("ghost")["interactions"] == 0
        learner.forget_profile("ghost")
        assert "ghost" not in learner._locks

    def test_forget_keeps_the_profile_lock(self):
        """Writers queued on the old lock still serialize with new ones."""
        learner = FeedbackLearner()
        learner.record_outcome(_record())
        lock = learner._lock_for("site-1")
        learner.forget_profile("site-1")
        assert learner._lock_for("site-1") is lock
        learner.record_outcome(_record(correct=False))
        assert learner.accuracy("site-1") == 0.0

    def test_load(self):
        learner = FeedbackLearner()
        count = learner.load([_record(), _record(correct=False)])
        assert count == 2
        assert learner.accuracy("site-1") == 0.5
