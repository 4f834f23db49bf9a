"""End-to-end fill pipeline: profile text + slots -> confidence-scored report."""

import logging
from typing import Iterable, Optional, Union

from .config import FillConfig
from .confidence import overall_confidence
from .errors import InvalidSlotDescriptorError
from .extractor import Extractor
from .feedback import FeedbackLearner, validate_record
from .matcher import SlotMatcher
from .patterns import PatternLibrary
from .types import FeedbackRecord, FillReport, SlotDescriptor

logger = logging.getLogger(__name__)

SlotInput = Union[SlotDescriptor, dict]


class FormFiller:
    """Wires extraction, matching and feedback together.

    The filler computes assignments; writing them into real slots and
    observing the user's edits is left to the caller.

    Example:
        >>> filler = FormFiller()
        >>> report = filler.fill(
        ...     "Email: jane@hosp.org",
        ...     [SlotDescriptor(id="contact_email", name="contact_email", declared_type="email")],
        ... )
        >>> report.assignments[0].value
        'jane@hosp.org'
    """

    def __init__(
        self,
        config: Optional[FillConfig] = None,
        library: Optional[PatternLibrary] = None,
        learner: Optional[FeedbackLearner] = None,
    ):
        self.config = config or FillConfig()
        self.extractor = Extractor(
            library=library,
            flexible=self.config.flexible_extraction,
            max_flexible_value_length=self.config.max_flexible_value_length,
        )
        self.matcher = SlotMatcher(
            library=self.extractor.library,
            min_match_score=self.config.min_match_score,
            cache_signatures=self.config.cache_signatures,
        )
        self.learner = learner or FeedbackLearner()

    def fill(self, profile_text: str, slots: Iterable[SlotInput]) -> FillReport:
        """Extract values from a profile and assign them to slots.

        Slots with missing identifiers are skipped and reported in
        ``skipped_slots``; the rest of the request carries on.

        Args:
            profile_text: Free-text profile
            slots: Slot descriptors, or mappings accepted by
                :meth:`SlotDescriptor.from_dict`

        Returns:
            :class:`FillReport` with one assignment per matched slot
        """
        report = FillReport(extracted=self.extractor.extract(profile_text))

        for slot in slots:
            if isinstance(slot, dict):
                slot = SlotDescriptor.from_dict(slot)
            try:
                assignment = self.matcher.match(slot, report.extracted)
            except InvalidSlotDescriptorError as e:
                logger.warning("Skipping slot: %s", e)
                report.skipped_slots.append(slot.id)
                continue

            if assignment is None:
                report.unmatched_slots.append(slot.id)
                continue
            report.assignments.append(assignment)
            if self.config.auto_fill_enabled and assignment.confidence >= self.config.confidence_threshold:
                report.auto_apply.append(assignment)

        report.overall_confidence = overall_confidence(report.assignments)
        logger.info(
            "Filled %d slot(s), %d unmatched, %d skipped (confidence %.2f)",
            len(report.assignments), len(report.unmatched_slots),
            len(report.skipped_slots), report.overall_confidence,
        )
        return report

    def record_feedback(self, record: FeedbackRecord) -> Optional[float]:
        """Pass a feedback record to the learner.

        Returns:
            The profile's updated accuracy, or None when learning is disabled

        Raises:
            FeedbackRecordInvalidError: If the record cannot be attributed,
                whether or not learning is enabled
        """
        validate_record(record)
        if not self.config.learning_enabled:
            logger.debug("Learning disabled; dropping feedback for %s", record.profile_id)
            return None
        return self.learner.record_outcome(record)
