"""Runtime configuration for the fill pipeline."""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict


@dataclass(frozen=True)
class FillConfig:
    """Explicit settings passed to :class:`~formfill.filler.FormFiller`.

    Attributes:
        min_match_score: A slot is assigned only when its best score is strictly
            above this value. Lower values favor recall over precision.
        flexible_extraction: Run the ``key: value`` line-scanning pass after
            the strict pattern pass.
        max_flexible_value_length: Flexible values this long or longer are
            rejected as unreliable.
        learning_enabled: Record feedback outcomes. When False,
            ``FormFiller.record_feedback`` validates and then drops records.
        auto_fill_enabled: Whether the collaborator should write values at all.
        confidence_threshold: Assignments at or above this confidence are
            listed in ``FillReport.auto_apply``.
        cache_signatures: Reuse slot signatures for unchanged descriptors.
    """
    min_match_score: float = 0.15
    flexible_extraction: bool = True
    max_flexible_value_length: int = 200
    learning_enabled: bool = True
    auto_fill_enabled: bool = True
    confidence_threshold: float = 0.7
    cache_signatures: bool = True

    def __post_init__(self):
        for name in ("min_match_score", "confidence_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")
        if self.max_flexible_value_length < 1:
            raise ValueError("max_flexible_value_length must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FillConfig":
        """Build a config from a settings mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    def with_overrides(self, **overrides: Any) -> "FillConfig":
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
