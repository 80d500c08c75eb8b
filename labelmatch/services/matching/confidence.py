"""Match types, match results and review actions."""

from dataclasses import dataclass
from enum import Enum

from labelmatch.config import Settings
from labelmatch.models.records import MasterRecord, SourceItem


class MatchType(str, Enum):
    """Which rule produced a match."""

    LEARNED = "learned"
    EXACT = "exact"
    BRAND = "brand"
    SUBSTRING = "substring"
    SIMILARITY = "similarity"
    NONE = "none"


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one source item against the catalog."""

    source_item: SourceItem
    matched: MasterRecord | None
    confidence: float
    match_type: MatchType

    @property
    def is_matched(self) -> bool:
        return self.matched is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "raw_label": self.source_item.raw_label,
            "quantity": self.source_item.quantity,
            "source_tag": self.source_item.source_tag,
            "master_id": self.matched.id if self.matched else None,
            "master_name": self.matched.name if self.matched else None,
            "confidence": self.confidence,
            "match_type": self.match_type.value,
        }


class ConfidenceScorer:
    """Maps match results to review actions for manual-resolution screens."""

    # Match types trusted without a human look
    AUTO_ACCEPT_TYPES = frozenset({MatchType.LEARNED, MatchType.EXACT})

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def clamp(self, score: float) -> float:
        """Clamp a score to the 0-100 range."""
        return max(0.0, min(100.0, score))

    def is_accepted(self, confidence: float) -> bool:
        """Whether a confidence clears the match threshold."""
        return confidence >= self.settings.match_threshold

    def get_action(self, result: MatchResult) -> str:
        """Determine review action for a result.

        Brand matches are at most suggested: the brand core is lossy, so it is
        never enough on its own for automatic acceptance.

        Returns:
            One of: 'auto_accept', 'suggest', 'review', 'manual'
        """
        if result.matched is None:
            return "manual"
        if result.match_type in self.AUTO_ACCEPT_TYPES:
            return "auto_accept"
        if result.confidence >= self.settings.brand_score:
            return "suggest"
        return "review"
