"""Matcher: learned mappings first, then the similarity cascade."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from labelmatch.config import Settings
from labelmatch.models.records import LearnedMapping, MasterRecord, SourceItem
from labelmatch.services.intake import sanitize_item

from .confidence import ConfidenceScorer, MatchResult, MatchType
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)


@dataclass
class MatchSummary:
    """Statistics over one matching run."""

    total_items: int = 0
    matched_count: int = 0
    unmatched_count: int = 0
    matched_quantity: float = 0.0
    unmatched_quantity: float = 0.0
    by_match_type: dict[str, int] = field(default_factory=dict)

    @property
    def total_quantity(self) -> float:
        return self.matched_quantity + self.unmatched_quantity

    @property
    def match_rate(self) -> float:
        if self.total_items == 0:
            return 0.0
        return self.matched_count / self.total_items


def summarize(results: Iterable[MatchResult]) -> MatchSummary:
    """Count matched/unmatched items and quantities per match type."""
    summary = MatchSummary()
    counts: Counter[str] = Counter()

    for result in results:
        summary.total_items += 1
        counts[result.match_type.value] += 1
        if result.matched is not None:
            summary.matched_count += 1
            summary.matched_quantity += result.source_item.quantity
        else:
            summary.unmatched_count += 1
            summary.unmatched_quantity += result.source_item.quantity

    summary.by_match_type = dict(counts)
    return summary


class NameMatcher:
    """Resolves free-text labels to master records.

    Per item:
    1. Exact raw label has a learned mapping to a master still in the
       catalog -> "learned" at 100, no scoring
    2. Otherwise score against every master and keep the best (first on ties)
    3. Gate by threshold; below it the item is unmatched but keeps the best
       score so a human can be shown the closest guess

    Master ids are compared by their string form, so mappings loaded from
    storage (text ids) resolve against integer or UUID catalog ids.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize matcher.

        Args:
            settings: Threshold and tier constants; defaults are used when omitted
        """
        self.settings = settings or Settings()
        self.scorer = SimilarityScorer(self.settings)
        self.confidence = ConfidenceScorer(self.settings)

    def match_all(
        self,
        items: Iterable[Any],
        masters: Sequence[MasterRecord],
        learned: Iterable[LearnedMapping] | None = None,
    ) -> list[MatchResult]:
        """Match every item; output has one result per input item, in order.

        Args:
            items: SourceItems (or row-like objects, sanitized at the boundary)
            masters: Catalog snapshot for this run
            learned: Learned mappings snapshot for this run

        Returns:
            List of MatchResult
        """
        masters = list(masters or [])
        masters_by_id = self._index_masters(masters)
        learned_by_label = self._index_learned(learned)

        if not masters:
            logger.warning("Matching against an empty catalog; every item will be unmatched")

        results = [
            self._match(sanitize_item(item), masters, masters_by_id, learned_by_label)
            for item in items or []
        ]

        summary = summarize(results)
        logger.info(
            f"Matched {summary.matched_count}/{summary.total_items} items "
            f"against {len(masters)} masters ({summary.by_match_type})"
        )
        return results

    def match_one(
        self,
        item: Any,
        masters: Sequence[MasterRecord],
        learned: Iterable[LearnedMapping] | None = None,
    ) -> MatchResult:
        """Match a single item."""
        masters = list(masters or [])
        return self._match(
            sanitize_item(item),
            masters,
            self._index_masters(masters),
            self._index_learned(learned),
        )

    def _match(
        self,
        item: SourceItem,
        masters: list[MasterRecord],
        masters_by_id: dict[str, MasterRecord],
        learned_by_label: dict[str, Any],
    ) -> MatchResult:
        """Run the learned lookup and the scoring cascade for one item."""
        if item.raw_label in learned_by_label:
            master_id = learned_by_label[item.raw_label]
            master = masters_by_id.get(str(master_id))
            if master is not None:
                logger.debug(f"Learned match {item.raw_label!r} -> {master.name!r}")
                return MatchResult(
                    source_item=item,
                    matched=master,
                    confidence=100.0,
                    match_type=MatchType.LEARNED,
                )
            logger.warning(
                f"Learned mapping for {item.raw_label!r} points at missing master "
                f"{master_id}; falling back to scoring"
            )

        best = self.scorer.best_match(item.raw_label, masters)
        confidence = self.confidence.clamp(best.score)

        if best.master is None or not self.confidence.is_accepted(confidence):
            logger.debug(f"No match for {item.raw_label!r} (best {confidence:.1f})")
            return MatchResult(
                source_item=item,
                matched=None,
                confidence=confidence,
                match_type=MatchType.NONE,
            )

        logger.debug(
            f"{best.match_type.value} match {item.raw_label!r} -> "
            f"{best.master.name!r} ({confidence:.1f})"
        )
        return MatchResult(
            source_item=item,
            matched=best.master,
            confidence=confidence,
            match_type=best.match_type,
        )

    @staticmethod
    def _index_masters(masters: list[MasterRecord]) -> dict[str, MasterRecord]:
        index: dict[str, MasterRecord] = {}
        for master in masters:
            index.setdefault(str(master.id), master)
        return index

    @staticmethod
    def _index_learned(learned: Iterable[LearnedMapping] | None) -> dict[str, Any]:
        # Later entries win, matching last-write-wins on the store
        return {mapping.raw_label: mapping.master_id for mapping in learned or []}
