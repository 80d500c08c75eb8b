"""Tiered similarity scoring between a raw label and a master name."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from labelmatch.config import Settings
from labelmatch.models.records import MasterRecord

from .confidence import MatchType
from .normalize import extract_brand, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierScore:
    """Score of one label/name pair and the tier that produced it."""

    score: float
    match_type: MatchType


@dataclass(frozen=True)
class BestMatch:
    """Highest-scoring master for a label (first one on ties)."""

    master: MasterRecord | None
    score: float
    match_type: MatchType


NO_SCORE = TierScore(0.0, MatchType.NONE)


def longest_common_substring_length(a: str, b: str) -> int:
    """Length of the longest common contiguous substring.

    Classic O(n*m) dynamic programming keeping only two rows.
    """
    if not a or not b:
        return 0
    if len(b) > len(a):
        a, b = b, a

    previous = [0] * (len(b) + 1)
    longest = 0
    for ch_a in a:
        current = [0] * (len(b) + 1)
        for j, ch_b in enumerate(b, start=1):
            if ch_a == ch_b:
                run = previous[j - 1] + 1
                current[j] = run
                if run > longest:
                    longest = run
        previous = current
    return longest


class SimilarityScorer:
    """Scores a candidate label against master names.

    Cascade, first applicable tier wins:
    1. Exact normalized equality       -> 100
    2. Brand core equality              -> brand_score (90)
    3. Containment                      -> shorter/longer * containment_max_score (80)
    4. Longest common substring ratio   -> L/longer * lcs_max_score (70), if L >= min_lcs_length
    """

    EXACT_SCORE = 100.0

    def __init__(self, settings: Settings | None = None):
        """Initialize scorer.

        Args:
            settings: Tunable score constants; defaults are used when omitted
        """
        self.settings = settings or Settings()

    def score(self, label: str, master_name: str) -> TierScore:
        """Score a raw candidate label against one master name."""
        return self._score(normalize(label), extract_brand(label), master_name)

    def _score(self, a_norm: str, brand: str, master_name: str) -> TierScore:
        """Run the cascade with the label side already normalized."""
        b_norm = normalize(master_name)

        # An empty side carries no evidence for any tier
        if not a_norm or not b_norm:
            return NO_SCORE

        if a_norm == b_norm:
            return TierScore(self.EXACT_SCORE, MatchType.EXACT)

        if len(brand) >= self.settings.min_brand_core_length and brand == extract_brand(
            master_name
        ):
            return TierScore(self.settings.brand_score, MatchType.BRAND)

        shorter, longer = sorted((len(a_norm), len(b_norm)))

        if a_norm in b_norm or b_norm in a_norm:
            return TierScore(
                shorter / longer * self.settings.containment_max_score,
                MatchType.SUBSTRING,
            )

        lcs = longest_common_substring_length(a_norm, b_norm)
        if lcs >= self.settings.min_lcs_length:
            return TierScore(lcs / longer * self.settings.lcs_max_score, MatchType.SIMILARITY)

        return NO_SCORE

    def best_match(self, label: str, masters: Sequence[MasterRecord]) -> BestMatch:
        """Find the highest-scoring master for a label.

        Every master is tried; the first one reaching the maximum is kept, so
        ties resolve in master-list order.
        """
        best = BestMatch(master=None, score=0.0, match_type=MatchType.NONE)
        a_norm = normalize(label)
        brand = extract_brand(label)

        for master in masters:
            result = self._score(a_norm, brand, master.name)
            if result.score > best.score:
                best = BestMatch(master=master, score=result.score, match_type=result.match_type)
                if result.score >= self.EXACT_SCORE:
                    break

        return best
