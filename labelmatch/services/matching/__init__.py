"""Label matching engine."""

from .confidence import ConfidenceScorer, MatchResult, MatchType
from .matcher import MatchSummary, NameMatcher, summarize
from .normalize import extract_brand, normalize, remove_dakuten
from .similarity import BestMatch, SimilarityScorer, TierScore, longest_common_substring_length

__all__ = [
    "BestMatch",
    "ConfidenceScorer",
    "MatchResult",
    "MatchSummary",
    "MatchType",
    "NameMatcher",
    "SimilarityScorer",
    "TierScore",
    "extract_brand",
    "longest_common_substring_length",
    "normalize",
    "remove_dakuten",
    "summarize",
]
