"""Data models."""

from .mapping import Base, LearnedMappingRow
from .records import DuplicateGroup, LearnedMapping, MasterRecord, SourceItem

__all__ = [
    "Base",
    "DuplicateGroup",
    "LearnedMapping",
    "LearnedMappingRow",
    "MasterRecord",
    "SourceItem",
]
