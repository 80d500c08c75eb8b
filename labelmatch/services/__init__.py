"""Services for label matching and reconciliation."""

from .intake import SourceRow, parse_quantity, rows_to_items, sanitize_item
from .learning import InMemoryLearnedMappingStore, LearnedMappingStore
from .mapping_store import LearnedMappingRepository
from .reconcile import (
    DiscrepancyKind,
    DiscrepancyReconciler,
    DiscrepancyRecord,
    ReconciliationReport,
    ReconciliationStats,
    aggregate_quantities,
    duplicate_identities,
    find_duplicates,
    reconcile,
)

__all__ = [
    "SourceRow",
    "parse_quantity",
    "rows_to_items",
    "sanitize_item",
    "InMemoryLearnedMappingStore",
    "LearnedMappingStore",
    "LearnedMappingRepository",
    "DiscrepancyKind",
    "DiscrepancyReconciler",
    "DiscrepancyRecord",
    "ReconciliationReport",
    "ReconciliationStats",
    "aggregate_quantities",
    "duplicate_identities",
    "find_duplicates",
    "reconcile",
]
