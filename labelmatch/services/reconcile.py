"""Discrepancy reconciliation between two matched-quantity datasets.

Typical use is auditing an import: "what the source document says" against
"what is about to be registered" after matching and manual corrections. The
join key is the raw label, not the master id, so a label that was matched to a
different master or dropped between the two passes still shows up.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from labelmatch.models.records import DuplicateGroup, SourceItem
from labelmatch.services.intake import coerce_label, parse_quantity
from labelmatch.services.matching.confidence import MatchResult

logger = logging.getLogger(__name__)


class DiscrepancyKind(str, Enum):
    """Why two quantities for the same label differ."""

    MISSING = "missing"  # in source, not registered
    EXTRA = "extra"  # registered, not in source
    QUANTITY_DIFF = "quantity_diff"
    DUPLICATE_ISSUE = "duplicate_issue"


@dataclass(frozen=True)
class DiscrepancyRecord:
    """A non-zero difference for one raw-label identity."""

    identity: str
    source_quantity: float
    registered_quantity: float
    difference: float
    kind: DiscrepancyKind
    label: str | None = None
    details: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "identity": self.identity,
            "source_quantity": self.source_quantity,
            "registered_quantity": self.registered_quantity,
            "difference": self.difference,
            "kind": self.kind.value,
            "label": self.label,
            "details": self.details,
        }


@dataclass
class ReconciliationStats:
    """Aggregate figures derived from one reconciliation."""

    source_total: float = 0.0
    registered_total: float = 0.0
    source_items: int = 0
    registered_items: int = 0
    total_discrepancy: float = 0.0
    missing_count: int = 0
    extra_count: int = 0
    quantity_diff_count: int = 0
    duplicate_issue_count: int = 0

    @property
    def net_difference(self) -> float:
        return self.source_total - self.registered_total

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "source_total": self.source_total,
            "registered_total": self.registered_total,
            "source_items": self.source_items,
            "registered_items": self.registered_items,
            "total_discrepancy": self.total_discrepancy,
            "missing_count": self.missing_count,
            "extra_count": self.extra_count,
            "quantity_diff_count": self.quantity_diff_count,
            "duplicate_issue_count": self.duplicate_issue_count,
        }


@dataclass
class ReconciliationReport:
    """Discrepancies plus the statistics computed over them."""

    records: list[DiscrepancyRecord] = field(default_factory=list)
    stats: ReconciliationStats = field(default_factory=ReconciliationStats)

    @property
    def is_clean(self) -> bool:
        return not self.records

    def by_kind(self, kind: DiscrepancyKind) -> list[DiscrepancyRecord]:
        return [r for r in self.records if r.kind == kind]


def _entry_identity_and_quantity(entry: Any) -> tuple[str, float, bool]:
    """Pull (identity, quantity, is_matched) out of a supported entry type."""
    if isinstance(entry, MatchResult):
        item = entry.source_item
        return item.raw_label, item.quantity, entry.matched is not None
    if isinstance(entry, SourceItem):
        return entry.raw_label, entry.quantity, True
    identity, quantity = entry
    return identity if isinstance(identity, str) else coerce_label(identity), quantity, True


def aggregate_quantities(
    entries: Iterable[Any],
    matched_only: bool = False,
    include_zero: bool = True,
) -> dict[str, float]:
    """Sum quantities per raw-label identity.

    Args:
        entries: MatchResults, SourceItems or (identity, quantity) pairs
        matched_only: Only count MatchResults that resolved to a master
        include_zero: Keep identities whose quantity is zero

    Returns:
        Dict identity -> total quantity; values are never negative
    """
    totals: dict[str, float] = {}

    for entry in entries:
        identity, quantity, is_matched = _entry_identity_and_quantity(entry)
        if matched_only and not is_matched:
            continue
        quantity = parse_quantity(quantity)
        if quantity == 0 and not include_zero:
            continue
        totals[identity] = totals.get(identity, 0.0) + quantity

    return totals


def find_duplicates(results: Iterable[MatchResult]) -> list[DuplicateGroup]:
    """Find masters that more than one distinct raw label resolved to.

    Quantities are summed per label. Groups are returned in order of first
    appearance of their master.
    """
    groups: dict[str, DuplicateGroup] = {}
    label_positions: dict[str, dict[str, int]] = {}

    for result in results:
        if result.matched is None:
            continue
        key = str(result.matched.id)
        group = groups.setdefault(key, DuplicateGroup(master=result.matched))
        positions = label_positions.setdefault(key, {})

        label = result.source_item.raw_label
        quantity = parse_quantity(result.source_item.quantity)
        if label in positions:
            group.quantities[positions[label]] += quantity
        else:
            positions[label] = len(group.raw_labels)
            group.raw_labels.append(label)
            group.quantities.append(quantity)

    duplicates = [g for g in groups.values() if g.count > 1]
    if duplicates:
        logger.info(f"Found {len(duplicates)} masters matched by several labels")
    return duplicates


def duplicate_identities(groups: Iterable[DuplicateGroup]) -> set[str]:
    """All raw labels that take part in a duplicate group."""
    return {label for group in groups for label in group.raw_labels}


def labels_from_results(results: Iterable[MatchResult]) -> dict[str, str]:
    """Raw label -> matched master name, for display next to discrepancies."""
    labels: dict[str, str] = {}
    for result in results:
        if result.matched is not None:
            labels.setdefault(result.source_item.raw_label, result.matched.name)
    return labels


def _format_quantity(value: float) -> str:
    return f"{value:g}"


class DiscrepancyReconciler:
    """Classifies per-label quantity differences between two datasets.

    For every label in either map:
    - difference == 0              -> skipped
    - source quantity == 0         -> extra
    - registered quantity == 0     -> missing
    - otherwise                    -> quantity_diff
    - label in duplicate set       -> duplicate_issue, whatever the above said
    """

    UNKNOWN_LABEL = "unknown"

    def reconcile(
        self,
        source: Mapping[str, Any],
        registered: Mapping[str, Any],
        duplicates: Iterable[str] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> ReconciliationReport:
        """Compare two identity -> quantity maps.

        Args:
            source: Quantities according to the source document
            registered: Quantities currently registered / about to be registered
            duplicates: Identities involved in duplicate matches
            labels: Optional display label per identity (e.g. master name)

        Returns:
            ReconciliationReport with records and derived statistics
        """
        source_agg = {k: parse_quantity(v) for k, v in source.items()}
        registered_agg = {k: parse_quantity(v) for k, v in registered.items()}
        duplicate_set = set(duplicates or ())
        labels = labels or {}

        records: list[DiscrepancyRecord] = []
        identities = list(source_agg) + [k for k in registered_agg if k not in source_agg]

        for identity in identities:
            source_qty = source_agg.get(identity, 0.0)
            registered_qty = registered_agg.get(identity, 0.0)
            diff = source_qty - registered_qty
            if diff == 0:
                continue

            if source_qty == 0:
                kind = DiscrepancyKind.EXTRA
                details = "registered but not in source"
            elif registered_qty == 0:
                kind = DiscrepancyKind.MISSING
                details = "in source but not registered"
            else:
                kind = DiscrepancyKind.QUANTITY_DIFF
                details = (
                    f"quantity mismatch (source: {_format_quantity(source_qty)}, "
                    f"registered: {_format_quantity(registered_qty)})"
                )

            if identity in duplicate_set:
                kind = DiscrepancyKind.DUPLICATE_ISSUE
                details += " [duplicate-related]"

            records.append(
                DiscrepancyRecord(
                    identity=identity,
                    source_quantity=source_qty,
                    registered_quantity=registered_qty,
                    difference=diff,
                    kind=kind,
                    label=labels.get(identity, self.UNKNOWN_LABEL),
                    details=details,
                )
            )

        stats = self._compute_stats(source_agg, registered_agg, records)
        if records:
            logger.info(
                f"Reconciliation found {len(records)} discrepancies "
                f"(net {stats.net_difference:g}, absolute {stats.total_discrepancy:g})"
            )
        return ReconciliationReport(records=records, stats=stats)

    def _compute_stats(
        self,
        source_agg: dict[str, float],
        registered_agg: dict[str, float],
        records: list[DiscrepancyRecord],
    ) -> ReconciliationStats:
        """Derive statistics from the maps and records."""
        counts = {kind: 0 for kind in DiscrepancyKind}
        for record in records:
            counts[record.kind] += 1

        return ReconciliationStats(
            source_total=sum(source_agg.values()),
            registered_total=sum(registered_agg.values()),
            source_items=len(source_agg),
            registered_items=len(registered_agg),
            total_discrepancy=sum(abs(r.difference) for r in records),
            missing_count=counts[DiscrepancyKind.MISSING],
            extra_count=counts[DiscrepancyKind.EXTRA],
            quantity_diff_count=counts[DiscrepancyKind.QUANTITY_DIFF],
            duplicate_issue_count=counts[DiscrepancyKind.DUPLICATE_ISSUE],
        )


def reconcile(
    source: Mapping[str, Any],
    registered: Mapping[str, Any],
    duplicates: Iterable[str] | None = None,
    labels: Mapping[str, str] | None = None,
) -> ReconciliationReport:
    """Module-level shortcut for DiscrepancyReconciler().reconcile."""
    return DiscrepancyReconciler().reconcile(source, registered, duplicates, labels)
