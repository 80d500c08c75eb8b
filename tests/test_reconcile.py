"""Tests for discrepancy reconciliation."""

import pytest

from labelmatch.models.records import SourceItem
from labelmatch.services.matching import NameMatcher
from labelmatch.services.reconcile import (
    DiscrepancyKind,
    DiscrepancyReconciler,
    aggregate_quantities,
    duplicate_identities,
    find_duplicates,
    labels_from_results,
    reconcile,
)


class TestReconcile:
    """Tests for DiscrepancyReconciler.reconcile."""

    def test_identical_maps_have_no_discrepancies(self):
        report = reconcile({"A": 10, "B": 5}, {"A": 10, "B": 5}, set())

        assert report.records == []
        assert report.is_clean

    def test_missing(self):
        report = reconcile({"A": 10}, {}, set())

        assert len(report.records) == 1
        record = report.records[0]
        assert record.kind == DiscrepancyKind.MISSING
        assert record.difference == 10
        assert record.details == "in source but not registered"

    def test_extra(self):
        report = reconcile({}, {"B": 4}, set())

        record = report.records[0]
        assert record.kind == DiscrepancyKind.EXTRA
        assert record.difference == -4
        assert record.details == "registered but not in source"

    def test_quantity_diff(self):
        report = reconcile({"A": 10}, {"A": 7}, set())

        record = report.records[0]
        assert record.kind == DiscrepancyKind.QUANTITY_DIFF
        assert record.difference == 3
        assert record.details == "quantity mismatch (source: 10, registered: 7)"

    def test_duplicate_overrides_every_kind(self):
        """Any identity in the duplicate set is reported as duplicate_issue."""
        report = reconcile(
            {"A": 10, "B": 2, "C": 1},
            {"A": 7, "D": 3, "C": 1},
            {"A", "B", "C", "D"},
        )

        assert [r.identity for r in report.records] == ["A", "B", "D"]
        assert all(r.kind == DiscrepancyKind.DUPLICATE_ISSUE for r in report.records)
        assert report.records[0].details.endswith("[duplicate-related]")

    def test_zero_difference_never_reported(self):
        report = reconcile({"A": 0}, {"B": 0}, set())

        assert report.records == []

    def test_order_source_first_then_registered_only(self):
        report = reconcile({"B": 1, "A": 1}, {"Z": 1, "A": 2, "C": 1}, set())

        assert [r.identity for r in report.records] == ["B", "A", "Z", "C"]

    def test_difference_conservation(self):
        """Net of all differences equals source total minus registered total."""
        source = {"A": 10, "B": 5, "C": 2.5}
        registered = {"A": 8, "C": 4, "D": 1}

        report = reconcile(source, registered, {"C"})

        net = sum(r.difference for r in report.records)
        assert net == pytest.approx(sum(source.values()) - sum(registered.values()))
        assert report.stats.net_difference == pytest.approx(net)

    def test_labels(self):
        report = reconcile({"A": 1, "B": 1}, {}, set(), labels={"A": "ジャワカレー"})

        assert report.records[0].label == "ジャワカレー"
        assert report.records[1].label == "unknown"

    def test_malformed_quantities(self):
        """Unparseable quantities count as zero."""
        report = reconcile({"A": "1,000", "B": "abc"}, {"A": 1000, "B": None}, set())

        assert report.is_clean

    def test_stats(self):
        report = reconcile({"A": 10, "B": 5}, {"A": 7, "C": 4}, set())

        stats = report.stats
        assert stats.source_total == 15
        assert stats.registered_total == 11
        assert stats.source_items == 2
        assert stats.registered_items == 2
        assert stats.total_discrepancy == 3 + 5 + 4
        assert stats.quantity_diff_count == 1
        assert stats.missing_count == 1
        assert stats.extra_count == 1
        assert stats.duplicate_issue_count == 0

    def test_by_kind_and_to_dict(self):
        report = DiscrepancyReconciler().reconcile({"A": 10}, {"B": 1})

        missing = report.by_kind(DiscrepancyKind.MISSING)
        assert [r.identity for r in missing] == ["A"]
        assert missing[0].to_dict()["kind"] == "missing"
        assert report.stats.to_dict()["missing_count"] == 1


class TestAggregateQuantities:
    """Tests for aggregate_quantities."""

    def test_sums_repeated_labels(self):
        items = [SourceItem("A", 2), SourceItem("B", 1), SourceItem("A", "3")]

        assert aggregate_quantities(items) == {"A": 5.0, "B": 1.0}

    def test_pairs(self):
        assert aggregate_quantities([("A", 1), ("A", "1,000"), (7, 2)]) == {"A": 1001.0, "7": 2.0}

    def test_include_zero(self):
        items = [SourceItem("A", 0), SourceItem("B", 1)]

        assert aggregate_quantities(items) == {"A": 0.0, "B": 1.0}
        assert aggregate_quantities(items, include_zero=False) == {"B": 1.0}

    def test_matched_only(self, masters):
        results = NameMatcher().match_all(
            [SourceItem("ジャワカレー", 2), SourceItem("全く関係ない", 5)], masters
        )

        assert aggregate_quantities(results) == {"ジャワカレー": 2.0, "全く関係ない": 5.0}
        assert aggregate_quantities(results, matched_only=True) == {"ジャワカレー": 2.0}


class TestFindDuplicates:
    """Tests for find_duplicates."""

    def test_groups_distinct_labels_per_master(self, masters):
        items = [
            SourceItem("ジャワカレー", 1),
            SourceItem("徳用ジャワカレー 1kg", 2),
            SourceItem("ジャワカレー", 3),
            SourceItem("コンソメ", 4),
        ]
        results = NameMatcher().match_all(items, masters)

        groups = find_duplicates(results)

        assert len(groups) == 1
        group = groups[0]
        assert group.master.id == 1
        assert group.raw_labels == ["ジャワカレー", "徳用ジャワカレー 1kg"]
        assert group.quantities == [4.0, 2.0]
        assert group.count == 2
        assert group.total_quantity == 6
        assert duplicate_identities(groups) == {"ジャワカレー", "徳用ジャワカレー 1kg"}

    def test_no_duplicates(self, masters):
        results = NameMatcher().match_all([SourceItem("ジャワカレー", 1)], masters)

        assert find_duplicates(results) == []


class TestReconciliationFlow:
    """Match two passes of the same document and reconcile them."""

    def test_end_to_end(self, masters):
        matcher = NameMatcher()
        source_items = [
            SourceItem("ジャワカレー", 10),
            SourceItem("徳用ジャワカレー 1kg", 2),
            SourceItem("コンソメ", 5),
            SourceItem("全く関係ない", 1),
        ]
        source_results = matcher.match_all(source_items, masters)
        registered_results = matcher.match_all(
            [SourceItem("ジャワカレー", 10), SourceItem("コンソメ", 3)], masters
        )

        duplicates = duplicate_identities(find_duplicates(source_results))
        report = reconcile(
            aggregate_quantities(source_results, matched_only=True),
            aggregate_quantities(registered_results, matched_only=True),
            duplicates,
            labels=labels_from_results(source_results),
        )

        assert [(r.identity, r.kind) for r in report.records] == [
            ("徳用ジャワカレー 1kg", DiscrepancyKind.DUPLICATE_ISSUE),
            ("コンソメ", DiscrepancyKind.QUANTITY_DIFF),
        ]
        assert report.records[0].label == "ジャワカレー"
        assert report.stats.total_discrepancy == 4
