"""Unit tests for snapshot classification and the safety guard."""

import logging

import pytest

from zfs_snapshot_operator.models.models import Frequency, Snapshot
from zfs_snapshot_operator.retention.classifier import apply_safety_guard, classify_snapshots
from zfs_snapshot_operator.retention.policy import RetentionPolicy

from tests.test_utils import hourly_series, make_foreign_snapshot, make_snapshot, utc


def names(snapshots):
    return [s.snapshot_name for s in snapshots]


class TestClassifySnapshots:
    def test_yearly_keeps_newest_of_the_year(self, policy):
        snapshots = [
            make_snapshot("tank/data", utc(2024, 1, 1), Frequency.YEARLY),
            make_snapshot("tank/data", utc(2024, 6, 15), Frequency.YEARLY),
            make_snapshot("tank/data", utc(2024, 12, 31), Frequency.YEARLY),
        ]
        result = classify_snapshots(snapshots, Frequency.YEARLY, utc(2026, 1, 25), policy)

        assert names(result.keep) == ["autosnap_2024-12-31_00:00:00_yearly"]
        assert names(result.delete) == [
            "autosnap_2024-01-01_00:00:00_yearly",
            "autosnap_2024-06-15_00:00:00_yearly",
        ]
        assert result.keepers["2024"].snapshot_name == "autosnap_2024-12-31_00:00:00_yearly"

    def test_duplicates_within_an_hour(self, policy):
        snapshots = [
            make_snapshot("tank/data", utc(2024, 1, 15, 10, 0, 0), Frequency.HOURLY),
            make_snapshot("tank/data", utc(2024, 1, 15, 10, 40, 0), Frequency.HOURLY),
            make_snapshot("tank/data", utc(2024, 1, 15, 10, 20, 0), Frequency.HOURLY),
        ]
        result = classify_snapshots(snapshots, Frequency.HOURLY, utc(2024, 1, 15, 10, 50), policy)

        assert names(result.keep) == ["autosnap_2024-01-15_10:40:00_hourly"]
        assert names(result.delete) == [
            "autosnap_2024-01-15_10:00:00_hourly",
            "autosnap_2024-01-15_10:20:00_hourly",
        ]

    def test_equal_times_break_ties_by_name(self, policy):
        when = utc(2024, 1, 15, 10, 0, 0)
        first = Snapshot("tank", "tank/data", "autosnap-a_hourly", when, Frequency.HOURLY)
        second = Snapshot("tank", "tank/data", "autosnap-b_hourly", when, Frequency.HOURLY)

        for ordering in ([first, second], [second, first]):
            result = classify_snapshots(ordering, Frequency.HOURLY, utc(2024, 1, 15, 10, 30), policy)
            assert result.keep == [second]
            assert result.delete == [first]

    def test_keepers_outside_window_are_deleted(self):
        policy = RetentionPolicy({Frequency.HOURLY: 2})
        snapshots = hourly_series("tank/data", utc(2024, 1, 15, 9, 0, 0), 4)
        result = classify_snapshots(snapshots, Frequency.HOURLY, utc(2024, 1, 15, 12, 30), policy)

        assert names(result.keep) == [
            "autosnap_2024-01-15_11:00:00_hourly",
            "autosnap_2024-01-15_12:00:00_hourly",
        ]
        assert names(result.delete) == [
            "autosnap_2024-01-15_09:00:00_hourly",
            "autosnap_2024-01-15_10:00:00_hourly",
        ]

    def test_keep_and_delete_partition_the_frequency(self, policy):
        hourly = hourly_series("tank/data", utc(2024, 1, 13, 0, 0, 0), 60)
        daily = make_snapshot("tank/data", utc(2024, 1, 14), Frequency.DAILY)
        foreign = make_foreign_snapshot("tank/data", "manual-before-upgrade")

        result = classify_snapshots(hourly + [daily, foreign], Frequency.HOURLY, utc(2024, 1, 15, 12, 30), policy)

        assert not set(result.keep) & set(result.delete)
        assert set(result.keep) | set(result.delete) == set(hourly)
        assert len(result.keep) == 23

    def test_empty_input(self, policy, now):
        result = classify_snapshots([], Frequency.DAILY, now, policy)
        assert result.keep == []
        assert result.delete == []


class TestSafetyGuard:
    @pytest.fixture
    def all_expired(self):
        policy = RetentionPolicy({Frequency.HOURLY: 1})
        snapshots = hourly_series("tank/data", utc(2024, 1, 15, 8, 0, 0), 2)
        return classify_snapshots(snapshots, Frequency.HOURLY, utc(2024, 1, 15, 12, 30), policy)

    def test_rescues_newest_candidate(self, all_expired, caplog):
        assert all_expired.keep == []

        with caplog.at_level(logging.WARNING):
            guarded = apply_safety_guard(all_expired, replacement_guaranteed=False)

        assert names(guarded.keep) == ["autosnap_2024-01-15_09:00:00_hourly"]
        assert names(guarded.delete) == ["autosnap_2024-01-15_08:00:00_hourly"]
        assert guarded.rescued.snapshot_name == "autosnap_2024-01-15_09:00:00_hourly"
        assert "Refusing to delete all 2 hourly" in caplog.text
        # Input classification is left untouched
        assert all_expired.keep == []

    def test_not_applied_when_replacement_was_created(self, all_expired):
        guarded = apply_safety_guard(all_expired, replacement_guaranteed=True)
        assert guarded.keep == []
        assert len(guarded.delete) == 2
        assert guarded.rescued is None

    def test_no_op_when_something_is_kept(self, policy, now):
        snapshots = hourly_series("tank/data", utc(2024, 1, 15, 10, 0, 0), 2)
        result = classify_snapshots(snapshots, Frequency.HOURLY, now, policy)
        assert apply_safety_guard(result, replacement_guaranteed=False) is result

    def test_no_op_when_nothing_to_delete(self, policy, now):
        result = classify_snapshots([], Frequency.HOURLY, now, policy)
        assert apply_safety_guard(result, replacement_guaranteed=False) is result
