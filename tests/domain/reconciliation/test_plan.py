from __future__ import annotations

import pytest

from cacheplane.domain.reconciliation import (
    ReconciliationPlan,
    diff_members,
    member_id,
    shard_id,
    shard_removals,
)


def test_member_and_shard_ids_are_zero_padded() -> None:
    assert member_id("cache", 1) == "cache-001"
    assert member_id("cache", 42) == "cache-042"
    assert shard_id(3) == "0003"


def test_diff_members_grows_in_ascending_order() -> None:
    plan = diff_members(2, 5, "cache")

    assert plan.to_add == ("cache-003", "cache-004", "cache-005")
    assert plan.to_remove == ()


def test_diff_members_shrinks_highest_first() -> None:
    plan = diff_members(5, 2, "cache")

    assert plan.to_add == ()
    assert plan.to_remove == ("cache-005", "cache-004", "cache-003")


def test_diff_members_is_empty_when_counts_match() -> None:
    assert diff_members(3, 3, "cache").is_empty


def test_diff_members_from_zero() -> None:
    assert diff_members(0, 1, "cache").to_add == ("cache-001",)


def test_diff_members_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        diff_members(-1, 2, "cache")


def test_plan_rejects_overlapping_members() -> None:
    with pytest.raises(ValueError, match="same members"):
        ReconciliationPlan(to_add=("cache-002",), to_remove=("cache-002",))


def test_shard_removals_highest_first() -> None:
    assert shard_removals(4, 2) == ("0004", "0003")
    assert shard_removals(2, 4) == ()


def test_member_plans_are_monotonic() -> None:
    for old in range(6):
        for new in range(6):
            plan = diff_members(old, new, "cache")
            sequences_added = [int(mid.rsplit("-", 1)[1]) for mid in plan.to_add]
            sequences_removed = [int(mid.rsplit("-", 1)[1]) for mid in plan.to_remove]

            assert len(plan.to_add) == max(new - old, 0)
            assert len(plan.to_remove) == max(old - new, 0)
            assert sequences_added == sorted(sequences_added)
            assert sequences_removed == sorted(sequences_removed, reverse=True)
            assert all(seq > new for seq in sequences_removed)
