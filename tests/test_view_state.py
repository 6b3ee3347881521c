"""
Unit tests for view state reducers.
"""

import json
import random
from datetime import date

import pytest

from usage_admin.core.user_detail import generate_user_stats
from usage_admin.core.view_state import (
    BucketSelected,
    DistributionViewState,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    UsageViewState,
    UserCleared,
    UserSelected,
    ViewToggled,
    WindowSelected,
    reduce_distribution,
    reduce_usage,
    select_bucket,
    select_user,
)
from usage_admin.data.models import MODEL_KEYS, SpendBucketDatum, SyntheticUser, UsagePoint


DATA = (
    SpendBucketDatum("$0–20", 500),
    SpendBucketDatum("$20–40", 30),
    SpendBucketDatum("$40–60", 0),
)


def loaded_distribution() -> DistributionViewState:
    state = reduce_distribution(DistributionViewState(), LoadStarted(1))
    return reduce_distribution(state, LoadSucceeded(1, DATA))


class TestUsageReducer:
    """Test usage view transitions."""

    def test_active_keys_by_view(self):
        assert UsageViewState(view="total").active_keys == ["total"]
        assert UsageViewState(view="models").active_keys == list(MODEL_KEYS)

    def test_toggle_view(self):
        state = reduce_usage(UsageViewState(), ViewToggled("total"))
        assert state.view == "total"

    def test_invalid_view_raises(self):
        with pytest.raises(ValueError, match="view must be one of"):
            reduce_usage(UsageViewState(), ViewToggled("stacked"))

    def test_window_change(self):
        state = reduce_usage(UsageViewState(), WindowSelected(90))
        assert state.days == 90

    def test_load_lifecycle(self):
        point = UsagePoint(date=date(2026, 10, 18), total=10.0)
        state = reduce_usage(UsageViewState(), LoadStarted(1))
        assert state.loading is True

        state = reduce_usage(state, LoadSucceeded(1, (point,)))
        assert state.loading is False
        assert state.data == (point,)

    def test_stale_result_ignored(self):
        """A result for an older request does not replace newer state."""
        point = UsagePoint(date=date(2026, 10, 18), total=10.0)
        state = reduce_usage(UsageViewState(), LoadStarted(1))
        state = reduce_usage(state, LoadStarted(2))
        state = reduce_usage(state, LoadSucceeded(1, (point,)))

        assert state.data == ()
        assert state.loading is True
        assert state.request_id == 2

    def test_older_start_ignored(self):
        state = reduce_usage(UsageViewState(), LoadStarted(5))
        assert reduce_usage(state, LoadStarted(3)).request_id == 5

    def test_failure_clears_loading(self):
        state = reduce_usage(UsageViewState(), LoadStarted(1))
        state = reduce_usage(state, LoadFailed(1, "backend down"))

        assert state.loading is False
        assert state.error == "backend down"

    def test_new_load_clears_error(self):
        state = reduce_usage(UsageViewState(error="backend down", request_id=1), LoadStarted(2))
        assert state.error is None

    def test_stale_failure_ignored(self):
        state = reduce_usage(UsageViewState(), LoadStarted(2))
        state = reduce_usage(state, LoadFailed(1, "old"))
        assert state.error is None

    def test_unknown_action_returns_same_state(self):
        state = UsageViewState()
        assert reduce_usage(state, UserCleared()) is state

    def test_serializable(self):
        point = UsagePoint(date=date(2026, 10, 18), total=10.0, models={"gpt-5": 10.0})
        state = UsageViewState(data=(point,))
        encoded = json.dumps(state.to_dict())
        assert '"date": "2026-10-18"' in encoded


class TestDistributionReducer:
    """Test distribution view transitions."""

    def test_select_bucket_uses_loaded_total(self):
        state = select_bucket(loaded_distribution(), "$20–40", rng=random.Random(1))

        assert state.selected_bucket == "$20–40"
        assert state.selected_bucket_total == 30
        assert len(state.selected_users) == 30

    def test_hyphenated_label_matches_loaded_bucket(self):
        state = select_bucket(loaded_distribution(), "$20-40", rng=random.Random(1))

        assert state.selected_bucket == "$20–40"
        assert state.selected_bucket_total == 30

    def test_malformed_bucket_selects_no_users(self):
        state = select_bucket(loaded_distribution(), "20 to 40", total_users=30)
        assert state.selected_bucket == "20 to 40"
        assert state.selected_users == ()

    def test_select_user_computes_stats(self):
        state = select_bucket(loaded_distribution(), "$20–40", rng=random.Random(1))
        user = state.selected_users[0]
        state = select_user(state, user)

        assert state.selected_user == user
        assert state.selected_user_stats == generate_user_stats(user.email, user.spend, "$20–40")

    def test_user_requires_bucket(self):
        user = SyntheticUser("a@example.com", 10.0)
        stats = generate_user_stats(user.email, user.spend, None)
        state = reduce_distribution(loaded_distribution(), UserSelected(user, stats))
        assert state.selected_user is None

    def test_new_bucket_clears_user(self):
        state = select_bucket(loaded_distribution(), "$20–40")
        state = select_user(state, state.selected_users[0])
        state = reduce_distribution(state, BucketSelected("$0–20", 500, ()))

        assert state.selected_bucket == "$0–20"
        assert state.selected_user is None
        assert state.selected_user_stats is None

    def test_clear_user_keeps_bucket(self):
        state = select_bucket(loaded_distribution(), "$20–40")
        state = select_user(state, state.selected_users[0])
        state = reduce_distribution(state, UserCleared())

        assert state.selected_bucket == "$20–40"
        assert state.selected_user is None

    def test_window_change_clears_selection(self):
        state = select_bucket(loaded_distribution(), "$20–40")
        state = select_user(state, state.selected_users[0])
        state = reduce_distribution(state, WindowSelected(7))

        assert state.days == 7
        assert state.selected_bucket is None
        assert state.selected_bucket_total == 0
        assert state.selected_users == ()
        assert state.selected_user is None
        assert state.selected_user_stats is None

    def test_serializable(self):
        state = select_bucket(loaded_distribution(), "$20–40")
        state = select_user(state, state.selected_users[0])
        decoded = json.loads(json.dumps(state.to_dict()))

        assert decoded["selected_bucket"] == "$20–40"
        assert sum(m["percent"] for m in decoded["selected_user_stats"]["model_usage"]) == 100
