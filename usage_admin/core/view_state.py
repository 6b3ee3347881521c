"""
View state for the usage and spend distribution views.

State is an immutable value; every interaction is an action applied by a
pure reducer. Loads carry the request id they were issued under, and a
result is committed only if that id is still the latest one.
"""

import random
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from usage_admin.core.distribution import generate_users_for_bucket, parse_bucket
from usage_admin.core.user_detail import generate_user_stats
from usage_admin.data.models import (
    MODEL_KEYS,
    SpendBucketDatum,
    SyntheticUser,
    UsagePoint,
    UserDetailStats,
)

USAGE_WINDOWS = (7, 14, 30, 60, 90)
DISTRIBUTION_WINDOWS = (7, 14, 30)
USAGE_VIEWS = ("total", "models")


# Actions

@dataclass(frozen=True)
class WindowSelected:
    days: int


@dataclass(frozen=True)
class ViewToggled:
    view: str


@dataclass(frozen=True)
class LoadStarted:
    request_id: int


@dataclass(frozen=True)
class LoadSucceeded:
    request_id: int
    data: Tuple[Any, ...]


@dataclass(frozen=True)
class LoadFailed:
    request_id: int
    message: str


@dataclass(frozen=True)
class BucketSelected:
    bucket: str
    total_users: int
    users: Tuple[SyntheticUser, ...]


@dataclass(frozen=True)
class UserSelected:
    user: SyntheticUser
    stats: UserDetailStats


@dataclass(frozen=True)
class UserCleared:
    pass


Action = Union[
    WindowSelected, ViewToggled, LoadStarted, LoadSucceeded, LoadFailed,
    BucketSelected, UserSelected, UserCleared,
]


# States

@dataclass(frozen=True)
class UsageViewState:
    """State of the usage-over-time chart."""
    days: int = 30
    view: str = "models"
    data: Tuple[UsagePoint, ...] = ()
    loading: bool = False
    request_id: int = 0
    error: Optional[str] = None

    def __post_init__(self):
        if self.days <= 0:
            raise ValueError("days must be > 0")
        if self.view not in USAGE_VIEWS:
            raise ValueError(f"view must be one of: {list(USAGE_VIEWS)}")

    @property
    def active_keys(self) -> List[str]:
        """Series plotted for the current view."""
        return ["total"] if self.view == "total" else list(MODEL_KEYS)

    def to_dict(self) -> Dict[str, Any]:
        state = asdict(self)
        state["data"] = [point.to_record() for point in self.data]
        return state


@dataclass(frozen=True)
class DistributionViewState:
    """State of the spend distribution chart and its drill-down."""
    days: int = 30
    data: Tuple[SpendBucketDatum, ...] = ()
    loading: bool = False
    request_id: int = 0
    error: Optional[str] = None
    selected_bucket: Optional[str] = None
    selected_bucket_total: int = 0
    selected_users: Tuple[SyntheticUser, ...] = ()
    selected_user: Optional[SyntheticUser] = None
    selected_user_stats: Optional[UserDetailStats] = field(default=None)

    def __post_init__(self):
        if self.days <= 0:
            raise ValueError("days must be > 0")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _clear_selection(state: DistributionViewState) -> DistributionViewState:
    return replace(
        state,
        selected_bucket=None,
        selected_bucket_total=0,
        selected_users=(),
        selected_user=None,
        selected_user_stats=None,
    )


def _reduce_load(state, action):
    """Shared handling of the load lifecycle for both views."""
    if isinstance(action, LoadStarted):
        # Ids only move forward
        if action.request_id < state.request_id:
            return state
        return replace(state, request_id=action.request_id, loading=True, error=None)

    if isinstance(action, LoadSucceeded):
        if action.request_id != state.request_id:
            return state
        return replace(state, data=tuple(action.data), loading=False, error=None)

    if isinstance(action, LoadFailed):
        if action.request_id != state.request_id:
            return state
        return replace(state, loading=False, error=action.message)

    return state


def reduce_usage(state: UsageViewState, action: Action) -> UsageViewState:
    """Apply an action to the usage view state."""
    if isinstance(action, WindowSelected):
        return replace(state, days=action.days)

    if isinstance(action, ViewToggled):
        return replace(state, view=action.view)

    return _reduce_load(state, action)


def reduce_distribution(state: DistributionViewState, action: Action) -> DistributionViewState:
    """Apply an action to the distribution view state.

    Changing the window drops any bucket or user selection, and choosing a
    bucket drops the selected user.
    """
    if isinstance(action, WindowSelected):
        return _clear_selection(replace(state, days=action.days))

    if isinstance(action, BucketSelected):
        return replace(
            state,
            selected_bucket=action.bucket,
            selected_bucket_total=max(0, action.total_users),
            selected_users=tuple(action.users),
            selected_user=None,
            selected_user_stats=None,
        )

    if isinstance(action, UserSelected):
        if state.selected_bucket is None:
            return state
        return replace(state, selected_user=action.user, selected_user_stats=action.stats)

    if isinstance(action, UserCleared):
        return replace(state, selected_user=None, selected_user_stats=None)

    return _reduce_load(state, action)


def select_bucket(
    state: DistributionViewState,
    label: str,
    total_users: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> DistributionViewState:
    """Select a bucket, synthesizing its user list.

    The label is matched to the loaded data by range, so "$20-40" selects
    "$20–40". When ``total_users`` is omitted it is taken from that datum.
    """
    wanted = parse_bucket(label)
    datum = next(
        (d for d in state.data if d.bucket == label or (wanted and parse_bucket(d.bucket) == wanted)),
        None
    )
    if datum is not None:
        label = datum.bucket
    if total_users is None:
        total_users = datum.users if datum is not None else 0
    users = generate_users_for_bucket(label, total_users, rng=rng)
    return reduce_distribution(state, BucketSelected(label, total_users, tuple(users)))


def select_user(state: DistributionViewState, user: SyntheticUser) -> DistributionViewState:
    """Select a user from the current bucket and compute their detail."""
    stats = generate_user_stats(user.email, user.spend, state.selected_bucket)
    return reduce_distribution(state, UserSelected(user, stats))
