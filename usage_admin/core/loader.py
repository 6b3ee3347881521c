"""
Asynchronous loading for the usage and distribution views.

Each view accepts an optional async fetch ``(days) -> records``; without one
the mock source is used. Every load is tagged with a new request id and its
result is committed only if no newer load was issued meanwhile, so the last
selected window always wins without needing real cancellation.
"""

import logging
import random
from typing import Any, Awaitable, Callable, Optional, Sequence

from usage_admin.core.view_state import (
    DistributionViewState,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    UsageViewState,
    UserCleared,
    ViewToggled,
    WindowSelected,
    reduce_distribution,
    reduce_usage,
    select_bucket,
    select_user,
)
from usage_admin.data.models import SpendBucketDatum, SyntheticUser, UsagePoint
from usage_admin.data.source import MockUsageSource

logger = logging.getLogger(__name__)

FetchFunction = Callable[[int], Awaitable[Sequence[Any]]]


class _ViewLoader:
    """Owns one view's state and drives its load lifecycle."""

    name = "view"
    reducer = None
    record_type = None

    def __init__(self, state, fetch: FetchFunction):
        self.state = state
        self._fetch = fetch
        self._last_request_id = state.request_id

    def dispatch(self, action):
        self.state = type(self).reducer(self.state, action)
        return self.state

    def _coerce(self, record):
        if isinstance(record, self.record_type):
            return record
        return self.record_type.from_record(record)

    async def select_window(self, days: int):
        """Switch to a new window and load its data.

        Returns:
            The view state after this load settled
        """
        self.dispatch(WindowSelected(days))
        return await self._load(days)

    async def refresh(self):
        """Reload the current window."""
        return await self._load(self.state.days)

    async def retry(self):
        """Reload after a failed fetch; same as refresh."""
        return await self.refresh()

    async def _load(self, days: int):
        self._last_request_id += 1
        request_id = self._last_request_id
        self.dispatch(LoadStarted(request_id))
        logger.debug("Loading %s for %d days (request %d)", self.name, days, request_id)

        try:
            records = await self._fetch(days)
            data = tuple(self._coerce(record) for record in (records or ()))
        except Exception as e:
            logger.exception("Loading %s for %d days failed", self.name, days)
            self.dispatch(LoadFailed(request_id, str(e) or type(e).__name__))
            return self.state

        if request_id != self.state.request_id:
            logger.debug("Discarding stale %s result (request %d)", self.name, request_id)
        self.dispatch(LoadSucceeded(request_id, data))
        return self.state


class UsageLoader(_ViewLoader):
    """Loads the usage-over-time series.

    Args:
        fetch: Optional async override returning usage records
        source: Mock source used when no override is given
        state: Initial view state
    """

    name = "usage"
    reducer = staticmethod(reduce_usage)
    record_type = UsagePoint

    def __init__(
        self,
        fetch: Optional[FetchFunction] = None,
        source: Optional[MockUsageSource] = None,
        state: Optional[UsageViewState] = None
    ):
        source = source or MockUsageSource()
        super().__init__(state or UsageViewState(), fetch or source.fetch_usage)

    def toggle_view(self, view: str) -> UsageViewState:
        return self.dispatch(ViewToggled(view))


class DistributionLoader(_ViewLoader):
    """Loads the spend distribution and handles bucket/user drill-down.

    Args:
        fetch: Optional async override returning distribution records
        source: Mock source used when no override is given
        state: Initial view state
        rng: Source of randomness for the synthetic bucket users
    """

    name = "distribution"
    reducer = staticmethod(reduce_distribution)
    record_type = SpendBucketDatum

    def __init__(
        self,
        fetch: Optional[FetchFunction] = None,
        source: Optional[MockUsageSource] = None,
        state: Optional[DistributionViewState] = None,
        rng: Optional[random.Random] = None
    ):
        source = source or MockUsageSource()
        super().__init__(state or DistributionViewState(), fetch or source.fetch_distribution)
        self.rng = rng

    def select_bucket(self, label: str, total_users: Optional[int] = None) -> DistributionViewState:
        self.state = select_bucket(self.state, label, total_users, rng=self.rng)
        return self.state

    def select_user(self, user: SyntheticUser) -> DistributionViewState:
        self.state = select_user(self.state, user)
        return self.state

    def clear_user(self) -> DistributionViewState:
        return self.dispatch(UserCleared())
