"""
Derived pool and license metrics.

Turns the raw usage pool summary into renewal countdowns, run-out
projections and the quarterly true-up schedule.

All functions are pure: ``now`` is always passed in explicitly.
"""

import calendar
import math
from datetime import datetime, timedelta
from typing import List, Optional

from usage_admin.core.rounding import clamp, round_half_up
from usage_admin.data.models import PoolSummary, UsageStats

ONE_DAY = timedelta(days=1)
CONTRACT_TERM_MONTHS = 12
TRUE_UP_INTERVAL_MONTHS = 3


def remaining_percent(remaining_pool: float, total_pool: float) -> int:
    """Remaining pool as a whole percentage clamped to [0, 100]."""
    ratio = remaining_pool / (total_pool if total_pool > 0 else 1)
    return int(clamp(round_half_up(ratio * 100), 0, 100))


def days_until_renewal(renewal_date: datetime, now: datetime) -> int:
    """Whole days until renewal, rounded up and never negative."""
    return max(0, math.ceil((renewal_date - now) / ONE_DAY))


def days_until_run_out(remaining_pool: float, average_daily_spend: float) -> Optional[int]:
    """Days until the pool is exhausted at the current burn rate.

    Returns:
        Number of days, or None when nothing is being spent
    """
    if average_daily_spend <= 0:
        return None
    return max(0, math.ceil(remaining_pool / average_daily_spend))


def projected_run_out_date(now: datetime, run_out_days: Optional[int]) -> Optional[datetime]:
    if run_out_days is None:
        return None
    return now + run_out_days * ONE_DAY


def projected_overage_spend(
    average_daily_spend: float,
    renewal_days: int,
    remaining_pool: float
) -> int:
    """Spend expected beyond the remaining pool before renewal."""
    projected_spend = average_daily_spend * renewal_days
    return max(0, round_half_up(projected_spend - remaining_pool))


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the month's end."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def contract_start(renewal_date: datetime) -> datetime:
    """Start of the 12-month term ending at ``renewal_date``."""
    return add_months(renewal_date, -CONTRACT_TERM_MONTHS)


def true_up_milestones(renewal_date: datetime) -> List[datetime]:
    """Quarterly true-up dates: contract start + 3, 6, 9 and 12 months."""
    start = contract_start(renewal_date)
    quarters = CONTRACT_TERM_MONTHS // TRUE_UP_INTERVAL_MONTHS
    return [add_months(start, q * TRUE_UP_INTERVAL_MONTHS) for q in range(1, quarters + 1)]


def next_true_up(renewal_date: datetime, now: datetime) -> datetime:
    """First milestone on or after ``now``, else the renewal date."""
    for milestone in true_up_milestones(renewal_date):
        if milestone >= now:
            return milestone
    return renewal_date


def projected_seats_added(active_users: int, license_count: int) -> int:
    """Seats to be added at the next true-up."""
    return max(0, active_users - license_count)


def summarize_pool(stats: UsageStats, now: datetime) -> PoolSummary:
    """Compute every derived figure shown on the overview cards.

    Args:
        stats: Raw pool and license summary
        now: Reference time; naive or aware to match ``stats.renewal_date``

    Returns:
        PoolSummary for display
    """
    renewal_days = days_until_renewal(stats.renewal_date, now)
    run_out_days = days_until_run_out(stats.remaining_pool, stats.average_daily_spend)

    return PoolSummary(
        remaining_percent=remaining_percent(stats.remaining_pool, stats.total_pool),
        days_until_renewal=renewal_days,
        days_until_run_out=run_out_days,
        projected_run_out_date=projected_run_out_date(now, run_out_days),
        projected_overage_spend=projected_overage_spend(
            stats.average_daily_spend, renewal_days, stats.remaining_pool
        ),
        true_up_milestones=true_up_milestones(stats.renewal_date),
        next_true_up_date=next_true_up(stats.renewal_date, now),
        projected_seats_added=projected_seats_added(stats.active_users, stats.license_count),
    )
