"""
Mock data source standing in for the usage reporting backend.

Exposes the same async fetch signature the views accept as an override, so
a real client can replace it without touching the views.
"""

import logging
import random
from datetime import datetime
from typing import List, Optional

from usage_admin.config.loader import PoolConfig
from usage_admin.core.distribution import generate_mock_distribution
from usage_admin.core.metrics import add_months
from usage_admin.core.timeseries import generate_mock_usage
from usage_admin.data.models import SpendBucketDatum, UsagePoint, UsageStats

logger = logging.getLogger(__name__)

# Mock renewal falls on the first day of the month this far ahead
RENEWAL_MONTHS_AHEAD = 8


def default_renewal_date(now: datetime) -> datetime:
    first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return add_months(first_of_month, RENEWAL_MONTHS_AHEAD)


class MockUsageSource:
    """Serves usage figures from the mock generators.

    Args:
        pool: Pool figures to report, defaults to the built-in mock values
        rng: Noise source for the generated series
    """

    def __init__(self, pool: Optional[PoolConfig] = None, rng: Optional[random.Random] = None):
        self.pool = pool or PoolConfig()
        self.rng = rng or random.Random()

    def get_usage_stats(self, now: Optional[datetime] = None) -> UsageStats:
        """Return the seat and pool summary.

        Raises:
            ValueError: If the configured figures are inconsistent
        """
        now = now or datetime.now()
        pool = self.pool
        return UsageStats(
            active_users=pool.active_users,
            license_count=pool.resolved_license_count,
            total_pool=pool.total_pool,
            remaining_pool=pool.remaining_pool,
            renewal_date=pool.renewal_date or default_renewal_date(now),
            average_daily_spend=pool.average_daily_spend,
        )

    async def fetch_usage(self, days: int) -> List[UsagePoint]:
        logger.debug("Generating %d days of mock usage", days)
        return generate_mock_usage(days, rng=self.rng)

    async def fetch_distribution(self, days: int) -> List[SpendBucketDatum]:
        logger.debug("Generating mock spend distribution for %d days", days)
        return generate_mock_distribution(days, rng=self.rng)
