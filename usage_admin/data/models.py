"""
Data models for usage reporting.

Defines the record shapes exchanged between data sources and views.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from usage_admin.core.rounding import clamp, round_half_up


# Ordered model keys used by the usage chart and the user drill-down
MODEL_KEYS: Tuple[str, ...] = ("gpt-5", "claude-4-sonnet", "claude-4-opus", "auto")

SERIES_LABELS: Dict[str, str] = {
    "total": "Total",
    "gpt-5": "gpt-5",
    "claude-4-sonnet": "claude-4-sonnet",
    "claude-4-opus": "claude-4-opus",
    "auto": "auto",
}


@dataclass(frozen=True)
class UsagePoint:
    """Dollars spent on a single day, in total and per model."""
    date: date
    total: float
    models: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.total < 0:
            raise ValueError("total cannot be negative")

    def value(self, key: str) -> float:
        """Value for a chart series key ('total' or a model key)."""
        if key == "total":
            return self.total
        return self.models.get(key, 0.0)

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"date": self.date.isoformat(), "total": self.total}
        record.update(self.models)
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UsagePoint":
        """Build a point from a plain record such as a decoded JSON object.

        Raises:
            ValueError: If the record has no date or total
        """
        if "date" not in record or "total" not in record:
            raise ValueError(f"Usage record missing date or total: {dict(record)}")
        raw_date = record["date"]
        if isinstance(raw_date, datetime):
            day = raw_date.date()
        elif isinstance(raw_date, date):
            day = raw_date
        else:
            day = date.fromisoformat(str(raw_date)[:10])
        models = {
            key: float(value)
            for key, value in record.items()
            if key not in ("date", "total")
        }
        return cls(date=day, total=float(record["total"]), models=models)


@dataclass(frozen=True)
class SpendBucketDatum:
    """Number of users whose spend falls in one bucket."""
    bucket: str
    users: int

    def __post_init__(self):
        if self.users < 0:
            raise ValueError("users cannot be negative")

    def to_record(self) -> Dict[str, Any]:
        return {"bucket": self.bucket, "users": self.users}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SpendBucketDatum":
        if "bucket" not in record or "users" not in record:
            raise ValueError(f"Distribution record missing bucket or users: {dict(record)}")
        return cls(bucket=str(record["bucket"]), users=int(record["users"]))


@dataclass(frozen=True)
class BucketRange:
    """Numeric bounds parsed back out of a bucket label."""
    min: int
    max: int


@dataclass(frozen=True)
class SyntheticUser:
    """Placeholder user shown when drilling into a bucket."""
    email: str
    spend: float


@dataclass(frozen=True)
class ModelUsage:
    model: str
    percent: int


@dataclass(frozen=True)
class UserDetailStats:
    """Productivity metrics shown for a selected user."""
    agent_requests: int
    lines_generated: int
    lines_accepted: int
    tab_completions_accepted: int
    model_usage: List[ModelUsage]

    def __post_init__(self):
        if self.lines_accepted > self.lines_generated:
            raise ValueError("lines_accepted cannot exceed lines_generated")

    @property
    def acceptance_percent(self) -> int:
        """Share of generated lines that were accepted, 0-100."""
        ratio = self.lines_accepted / max(1, self.lines_generated)
        return int(clamp(round_half_up(ratio * 100), 0, 100))


@dataclass(frozen=True)
class UsageStats:
    """Seat and usage pool summary for the organisation.

    Amounts are dollars; the pool renews on ``renewal_date``.
    """
    active_users: int
    license_count: int
    total_pool: float
    remaining_pool: float
    renewal_date: datetime
    average_daily_spend: float

    def __post_init__(self):
        """Validate counts and amounts are consistent."""
        if self.active_users < 0:
            raise ValueError("active_users cannot be negative")
        if self.license_count < 0:
            raise ValueError("license_count cannot be negative")
        if self.license_count > self.active_users:
            raise ValueError("license_count cannot exceed active_users")
        if self.total_pool < 0:
            raise ValueError("total_pool cannot be negative")
        if self.remaining_pool < 0:
            raise ValueError("remaining_pool cannot be negative")
        if self.remaining_pool > self.total_pool:
            raise ValueError("remaining_pool cannot exceed total_pool")
        if self.average_daily_spend < 0:
            raise ValueError("average_daily_spend cannot be negative")


@dataclass(frozen=True)
class PoolSummary:
    """Figures derived from UsageStats at a point in time."""
    remaining_percent: int
    days_until_renewal: int
    days_until_run_out: Optional[int]  # None means the pool never runs out
    projected_run_out_date: Optional[datetime]
    projected_overage_spend: int
    true_up_milestones: List[datetime]
    next_true_up_date: datetime
    projected_seats_added: int
