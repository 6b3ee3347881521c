"""
Configuration management and loading.

Handles dashboard settings read from a YAML file.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from usage_admin.core.view_state import DISTRIBUTION_WINDOWS, USAGE_VIEWS

# Mock shortfall between active users and contracted seats
DEFAULT_LICENSE_SHORTFALL = 120

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class PoolConfig:
    """Seat and usage pool figures reported by the mock source."""
    active_users: int = 1562
    license_count: Optional[int] = None
    total_pool: float = 1_000_000
    remaining_pool: float = 732_450
    renewal_date: Optional[datetime] = None
    average_daily_spend: float = 4_000

    def __post_init__(self):
        """Validate pool figures are non-negative and consistent."""
        if self.active_users < 0:
            raise ValueError("active_users must be >= 0")
        if self.license_count is not None and self.license_count < 0:
            raise ValueError("license_count must be >= 0")
        if self.total_pool < 0:
            raise ValueError("total_pool must be >= 0")
        if self.remaining_pool < 0:
            raise ValueError("remaining_pool must be >= 0")
        if self.remaining_pool > self.total_pool:
            raise ValueError("remaining_pool must be <= total_pool")
        if self.average_daily_spend < 0:
            raise ValueError("average_daily_spend must be >= 0")

    @property
    def resolved_license_count(self) -> int:
        """Configured license count, else active users minus the mock shortfall."""
        if self.license_count is not None:
            return self.license_count
        return max(0, self.active_users - DEFAULT_LICENSE_SHORTFALL)


@dataclass(frozen=True)
class DisplayConfig:
    """Initial windows and view for the charts."""
    usage_days: int = 30
    usage_view: str = "models"
    distribution_days: int = 30

    def __post_init__(self):
        if self.usage_days <= 0:
            raise ValueError("usage_days must be > 0")
        if self.usage_view not in USAGE_VIEWS:
            raise ValueError(f"usage_view must be one of: {list(USAGE_VIEWS)}")
        if self.distribution_days not in DISTRIBUTION_WINDOWS:
            raise ValueError(f"distribution_days must be one of: {list(DISTRIBUTION_WINDOWS)}")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"

    def __post_init__(self):
        if self.level.upper() not in LOG_LEVELS:
            raise ValueError(f"logging level must be one of: {list(LOG_LEVELS)}")


@dataclass(frozen=True)
class DashboardConfig:
    """Complete dashboard configuration."""
    pool: PoolConfig = field(default_factory=PoolConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def default_config() -> DashboardConfig:
    """Configuration used when no file is given."""
    return DashboardConfig()


def load_dashboard_config(path: str) -> DashboardConfig:
    """Load and validate dashboard configuration from a YAML file.

    Every section is optional; unknown keys are rejected so that a typo
    does not silently fall back to a mock default.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated DashboardConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Dashboard config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed_top_keys = {'pool', 'display', 'logging'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    return DashboardConfig(
        pool=_parse_pool(_section(raw_config, 'pool')),
        display=_parse_display(_section(raw_config, 'display')),
        logging=_parse_logging(_section(raw_config, 'logging')),
    )


def _section(raw_config: Dict[str, Any], name: str) -> Dict[str, Any]:
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    return data


def _check_keys(data: Dict[str, Any], allowed: set, path: str) -> None:
    unknown_keys = set(data.keys()) - allowed
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")


def _number(data: Dict[str, Any], key: str, path: str, integer: bool = False):
    value = data[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' in {path} must be a number")
    if integer:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"'{key}' in {path} must be a whole number")
        return int(value)
    return float(value)


def _to_local(value: datetime) -> datetime:
    """Drop any UTC offset, converting to naive local time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _parse_date(value: Any, path: str) -> datetime:
    """Accept a YAML date, datetime or ISO string.

    Offset-aware values are converted to naive local time.
    """
    if isinstance(value, datetime):
        return _to_local(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            return _to_local(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"'renewal_date' in {path} must be an ISO date: {value!r}")
    raise ValueError(f"'renewal_date' in {path} must be a date")


def _parse_pool(data: Dict[str, Any]) -> PoolConfig:
    path = "pool"
    _check_keys(data, {
        'active_users', 'license_count', 'total_pool',
        'remaining_pool', 'renewal_date', 'average_daily_spend'
    }, path)

    kwargs: Dict[str, Any] = {}
    for key in ('active_users', 'license_count'):
        if key in data:
            kwargs[key] = _number(data, key, path, integer=True)
    for key in ('total_pool', 'remaining_pool', 'average_daily_spend'):
        if key in data:
            kwargs[key] = _number(data, key, path)
    if 'renewal_date' in data:
        kwargs['renewal_date'] = _parse_date(data['renewal_date'], path)

    pool = PoolConfig(**kwargs)
    if pool.resolved_license_count > pool.active_users:
        raise ValueError("'license_count' in pool must be <= active_users")
    return pool


def _parse_display(data: Dict[str, Any]) -> DisplayConfig:
    path = "display"
    _check_keys(data, {'usage_days', 'usage_view', 'distribution_days'}, path)

    kwargs: Dict[str, Any] = {}
    for key in ('usage_days', 'distribution_days'):
        if key in data:
            kwargs[key] = _number(data, key, path, integer=True)
    if 'usage_view' in data:
        view = data['usage_view']
        if not isinstance(view, str):
            raise ValueError(f"'usage_view' in {path} must be a string")
        kwargs['usage_view'] = view.lower()

    return DisplayConfig(**kwargs)


def _parse_logging(data: Dict[str, Any]) -> LoggingConfig:
    path = "logging"
    _check_keys(data, {'level'}, path)
    if 'level' not in data:
        return LoggingConfig()
    level = data['level']
    if not isinstance(level, str):
        raise ValueError(f"'level' in {path} must be a string")
    return LoggingConfig(level=level.upper())
