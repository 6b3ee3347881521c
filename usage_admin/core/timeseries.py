"""
Mock time-series of daily spend per model.

Placeholder for the real usage endpoint. Values follow a smooth wave per
model plus uniform noise, so two calls for the same window differ.
"""

import math
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional

from usage_admin.core.rounding import round_half_up
from usage_admin.data.models import UsagePoint

# Chart values are in units of 10 dollars before scaling
SPEND_MULTIPLIER = 10


@dataclass(frozen=True)
class SeriesShape:
    """Wave parameters for one model's daily spend."""
    model: str
    baseline: float
    wave: Callable[[float], float]
    period: float
    amplitude: float
    noise: float

    def sample(self, offset: int, rng: random.Random) -> int:
        raw = (
            self.baseline
            + self.wave(offset / self.period) * self.amplitude
            + (rng.random() - 0.5) * self.noise
        )
        return max(0, round_half_up(raw)) * SPEND_MULTIPLIER


SERIES_SHAPES = (
    SeriesShape("gpt-5", 200, math.sin, 3, 40, 30),
    SeriesShape("claude-4-sonnet", 120, math.cos, 4, 25, 20),
    SeriesShape("claude-4-opus", 80, math.sin, 5, 15, 15),
    SeriesShape("auto", 60, math.cos, 6, 20, 12),
)


def generate_mock_usage(
    days: int,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None
) -> List[UsagePoint]:
    """Generate one usage point per day, oldest first, ending today.

    Args:
        days: Window length in days (any positive integer)
        today: Last day of the window, defaults to the current date
        rng: Noise source; pass a seeded Random for reproducible output

    Returns:
        List of ``days`` points in ascending date order

    Raises:
        ValueError: If days is not positive
    """
    if days <= 0:
        raise ValueError("days must be > 0")

    today = today or date.today()
    rng = rng or random.Random()

    points = []
    for offset in range(days - 1, -1, -1):
        models = {shape.model: float(shape.sample(offset, rng)) for shape in SERIES_SHAPES}
        points.append(UsagePoint(
            date=today - timedelta(days=offset),
            total=round(sum(models.values()), 2),
            models=models
        ))
    return points
