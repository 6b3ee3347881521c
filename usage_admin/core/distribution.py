"""
Mock spend distribution and bucket drill-down.

Buckets partition [0, 1000) dollars into fixed $20 ranges. User counts decay
exponentially with spend and scale with the lookback window.
"""

import math
import random
import re
from typing import List, Optional

from usage_admin.core.rounding import round_half_up
from usage_admin.data.models import BucketRange, SpendBucketDatum, SyntheticUser

BUCKET_STEP = 20
BUCKET_MAX = 1000

# Distribution shape
BASE_USERS_AT_ZERO = 450
DECAY_PER_DOLLAR = 1 / 250
WINDOW_BLEND_BASE = 0.6
WINDOW_BLEND_RATIO = 0.7
REFERENCE_WINDOW_DAYS = 30

MAX_USERS_SHOWN = 50

# Accepts hyphen or en dash between the bounds
_BUCKET_PATTERN = re.compile(r"\$(\d+)[–-](\d+)")


def build_bucket_labels(step: int = BUCKET_STEP, maximum: int = BUCKET_MAX) -> List[str]:
    """Labels such as "$0–20" for each range up to ``maximum``."""
    return [f"${start}–{start + step}" for start in range(0, maximum, step)]


def parse_bucket(label: str) -> Optional[BucketRange]:
    """Recover the numeric range from a bucket label.

    Returns:
        BucketRange, or None when the label does not look like "$a–b"
    """
    match = _BUCKET_PATTERN.search(label)
    if not match:
        return None
    return BucketRange(min=int(match.group(1)), max=int(match.group(2)))


def generate_mock_distribution(
    days: int,
    rng: Optional[random.Random] = None
) -> List[SpendBucketDatum]:
    """Simulate how many users fall into each spend bucket.

    Args:
        days: Lookback window (7, 14 or 30; other positive values scale linearly)
        rng: Noise source; pass a seeded Random for reproducible output

    Returns:
        One datum per bucket, ascending by range start
    """
    if days <= 0:
        raise ValueError("days must be > 0")

    rng = rng or random.Random()
    scale = days / REFERENCE_WINDOW_DAYS

    data = []
    for idx, label in enumerate(build_bucket_labels()):
        mid = idx * BUCKET_STEP + BUCKET_STEP / 2
        mean = (
            BASE_USERS_AT_ZERO
            * math.exp(-mid * DECAY_PER_DOLLAR)
            * (WINDOW_BLEND_BASE + scale * WINDOW_BLEND_RATIO)
        )
        noise = (rng.random() - 0.5) * max(6, mean * 0.08)
        data.append(SpendBucketDatum(bucket=label, users=max(0, round_half_up(mean + noise))))
    return data


def generate_users_for_bucket(
    label: str,
    total_users: int,
    rng: Optional[random.Random] = None
) -> List[SyntheticUser]:
    """Synthesize the users listed when a bucket is selected.

    At most 50 users are produced whatever the bucket total. A label that
    cannot be parsed yields an empty list.

    Returns:
        Users sorted by spend, highest first
    """
    bucket_range = parse_bucket(label)
    if bucket_range is None:
        return []

    rng = rng or random.Random()
    to_show = min(MAX_USERS_SHOWN, max(1, total_users))

    users = []
    for _ in range(to_show):
        spend = round(bucket_range.min + rng.random() * (bucket_range.max - bucket_range.min), 2)
        email = f"user{math.floor(rng.random() * 900000 + 100000)}@example.com"
        users.append(SyntheticUser(email=email, spend=spend))

    users.sort(key=lambda u: u.spend, reverse=True)
    return users
