"""
Synthetic per-user detail for the spend drill-down.

Everything is drawn from a PRNG seeded by the user's email, so selecting the
same user twice shows the same figures.
"""

from typing import List, Optional

from usage_admin.core.distribution import BUCKET_MAX, parse_bucket
from usage_admin.core.prng import Mulberry32, hash_string
from usage_admin.core.rounding import clamp, round_half_up
from usage_admin.data.models import MODEL_KEYS, ModelUsage, UserDetailStats

MIN_SPEND_FACTOR = 0.05


def spend_factor(spend: float, bucket_label: Optional[str]) -> float:
    """Spend relative to the bucket's upper bound, clamped to [0.05, 1]."""
    bucket_range = parse_bucket(bucket_label) if bucket_label else None
    max_bench = bucket_range.max if bucket_range else BUCKET_MAX
    return clamp(spend / max(1, max_bench), MIN_SPEND_FACTOR, 1.0)


def generate_user_stats(email: str, spend: float, bucket_label: Optional[str]) -> UserDetailStats:
    """Derive productivity metrics and model mix for one user.

    Higher spend factors produce more requests, a higher acceptance rate and
    a model mix skewed toward claude-4-opus.

    Args:
        email: User identity; seeds the PRNG
        spend: User's spend in the bucket
        bucket_label: Originating bucket label, or None

    Returns:
        UserDetailStats whose model percentages sum to 100
    """
    sf = spend_factor(spend, bucket_label)
    prng = Mulberry32(hash_string(email))

    agent_requests_base = 100 + sf * 4000
    agent_requests = max(1, round_half_up(agent_requests_base * (0.8 + prng() * 0.4)))

    lines_generated_base = agent_requests * (8 + prng() * 12)
    lines_generated = round_half_up(lines_generated_base * (0.9 + sf * 0.6))
    acceptance_rate = 0.45 + sf * 0.4 + (prng() - 0.5) * 0.06
    lines_accepted = min(lines_generated, max(0, round_half_up(lines_generated * acceptance_rate)))

    tab_completions_accepted = max(0, round_half_up((200 + sf * 6000) * (0.7 + prng() * 0.6)))

    weights = [
        1.0 + prng() * 0.6 + (1 - sf) * 1.2,   # gpt-5
        1.0 + prng() * 0.6 + sf * 0.8,         # claude-4-sonnet
        1.0 + prng() * 0.6 + sf * 2.8,         # claude-4-opus
        0.8 + prng() * 0.6 + (1 - sf) * 0.6,   # auto
    ]

    return UserDetailStats(
        agent_requests=agent_requests,
        lines_generated=lines_generated,
        lines_accepted=lines_accepted,
        tab_completions_accepted=tab_completions_accepted,
        model_usage=weights_to_percentages(weights)
    )


def weights_to_percentages(weights: List[float]) -> List[ModelUsage]:
    """Turn the four model weights into integer percentages summing to 100.

    Rounding drift is added to the first model holding the largest share.
    """
    total = sum(weights)
    percents = [round_half_up(w / total * 100) for w in weights]

    diff = 100 - sum(percents)
    if diff != 0:
        largest = percents.index(max(percents))
        percents[largest] += diff

    return [ModelUsage(model=model, percent=pct) for model, pct in zip(MODEL_KEYS, percents)]
