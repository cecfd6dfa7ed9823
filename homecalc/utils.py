"""Assorted utility helpers."""


def credit_tier(score, tiers):
    """Return the highest tier whose ``min_score`` the score reaches.

    ``tiers`` must be ordered by ``min_score``.  Scores that cannot be read as
    numbers fall into the lowest tier.
    """
    try:
        s = float(score)
    except (TypeError, ValueError):
        return tiers[0]
    match = tiers[0]
    for tier in tiers:
        if s >= tier.min_score:
            match = tier
    return match
