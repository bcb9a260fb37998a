"""Practitioner rating aggregation"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple


def summarize_ratings(ratings: List[int]) -> Tuple[float, int]:
    """
    Collapse star ratings into the practitioner's displayed summary.

    The average is rounded half-up to one decimal so 4.25 shows as 4.3,
    which float rounding would not guarantee.

    Args:
        ratings: Star ratings (1-5)

    Returns:
        Tuple of (average_rating, review_count); (0.0, 0) when there are none
    """
    if not ratings:
        return 0.0, 0

    average = Decimal(sum(ratings)) / Decimal(len(ratings))
    rounded = average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(rounded), len(ratings)
