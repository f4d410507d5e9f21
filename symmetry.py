"""
Bilateral symmetry scoring.

Each limb pair measured on both sides costs twice its percentage difference;
the score is what remains of 100.
"""

import math

from shared_models import BilateralGirths, SymmetryScore

MAX_SCORE = 100
PENALTY_PER_PERCENT = 2


def pair_difference_percent(right, left):
    """|right - left| as a percentage of the larger side, or None if unmeasured."""
    if right is None or left is None or right <= 0 or left <= 0:
        return None
    return abs(right - left) / max(right, left) * 100


def score_symmetry(girths: BilateralGirths) -> SymmetryScore:
    """
    Scores bilateral symmetry of arm, thigh and calf girths.

    Args:
        girths (BilateralGirths): Right/left circumferences in cm.

    Returns:
        SymmetryScore: value in 0..100 rounded half up, or None when no pair
        has both sides measured. measured_pair_count tells how many of the
        three pairs contributed.
    """
    differences = {}
    for limb, (right, left) in girths.pairs().items():
        diff = pair_difference_percent(right, left)
        if diff is not None:
            differences[limb] = diff

    if not differences:
        return SymmetryScore(value=None, measured_pair_count=0)

    penalty = sum(diff * PENALTY_PER_PERCENT for diff in differences.values())
    score = max(0.0, MAX_SCORE - penalty)
    return SymmetryScore(
        value=int(math.floor(score + 0.5)),
        measured_pair_count=len(differences),
        pair_differences=differences,
    )
