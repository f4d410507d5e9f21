"""Tests for the bilateral symmetry scorer."""

import unittest

from shared_models import BilateralGirths
from symmetry import pair_difference_percent, score_symmetry


class TestSymmetryScore(unittest.TestCase):
    """Test cases for score_symmetry."""

    def test_single_arm_pair(self):
        """36 vs 34 cm: 5.56% difference, 11.11 penalty, score 89."""
        score = score_symmetry(BilateralGirths(arm_right=36, arm_left=34))
        self.assertEqual(score.value, 89)
        self.assertEqual(score.measured_pair_count, 1)
        self.assertAlmostEqual(score.pair_differences["arm"], 2 / 36 * 100, places=4)

    def test_all_pairs(self):
        girths = BilateralGirths(
            arm_right=36, arm_left=34, thigh_right=60, thigh_left=60, calf_right=40, calf_left=38
        )
        score = score_symmetry(girths)
        # 11.11 (arm) + 0 (thigh) + 10 (calf)
        self.assertEqual(score.value, 79)
        self.assertEqual(score.measured_pair_count, 3)

    def test_perfect_symmetry(self):
        score = score_symmetry(BilateralGirths(thigh_right=55, thigh_left=55))
        self.assertEqual(score.value, 100)
        self.assertEqual(score.measured_pair_count, 1)

    def test_no_pairs_is_unknown(self):
        """Nothing measured must not read as a perfect 100."""
        score = score_symmetry(BilateralGirths())
        self.assertIsNone(score.value)
        self.assertEqual(score.measured_pair_count, 0)

    def test_one_sided_or_zero_pairs_do_not_count(self):
        girths = BilateralGirths(arm_right=36, arm_left=None, calf_right=0, calf_left=38)
        score = score_symmetry(girths)
        self.assertIsNone(score.value)
        self.assertEqual(score.measured_pair_count, 0)

    def test_floor_at_zero(self):
        score = score_symmetry(BilateralGirths(arm_right=40, arm_left=20))
        self.assertEqual(score.value, 0)

    def test_larger_side_is_the_reference(self):
        """Left-dominant and right-dominant asymmetry score the same."""
        self.assertEqual(pair_difference_percent(34, 36), pair_difference_percent(36, 34))


class TestSymmetryFixtures:
    def test_full_measurement(self, full_bilateral_girths):
        score = score_symmetry(full_bilateral_girths)

        assert score.value == 79
        assert set(score.pair_differences) == {"arm", "thigh", "calf"}
        assert score.pair_differences["thigh"] == 0
