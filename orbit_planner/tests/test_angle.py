"""Tests for Angle normalisation, comparison and range helpers."""
import math
import unittest

from orbit_planner.angle import Angle
from orbit_planner.constants import TWO_PI


class TestAngleNormalisation(unittest.TestCase):
    """Values are wrapped into [0, 2*pi)."""

    def test_negative_radians_wrap(self):
        self.assertAlmostEqual(Angle(-math.pi / 2).rad, 3 * math.pi / 2)

    def test_large_radians_wrap(self):
        self.assertAlmostEqual(Angle(5 * math.pi).rad, math.pi)

    def test_tiny_negative_does_not_round_to_full_turn(self):
        angle = Angle(-1e-20)
        self.assertGreaterEqual(angle.rad, 0.0)
        self.assertLess(angle.rad, TWO_PI)

    def test_degrees(self):
        self.assertAlmostEqual(Angle.from_degrees(-90.0).deg, 270.0)
        self.assertAlmostEqual(Angle.from_degrees(450.0).deg, 90.0)
        self.assertAlmostEqual(Angle.from_degrees(180.0).rad, math.pi)

    def test_signed_ranges(self):
        self.assertAlmostEqual(Angle(3 * math.pi / 2).rad_signed, -math.pi / 2)
        self.assertAlmostEqual(Angle(math.pi).rad_signed, math.pi)
        self.assertAlmostEqual(Angle.from_degrees(270.0).deg_signed, -90.0)

    def test_non_finite_rejected(self):
        with self.assertRaises(ValueError):
            Angle(math.nan)
        with self.assertRaises(ValueError):
            Angle(math.inf)
        with self.assertRaises(ValueError):
            Angle.from_degrees(math.nan)

    def test_copy_constructor(self):
        angle = Angle(1.25)
        self.assertEqual(Angle(angle).rad, 1.25)

    def test_named_constants(self):
        self.assertEqual(Angle.ZERO.rad, 0.0)
        self.assertAlmostEqual(Angle.QUARTER_TURN.rad, math.pi / 2)
        self.assertAlmostEqual(Angle.HALF_TURN.rad, math.pi)
        self.assertAlmostEqual(Angle.THREE_QUARTERS_TURN.rad, 3 * math.pi / 2)
        self.assertLess(Angle.MAX_ANGLE.rad, TWO_PI)
        self.assertEqual(math.nextafter(Angle.MAX_ANGLE.rad, math.inf), TWO_PI)


class TestAngleArithmetic(unittest.TestCase):

    def test_negation_is_reflection(self):
        self.assertAlmostEqual((-Angle(1.0)).rad, TWO_PI - 1.0)
        self.assertEqual(-Angle.ZERO, Angle.ZERO)

    def test_addition_wraps(self):
        self.assertAlmostEqual((Angle(6.0) + 1.0).rad, 7.0 - TWO_PI)
        self.assertAlmostEqual((1.0 + Angle(6.0)).rad, 7.0 - TWO_PI)

    def test_subtraction_wraps(self):
        self.assertAlmostEqual((Angle(0.5) - Angle(1.0)).rad, TWO_PI - 0.5)
        self.assertAlmostEqual((3.0 - Angle(1.0)).rad, 2.0)

    def test_float_conversion(self):
        self.assertAlmostEqual(math.cos(Angle(math.pi)), -1.0)


class TestAngleComparison(unittest.TestCase):

    def test_equality_within_tolerance(self):
        self.assertEqual(Angle(1.0), Angle(1.0 + 1e-12))
        self.assertNotEqual(Angle(0.1), Angle(0.2))

    def test_equality_across_seam(self):
        self.assertEqual(Angle(1e-12), Angle(TWO_PI - 1e-12))
        self.assertEqual(Angle.ZERO, Angle.MAX_ANGLE)

    def test_equality_with_float(self):
        self.assertTrue(Angle(0.5) == 0.5)
        self.assertTrue(Angle(0.5) == 0.5 + TWO_PI)

    def test_none_comparisons(self):
        self.assertFalse(Angle(1.0) == None)  # noqa: E711
        self.assertTrue(Angle(1.0) != None)  # noqa: E711
        self.assertFalse(Angle(1.0) < None)
        self.assertFalse(Angle(1.0) > None)

    def test_ordering_uses_raw_values(self):
        self.assertTrue(Angle(0.1) < Angle(6.0))
        self.assertTrue(Angle(6.0) > Angle(0.1))
        self.assertTrue(Angle(1.0) <= Angle(1.0))
        self.assertTrue(Angle(1.0) >= Angle(1.0))

    def test_is_close(self):
        self.assertTrue(Angle(1.0).is_close(Angle(1.001), abs_tol=0.01))
        self.assertFalse(Angle(1.0).is_close(Angle(1.1), abs_tol=0.01))
        self.assertTrue(Angle(0.001).is_close(Angle(TWO_PI - 0.001), abs_tol=0.01))
        self.assertFalse(Angle(1.0).is_close(None))

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(Angle(1.0))


class TestAngleRanges(unittest.TestCase):

    def test_is_between_normal_interval(self):
        self.assertTrue(Angle(1.0).is_between(0.5, 2.0))
        self.assertFalse(Angle(3.0).is_between(0.5, 2.0))

    def test_is_between_is_strict(self):
        self.assertFalse(Angle(0.5).is_between(0.5, 2.0))
        self.assertFalse(Angle(2.0).is_between(0.5, 2.0))

    def test_is_between_wrapped_interval(self):
        self.assertTrue(Angle(0.1).is_between(6.0, 0.5))
        self.assertTrue(Angle(6.1).is_between(6.0, 0.5))
        self.assertFalse(Angle(3.0).is_between(6.0, 0.5))

    def test_is_between_empty_interval(self):
        self.assertTrue(Angle(1.0).is_between(1.0, 1.0))
        self.assertFalse(Angle(2.0).is_between(1.0, 1.0))

    def test_is_between_missing_bound(self):
        self.assertFalse(Angle(1.0).is_between(None, 2.0))
        self.assertFalse(Angle(1.0).is_between(0.5, None))

    def test_closer(self):
        self.assertEqual(Angle(1.0).closer(0.5, 2.0), Angle(0.5))
        self.assertEqual(Angle(1.8).closer(0.5, 2.0), Angle(2.0))
        self.assertEqual(Angle(1.0).closer(None, 2.0), Angle(2.0))
        self.assertEqual(Angle(1.0).closer(0.5, None), Angle(0.5))
        self.assertEqual(Angle(1.0).closer(None, None), Angle(1.0))

    def test_expel_inside_arc_snaps_to_closer_bound(self):
        self.assertEqual(Angle.expel(2.0, 1.0, 4.0), Angle(1.0))
        self.assertEqual(Angle.expel(3.5, 1.0, 4.0), Angle(4.0))

    def test_expel_outside_arc_unchanged(self):
        self.assertEqual(Angle.expel(5.0, 1.0, 4.0), Angle(5.0))
        self.assertEqual(Angle.expel(0.5, 1.0, 4.0), Angle(0.5))

    def test_expel_empty_arc_unchanged(self):
        self.assertEqual(Angle.expel(2.0, 1.0, 1.0), Angle(2.0))
        self.assertEqual(Angle.expel(math.pi, math.pi, math.pi), Angle(math.pi))

    def test_expel_hyperbolic_asymptotes(self):
        max_nu = Angle(math.acos(-1.0 / 1.5))
        self.assertEqual(Angle.expel(3.0, max_nu, -max_nu), max_nu)
        self.assertEqual(Angle.expel(3.5, max_nu, -max_nu), -max_nu)
        self.assertEqual(Angle.expel(max_nu.rad + 0.01, max_nu, -max_nu), max_nu)
        self.assertEqual(Angle.expel(0.3, max_nu, -max_nu), Angle(0.3))


if __name__ == '__main__':
    unittest.main()
