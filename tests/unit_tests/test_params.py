"""Tests for analysis parameters.

Tests:
- Defaults and derived values (mass difference, non-control conditions)
- Tracer presets
- Validation of inconsistent configuration
"""

import unittest

from isoenrich.constants import C12_MASS, C13_MASS, N14_MASS, N15_MASS
from isoenrich.params import LabelCompareParams


class TestLabelCompareParams(unittest.TestCase):
    """Test parameter defaults and derived values."""

    def test_defaults(self):
        params = LabelCompareParams(conditions=("WT", "KO"), control_condition="WT")

        self.assertEqual(params.ppm_tolerance, 5.0)
        self.assertEqual(params.fold_change_threshold, 1.0)
        self.assertEqual(params.p_value_threshold, 0.05)
        self.assertTrue(params.show_base_peak)
        self.assertEqual(params.unlabelled_atom_mass, C12_MASS)
        self.assertEqual(params.labelled_atom_mass, C13_MASS)

    def test_mass_diff_is_one_labelling_step(self):
        """Mass difference is labelled minus unlabelled atom (positive for 13C)."""
        params = LabelCompareParams(conditions=("WT",), control_condition="WT")

        self.assertAlmostEqual(params.mass_diff, 1.003354835, places=8)
        self.assertGreater(params.mass_diff, 0)

    def test_noncontrol_conditions_keep_order(self):
        params = LabelCompareParams(
            conditions=("A", "CTRL", "B"), control_condition="CTRL"
        )

        self.assertEqual(params.noncontrol_conditions, ("A", "B"))

    def test_single_condition_has_no_noncontrol(self):
        params = LabelCompareParams(conditions=("WT",), control_condition="WT")

        self.assertEqual(params.noncontrol_conditions, ())

    def test_list_conditions_are_frozen(self):
        params = LabelCompareParams(conditions=["WT", "KO"], control_condition="WT")

        self.assertIsInstance(params.conditions, tuple)

    def test_immutable(self):
        params = LabelCompareParams(conditions=("WT",), control_condition="WT")

        with self.assertRaises(AttributeError):
            params.ppm_tolerance = 10.0


class TestTracerPresets(unittest.TestCase):
    """Test tracer-specific atomic masses."""

    def test_nitrogen_preset(self):
        params = LabelCompareParams.for_label(
            "15N", conditions=("WT",), control_condition="WT"
        )

        self.assertEqual(params.unlabelled_atom_mass, N14_MASS)
        self.assertEqual(params.labelled_atom_mass, N15_MASS)
        self.assertAlmostEqual(params.mass_diff, 0.99703, places=4)

    def test_unknown_tracer(self):
        with self.assertRaises(ValueError):
            LabelCompareParams.for_label("99X", conditions=("WT",), control_condition="WT")


class TestParameterValidation(unittest.TestCase):
    """Test that inconsistent configuration fails fast."""

    def test_control_not_in_conditions(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(conditions=("WT", "KO"), control_condition="CTRL")

    def test_no_conditions(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(conditions=(), control_condition="")

    def test_duplicated_conditions(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(conditions=("WT", "WT"), control_condition="WT")

    def test_non_positive_ppm(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(conditions=("WT",), control_condition="WT", ppm_tolerance=0.0)

    def test_p_value_threshold_range(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(conditions=("WT",), control_condition="WT", p_value_threshold=1.5)

    def test_negative_fold_change_threshold(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(
                conditions=("WT",), control_condition="WT", fold_change_threshold=-1.0
            )

    def test_identical_tags(self):
        with self.assertRaises(ValueError):
            LabelCompareParams(
                conditions=("WT",), control_condition="WT",
                labelled_tag="L", unlabelled_tag="L"
            )


if __name__ == '__main__':
    unittest.main()
