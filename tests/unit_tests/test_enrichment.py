"""Tests for enrichment percentage calculation.

Tests cover:
1. Percentage definition (single member is always 100%)
2. Worked two-condition example
3. Located isotope enlarges the denominator
4. Pooling of members with equal atom counts
5. Non-finite values for zero denominators and single samples
"""

import numpy as np
import pytest

from isoenrich.scoring import (
    calculate_group_enrichment,
    calculate_percentages,
    group_rows_by_atoms,
    mean_and_sd,
)
from isoenrich.tables import FeatureTable, IncorporationGroup


class TestCalculatePercentages:
    """Test the per-sample percentage definition."""

    def test_single_member_is_100_percent(self):
        intensities = np.array([[123.0, 4.5, 1e7]])

        percentages = calculate_percentages(intensities, intensities)

        np.testing.assert_array_equal(percentages, [[100.0, 100.0, 100.0]])

    def test_columns_are_independent(self):
        members = np.array([[1.0, 3.0], [1.0, 1.0]])

        percentages = calculate_percentages(members, members)

        np.testing.assert_allclose(percentages, [[50.0, 75.0], [50.0, 25.0]])

    def test_percentages_sum_to_100_without_isotope(self):
        members = np.random.uniform(1, 1000, size=(4, 6))

        percentages = calculate_percentages(members, members)

        np.testing.assert_allclose(percentages.sum(axis=0), 100.0)

    def test_zero_denominator_is_not_finite(self):
        members = np.array([[0.0, 5.0], [0.0, 5.0]])

        percentages = calculate_percentages(members, members)

        assert np.all(np.isnan(percentages[:, 0]))
        np.testing.assert_allclose(percentages[:, 1], [50.0, 50.0])

    def test_not_clipped(self):
        """Numerator from a different table can exceed the denominator."""
        percentages = calculate_percentages(np.array([[200.0]]), np.array([[100.0]]))

        assert percentages[0, 0] == pytest.approx(200.0)


class TestHelpers:
    """Test atom grouping and summary statistics."""

    def test_group_rows_by_atoms(self):
        rows = group_rows_by_atoms(np.array([0, 1, 1, 2]))

        assert sorted(rows) == [0, 1, 2]
        np.testing.assert_array_equal(rows[1], [1, 2])

    def test_mean_and_sd(self):
        mean, sd = mean_and_sd(np.array([1.0, 2.0, 3.0]))

        assert mean == pytest.approx(2.0)
        assert sd == pytest.approx(1.0)

    def test_single_value_sd_is_nan(self):
        mean, sd = mean_and_sd(np.array([4.0]))

        assert mean == 4.0
        assert np.isnan(sd)

    def test_empty_values(self):
        mean, sd = mean_and_sd(np.array([]))

        assert np.isnan(mean)
        assert np.isnan(sd)

    def test_nan_propagates(self):
        mean, sd = mean_and_sd(np.array([1.0, np.nan]))

        assert np.isnan(mean)
        assert np.isnan(sd)


class TestGroupEnrichment:
    """Test enrichment of a full incorporation group."""

    def test_worked_example(self, group, feature_table, sample_map, params):
        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        control = enrichment.percentages["control"]
        treatment = enrichment.percentages["treatment"]
        np.testing.assert_allclose(control[1], [100 * 100 / 1100, 100 * 95 / 995])
        np.testing.assert_allclose(treatment[1], [100 * 300 / 1300, 100 * 280 / 1380])

        assert enrichment.mean[1, 0] == pytest.approx(9.3193, abs=1e-3)
        assert enrichment.mean[1, 1] == pytest.approx(21.6834, abs=1e-3)
        assert enrichment.mean[0, 0] == pytest.approx(100 - 9.3193, abs=1e-3)
        assert enrichment.sd[1, 0] == pytest.approx(np.std(control[1], ddof=1))

    def test_unlabelled_samples_are_ignored(self, group, feature_table, sample_map, params):
        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        assert enrichment.percentages["control"].shape == (2, 2)

    def test_located_isotope_in_denominator(self, group, sample_map, params,
                                            member_intensities):
        isotope = np.array([[100.0, 5.0, 100.0, 20.0, 0.0]])
        table = FeatureTable(
            ids=[11, 12, 13],
            mz=[100.0, 101.0034, 102.0067],
            rt=[60.0, 60.5, 60.2],
            intensities=np.vstack([member_intensities, isotope]),
        )

        enrichment = calculate_group_enrichment(group, table, 2, sample_map, params)

        assert enrichment.has_isotope
        np.testing.assert_allclose(
            enrichment.percentages["control"][1], [100 * 100 / 1200, 100 * 95 / 1000]
        )
        # Members no longer sum to 100
        assert enrichment.percentages["control"][:, 0].sum() < 100.0

    def test_numerator_from_group_table(self, sample_map, params, feature_table):
        """Group intensities are the numerator, feature table the denominator."""
        group = IncorporationGroup(
            inc_id=1, feature_ids=[11], mz=[100.0], rt=[60.0], atoms=[0],
            intensities=np.array([[500.0, 450.0, 500.0, 550.0, 2500.0]]),
        )

        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        np.testing.assert_allclose(enrichment.percentages["control"][0], [50.0, 50.0])

    def test_single_member_group(self, sample_map, params, feature_table):
        group = IncorporationGroup(
            inc_id=1, feature_ids=[13], mz=[250.0], rt=[120.0], atoms=[0],
            intensities=np.full((1, 5), 50.0),
        )

        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        np.testing.assert_array_equal(enrichment.mean, [[100.0, 100.0]])
        np.testing.assert_array_equal(enrichment.sd, [[0.0, 0.0]])

    def test_repeated_atom_counts_are_pooled(self, sample_map, params):
        intensities = np.array([
            [100.0, 100.0, 100.0, 100.0, 100.0],
            [10.0, 20.0, 30.0, 40.0, 0.0],
            [30.0, 40.0, 50.0, 60.0, 0.0],
        ])
        table = FeatureTable(ids=[1, 2, 3], mz=[100.0, 101.0, 101.1],
                             rt=[5.0, 5.0, 5.0], intensities=intensities)
        group = IncorporationGroup(inc_id="g", feature_ids=[1, 2, 3],
                                   mz=[100.0, 101.0, 101.1], rt=[5.0, 5.0, 5.0],
                                   atoms=[0, 1, 1], intensities=intensities)

        enrichment = calculate_group_enrichment(group, table, -1, sample_map, params)

        pooled = enrichment.values_for_atoms(1, "control")
        assert len(pooled) == 4
        assert enrichment.mean[1, 0] == enrichment.mean[2, 0]
        assert enrichment.mean[1, 0] == pytest.approx(np.mean(pooled))
        assert enrichment.sd[1, 0] == pytest.approx(np.std(pooled, ddof=1))

    def test_condition_without_samples(self, group, feature_table, params):
        sample_map = {"control": np.array([0, 1]), "treatment": np.array([], dtype=np.int64)}

        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        assert np.all(np.isnan(enrichment.mean[:, 1]))
        assert np.all(np.isnan(enrichment.sd[:, 1]))

    def test_single_sample_sd_is_nan(self, group, feature_table, params):
        sample_map = {"control": np.array([0]), "treatment": np.array([2, 3])}

        enrichment = calculate_group_enrichment(group, feature_table, -1, sample_map, params)

        assert np.all(np.isnan(enrichment.sd[:, 0]))
        assert np.all(np.isfinite(enrichment.sd[:, 1]))

    def test_zero_intensity_sample_propagates(self, params, sample_map):
        intensities = np.array([
            [0.0, 100.0, 100.0, 100.0, 1.0],
            [0.0, 10.0, 10.0, 10.0, 1.0],
        ])
        table = FeatureTable(ids=[1, 2], mz=[100.0, 101.0], rt=[5.0, 5.0],
                             intensities=intensities)
        group = IncorporationGroup(inc_id="g", feature_ids=[1, 2], mz=[100.0, 101.0],
                                   rt=[5.0, 5.0], atoms=[0, 1], intensities=intensities)

        enrichment = calculate_group_enrichment(group, table, -1, sample_map, params)

        assert np.all(np.isnan(enrichment.mean[:, 0]))
        assert np.all(np.isfinite(enrichment.mean[:, 1]))
