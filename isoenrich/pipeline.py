"""
Quantify and compare labelling enrichment for all incorporation groups.

Stages per group: isotope search -> enrichment -> comparison -> assembly. The
isotope search runs once for all groups; the remaining stages are
independent per group. Group tables are stacked in input group order.
"""

import logging
import warnings
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .constants import BASE_PEAK_PLACEHOLDER
from .features.isotope_locator import locate_isotopes
from .params import LabelCompareParams
from .scoring.comparison import GroupComparison, compare_group
from .scoring.enrichment import GroupEnrichment, calculate_group_enrichment
from .tables import (
    MZ_COLUMN,
    RT_COLUMN,
    FeatureTable,
    IncorporationGroup,
    SampleClassAssignment,
    incorporation_groups_from_dataframe,
    incorporation_sample_columns,
    validate_inputs,
)

logger = logging.getLogger(__name__)

COMPARISON_COLUMN = "Comparison"
INDEX_NAMES = ["inc_id", "feature_id", "atoms"]


def result_columns(params: LabelCompareParams) -> list:
    """Column names of the result table in output order."""
    control = params.control_condition
    noncontrol = params.noncontrol_conditions
    return (
        [COMPARISON_COLUMN]
        + [f"{c}_pvaluevs{control}" for c in noncontrol]
        + [f"{c}_foldchangevs{control}" for c in noncontrol]
        + [f"{c}_MEAN" for c in params.conditions]
        + [f"{c}_SD" for c in params.conditions]
    )


def assemble_group_table(
    comparison: GroupComparison,
    enrichment: GroupEnrichment,
    params: LabelCompareParams,
) -> pd.DataFrame:
    """Join comparison results and condition summaries of one group.

    With ``params.show_base_peak`` disabled, every value of the first row is
    replaced by the 'Base Peak' placeholder.
    """
    n_members = len(enrichment.atoms)
    blocks = [np.array(comparison.comparison, dtype=object)[:, np.newaxis]]
    blocks += [comparison.p_values, comparison.fold_changes, enrichment.mean, enrichment.sd]

    values = {}
    names = iter(result_columns(params))
    for block in blocks:
        for j in range(block.shape[1]):
            values[next(names)] = block[:, j]

    index = pd.MultiIndex.from_arrays(
        [[enrichment.inc_id] * n_members, enrichment.feature_ids, enrichment.atoms],
        names=INDEX_NAMES,
    )
    table = pd.DataFrame(values, index=index)

    if not params.show_base_peak:
        table = table.astype(object)
        table.iloc[0, :] = BASE_PEAK_PLACEHOLDER

    return table


def label_compare(
    groups: Sequence[IncorporationGroup],
    feature_table: FeatureTable,
    sample_classes: SampleClassAssignment,
    params: LabelCompareParams,
) -> pd.DataFrame:
    """Quantify labelling enrichment and compare it against the control.

    Args:
        groups: Incorporation groups, in output order
        feature_table: All detected features (denominator and isotope search)
        sample_classes: Label tag and condition of every sample
        params: Analysis parameters

    Returns:
        DataFrame with one row per group member, indexed by
        (inc_id, feature_id, atoms)

    Raises:
        ValueError: On structurally inconsistent inputs
    """
    validate_inputs(groups, feature_table, sample_classes)

    sample_map = sample_classes.labelled_samples(params)
    for condition, samples in sample_map.items():
        if len(samples) == 0:
            warnings.warn(
                f"No '{params.labelled_tag}' samples for condition '{condition}'. "
                f"Its enrichment will be NaN."
            )

    logger.info(
        f"Comparing labelling of {len(groups):,} incorporation groups "
        f"({len(params.noncontrol_conditions)} conditions vs '{params.control_condition}')..."
    )

    isotope_rows = locate_isotopes(groups, feature_table, params)

    tables = []
    n_significant = 0
    n_failed = 0
    for group, isotope_row in zip(groups, isotope_rows):
        enrichment = calculate_group_enrichment(
            group, feature_table, int(isotope_row), sample_map, params
        )
        comparison = compare_group(enrichment, params)
        tables.append(assemble_group_table(comparison, enrichment, params))

        n_significant += comparison.n_significant
        n_failed += comparison.n_failed_tests
        logger.debug(
            f"Group {group.inc_id}: {group.n_members} members, "
            f"isotope row {int(isotope_row)}, {comparison.n_significant} significant, "
            f"failed t-tests {comparison.failure_reasons}"
        )

    result = pd.concat(tables)

    logger.info("✓ Labelling comparison complete:")
    logger.info(f"  Rows: {len(result):,}")
    logger.info(f"  Significant isotopologues: {n_significant:,}")
    if n_failed:
        logger.info(f"  Failed t-tests (reported as p=1): {n_failed:,}")

    return result


def label_compare_dataframes(
    incorporation_df: pd.DataFrame,
    feature_df: pd.DataFrame,
    class_labels: Sequence[str],
    params: LabelCompareParams,
    sample_columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Run ``label_compare`` on the upstream tables as pandas DataFrames.

    Args:
        incorporation_df: Incorporation table (inc_id, feature_id, mzmed,
            rtmed, atoms, sample intensities)
        feature_df: Feature table indexed by feature id (mzmed, rtmed,
            sample intensities)
        class_labels: Raw class label of every sample, e.g. "C13_WT"
        params: Analysis parameters
        sample_columns: Intensity columns shared by both tables. Defaults to
            the incorporation table's intensity block; the feature table
            must then hold the same samples, which are matched by name.

    Returns:
        Result DataFrame of label_compare

    Raises:
        ValueError: If the two tables do not hold the same samples
    """
    if sample_columns is None:
        sample_columns = incorporation_sample_columns(incorporation_df)
        feature_samples = [c for c in feature_df.columns if c not in (MZ_COLUMN, RT_COLUMN)]
        if set(feature_samples) != set(sample_columns):
            raise ValueError(
                f"Feature table samples {sorted(map(str, feature_samples))} differ from "
                f"incorporation table samples {sorted(map(str, sample_columns))}"
            )

    groups = incorporation_groups_from_dataframe(incorporation_df, sample_columns)
    feature_table = FeatureTable.from_dataframe(feature_df, sample_columns)
    sample_classes = SampleClassAssignment.from_labels(class_labels, params)
    return label_compare(groups, feature_table, sample_classes, params)
