"""Enrichment quantification and statistical comparison.

This module provides:
- Per-sample labelling percentages of each isotopologue
- Mean and standard deviation per condition, pooling equal atom counts
- Pooled-variance t-test with a non-significant fallback on failure
- Signed fold-change and UP/DOWN annotation against a control condition

Examples
--------
>>> from isoenrich.scoring import calculate_group_enrichment, compare_group
>>>
>>> enrichment = calculate_group_enrichment(group, features, -1, sample_map, params)
>>> comparison = compare_group(enrichment, params)
>>> comparison.comparison[0]
'Base peak'
"""

from .enrichment import (
    GroupEnrichment,
    calculate_group_enrichment,
    calculate_percentages,
    group_rows_by_atoms,
    mean_and_sd,
    pooled_percentages,
)
from .comparison import (
    GroupComparison,
    TTestResult,
    annotate_row,
    compare_group,
    equal_variance_ttest,
    signed_fold_change,
)

__all__ = [
    # Enrichment
    "GroupEnrichment",
    "calculate_group_enrichment",
    "calculate_percentages",
    "group_rows_by_atoms",
    "mean_and_sd",
    "pooled_percentages",
    # Comparison
    "GroupComparison",
    "TTestResult",
    "annotate_row",
    "compare_group",
    "equal_variance_ttest",
    "signed_fold_change",
]
