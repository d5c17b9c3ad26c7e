"""Statistical comparison of enrichment between conditions.

Every non-control condition is compared with the control condition, for every
member isotopologue of a group:

- p-value of a two-sample t-test with pooled (equal) variance
- signed fold-change of the condition means

A failed t-test (too few observations, essentially constant data, non-finite
input) does not raise: it is reported as ``TTestResult(failed=True)`` whose
effective p-value is 1.0, i.e. not significant.

Fold-change
-----------
    FC = case / control          if case / control >= 1
    FC = -(control / case)       otherwise

so |FC| >= 1 and FC(a, b) == -FC(b, a) for a != b.

Annotation
----------
A condition is significant when p < p_value_threshold. Significant conditions
are tagged ``UP_<condition>`` when FC > fold_change_threshold,
``DOWN_<condition>`` when FC < -fold_change_threshold and ``<condition>``
otherwise; several tags are joined with ';'. The first member of every group
is always tagged 'Base peak'.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from ..constants import BASE_PEAK_TAG, DOWN_PREFIX, TAG_SEPARATOR, UP_PREFIX
from ..params import LabelCompareParams
from .enrichment import GroupEnrichment


# =============================================================================
# Two-sample t-test
# =============================================================================

@dataclass(frozen=True)
class TTestResult:
    """Outcome of a two-sample t-test.

    ``value`` is the p-value to report: the computed one, or 1.0 when the test
    could not be computed.
    """

    p_value: float = 1.0
    failed: bool = False
    reason: str = ''

    @property
    def value(self) -> float:
        return 1.0 if self.failed else self.p_value


def equal_variance_ttest(case: np.ndarray, control: np.ndarray) -> TTestResult:
    """Two-sided two-sample t-test with pooled variance.

    Missing values are dropped first. A side with a single observation
    contributes no variance to the pooled estimate.

    Args:
        case: Percentages of the case condition
        control: Percentages of the control condition

    Returns:
        TTestResult
    """
    x = np.asarray(case, dtype=np.float64)
    y = np.asarray(control, dtype=np.float64)
    x = x[~np.isnan(x)]
    y = y[~np.isnan(y)]

    nx, ny = len(x), len(y)
    if nx < 1 or ny < 1 or nx + ny - 2 < 1:
        return TTestResult(failed=True, reason='not enough observations')

    with np.errstate(invalid='ignore', over='ignore'):
        mx, my = float(np.mean(x)), float(np.mean(y))
        sx = float(np.std(x, ddof=1)) if nx > 1 else 0.0
        sy = float(np.std(y, ddof=1)) if ny > 1 else 0.0

        pooled_var = ((nx - 1) * sx ** 2 + (ny - 1) * sy ** 2) / (nx + ny - 2)
        stderr = np.sqrt(pooled_var * (1.0 / nx + 1.0 / ny))

    if not np.isfinite(stderr):
        return TTestResult(failed=True, reason='non-finite data')
    if stderr < 10 * np.finfo(np.float64).eps * max(abs(mx), abs(my)) or stderr == 0.0:
        return TTestResult(failed=True, reason='data are essentially constant')

    with np.errstate(invalid='ignore', divide='ignore'):
        _, p_value = stats.ttest_ind_from_stats(
            mean1=mx, std1=sx, nobs1=nx,
            mean2=my, std2=sy, nobs2=ny,
            equal_var=True
        )

    if not np.isfinite(p_value):
        return TTestResult(failed=True, reason='non-finite p-value')

    return TTestResult(p_value=float(p_value))


# =============================================================================
# Fold-change
# =============================================================================

def signed_fold_change(case, control):
    """Signed fold-change of case over control.

    Works element-wise on arrays. Zero means give +/-inf, NaN means give NaN.
    """
    case = np.asarray(case, dtype=np.float64)
    control = np.asarray(control, dtype=np.float64)

    with np.errstate(divide='ignore', invalid='ignore'):
        fc = case / control
        inverse = -(control / case)
        fc = np.where(fc < 1, inverse, fc)

    if fc.ndim == 0:
        return float(fc)
    return fc


# =============================================================================
# Annotation
# =============================================================================

def annotate_row(
    p_values: Sequence[float],
    fold_changes: Sequence[float],
    conditions: Sequence[str],
    params: LabelCompareParams,
) -> str:
    """Significance tag of one isotopologue across non-control conditions."""
    tags = []
    for condition, p, fc in zip(conditions, p_values, fold_changes):
        if not p < params.p_value_threshold:
            continue
        if fc > params.fold_change_threshold:
            tags.append(f"{UP_PREFIX}_{condition}")
        elif fc < -params.fold_change_threshold:
            tags.append(f"{DOWN_PREFIX}_{condition}")
        else:
            tags.append(condition)
    return TAG_SEPARATOR.join(tags)


@dataclass
class GroupComparison:
    """Comparison of every member of a group against the control."""

    inc_id: object
    noncontrol: Tuple[str, ...]
    comparison: List[str]

    # (n_members, n_noncontrol)
    p_values: np.ndarray
    fold_changes: np.ndarray

    # failure reason -> member rows reported as p = 1
    failure_reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def n_failed_tests(self) -> int:
        return sum(self.failure_reasons.values())

    @property
    def n_significant(self) -> int:
        """Members other than the base peak with at least one tag."""
        return sum(1 for tag in self.comparison[1:] if tag)


def compare_group(enrichment: GroupEnrichment, params: LabelCompareParams) -> GroupComparison:
    """Compare each non-control condition with the control for one group.

    Args:
        enrichment: Output of calculate_group_enrichment
        params: Uses control_condition and the significance thresholds

    Returns:
        GroupComparison
    """
    noncontrol = params.noncontrol_conditions
    control = params.control_condition
    control_col = enrichment.conditions.index(control)

    n_members = len(enrichment.atoms)
    p_values = np.ones((n_members, len(noncontrol)), dtype=np.float64)
    fold_changes = np.full((n_members, len(noncontrol)), np.nan, dtype=np.float64)
    failure_reasons = Counter()

    for k, condition in enumerate(noncontrol):
        case_col = enrichment.conditions.index(condition)

        # Members sharing an atom count share one test
        for atoms, rows in enrichment.atom_rows.items():
            result = equal_variance_ttest(
                enrichment.values_for_atoms(atoms, condition),
                enrichment.values_for_atoms(atoms, control),
            )
            p_values[rows, k] = result.value
            if result.failed:
                failure_reasons[result.reason] += len(rows)

        fold_changes[:, k] = signed_fold_change(
            enrichment.mean[:, case_col], enrichment.mean[:, control_col]
        )

    if noncontrol:
        comparison = [
            annotate_row(p_values[i], fold_changes[i], noncontrol, params)
            for i in range(n_members)
        ]
    else:
        comparison = [''] * n_members
    comparison[0] = BASE_PEAK_TAG

    return GroupComparison(
        inc_id=enrichment.inc_id,
        noncontrol=noncontrol,
        comparison=comparison,
        p_values=p_values,
        fold_changes=fold_changes,
        failure_reasons=dict(failure_reasons),
    )
