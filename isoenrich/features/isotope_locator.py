"""
Search for the next isotopologue of each incorporation group.

For a group whose heaviest member carries ``n`` labelled atoms, the feature
carrying ``n + 1`` labelled atoms is expected at

    base_mz + (n + 1) * mass_diff

and must co-elute with the group (RT inside the members' RT span). The first
matching feature in feature-table order is taken; there is no tie-break by
mass error or intensity.

The search uses binary search on m/z-sorted features (O(log n) per group) and
runs over all groups in parallel. Each group's result only depends on its own
window, so the outcome does not depend on scheduling.
"""

import logging
from typing import Sequence

import numpy as np
import numba as nb
from numba import njit

from ..params import LabelCompareParams
from ..tables import FeatureTable, IncorporationGroup

logger = logging.getLogger(__name__)


def calculate_expected_isotope_mz(base_mz: float, n_atoms: int, mass_diff: float) -> float:
    """Expected m/z of the isotopologue with ``n_atoms`` labelled atoms."""
    return base_mz + n_atoms * mass_diff


def ppm_window(mz, ppm: float):
    """(low, high) m/z bounds of a ppm window around ``mz`` (scalar or array)."""
    tol = ppm * (mz / 1e6)
    return mz - tol, mz + tol


@njit
def _find_first_in_window(
    mz_sorted: np.ndarray,
    order: np.ndarray,
    rt: np.ndarray,
    mz_min: float,
    mz_max: float,
    rt_min: float,
    rt_max: float,
) -> int:
    """Find the lowest original row index inside an m/z and RT window.

    Args:
        mz_sorted: Feature m/z values (SORTED)
        order: Original row index of each sorted entry
        rt: Feature RT values in original row order
        mz_min, mz_max: Inclusive m/z bounds
        rt_min, rt_max: Inclusive RT bounds

    Returns:
        Original row index of the first match, -1 if none
    """
    n_features = len(mz_sorted)

    # Find start index
    left = 0
    right = n_features
    while left < right:
        mid = (left + right) // 2
        if mz_sorted[mid] < mz_min:
            left = mid + 1
        else:
            right = mid
    start_idx = left

    # Find end index
    left = start_idx
    right = n_features
    while left < right:
        mid = (left + right) // 2
        if mz_sorted[mid] <= mz_max:
            left = mid + 1
        else:
            right = mid
    end_idx = left

    first = -1
    for i in range(start_idx, end_idx):
        row = order[i]
        if rt[row] < rt_min or rt[row] > rt_max:
            continue
        if first < 0 or row < first:
            first = row

    return first


@njit(parallel=True)
def locate_isotopes_numba(
    mz_min: np.ndarray,
    mz_max: np.ndarray,
    rt_min: np.ndarray,
    rt_max: np.ndarray,
    mz_sorted: np.ndarray,
    order: np.ndarray,
    rt: np.ndarray,
) -> np.ndarray:
    """Locate the next isotopologue for many groups at once.

    Args:
        mz_min, mz_max: Inclusive m/z bounds per group
        rt_min, rt_max: RT span per group
        mz_sorted: Feature m/z values (SORTED)
        order: Original row index of each sorted entry
        rt: Feature RT values in original row order

    Returns:
        Feature row index per group (-1 if not found)
    """
    n_groups = len(mz_min)
    result = np.full(n_groups, -1, dtype=np.int64)

    for g in nb.prange(n_groups):
        result[g] = _find_first_in_window(
            mz_sorted, order, rt,
            mz_min[g], mz_max[g],
            rt_min[g], rt_max[g]
        )

    return result


def locate_isotopes(
    groups: Sequence[IncorporationGroup],
    feature_table: FeatureTable,
    params: LabelCompareParams,
) -> np.ndarray:
    """Locate the next isotopologue of every group in the feature table.

    Args:
        groups: Incorporation groups
        feature_table: All detected features
        params: Uses ppm_tolerance and mass_diff

    Returns:
        Feature table row position per group, -1 where nothing was found
    """
    n_groups = len(groups)
    if n_groups == 0 or feature_table.n_features == 0:
        return np.full(n_groups, -1, dtype=np.int64)

    expected_mz = np.empty(n_groups, dtype=np.float64)
    rt_min = np.empty(n_groups, dtype=np.float64)
    rt_max = np.empty(n_groups, dtype=np.float64)
    for g, group in enumerate(groups):
        expected_mz[g] = calculate_expected_isotope_mz(
            group.base_mz, group.next_atoms, params.mass_diff
        )
        rt_min[g], rt_max[g] = group.rt_range

    # Stable sort keeps table order among equal m/z
    order = np.argsort(feature_table.mz, kind="stable").astype(np.int64)
    mz_sorted = feature_table.mz[order]

    mz_min, mz_max = ppm_window(expected_mz, float(params.ppm_tolerance))

    rows = locate_isotopes_numba(
        mz_min, mz_max, rt_min, rt_max,
        mz_sorted, order, feature_table.rt
    )

    n_found = int(np.sum(rows >= 0))
    logger.info(f"Located next isotopologue for {n_found:,} of {n_groups:,} groups")

    return rows


def locate_isotope(
    group: IncorporationGroup,
    feature_table: FeatureTable,
    params: LabelCompareParams,
) -> int:
    """Locate the next isotopologue of a single group.

    Returns:
        Feature table row position, -1 if not found
    """
    return int(locate_isotopes([group], feature_table, params)[0])
