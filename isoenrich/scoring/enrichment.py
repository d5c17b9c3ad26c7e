"""Labelling enrichment of incorporation groups.

For every labelled sample, the enrichment of a member isotopologue is its
share of the summed intensity of all matched peaks of the group (members plus
the located next isotopologue):

    percentage = 100 * member_intensity / sum(matched_intensities)

computed independently per sample. Percentages are then summarized per
condition as mean and standard deviation. Members that carry the same number
of labelled atoms are pooled before summarizing.

Zero denominators are not treated as errors: they produce inf/NaN
percentages which propagate to the summaries.

Examples
--------
>>> enrichment = calculate_group_enrichment(group, features, isotope_row,
...                                         sample_map, params)
>>> enrichment.mean   # (n_members, n_conditions)
>>> enrichment.values_for_atoms(1, "WT")
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

import numpy as np

from ..params import LabelCompareParams
from ..tables import FeatureTable, IncorporationGroup


@dataclass
class GroupEnrichment:
    """Enrichment percentages and per-condition summaries of one group."""

    inc_id: object
    feature_ids: np.ndarray
    atoms: np.ndarray
    conditions: Tuple[str, ...]

    # condition -> (n_members, n_labelled_samples) percentages
    percentages: Dict[str, np.ndarray]

    # atom count -> member rows carrying it
    atom_rows: Dict[int, np.ndarray]

    # (n_members, n_conditions)
    mean: np.ndarray
    sd: np.ndarray

    # Feature table row of the located isotope (-1 if none)
    isotope_row: int = -1

    @property
    def has_isotope(self) -> bool:
        return self.isotope_row >= 0

    def values_for_atoms(self, atoms: int, condition: str) -> np.ndarray:
        """All percentages of members with ``atoms`` labelled atoms in a condition."""
        return pooled_percentages(self.percentages[condition], self.atom_rows[int(atoms)])


def calculate_percentages(
    member_intensities: np.ndarray,
    matched_intensities: np.ndarray,
) -> np.ndarray:
    """Percentage of total matched intensity carried by each member.

    Args:
        member_intensities: (n_members, n_samples)
        matched_intensities: (n_matched, n_samples), all peaks of the group
            including the located isotope

    Returns:
        (n_members, n_samples) percentages, not clipped to [0, 100]
    """
    member_intensities = np.asarray(member_intensities, dtype=np.float64)
    total = np.asarray(matched_intensities, dtype=np.float64).sum(axis=0)

    with np.errstate(divide='ignore', invalid='ignore'):
        return 100.0 * member_intensities / total[np.newaxis, :]


def group_rows_by_atoms(atoms: np.ndarray) -> Dict[int, np.ndarray]:
    """Map each atom count to the member rows carrying it."""
    atoms = np.asarray(atoms, dtype=np.int64)
    return {int(a): np.flatnonzero(atoms == a) for a in np.unique(atoms)}


def pooled_percentages(percentages: np.ndarray, rows: np.ndarray) -> np.ndarray:
    """Flatten the percentages of several member rows into one sample."""
    return percentages[rows].ravel()


def mean_and_sd(values: np.ndarray) -> Tuple[float, float]:
    """Mean and sample standard deviation (ddof=1).

    Empty input gives (NaN, NaN); a single value gives (value, NaN).
    """
    n = len(values)
    if n == 0:
        return np.nan, np.nan

    with np.errstate(invalid='ignore', over='ignore'):
        mean = float(np.mean(values))
        if n < 2:
            return mean, np.nan
        sd = float(np.std(values, ddof=1))
    return mean, sd


def calculate_group_enrichment(
    group: IncorporationGroup,
    feature_table: FeatureTable,
    isotope_row: int,
    sample_map: Mapping[str, np.ndarray],
    params: LabelCompareParams,
) -> GroupEnrichment:
    """Calculate enrichment percentages and condition summaries for a group.

    Args:
        group: Incorporation group (numerator intensities)
        feature_table: Feature table (denominator intensities)
        isotope_row: Row of the located next isotopologue, -1 if none
        sample_map: condition -> labelled sample indices
        params: Uses conditions

    Returns:
        GroupEnrichment
    """
    matched_rows = feature_table.positions_of(group.feature_ids)
    if isotope_row >= 0:
        matched_rows = np.append(matched_rows, isotope_row)
    matched = feature_table.intensities[matched_rows]

    percentages = {}
    for condition in params.conditions:
        samples = sample_map[condition]
        percentages[condition] = calculate_percentages(
            group.intensities[:, samples], matched[:, samples]
        )

    atom_rows = group_rows_by_atoms(group.atoms)

    n_members = group.n_members
    n_conditions = len(params.conditions)
    mean = np.full((n_members, n_conditions), np.nan, dtype=np.float64)
    sd = np.full((n_members, n_conditions), np.nan, dtype=np.float64)

    for j, condition in enumerate(params.conditions):
        for atoms, rows in atom_rows.items():
            m, s = mean_and_sd(pooled_percentages(percentages[condition], rows))
            mean[rows, j] = m
            sd[rows, j] = s

    return GroupEnrichment(
        inc_id=group.inc_id,
        feature_ids=group.feature_ids,
        atoms=group.atoms,
        conditions=params.conditions,
        percentages=percentages,
        atom_rows=atom_rows,
        mean=mean,
        sd=sd,
        isotope_row=int(isotope_row),
    )
