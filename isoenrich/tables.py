"""Input tables for labelling enrichment analysis.

This module holds the already-materialized inputs produced by the upstream
peak-picking and isotopologue grouping steps:

- ``FeatureTable``: every detected feature with its median m/z, median RT and
  per-sample intensities
- ``IncorporationGroup``: one cluster of isotopologue features sharing a
  labelling origin, with the number of labelled atoms of each member
- ``SampleClassAssignment``: the (label tag, condition) pair of every sample,
  resolved once from the raw class labels

All tables are read-only once constructed. Pandas is only needed for the
``from_dataframe`` constructors.

Examples
--------
>>> features = FeatureTable.from_dataframe(xcms_groups, sample_columns=samples)
>>> groups = incorporation_groups_from_dataframe(george_table)
>>> classes = SampleClassAssignment.from_labels(["C13_WT", "C13_KO"], params)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .params import LabelCompareParams

# Metadata columns of the upstream incorporation table
INC_ID_COLUMN = "inc_id"
FEATURE_ID_COLUMN = "feature_id"
MZ_COLUMN = "mzmed"
RT_COLUMN = "rtmed"
ATOMS_COLUMN = "atoms"


# =============================================================================
# Feature Table
# =============================================================================

@dataclass
class FeatureTable:
    """All detected features of the experiment (superset of the groups)."""

    ids: np.ndarray          # (n_features,) int64
    mz: np.ndarray           # (n_features,) float64
    rt: np.ndarray           # (n_features,) float64
    intensities: np.ndarray  # (n_features, n_samples) float64
    sample_names: Optional[List[str]] = None

    def __post_init__(self):
        self.ids = np.asarray(self.ids, dtype=np.int64)
        self.mz = np.asarray(self.mz, dtype=np.float64)
        self.rt = np.asarray(self.rt, dtype=np.float64)
        self.intensities = np.atleast_2d(np.asarray(self.intensities, dtype=np.float64))

        n = len(self.ids)
        if len(self.mz) != n or len(self.rt) != n or self.intensities.shape[0] != n:
            raise ValueError(
                f"Feature table columns differ in length: ids={n}, mz={len(self.mz)}, "
                f"rt={len(self.rt)}, intensities={self.intensities.shape[0]}"
            )
        if len(np.unique(self.ids)) != n:
            raise ValueError("Feature ids must be unique")
        if self.sample_names is not None and len(self.sample_names) != self.n_samples:
            raise ValueError(
                f"Got {len(self.sample_names)} sample names for {self.n_samples} samples"
            )

        self._position = {int(fid): i for i, fid in enumerate(self.ids)}

    @property
    def n_features(self) -> int:
        return len(self.ids)

    @property
    def n_samples(self) -> int:
        return self.intensities.shape[1]

    def positions_of(self, feature_ids: Sequence[int]) -> np.ndarray:
        """Map feature ids to row positions.

        Raises:
            KeyError: If any id is not in the table
        """
        missing = [int(f) for f in feature_ids if int(f) not in self._position]
        if missing:
            raise KeyError(f"Feature ids not found in feature table: {missing}")
        return np.array([self._position[int(f)] for f in feature_ids], dtype=np.int64)

    @classmethod
    def from_dataframe(
        cls,
        df,
        sample_columns: Optional[Sequence[str]] = None,
        id_column: Optional[str] = None,
        mz_column: str = MZ_COLUMN,
        rt_column: str = RT_COLUMN,
    ) -> 'FeatureTable':
        """Build a feature table from a pandas DataFrame.

        Args:
            df: One row per feature
            sample_columns: Intensity columns in sample order. Defaults to all
                columns except id, m/z and RT.
            id_column: Column with feature ids. Defaults to the index.
            mz_column: Median m/z column
            rt_column: Median RT column

        Returns:
            FeatureTable
        """
        if id_column is None:
            ids = df.index.to_numpy()
        else:
            ids = df[id_column].to_numpy()

        if sample_columns is None:
            skip = {mz_column, rt_column, id_column}
            sample_columns = [c for c in df.columns if c not in skip]

        return cls(
            ids=ids,
            mz=df[mz_column].to_numpy(),
            rt=df[rt_column].to_numpy(),
            intensities=df[list(sample_columns)].to_numpy(dtype=np.float64),
            sample_names=[str(c) for c in sample_columns],
        )


# =============================================================================
# Incorporation Groups
# =============================================================================

@dataclass
class IncorporationGroup:
    """Isotopologue features believed to share one labelling origin.

    Members are ordered as produced upstream; the first member is the base
    peak of the group.
    """

    inc_id: object
    feature_ids: np.ndarray  # (n_members,) int64
    mz: np.ndarray           # (n_members,) float64
    rt: np.ndarray           # (n_members,) float64
    atoms: np.ndarray        # (n_members,) int64, labelled atoms per member
    intensities: np.ndarray  # (n_members, n_samples) float64
    sample_names: Optional[List[str]] = None

    def __post_init__(self):
        self.feature_ids = np.asarray(self.feature_ids, dtype=np.int64)
        self.mz = np.asarray(self.mz, dtype=np.float64)
        self.rt = np.asarray(self.rt, dtype=np.float64)
        self.intensities = np.atleast_2d(np.asarray(self.intensities, dtype=np.float64))

        atoms = np.asarray(self.atoms)
        n = len(self.feature_ids)
        if n == 0:
            raise ValueError(f"Incorporation group {self.inc_id!r} has no members")
        if (len(self.mz) != n or len(self.rt) != n or len(atoms) != n
                or self.intensities.shape[0] != n):
            raise ValueError(
                f"Incorporation group {self.inc_id!r}: member columns differ in length"
            )
        if not np.all(np.mod(atoms, 1) == 0) or np.any(atoms < 0):
            raise ValueError(
                f"Incorporation group {self.inc_id!r}: atom counts must be "
                f"non-negative integers, got {atoms.tolist()}"
            )
        self.atoms = atoms.astype(np.int64)
        if self.sample_names is not None and len(self.sample_names) != self.n_samples:
            raise ValueError(
                f"Incorporation group {self.inc_id!r}: got {len(self.sample_names)} "
                f"sample names for {self.n_samples} samples"
            )

    @property
    def n_members(self) -> int:
        return len(self.feature_ids)

    @property
    def n_samples(self) -> int:
        return self.intensities.shape[1]

    @property
    def rt_range(self):
        """(min, max) retention time of the members."""
        return float(self.rt.min()), float(self.rt.max())

    @property
    def base_mz(self) -> float:
        """m/z of the first member (base peak)."""
        return float(self.mz[0])

    @property
    def next_atoms(self) -> int:
        """Labelled atom count of the isotopologue after the heaviest member."""
        return int(self.atoms.max()) + 1


def incorporation_sample_columns(df) -> list:
    """Intensity columns of the incorporation table: all columns after the
    last metadata column."""
    metadata = [INC_ID_COLUMN, FEATURE_ID_COLUMN, MZ_COLUMN, RT_COLUMN, ATOMS_COLUMN]
    last = max(df.columns.get_loc(c) for c in metadata)
    return list(df.columns[last + 1:])


def incorporation_groups_from_dataframe(
    df,
    sample_columns: Optional[Sequence[str]] = None,
) -> List[IncorporationGroup]:
    """Split the upstream incorporation table into groups.

    Groups are returned in first-appearance order of ``inc_id``; members keep
    their row order.

    Args:
        df: One row per member feature with columns inc_id, feature_id, mzmed,
            rtmed, atoms and a contiguous block of sample intensities
        sample_columns: Intensity columns. Defaults to the columns after the
            last metadata column.

    Returns:
        List of IncorporationGroup
    """
    if len(df) == 0:
        raise ValueError("Incorporation table is empty")

    if sample_columns is None:
        sample_columns = incorporation_sample_columns(df)
    sample_columns = list(sample_columns)

    groups = []
    for inc_id, members in df.groupby(INC_ID_COLUMN, sort=False):
        groups.append(IncorporationGroup(
            inc_id=inc_id,
            feature_ids=members[FEATURE_ID_COLUMN].to_numpy(),
            mz=members[MZ_COLUMN].to_numpy(),
            rt=members[RT_COLUMN].to_numpy(),
            atoms=members[ATOMS_COLUMN].to_numpy(),
            intensities=members[sample_columns].to_numpy(dtype=np.float64),
            sample_names=[str(c) for c in sample_columns],
        ))

    return groups


# =============================================================================
# Sample Classes
# =============================================================================

@dataclass(frozen=True)
class SampleClassAssignment:
    """Label tag and condition of every sample, in intensity column order."""

    label_tags: tuple
    conditions: tuple

    def __post_init__(self):
        object.__setattr__(self, "label_tags", tuple(self.label_tags))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        if len(self.label_tags) != len(self.conditions):
            raise ValueError("label_tags and conditions must have the same length")

    @property
    def n_samples(self) -> int:
        return len(self.label_tags)

    @classmethod
    def from_labels(
        cls,
        class_labels: Sequence[str],
        params: LabelCompareParams,
    ) -> 'SampleClassAssignment':
        """Decompose raw class labels such as ``"C13_WT"``.

        The label is split once at ``params.separator``; with
        ``params.tag_position_front`` the label tag is the part before it,
        otherwise the part after it.

        Raises:
            ValueError: If a label does not contain the separator
        """
        tags = []
        conditions = []
        for label in class_labels:
            label = str(label)
            if params.tag_position_front:
                head, sep, tail = label.partition(params.separator)
                tag, condition = head, tail
            else:
                head, sep, tail = label.rpartition(params.separator)
                tag, condition = tail, head
            if not sep:
                raise ValueError(
                    f"Class label {label!r} does not contain separator {params.separator!r}"
                )
            tags.append(tag)
            conditions.append(condition)

        return cls(label_tags=tuple(tags), conditions=tuple(conditions))

    def labelled_samples(self, params: LabelCompareParams) -> Dict[str, np.ndarray]:
        """Sample indices of labelled samples for each configured condition."""
        tags = np.array(self.label_tags, dtype=object)
        conditions = np.array(self.conditions, dtype=object)
        labelled = tags == params.labelled_tag

        return {
            condition: np.flatnonzero(labelled & (conditions == condition))
            for condition in params.conditions
        }


def validate_inputs(
    groups: Sequence[IncorporationGroup],
    feature_table: FeatureTable,
    sample_classes: SampleClassAssignment,
) -> None:
    """Check that the inputs describe the same samples and features.

    Raises:
        ValueError: On an empty group list, a sample count or sample name
            mismatch, or member features missing from the feature table
    """
    if len(groups) == 0:
        raise ValueError("No incorporation groups given")

    n_samples = feature_table.n_samples
    if sample_classes.n_samples != n_samples:
        raise ValueError(
            f"Sample classes cover {sample_classes.n_samples} samples, "
            f"feature table has {n_samples}"
        )

    for group in groups:
        if group.n_samples != n_samples:
            raise ValueError(
                f"Incorporation group {group.inc_id!r} has {group.n_samples} samples, "
                f"feature table has {n_samples}"
            )
        if (group.sample_names is not None and feature_table.sample_names is not None
                and list(group.sample_names) != list(feature_table.sample_names)):
            raise ValueError(
                f"Incorporation group {group.inc_id!r} samples {list(group.sample_names)} "
                f"do not match feature table samples {list(feature_table.sample_names)}"
            )
        try:
            feature_table.positions_of(group.feature_ids)
        except KeyError as e:
            raise ValueError(f"Incorporation group {group.inc_id!r}: {e.args[0]}") from e
