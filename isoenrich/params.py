"""
Parameters for labelling enrichment quantification and comparison.

A single immutable parameter object is passed explicitly to every stage of the
pipeline (isotope search, enrichment calculation, comparison, assembly).
"""

from dataclasses import dataclass, field
from typing import Tuple

from .constants import (
    C12_MASS,
    C13_MASS,
    DEFAULT_PPM_TOLERANCE,
    TRACER_MASSES,
)


@dataclass(frozen=True)
class LabelCompareParams:
    """Parameters for enrichment quantification and condition comparison.

    Conditions are compared against ``control_condition`` which must be one of
    ``conditions``.
    """

    # Experimental conditions (ordered, used for output column order)
    conditions: Tuple[str, ...] = field(default_factory=tuple)
    control_condition: str = ""

    # Mass window for the next isotopologue (ppm of expected mass)
    ppm_tolerance: float = DEFAULT_PPM_TOLERANCE

    # Atomic masses of the tracer element
    unlabelled_atom_mass: float = C12_MASS
    labelled_atom_mass: float = C13_MASS

    # Significance thresholds
    fold_change_threshold: float = 1.0
    p_value_threshold: float = 0.05

    # Keep real percentages in each group's base peak row
    show_base_peak: bool = True

    # Sample class label decomposition, e.g. "C13_WT"
    labelled_tag: str = "C13"
    unlabelled_tag: str = "C12"
    separator: str = "_"
    tag_position_front: bool = True

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))

        if len(self.conditions) == 0:
            raise ValueError("At least one condition is required")
        if len(set(self.conditions)) != len(self.conditions):
            raise ValueError(f"Duplicated conditions: {self.conditions}")
        if self.control_condition not in self.conditions:
            raise ValueError(
                f"Control condition {self.control_condition!r} is not one of "
                f"the configured conditions {self.conditions}"
            )
        if self.ppm_tolerance <= 0:
            raise ValueError(f"ppm_tolerance must be positive, got {self.ppm_tolerance}")
        if not 0.0 < self.p_value_threshold <= 1.0:
            raise ValueError(
                f"p_value_threshold must be in (0, 1], got {self.p_value_threshold}"
            )
        if self.fold_change_threshold < 0:
            raise ValueError(
                f"fold_change_threshold must be non-negative, got {self.fold_change_threshold}"
            )
        if self.labelled_tag == self.unlabelled_tag:
            raise ValueError("labelled_tag and unlabelled_tag must differ")

    @property
    def mass_diff(self) -> float:
        """Mass shift of one labelling step (labelled - unlabelled atom)."""
        return self.labelled_atom_mass - self.unlabelled_atom_mass

    @property
    def noncontrol_conditions(self) -> Tuple[str, ...]:
        """Conditions compared against the control, in configured order."""
        return tuple(c for c in self.conditions if c != self.control_condition)

    @classmethod
    def for_label(cls, label: str, **kwargs) -> 'LabelCompareParams':
        """Create parameters with the atomic masses of a tracer element.

        Args:
            label: Tracer name, one of '13C', '15N', '2H', '18O', '34S'
            **kwargs: Remaining LabelCompareParams fields

        Returns:
            LabelCompareParams with tracer-specific atomic masses
        """
        if label not in TRACER_MASSES:
            raise ValueError(
                f"Unknown tracer: {label}. Use one of {sorted(TRACER_MASSES)}"
            )
        unlabelled, labelled = TRACER_MASSES[label]
        return cls(
            unlabelled_atom_mass=unlabelled,
            labelled_atom_mass=labelled,
            **kwargs
        )
