"""isoenrich - Isotopic labelling enrichment quantification and comparison.

Given incorporation groups (clusters of isotopologue features sharing a
labelling origin) and the feature intensity matrix of an untargeted
metabolomics experiment, isoenrich computes the percentage of intensity
carried by each isotopologue in every labelled sample and tests whether it
differs between a control condition and every other condition.

Examples
--------
>>> from isoenrich import LabelCompareParams, label_compare_dataframes
>>> params = LabelCompareParams(conditions=("WT", "KO"), control_condition="WT")
>>> result = label_compare_dataframes(george_df, feature_df, class_labels, params)
"""

__version__ = "0.1.0"

from isoenrich import features
from isoenrich import scoring
from isoenrich.params import LabelCompareParams
from isoenrich.tables import (
    FeatureTable,
    IncorporationGroup,
    SampleClassAssignment,
    incorporation_groups_from_dataframe,
)
from isoenrich.pipeline import (
    assemble_group_table,
    label_compare,
    label_compare_dataframes,
)

__all__ = [
    "features",
    "scoring",
    "LabelCompareParams",
    "FeatureTable",
    "IncorporationGroup",
    "SampleClassAssignment",
    "incorporation_groups_from_dataframe",
    "assemble_group_table",
    "label_compare",
    "label_compare_dataframes",
]
