"""Pytest configuration for isoenrich tests.

This module provides common fixtures for all tests: a small two-condition
labelling experiment with one two-member incorporation group.
"""

import numpy as np
import pytest

from isoenrich.params import LabelCompareParams
from isoenrich.tables import FeatureTable, IncorporationGroup, SampleClassAssignment


@pytest.fixture
def class_labels():
    """Class label per sample: two labelled per condition, one unlabelled."""
    return ["C13_control", "C13_control", "C13_treatment", "C13_treatment", "C12_control"]


@pytest.fixture
def params():
    """Control vs treatment, 13C labelling, 5 ppm."""
    return LabelCompareParams(
        conditions=("control", "treatment"),
        control_condition="control",
        ppm_tolerance=5.0,
    )


@pytest.fixture
def member_intensities():
    """Intensities of the base peak (M+0) and the M+1 isotopologue."""
    return np.array([
        [1000.0, 900.0, 1000.0, 1100.0, 5000.0],
        [100.0, 95.0, 300.0, 280.0, 10.0],
    ])


@pytest.fixture
def group(member_intensities):
    """Two-member incorporation group (atoms 0 and 1)."""
    return IncorporationGroup(
        inc_id=1,
        feature_ids=[11, 12],
        mz=[100.0, 101.0034],
        rt=[60.0, 60.5],
        atoms=[0, 1],
        intensities=member_intensities,
    )


@pytest.fixture
def feature_table(member_intensities):
    """Feature table with the group members and one unrelated feature."""
    unrelated = np.array([[50.0, 50.0, 50.0, 50.0, 50.0]])
    return FeatureTable(
        ids=[11, 12, 13],
        mz=[100.0, 101.0034, 250.0],
        rt=[60.0, 60.5, 120.0],
        intensities=np.vstack([member_intensities, unrelated]),
    )


@pytest.fixture
def sample_classes(class_labels, params):
    return SampleClassAssignment.from_labels(class_labels, params)


@pytest.fixture
def sample_map(sample_classes, params):
    return sample_classes.labelled_samples(params)


# Random seed for reproducibility
@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
