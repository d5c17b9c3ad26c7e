"""Isotopologue search in the feature table.

This module provides:
- Expected m/z of the next isotopologue of an incorporation group
- First-match isotope search within a ppm and RT co-elution window
- Batched, parallel search over all groups
"""

from .isotope_locator import (
    calculate_expected_isotope_mz,
    ppm_window,
    locate_isotope,
    locate_isotopes,
)

__all__ = [
    'calculate_expected_isotope_mz',
    'ppm_window',
    'locate_isotope',
    'locate_isotopes',
]
