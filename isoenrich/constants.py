"""Isotope masses and output labels for labelling enrichment analysis.

This module provides the atomic masses of the stable isotopes commonly used as
metabolic tracers, together with the literal strings written into the result
table. All masses are monoisotopic atomic masses in Da.

Key Features
------------
- Unlabelled / labelled atomic mass pairs for 13C, 15N, 2H, 18O and 34S
- Mass difference of one labelling step for each tracer
- Literal tags used in the ``Comparison`` column

Sources
-------
- NIST atomic weights and isotopic compositions:
  https://physics.nist.gov/cgi-bin/Compositions/stand_alone.pl
"""

# =============================================================================
# Atomic Masses (NIST values)
# =============================================================================

# Carbon
# 12C defines the unified atomic mass unit
C12_MASS = 12.0  # Da
C13_MASS = 13.00335483507  # Da

# Nitrogen
N14_MASS = 14.00307400443  # Da
N15_MASS = 15.00010889888  # Da

# Hydrogen
H1_MASS = 1.00782503223  # Da
H2_MASS = 2.01410177812  # Da (deuterium)

# Oxygen
O16_MASS = 15.99491461957  # Da
O18_MASS = 17.99915961286  # Da

# Sulfur
S32_MASS = 31.9720711744  # Da
S34_MASS = 33.967867004  # Da

# (unlabelled, labelled) atomic mass pairs keyed by tracer name
TRACER_MASSES = {
    "13C": (C12_MASS, C13_MASS),
    "15N": (N14_MASS, N15_MASS),
    "2H": (H1_MASS, H2_MASS),
    "18O": (O16_MASS, O18_MASS),
    "34S": (S32_MASS, S34_MASS),
}

# Mass shift of a single labelling step (labelled - unlabelled)
C13_MASS_DIFF = C13_MASS - C12_MASS  # 1.00335 Da

# =============================================================================
# Output Labels
# =============================================================================

# Tag written to the first isotopologue row of every group
BASE_PEAK_TAG = "Base peak"

# Value written across the whole first row when base peak values are hidden
BASE_PEAK_PLACEHOLDER = "Base Peak"

# Direction prefixes for significant comparisons
UP_PREFIX = "UP"
DOWN_PREFIX = "DOWN"

# Separator between several significant conditions in one row
TAG_SEPARATOR = ";"

# Default ppm window for matching the next isotopologue
DEFAULT_PPM_TOLERANCE = 5.0
