"""
Constants for P3 cloud optics

Band counts and table geometry of the RRTMG cloud property tables used
for cloud liquid (liqflag=1, indexed by effective radius) and for every
P3 ice category (iceflag=3, indexed by generalized effective size Dge).

Date: 2025-01-10
"""

import math

# Spectral bands
N_LW_BANDS = 16  # RRTMG longwave bands
N_SW_BANDS = 14  # RRTMG shortwave bands (16-29 in RRTMG numbering)

# Liquid lookup tables, indexed by effective radius (microns)
N_SIZE_LIQ = 58
RADIUS_LIQ_LOWER = 2.5      # Radius of the first table bin
RADIUS_LIQ_SPACING = 1.0    # Bin spacing
RADIUS_LIQ_MIN = 2.5        # Smaller radii are rejected
RADIUS_LIQ_MAX = 60.0       # Larger radii are rejected
RADIUS_LIQ_CLIP = (2.51, 59.99)  # Range used for table indexing

# Ice lookup tables, indexed by generalized effective size (microns)
N_SIZE_ICE = 46
DGE_ICE_LOWER = 5.0         # Dge of the first table bin
DGE_ICE_SPACING = 3.0       # Bin spacing
DGE_ICE_MIN = 5.0           # Smaller sizes are rejected
DGE_ICE_TABLE_MAX = 140.0   # Dge of the last table bin

# Ratio Dge / r_eff for ice, eqn 10 in Fu (1996, J. Climate)
DGE_OVER_REFF = 2.0 / math.sqrt(3.0)

# Diagnostic ice effective radius
REFERENCE_SW_BAND = 8       # Zero-based; RRTMG SW band 9
REFF_ICE_FILL = 25.0        # Value where there is no ice optical depth (microns)

# kg -> g, water paths are expressed in g/m² to match the tables (m²/g)
GRAMS_PER_KG = 1.0e3
