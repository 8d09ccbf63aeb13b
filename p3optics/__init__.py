"""
P3 cloud optics for JAX

Cloud optical properties for RRTMG-type radiation computed from the
liquid and multi-category ice output of the P3 microphysics scheme,
using the RRTMG liquid (liqflag=1) and ice (iceflag=3) lookup tables.

Components:
- lookup_tables: table store, built once from the radiation scheme's tables
- liquid_optics: cloud liquid optical properties
- ice_optics: optical properties added per ice category
- cloud_optics: combination over species and normalization
"""

from .cloud_optics import (
    compute_cloud_optics,
    p3_cloud_optics,
    accumulate_ice_category,
    normalize_optics,
)
from .cloud_optics_types import (
    CloudOpticsAccumulator,
    CloudOpticsOutput,
    IceCategoryState,
    LiquidCloudState,
)
from .errors import (
    BoundsViolation,
    CloudOpticsError,
    InputBoundsError,
    TableBoundsError,
    ViolationKind,
)
from .ice_optics import add_ice_cloud_optics, extinction_scaling_factor
from .liquid_optics import liquid_cloud_optics
from .lookup_tables import (
    CloudOpticsTables,
    RRTMGCloudTables,
    TableStore,
    build_lookup_tables,
    from_nc_file,
)
from .parameters import CloudOpticsParameters

__version__ = "0.1.0"

__all__ = [
    # Main interface
    "compute_cloud_optics",
    "p3_cloud_optics",
    "accumulate_ice_category",
    "normalize_optics",
    "liquid_cloud_optics",
    "add_ice_cloud_optics",
    "extinction_scaling_factor",

    # Tables
    "CloudOpticsTables",
    "RRTMGCloudTables",
    "TableStore",
    "build_lookup_tables",
    "from_nc_file",

    # Types
    "CloudOpticsAccumulator",
    "CloudOpticsOutput",
    "IceCategoryState",
    "LiquidCloudState",
    "CloudOpticsParameters",

    # Errors
    "BoundsViolation",
    "CloudOpticsError",
    "InputBoundsError",
    "TableBoundsError",
    "ViolationKind",
]
