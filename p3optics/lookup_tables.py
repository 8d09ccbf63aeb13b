"""Lookup tables of cloud liquid and ice optical properties.

The radiation scheme initializer provides the RRTMG cloud property
tables laid out [nbands, nsize]. They are transposed once into
[nsize, nbands] so that the band axis is contiguous for the per-cell
lookups, and are never modified afterwards.
"""

import threading
from typing import NamedTuple, Optional

import jax.numpy as jnp
import numpy as np
import tree_math
import xarray as xr
from absl import logging

from .constants import N_LW_BANDS, N_SW_BANDS, N_SIZE_LIQ, N_SIZE_ICE


class RRTMGCloudTables(NamedTuple):
    """Cloud property tables as provided by the radiation scheme, [nbands, nsize]."""
    # Liquid, indexed by effective radius (liqflag=1)
    abs_liq: np.ndarray   # LW absorption coefficient (m²/g)
    ext_liq: np.ndarray   # SW extinction coefficient (m²/g)
    ssa_liq: np.ndarray   # SW single-scattering albedo
    asy_liq: np.ndarray   # SW asymmetry parameter
    # Ice, indexed by generalized effective size (iceflag=3)
    abs_ice: np.ndarray   # LW absorption coefficient (m²/g)
    ext_ice: np.ndarray   # SW extinction coefficient (m²/g)
    ssa_ice: np.ndarray   # SW single-scattering albedo
    asy_ice: np.ndarray   # SW asymmetry parameter
    fdl_ice: np.ndarray   # SW forward-scattering delta


# Variable names of the RRTMG tables in netCDF files
NC_VARIABLES = {
    'abs_liq': 'absliq1',
    'ext_liq': 'extliq1',
    'ssa_liq': 'ssaliq1',
    'asy_liq': 'asyliq1',
    'abs_ice': 'absice3',
    'ext_ice': 'extice3',
    'ssa_ice': 'ssaice3',
    'asy_ice': 'asyice3',
    'fdl_ice': 'fdlice3',
}

_EXPECTED_SHAPES = {
    'abs_liq': (N_LW_BANDS, N_SIZE_LIQ),
    'ext_liq': (N_SW_BANDS, N_SIZE_LIQ),
    'ssa_liq': (N_SW_BANDS, N_SIZE_LIQ),
    'asy_liq': (N_SW_BANDS, N_SIZE_LIQ),
    'abs_ice': (N_LW_BANDS, N_SIZE_ICE),
    'ext_ice': (N_SW_BANDS, N_SIZE_ICE),
    'ssa_ice': (N_SW_BANDS, N_SIZE_ICE),
    'asy_ice': (N_SW_BANDS, N_SIZE_ICE),
    'fdl_ice': (N_SW_BANDS, N_SIZE_ICE),
}


@tree_math.struct
class CloudOpticsTables:
    """Band-contiguous lookup tables, [nsize, nbands]."""
    abs_liq: jnp.ndarray
    ext_liq: jnp.ndarray
    ssa_liq: jnp.ndarray
    asy_liq: jnp.ndarray
    abs_ice: jnp.ndarray
    ext_ice: jnp.ndarray
    ssa_ice: jnp.ndarray
    asy_ice: jnp.ndarray
    fdl_ice: jnp.ndarray


def build_lookup_tables(host_tables: RRTMGCloudTables) -> CloudOpticsTables:
    """Transpose the host tables into band-contiguous storage.

    Args:
      host_tables: Tables laid out [nbands, nsize].

    Returns:
      A `CloudOpticsTables` instance.

    Raises:
      ValueError: If a table does not have the RRTMG shape.
    """
    data = {}
    for name, expected in _EXPECTED_SHAPES.items():
        table = np.asarray(getattr(host_tables, name))
        if table.shape != expected:
            raise ValueError(
                f"Invalid shape for table {name}: {table.shape}. Expected {expected}."
            )
        data[name] = jnp.asarray(np.ascontiguousarray(table.T))
    return CloudOpticsTables(**data)


def from_dataset(ds: xr.Dataset) -> RRTMGCloudTables:
    """Extract the RRTMG cloud property tables from a dataset.

    Each variable is expected with the band dimension first and the size
    dimension second.
    """
    return RRTMGCloudTables(**{
        name: np.asarray(ds[variable].values) for name, variable in NC_VARIABLES.items()
    })


def from_nc_file(path: str) -> RRTMGCloudTables:
    """Load the RRTMG cloud property tables from a netCDF file."""
    with xr.open_dataset(path) as ds:
        return from_dataset(ds)


class TableStore:
    """Holds the lookup tables, built on the first call to `initialize`.

    Initialization is guarded by a lock, so slices processed on other
    threads always see fully built tables.
    """

    def __init__(self, host_tables: RRTMGCloudTables):
        self._host_tables = host_tables
        self._tables: Optional[CloudOpticsTables] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._tables is not None

    def initialize(self) -> CloudOpticsTables:
        """Build the tables once; later calls return the same tables."""
        with self._lock:
            if self._tables is None:
                logging.info('Initializing P3 cloud optics')
                self._tables = build_lookup_tables(self._host_tables)
                # The host layout is not needed once the device tables exist
                self._host_tables = None
        return self._tables
