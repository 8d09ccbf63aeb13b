"""
Type definitions for P3 cloud optics

Cloud state arrays are [ncol, nlev] for one latitude slice; optical
properties carry a trailing band axis, [ncol, nlev, nbands].

Date: 2025-01-10
"""

import dataclasses

import jax
import jax.numpy as jnp
from typing import NamedTuple
import tree_math

from .constants import N_LW_BANDS, N_SW_BANDS


class LiquidCloudState(NamedTuple):
    """Cloud liquid input for one latitude slice"""

    water_path: jnp.ndarray          # Liquid water path (g/m²) [ncol, nlev]
    effective_radius: jnp.ndarray    # Droplet effective radius (microns) [ncol, nlev]


class IceCategoryState(NamedTuple):
    """Input for one P3 ice category (cloud ice or snow)"""

    water_path: jnp.ndarray          # Ice water path (g/m²) [ncol, nlev]
    effective_size: jnp.ndarray      # Generalized effective size Dge (microns) [ncol, nlev]


@tree_math.struct
class CloudOpticsAccumulator:
    """
    Running totals of the additive optical quantities.

    Liquid and every ice category add into these; they are only divided
    out into intensive quantities once all species have been added.
    """
    tau_lw: jnp.ndarray        # LW absorption optical depth [ncol, nlev, N_LW_BANDS]
    tau_sw: jnp.ndarray        # SW optical depth [ncol, nlev, N_SW_BANDS]
    tau_ssa_sw: jnp.ndarray    # tau * ssa
    tau_ssa_g_sw: jnp.ndarray  # tau * ssa * g
    tau_ssa_f_sw: jnp.ndarray  # tau * ssa * f

    @classmethod
    def zeros(cls, shape, n_lw_bands=N_LW_BANDS, n_sw_bands=N_SW_BANDS):
        shape = tuple(shape)
        return cls(
            tau_lw=jnp.zeros(shape + (n_lw_bands,)),
            tau_sw=jnp.zeros(shape + (n_sw_bands,)),
            tau_ssa_sw=jnp.zeros(shape + (n_sw_bands,)),
            tau_ssa_g_sw=jnp.zeros(shape + (n_sw_bands,)),
            tau_ssa_f_sw=jnp.zeros(shape + (n_sw_bands,)),
        )

    def add(self, other: 'CloudOpticsAccumulator') -> 'CloudOpticsAccumulator':
        return jax.tree_util.tree_map(jnp.add, self, other)


class IceAccumulation(NamedTuple):
    """Carry of the fold over ice categories"""

    totals: CloudOpticsAccumulator   # Liquid plus the categories added so far
    tau_sw_snapshot: jnp.ndarray     # SW tau before the latest category [ncol, nlev, N_SW_BANDS]
    tau_dge: jnp.ndarray             # Sum of marginal reference-band tau * Dge [ncol, nlev]
    total_water_path: jnp.ndarray    # Liquid plus ice water path (g/m²) [ncol, nlev]


@tree_math.struct
class CloudOpticsOutput:
    """Cloud optical properties handed to the radiative transfer solver"""
    tau_lw: jnp.ndarray          # LW optical depth [ncol, nlev, N_LW_BANDS]
    tau_sw: jnp.ndarray          # SW optical depth [ncol, nlev, N_SW_BANDS]
    ssa_sw: jnp.ndarray          # SW single-scattering albedo
    asm_sw: jnp.ndarray          # SW asymmetry parameter
    for_sw: jnp.ndarray          # SW forward-scattering factor
    tau_sw_liquid: jnp.ndarray   # SW optical depth of cloud liquid alone
    tau_sw_ice: jnp.ndarray      # SW optical depth of all ice categories
    reff_ice: jnp.ndarray        # Optical-depth weighted ice effective radius (microns) [ncol, nlev]
    cloud_fraction: jnp.ndarray  # 1 where there is condensate, else 0 [ncol, nlev]

    def copy(self, **kwargs) -> 'CloudOpticsOutput':
        return dataclasses.replace(self, **kwargs)
