"""
Optical properties of cloud liquid

Interpolates the RRTMG liquid tables (liqflag=1) in droplet effective
radius and scales the result by liquid water path. Returns the additive
quantities tau, tau*ssa, tau*ssa*g and tau*ssa*f, with f = g², so that
ice categories can be added before normalizing.

Date: 2025-01-10
"""

import jax
import jax.numpy as jnp

from .cloud_optics_types import CloudOpticsAccumulator
from .constants import (
    N_SIZE_LIQ, RADIUS_LIQ_LOWER, RADIUS_LIQ_SPACING,
    RADIUS_LIQ_MIN, RADIUS_LIQ_MAX, RADIUS_LIQ_CLIP
)
from .errors import InputBoundsError, ViolationKind, locate, raise_violation
from .interpolation import interpolate, table_index, table_position
from .lookup_tables import CloudOpticsTables


def check_liquid_radius(water_path: jnp.ndarray, effective_radius: jnp.ndarray):
    """
    Reject cloudy cells whose droplet radius is outside the table range.

    Args:
        water_path: Liquid water path (g/m²) [ncol, nlev]
        effective_radius: Droplet effective radius (microns) [ncol, nlev]

    Raises:
        InputBoundsError: If a cell with liquid has a radius below 2.5 or
            above 60 microns, or a NaN radius (reported as too small).
            Reports the most extreme radius.
    """
    active = water_path > 0.0
    # NaN fails both comparisons and is reported as too small
    too_small = active & ~(effective_radius >= RADIUS_LIQ_MIN)
    if jnp.any(too_small):
        raise_violation(
            InputBoundsError, ViolationKind.LIQUID_RADIUS_TOO_SMALL, effective_radius,
            locate(too_small, effective_radius), water_path
        )
    too_large = active & ~(effective_radius <= RADIUS_LIQ_MAX)
    if jnp.any(too_large):
        raise_violation(
            InputBoundsError, ViolationKind.LIQUID_RADIUS_TOO_LARGE, effective_radius,
            locate(too_large, effective_radius, largest=True), water_path
        )


@jax.jit
def _liquid_optics(
    tables: CloudOpticsTables,
    water_path: jnp.ndarray,
    effective_radius: jnp.ndarray
) -> CloudOpticsAccumulator:
    radius = jnp.clip(effective_radius, *RADIUS_LIQ_CLIP)
    idx, frac = table_index(
        table_position(radius, RADIUS_LIQ_LOWER, RADIUS_LIQ_SPACING), N_SIZE_LIQ
    )

    liqabs = interpolate(tables.abs_liq, idx, frac)
    ext = interpolate(tables.ext_liq, idx, frac)
    ssa = interpolate(tables.ssa_liq, idx, frac)
    asm = interpolate(tables.asy_liq, idx, frac)

    lwp = water_path[..., jnp.newaxis]
    active = lwp > 0.0
    tau = lwp * ext

    def masked(x):
        return jnp.where(active, x, 0.0)

    return CloudOpticsAccumulator(
        tau_lw=masked(lwp * liqabs),
        tau_sw=masked(tau),
        tau_ssa_sw=masked(tau * ssa),
        tau_ssa_g_sw=masked(tau * ssa * asm),
        tau_ssa_f_sw=masked(tau * ssa * asm * asm),
    )


def liquid_cloud_optics(
    tables: CloudOpticsTables,
    water_path: jnp.ndarray,
    effective_radius: jnp.ndarray
) -> CloudOpticsAccumulator:
    """
    Calculate optical properties of cloud liquid.

    Cells without liquid get zeros in every band.

    Args:
        tables: Cloud optics lookup tables
        water_path: Liquid water path (g/m²) [ncol, nlev]
        effective_radius: Droplet effective radius (microns) [ncol, nlev]

    Returns:
        Accumulator holding the liquid tau_lw, tau_sw, tau*ssa, tau*ssa*g
        and tau*ssa*g² [ncol, nlev, nbands]

    Raises:
        InputBoundsError: If a radius is outside [2.5, 60] microns where
            there is liquid.
    """
    water_path = jnp.asarray(water_path)
    effective_radius = jnp.asarray(effective_radius)
    if water_path.shape != effective_radius.shape:
        raise ValueError(
            f"Shape mismatch: water path {water_path.shape}, "
            f"effective radius {effective_radius.shape}"
        )
    check_liquid_radius(water_path, effective_radius)
    return _liquid_optics(tables, water_path, effective_radius)
