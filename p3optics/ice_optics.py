"""
Optical properties of P3 ice categories

Every ice category (cloud ice or snow) uses the RRTMG ice tables
(iceflag=3) indexed by generalized effective size Dge, and adds its
contribution into running totals shared with cloud liquid.

Sizes beyond the top of the table (140 microns) read the top bin. Their
LW absorption and SW extinction are scaled down by 140/Dge, which keeps
the optical depth of the ice mass, while single-scattering albedo,
asymmetry parameter and forward-scattering factor stay at their top-bin
values (following advice from Qiang Fu).

Date: 2025-01-10
"""

import jax
import jax.numpy as jnp
from typing import NamedTuple

from .cloud_optics_types import CloudOpticsAccumulator
from .constants import (
    N_SIZE_ICE, DGE_ICE_LOWER, DGE_ICE_SPACING, DGE_ICE_MIN, DGE_ICE_TABLE_MAX
)
from .errors import (
    InputBoundsError, TableBoundsError, ViolationKind, locate, raise_violation
)
from .interpolation import interpolate, table_index, table_position
from .lookup_tables import CloudOpticsTables


class IceTableValues(NamedTuple):
    """Ice table values interpolated to each cell [ncol, nlev, nbands]"""

    absorption: jnp.ndarray   # LW absorption coefficient (m²/g)
    extinction: jnp.ndarray   # SW extinction coefficient (m²/g)
    ssa: jnp.ndarray          # SW single-scattering albedo
    asymmetry: jnp.ndarray    # SW asymmetry parameter
    fdelta: jnp.ndarray       # SW forward-scattering delta


@jax.jit
def extinction_scaling_factor(effective_size: jnp.ndarray) -> jnp.ndarray:
    """
    Scaling of ice extinction for sizes beyond the top of the table.

    Args:
        effective_size: Generalized effective size Dge (microns)

    Returns:
        min(1, 140 / Dge)
    """
    eps = jnp.finfo(jnp.float32).eps
    return jnp.minimum(1.0, DGE_ICE_TABLE_MAX / jnp.maximum(eps, effective_size))


@jax.jit
def forward_scattering_factor(
    fdelta: jnp.ndarray,
    ssa: jnp.ndarray,
    asymmetry: jnp.ndarray
) -> jnp.ndarray:
    """
    Forward-scattering factor from the tabulated delta.

    Rescaled following Fu (1996) p. 2067 as in rrtmg_sw_cldprop, and
    capped at the asymmetry parameter.
    """
    forward = fdelta + 0.5 / ssa
    return jnp.minimum(forward, asymmetry)


@jax.jit
def lookup_ice_tables(tables: CloudOpticsTables, effective_size: jnp.ndarray) -> IceTableValues:
    """Interpolate the ice tables in Dge"""
    idx, frac = table_index(
        table_position(effective_size, DGE_ICE_LOWER, DGE_ICE_SPACING), N_SIZE_ICE
    )
    return IceTableValues(
        absorption=interpolate(tables.abs_ice, idx, frac),
        extinction=interpolate(tables.ext_ice, idx, frac),
        ssa=interpolate(tables.ssa_ice, idx, frac),
        asymmetry=interpolate(tables.asy_ice, idx, frac),
        fdelta=interpolate(tables.fdl_ice, idx, frac),
    )


def check_ice_size(water_path: jnp.ndarray, effective_size: jnp.ndarray):
    """
    Reject ice sizes the tables cannot represent.

    A size of exactly 0 marks the category as absent from the cell and is
    accepted whatever the water path.

    Raises:
        InputBoundsError: If a cell with ice has a negative or non-finite
            Dge, or a Dge below 5 microns.
    """
    has_ice = water_path > 0.0
    not_valid = has_ice & (effective_size != 0.0) & ~(
        jnp.isfinite(effective_size) & (effective_size > 0.0)
    )
    if jnp.any(not_valid):
        raise_violation(
            InputBoundsError, ViolationKind.ICE_SIZE_NOT_VALID, effective_size,
            locate(not_valid, effective_size), water_path
        )
    too_small = has_ice & (effective_size > 0.0) & (effective_size < DGE_ICE_MIN)
    if jnp.any(too_small):
        raise_violation(
            InputBoundsError, ViolationKind.ICE_SIZE_TOO_SMALL, effective_size,
            locate(too_small, effective_size), water_path
        )


def check_ice_table_values(values: IceTableValues, active: jnp.ndarray, water_path: jnp.ndarray):
    """
    Make sure the interpolated ice properties are physical.

    Args:
        values: Interpolated table values [ncol, nlev, N_SW_BANDS]
        active: Cells holding ice [ncol, nlev]
        water_path: Ice water path (g/m²) [ncol, nlev]

    Raises:
        TableBoundsError: If fdelta, ssa or asymmetry fall outside [0, 1]
            or extinction is negative in a cell holding ice.
    """
    active = active[..., jnp.newaxis]

    def outside_unit_interval(x):
        return ~((x >= 0.0) & (x <= 1.0))

    checks = (
        (ViolationKind.FDELTA_OUT_OF_RANGE, values.fdelta, outside_unit_interval(values.fdelta)),
        (ViolationKind.NEGATIVE_EXTINCTION, values.extinction, ~(values.extinction >= 0.0)),
        (ViolationKind.SSA_OUT_OF_RANGE, values.ssa, outside_unit_interval(values.ssa)),
        (ViolationKind.ASYMMETRY_OUT_OF_RANGE, values.asymmetry, outside_unit_interval(values.asymmetry)),
    )
    for kind, field, bad in checks:
        bad = active & bad
        if jnp.any(bad):
            # Report the value furthest from the valid range
            distance = jnp.abs(field - jnp.clip(field, 0.0, 1.0))
            if kind is ViolationKind.NEGATIVE_EXTINCTION:
                distance = -field
            raise_violation(
                TableBoundsError, kind, field,
                locate(bad, distance, largest=True), water_path
            )


@jax.jit
def _ice_contribution(
    values: IceTableValues,
    water_path: jnp.ndarray,
    effective_size: jnp.ndarray
) -> CloudOpticsAccumulator:
    forward = forward_scattering_factor(values.fdelta, values.ssa, values.asymmetry)

    scale = extinction_scaling_factor(effective_size)[..., jnp.newaxis]
    iceabs = values.absorption * scale
    ext = values.extinction * scale

    iwp = water_path[..., jnp.newaxis]
    active = (iwp > 0.0) & (effective_size[..., jnp.newaxis] > 0.0)
    tau = iwp * ext
    tau_ssa = tau * values.ssa

    def masked(x):
        return jnp.where(active, x, 0.0)

    return CloudOpticsAccumulator(
        tau_lw=masked(iwp * iceabs),
        tau_sw=masked(tau),
        tau_ssa_sw=masked(tau_ssa),
        tau_ssa_g_sw=masked(tau_ssa * values.asymmetry),
        tau_ssa_f_sw=masked(tau_ssa * forward),
    )


def ice_cloud_optics(
    tables: CloudOpticsTables,
    water_path: jnp.ndarray,
    effective_size: jnp.ndarray
) -> CloudOpticsAccumulator:
    """
    Calculate the optical contribution of one ice category.

    Args:
        tables: Cloud optics lookup tables
        water_path: Ice water path (g/m²) [ncol, nlev]
        effective_size: Generalized effective size Dge (microns) [ncol, nlev]

    Returns:
        Accumulator holding this category's tau_lw, tau_sw, tau*ssa,
        tau*ssa*g and tau*ssa*f; zero where the category is absent, that is
        where the water path is 0 or the size is exactly 0. A zero size
        with a positive water path adds no optics, but the water path still
        counts towards the cloud mask in compute_cloud_optics.

    Raises:
        InputBoundsError: If Dge is negative, non-finite or below 5 microns
            where there is ice.
        TableBoundsError: If an interpolated property is unphysical.
    """
    water_path = jnp.asarray(water_path)
    effective_size = jnp.asarray(effective_size)
    if water_path.shape != effective_size.shape:
        raise ValueError(
            f"Shape mismatch: water path {water_path.shape}, "
            f"effective size {effective_size.shape}"
        )
    check_ice_size(water_path, effective_size)

    values = lookup_ice_tables(tables, effective_size)
    active = (water_path > 0.0) & (effective_size > 0.0)
    check_ice_table_values(values, active, water_path)

    return _ice_contribution(values, water_path, effective_size)


def add_ice_cloud_optics(
    tables: CloudOpticsTables,
    water_path: jnp.ndarray,
    effective_size: jnp.ndarray,
    totals: CloudOpticsAccumulator
) -> CloudOpticsAccumulator:
    """
    Add the optical properties of one ice category to the running totals.

    Cells without this category keep their totals unchanged. A cell
    without the category has a water path of 0 or a size of exactly 0.
    The size 0 case is kept for microphysics that report no size for
    trace amounts: the cell gets no ice optics from this category, though
    compute_cloud_optics still counts its water path towards the cloud
    mask.

    Returns:
        New running totals

    Raises:
        InputBoundsError: If Dge is negative, non-finite or below 5 microns
            where there is ice.
        TableBoundsError: If an interpolated property is unphysical.
    """
    return totals.add(ice_cloud_optics(tables, water_path, effective_size))
