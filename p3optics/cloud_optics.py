"""
Total cloud optical properties from P3 microphysics

Combines cloud liquid and all P3 ice categories into the optical
properties used by RRTMG: LW optical depth, and SW optical depth,
single-scattering albedo, asymmetry parameter and forward-scattering
factor. The liquid and ice routines return tau, tau*ssa, tau*ssa*g and
tau*ssa*f; these are summed over species and only normalized once every
contribution has been added.

Date: 2025-01-10
"""

import functools
from typing import Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from absl import logging

from .cloud_optics_types import (
    CloudOpticsAccumulator, CloudOpticsOutput, IceAccumulation,
    IceCategoryState, LiquidCloudState
)
from .ice_optics import add_ice_cloud_optics
from .liquid_optics import liquid_cloud_optics
from .lookup_tables import CloudOpticsTables
from .parameters import CloudOpticsParameters
from .unit_conversions import (
    dge_from_effective_radius, effective_radius_from_dge, water_path_from_mixing_ratio
)


def accumulate_ice_category(
    tables: CloudOpticsTables,
    reference_band: int,
    carry: IceAccumulation,
    category: IceCategoryState
) -> IceAccumulation:
    """
    Add one ice category and track its marginal SW optical depth.

    Args:
        tables: Cloud optics lookup tables
        reference_band: SW band whose optical depth weights Dge
        carry: Totals after the previous categories
        category: Ice category to add (Dge already converted)

    Returns:
        Totals after this category
    """
    totals = add_ice_cloud_optics(
        tables, category.water_path, category.effective_size, carry.totals
    )
    # SW optical depth of this category alone
    tau_sw_category = totals.tau_sw - carry.tau_sw_snapshot
    tau_reference = tau_sw_category[..., reference_band]
    # Sizes of absent categories are arbitrary, including inf or NaN
    tau_dge = carry.tau_dge + jnp.where(
        tau_reference > 0.0, tau_reference * category.effective_size, 0.0
    )
    return IceAccumulation(
        totals=totals,
        tau_sw_snapshot=totals.tau_sw,
        tau_dge=tau_dge,
        total_water_path=carry.total_water_path + category.water_path,
    )


@jax.jit
def normalize_optics(
    totals: CloudOpticsAccumulator
) -> Tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray]:
    """
    Recover ssa, g and f from the accumulated products.

    Cells with zero tau (or tau*ssa) are left at zero.

    Returns:
        Tuple of (single_scatter_albedo, asymmetry_factor, forward_scattering_factor)
    """
    tau_ssa = totals.tau_ssa_sw
    has_scattering = tau_ssa > 0.0
    safe_tau_ssa = jnp.where(has_scattering, tau_ssa, 1.0)
    asm = jnp.where(has_scattering, totals.tau_ssa_g_sw / safe_tau_ssa, 0.0)
    forward = jnp.where(has_scattering, totals.tau_ssa_f_sw / safe_tau_ssa, 0.0)

    has_extinction = totals.tau_sw > 0.0
    safe_tau = jnp.where(has_extinction, totals.tau_sw, 1.0)
    ssa = jnp.where(has_extinction, tau_ssa / safe_tau, 0.0)
    return ssa, asm, forward


def ice_effective_radius(
    tau_dge: jnp.ndarray,
    tau_sw_ice: jnp.ndarray,
    fill: float
) -> jnp.ndarray:
    """
    Optical-depth weighted effective radius of all ice categories.

    Args:
        tau_dge: Sum over categories of reference-band tau * Dge [ncol, nlev]
        tau_sw_ice: Reference-band SW optical depth of all ice [ncol, nlev]
        fill: Value where there is no ice optical depth

    Returns:
        Effective radius (microns) [ncol, nlev]
    """
    has_ice = tau_sw_ice > 0.0
    dge = tau_dge / jnp.where(has_ice, tau_sw_ice, 1.0)
    return jnp.where(has_ice, effective_radius_from_dge(dge), fill)


def compute_cloud_optics(
    tables: CloudOpticsTables,
    liquid: LiquidCloudState,
    ice_categories: Sequence[IceCategoryState] = (),
    params: Optional[CloudOpticsParameters] = None
) -> CloudOpticsOutput:
    """
    Calculate total cloud optical properties for one latitude slice.

    Liquid is evaluated first, then the ice categories are added in the
    order given.

    Args:
        tables: Cloud optics lookup tables
        liquid: Liquid water path and droplet effective radius [ncol, nlev]
        ice_categories: Water path and size of each ice category [ncol, nlev]
        params: Cloud optics parameters

    Returns:
        Cloud optical properties

    Raises:
        InputBoundsError: If a particle size is outside the table range.
        TableBoundsError: If an interpolated ice property is unphysical.
    """
    if params is None:
        params = CloudOpticsParameters.default()

    liquid = LiquidCloudState(*(jnp.asarray(x) for x in liquid))
    shape = liquid.water_path.shape
    categories = []
    for n, category in enumerate(ice_categories):
        water_path, size = (jnp.asarray(x) for x in category)
        if water_path.shape != shape or size.shape != shape:
            raise ValueError(
                f"Ice category {n} has shape {water_path.shape}/{size.shape}, "
                f"expected {shape}"
            )
        if not params.reff_ice_holds_dge:
            size = dge_from_effective_radius(size)
        categories.append(IceCategoryState(water_path, size))

    totals = liquid_cloud_optics(tables, liquid.water_path, liquid.effective_radius)
    tau_sw_liquid = totals.tau_sw

    initial = IceAccumulation(
        totals=totals,
        tau_sw_snapshot=totals.tau_sw,
        tau_dge=jnp.zeros(shape),
        total_water_path=liquid.water_path,
    )
    step = functools.partial(accumulate_ice_category, tables, params.reference_band)
    final = functools.reduce(step, categories, initial)
    totals = final.totals

    tau_sw_ice = totals.tau_sw - tau_sw_liquid
    reff_ice = ice_effective_radius(
        final.tau_dge, tau_sw_ice[..., params.reference_band], params.reff_ice_fill
    )
    ssa, asm, forward = normalize_optics(totals)

    return CloudOpticsOutput(
        tau_lw=totals.tau_lw,
        tau_sw=totals.tau_sw,
        ssa_sw=ssa,
        asm_sw=asm,
        for_sw=forward,
        tau_sw_liquid=tau_sw_liquid,
        tau_sw_ice=tau_sw_ice,
        reff_ice=reff_ice,
        cloud_fraction=jnp.where(final.total_water_path > 0.0, 1.0, 0.0),
    )


def pad_levels(output: CloudOpticsOutput, n_levels: int, reff_ice_fill: float) -> CloudOpticsOutput:
    """Append cloud-free levels on top of every output field."""
    if n_levels == 0:
        return output

    def pad(x, value=0.0):
        widths = [(0, 0)] * x.ndim
        widths[1] = (0, n_levels)
        return jnp.pad(x, widths, constant_values=value)

    padded = jax.tree_util.tree_map(pad, output)
    return padded.copy(reff_ice=pad(output.reff_ice, reff_ice_fill))


def p3_cloud_optics(
    tables: CloudOpticsTables,
    layer_mass: jnp.ndarray,
    cloud_liquid_mixing_ratio: jnp.ndarray,
    reff_liquid: jnp.ndarray,
    ice_mixing_ratio: jnp.ndarray,
    reff_ice: jnp.ndarray,
    params: Optional[CloudOpticsParameters] = None
) -> CloudOpticsOutput:
    """
    Cloud optical properties from P3 microphysics state.

    Args:
        tables: Cloud optics lookup tables
        layer_mass: Mass of air per unit area in each layer (kg/m²) [ncol, nlev]
        cloud_liquid_mixing_ratio: Cloud liquid mass mixing ratio (kg/kg) [ncol, nlev]
        reff_liquid: Droplet effective radius (microns) [ncol, nlev]
        ice_mixing_ratio: Mass mixing ratio of each ice category (kg/kg) [ncat, ncol, nlev]
        reff_ice: Size of each ice category (microns) [ncat, ncol, nlev], Dge
            or effective radius depending on params.reff_ice_holds_dge
        params: Cloud optics parameters

    Returns:
        Cloud optical properties on nlev + params.n_pad_levels levels
    """
    if params is None:
        params = CloudOpticsParameters.default()

    ice_mixing_ratio = jnp.asarray(ice_mixing_ratio)
    reff_ice = jnp.asarray(reff_ice)
    if ice_mixing_ratio.shape != reff_ice.shape:
        raise ValueError(
            f"Shape mismatch: ice mixing ratio {ice_mixing_ratio.shape}, "
            f"ice size {reff_ice.shape}"
        )

    liquid = LiquidCloudState(
        water_path=water_path_from_mixing_ratio(cloud_liquid_mixing_ratio, layer_mass),
        effective_radius=jnp.asarray(reff_liquid),
    )
    ice_categories = [
        IceCategoryState(
            water_path=water_path_from_mixing_ratio(ice_mixing_ratio[n], layer_mass),
            effective_size=reff_ice[n],
        )
        for n in range(ice_mixing_ratio.shape[0])
    ]

    output = compute_cloud_optics(tables, liquid, ice_categories, params)
    log_optics_summary(output, liquid)
    return pad_levels(output, params.n_pad_levels, params.reff_ice_fill)


def log_optics_summary(output: CloudOpticsOutput, liquid: LiquidCloudState):
    """Log the largest band-summed optical depths and the liquid state there."""
    if not logging.level_debug():
        return
    for name, tau in (('tauSW', output.tau_sw), ('tauLW', output.tau_lw)):
        total = jnp.sum(tau, axis=-1)
        i, k = jnp.unravel_index(jnp.argmax(total), total.shape)
        logging.debug(
            'Max %s = %10.4f, rel at max %s = %10.4f, lwp at max %s = %10.4f',
            name, float(total[i, k]), name, float(liquid.effective_radius[i, k]),
            name, float(liquid.water_path[i, k]),
        )
