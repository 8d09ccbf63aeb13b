"""
Unit conversions between P3 microphysics output and cloud optics input

P3 provides mass mixing ratios (kg/kg) and particle sizes; the lookup
tables expect water paths in g/m² and, for ice, the generalized
effective size Dge.

Date: 2025-01-10
"""

import jax.numpy as jnp

from .constants import DGE_OVER_REFF, GRAMS_PER_KG


def water_path_from_mixing_ratio(
    mixing_ratio: jnp.ndarray,
    layer_mass: jnp.ndarray
) -> jnp.ndarray:
    """
    Convert a condensate mass mixing ratio to a layer water path.

    Args:
        mixing_ratio: Condensate mass mixing ratio (kg/kg)
        layer_mass: Mass of air per unit area in the layer (kg/m²)

    Returns:
        Water path (g/m²)
    """
    return GRAMS_PER_KG * mixing_ratio * layer_mass


def dge_from_effective_radius(effective_radius: jnp.ndarray) -> jnp.ndarray:
    """Generalized effective size of ice from its effective radius (Fu 1996, eqn 10)"""
    return effective_radius * DGE_OVER_REFF


def effective_radius_from_dge(dge: jnp.ndarray) -> jnp.ndarray:
    """Inverse of dge_from_effective_radius"""
    return dge / DGE_OVER_REFF
