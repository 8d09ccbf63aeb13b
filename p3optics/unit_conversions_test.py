"""
Unit tests for unit conversions

Date: 2025-01-10
"""

import jax.numpy as jnp
import numpy as np

from p3optics.unit_conversions import (
    dge_from_effective_radius, effective_radius_from_dge, water_path_from_mixing_ratio
)


def test_water_path_in_grams():
    """1 g/kg of condensate in a 100 hPa layer is ~1 kg/m² = 1000 g/m²"""
    layer_mass = jnp.array([1.0e4 / 9.81])
    wp = water_path_from_mixing_ratio(jnp.array([1.0e-3]), layer_mass)
    np.testing.assert_allclose(wp, 1.0e3 * 1.0e-3 * layer_mass)
    assert 1000.0 < wp[0] < 1025.0


def test_zero_mixing_ratio_gives_zero_path():
    wp = water_path_from_mixing_ratio(jnp.zeros((2, 3)), jnp.full((2, 3), 500.0))
    assert jnp.all(wp == 0.0)


def test_dge_conversion():
    reff = jnp.array([10.0, 30.0, 100.0])
    dge = dge_from_effective_radius(reff)
    np.testing.assert_allclose(dge, reff * 2.0 / np.sqrt(3.0))
    np.testing.assert_allclose(effective_radius_from_dge(dge), reff)
