"""
Unit tests for lookup table interpolation

Date: 2025-01-10
"""

import jax.numpy as jnp
import numpy as np

from p3optics.constants import (
    N_SIZE_LIQ, N_SIZE_ICE, RADIUS_LIQ_LOWER, RADIUS_LIQ_SPACING,
    DGE_ICE_LOWER, DGE_ICE_SPACING
)
from p3optics.interpolation import interpolate, table_index, table_position


def test_liquid_position_matches_rrtmg_indexing():
    """Liquid position is radius - 1.5"""
    radius = jnp.array([2.51, 10.0, 33.3, 59.99])
    position = table_position(radius, RADIUS_LIQ_LOWER, RADIUS_LIQ_SPACING)
    assert jnp.allclose(position, radius - 1.5)


def test_ice_position_matches_rrtmg_indexing():
    """Ice position is (Dge - 2) / 3"""
    dge = jnp.array([5.0, 10.0, 140.0, 200.0])
    position = table_position(dge, DGE_ICE_LOWER, DGE_ICE_SPACING)
    assert jnp.allclose(position, (dge - 2.0) / 3.0)


def test_table_index_interior():
    idx, frac = table_index(jnp.array([8.5, 2.0]), N_SIZE_LIQ)
    assert idx.tolist() == [8, 2]
    assert jnp.allclose(frac, jnp.array([0.5, 0.0]))


def test_table_index_clamped_at_both_ends():
    """Positions outside the table clamp to the edge bins"""
    idx, frac = table_index(jnp.array([-3.0, 0.5, 66.0, 1.0e6]), N_SIZE_ICE)
    assert idx.tolist() == [1, 1, N_SIZE_ICE - 1, N_SIZE_ICE - 1]
    assert jnp.allclose(frac, jnp.array([0.0, 0.0, 1.0, 1.0]))


def test_interpolate_between_bins():
    table = jnp.array([[0.0, 10.0], [1.0, 20.0], [3.0, 40.0]])  # [nsize=3, nbands=2]
    idx = jnp.array([[1, 2]])
    frac = jnp.array([[0.25, 1.0]])

    values = interpolate(table, idx, frac)

    assert values.shape == (1, 2, 2)
    np.testing.assert_allclose(values[0, 0], [0.25, 12.5])
    np.testing.assert_allclose(values[0, 1], [3.0, 40.0])


def test_interpolate_at_bin_returns_table_value():
    table = jnp.arange(12.0).reshape(4, 3)
    values = interpolate(table, jnp.array([3]), jnp.array([0.0]))
    np.testing.assert_allclose(values[0], table[2])
