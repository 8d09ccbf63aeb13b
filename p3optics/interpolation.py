"""
Piecewise-linear interpolation in the size-indexed lookup tables

Table bins are numbered from 1 as in RRTMG; bin k sits at size
lower + (k - 1) * spacing. Tables are stored [nsize, nbands] so that a
lookup gathers a contiguous band vector per cell.
"""

import jax.numpy as jnp
from typing import Tuple


def table_position(size: jnp.ndarray, lower: float, spacing: float) -> jnp.ndarray:
    """Fractional 1-based bin position of size in a table starting at lower"""
    return (size - (lower - spacing)) / spacing


def table_index(position: jnp.ndarray, n_size: int) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Lower bin and interpolation weight for a fractional bin position.

    Args:
        position: Fractional 1-based bin position
        n_size: Number of bins in the table

    Returns:
        Tuple of (index in [1, n_size-1], weight of the upper bin in [0, 1])
    """
    idx = jnp.clip(jnp.floor(position), 1, n_size - 1).astype(jnp.int32)
    frac = jnp.clip(position - idx, 0.0, 1.0)
    return idx, frac


def interpolate(table: jnp.ndarray, idx: jnp.ndarray, frac: jnp.ndarray) -> jnp.ndarray:
    """
    (1 - frac) * table[idx] + frac * table[idx + 1] for every band.

    Args:
        table: Lookup table [nsize, nbands]
        idx: 1-based lower bin [...]
        frac: Weight of the upper bin [...]

    Returns:
        Interpolated values [..., nbands]
    """
    frac = frac[..., jnp.newaxis]
    return (1.0 - frac) * table[idx - 1] + frac * table[idx]
