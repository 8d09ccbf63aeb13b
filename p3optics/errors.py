"""
Bounds violations raised by the cloud optics engines

An out-of-range input size or an unphysical interpolated table value
means the upstream state is corrupted. The engines never correct such
values: they raise a CloudOpticsError carrying a BoundsViolation record
and leave it to the caller whether to abort the run.
"""

import enum
from typing import NamedTuple, Optional, Tuple

import jax.numpy as jnp
import numpy as np
from absl import logging


class ViolationKind(enum.Enum):
    """Kinds of bounds violations"""
    # Input-bounds violations
    LIQUID_RADIUS_TOO_SMALL = 'liquid effective radius smaller than limit of 2.5 microns'
    LIQUID_RADIUS_TOO_LARGE = 'liquid effective radius larger than limit of 60 microns'
    ICE_SIZE_TOO_SMALL = 'ice generalized effective size smaller than limit of 5 microns'
    ICE_SIZE_NOT_VALID = 'ice generalized effective size negative or not finite'
    # Table/arithmetic-bounds violations
    FDELTA_OUT_OF_RANGE = 'ice forward-scattering delta outside [0, 1]'
    NEGATIVE_EXTINCTION = 'ice extinction less than 0'
    SSA_OUT_OF_RANGE = 'ice single-scattering albedo outside [0, 1]'
    ASYMMETRY_OUT_OF_RANGE = 'ice asymmetry parameter outside [0, 1]'


class BoundsViolation(NamedTuple):
    """Diagnostic payload of a bounds violation"""

    kind: ViolationKind
    value: float                      # Offending value
    water_path: Optional[float]       # Water path of the offending cell (g/m²)
    location: Tuple[int, ...]         # Index of the offending cell (column, level[, band])

    def describe(self) -> str:
        text = f"{self.kind.value}: value = {self.value:g} at {self.location}"
        if self.water_path is not None:
            text += f", water path = {self.water_path:g} g/m²"
        return text


class CloudOpticsError(ValueError):
    """Base class for cloud optics bounds violations"""

    def __init__(self, violation: BoundsViolation):
        self.violation = violation
        super().__init__(violation.describe())

    @property
    def kind(self) -> ViolationKind:
        return self.violation.kind


class InputBoundsError(CloudOpticsError):
    """Particle size from microphysics outside the range the tables support"""


class TableBoundsError(CloudOpticsError):
    """Interpolated table value outside its physical range"""


def locate(mask: jnp.ndarray, values: jnp.ndarray, largest: bool = False) -> Tuple[int, ...]:
    """
    Index of the extreme value among the flagged cells.

    NaN ranks beyond every number, so a flagged NaN is always reported.

    Args:
        mask: Flagged cells
        values: Values to rank, same shape as mask
        largest: Pick the largest flagged value instead of the smallest

    Returns:
        Index tuple into mask
    """
    fill = -jnp.inf if largest else jnp.inf
    ranked = jnp.where(jnp.isnan(values), -fill, values)
    candidates = jnp.where(mask, ranked, fill)
    extreme = jnp.max(candidates) if largest else jnp.min(candidates)
    # First flagged cell holding the extreme, even when it equals the fill
    flat = jnp.argmax(mask & (ranked == extreme))
    return tuple(int(i) for i in np.unravel_index(int(flat), mask.shape))


def raise_violation(
    error_cls: type,
    kind: ViolationKind,
    values: jnp.ndarray,
    location: Tuple[int, ...],
    water_path: Optional[jnp.ndarray] = None
):
    """Log a bounds violation and raise it as error_cls"""
    violation = BoundsViolation(
        kind=kind,
        value=float(values[location]),
        water_path=None if water_path is None else float(water_path[location[:2]]),
        location=location,
    )
    logging.error('Error in P3 cloud optics: %s', violation.describe())
    raise error_cls(violation)
