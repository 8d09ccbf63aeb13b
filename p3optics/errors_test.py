import jax.numpy as jnp
import pytest

from p3optics.errors import (
    BoundsViolation, CloudOpticsError, InputBoundsError, TableBoundsError,
    ViolationKind, locate, raise_violation
)


def test_locate_smallest_and_largest():
    values = jnp.array([[3.0, 1.0], [0.5, 7.0]])
    mask = jnp.array([[True, True], [False, True]])
    assert locate(mask, values) == (0, 1)
    assert locate(mask, values, largest=True) == (1, 1)


def test_raise_violation_carries_payload():
    values = jnp.array([[4.0, 2.0]])
    water_path = jnp.array([[1.5, 3.0]])

    with pytest.raises(InputBoundsError) as excinfo:
        raise_violation(InputBoundsError, ViolationKind.ICE_SIZE_TOO_SMALL, values, (0, 1), water_path)

    error = excinfo.value
    assert isinstance(error, CloudOpticsError)
    assert isinstance(error, ValueError)
    assert error.violation == BoundsViolation(ViolationKind.ICE_SIZE_TOO_SMALL, 2.0, 3.0, (0, 1))
    assert "water path = 3" in str(error)


def test_table_violation_without_water_path():
    violation = BoundsViolation(ViolationKind.SSA_OUT_OF_RANGE, 1.2, None, (0, 0, 4))
    error = TableBoundsError(violation)
    assert error.kind is ViolationKind.SSA_OUT_OF_RANGE
    assert "water path" not in str(error)


def test_locate_reports_flagged_nan():
    values = jnp.array([[3.0, jnp.nan, -5.0, jnp.nan]])
    mask = jnp.array([[True, True, True, False]])
    assert locate(mask, values) == (0, 1)
    assert locate(mask, values, largest=True) == (0, 1)


def test_locate_when_flagged_values_equal_fill():
    values = jnp.array([[jnp.inf, 1.0, jnp.inf]])
    mask = jnp.array([[False, False, True]])
    assert locate(mask, values) == (0, 2)
