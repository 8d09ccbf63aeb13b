import numpy as np
import pytest

from p3optics.constants import (
    N_LW_BANDS, N_SW_BANDS, N_SIZE_LIQ, N_SIZE_ICE,
    RADIUS_LIQ_LOWER, RADIUS_LIQ_SPACING, DGE_ICE_LOWER, DGE_ICE_SPACING
)
from p3optics.lookup_tables import RRTMGCloudTables, build_lookup_tables


def make_host_tables() -> RRTMGCloudTables:
    """Smooth, physically plausible stand-ins for the RRTMG cloud tables [nbands, nsize]"""
    radius = RADIUS_LIQ_LOWER + RADIUS_LIQ_SPACING * np.arange(N_SIZE_LIQ)
    dge = DGE_ICE_LOWER + DGE_ICE_SPACING * np.arange(N_SIZE_ICE)
    lw = np.arange(N_LW_BANDS)[:, np.newaxis]
    sw = np.arange(N_SW_BANDS)[:, np.newaxis]

    # tau = 3 LWP / (2 rho r) for large droplets
    ext_liq = 1.5 / radius * (1.0 + 0.02 * sw)
    abs_liq = 0.15 * np.sqrt(10.0 / radius) * (1.0 + 0.05 * lw)
    ssa_liq = 0.9999 - 0.004 * sw * (1.0 + radius / 60.0)
    asy_liq = 0.75 + 0.15 * radius / 60.0 - 0.005 * sw

    ext_ice = 3.0 / dge * (1.0 + 0.01 * sw)
    abs_ice = 0.8 / dge * (1.0 + 0.03 * lw)
    ssa_ice = 0.9995 - 0.01 * sw * (1.0 + dge / 140.0)
    asy_ice = 0.74 + 0.15 * dge / 140.0 + 0.003 * sw
    fdl_ice = 0.02 + 0.05 * dge / 140.0 + 0.0 * sw

    return RRTMGCloudTables(
        abs_liq=abs_liq, ext_liq=ext_liq, ssa_liq=ssa_liq, asy_liq=asy_liq,
        abs_ice=abs_ice, ext_ice=ext_ice, ssa_ice=ssa_ice, asy_ice=asy_ice,
        fdl_ice=fdl_ice,
    )


@pytest.fixture
def host_tables() -> RRTMGCloudTables:
    return make_host_tables()


@pytest.fixture
def tables(host_tables):
    return build_lookup_tables(host_tables)
