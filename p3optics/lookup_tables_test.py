"""
Unit tests for the cloud optics lookup tables

Date: 2025-01-10
"""

import threading

import numpy as np
import pytest
import xarray as xr

from p3optics.constants import N_LW_BANDS, N_SW_BANDS, N_SIZE_LIQ, N_SIZE_ICE
from p3optics.lookup_tables import (
    NC_VARIABLES, TableStore, build_lookup_tables, from_dataset, from_nc_file
)


def _to_dataset(host_tables):
    data_vars = {}
    for name, variable in NC_VARIABLES.items():
        table = getattr(host_tables, name)
        band = 'lw_band' if table.shape[0] == N_LW_BANDS else 'sw_band'
        size = 'radius_liq' if table.shape[1] == N_SIZE_LIQ else 'dge_ice'
        data_vars[variable] = ((band, size), table)
    return xr.Dataset(data_vars)


class TestBuildLookupTables:

    def test_tables_are_band_contiguous(self, host_tables):
        tables = build_lookup_tables(host_tables)

        assert tables.abs_liq.shape == (N_SIZE_LIQ, N_LW_BANDS)
        assert tables.ext_liq.shape == (N_SIZE_LIQ, N_SW_BANDS)
        assert tables.abs_ice.shape == (N_SIZE_ICE, N_LW_BANDS)
        assert tables.fdl_ice.shape == (N_SIZE_ICE, N_SW_BANDS)
        np.testing.assert_array_equal(tables.ssa_ice, host_tables.ssa_ice.T)
        np.testing.assert_array_equal(tables.asy_liq, host_tables.asy_liq.T)

    def test_wrong_shape_rejected(self, host_tables):
        bad = host_tables._replace(ext_ice=host_tables.ext_ice.T)
        with pytest.raises(ValueError, match="ext_ice"):
            build_lookup_tables(bad)


class TestTableStore:

    def test_initialize_is_idempotent(self, host_tables):
        store = TableStore(host_tables)
        assert not store.initialized

        first = store.initialize()
        second = store.initialize()

        assert store.initialized
        assert first is second

    def test_initialize_releases_host_tables(self, host_tables):
        store = TableStore(host_tables)

        tables = store.initialize()

        assert store._host_tables is None
        assert store.initialize() is tables
        np.testing.assert_array_equal(tables.ext_ice, np.asarray(host_tables.ext_ice).T)

    def test_initialize_from_many_threads(self, host_tables):
        store = TableStore(host_tables)
        results = []

        def worker():
            results.append(store.initialize())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(result is results[0] for result in results)


class TestNetCDF:

    def test_from_dataset(self, host_tables):
        loaded = from_dataset(_to_dataset(host_tables))
        for name in NC_VARIABLES:
            np.testing.assert_array_equal(getattr(loaded, name), getattr(host_tables, name))

    def test_from_nc_file(self, host_tables, tmp_path):
        path = tmp_path / 'cloud_tables.nc'
        _to_dataset(host_tables).to_netcdf(path)

        loaded = from_nc_file(str(path))
        tables = build_lookup_tables(loaded)

        np.testing.assert_allclose(tables.ext_liq, host_tables.ext_liq.T)
        np.testing.assert_allclose(tables.fdl_ice, host_tables.fdl_ice.T)
