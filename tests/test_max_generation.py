"""Tests for engine/max_generation.py — deliverable power per joint state."""

from __future__ import annotations

import numpy as np
import pytest

from outage_simulator.engine.max_generation import maximum_generation


@pytest.fixture
def table() -> np.ndarray:
    return maximum_generation(
        battery_size_kw=100,
        h2_fuelcell_size_kw=100,
        generator_size_kw=[50, 125],
        battery_bin_size=50,
        battery_num_bins=5,
        h2_bin_size=400,
        h2_num_bins=3,
        num_generators=[2, 1],
        battery_discharge_efficiency=0.98,
        h2_discharge_efficiency=0.9,
    )


def test_shape(table):
    # (2+1)(1+1) generator states × 5 battery bins × 3 H2 bins
    assert table.shape == (6, 5, 3)


def test_battery_limited_by_inverter(table):
    # no generators, empty H2: min(100, (b−1) × 50 × 0.98)
    np.testing.assert_allclose(table[0, :, 0], [0, 49, 98, 100, 100])


def test_hydrogen_limited_by_fuel_cell(table):
    # no generators, empty battery: min(100, (h−1) × 400 × 0.9)
    np.testing.assert_allclose(table[0, 0, :], [0, 100, 100])


def test_full_system(table):
    # 2 × 50 + 125 + 100 + 100
    assert table[5, 4, 2] == pytest.approx(425)


def test_generator_only_table():
    table = maximum_generation(0, 0, [1.0], 0.0, 1, 0.0, 1, [2], 1.0, 1.0)
    np.testing.assert_array_equal(table[:, 0, 0], [0, 1, 2])
