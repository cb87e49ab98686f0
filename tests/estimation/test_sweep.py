"""
Tests for parameter sweeps over profiles and operating points.
"""

import numpy as np
import pytest

from rvaccel.estimation import (
    DEFAULT_INSTRUCTION_MIX,
    SWEEPABLE_FIELDS,
    sweep_instruction_cycles,
    sweep_operating_points,
    sweep_parameter,
    sweep_table,
)
from rvaccel.hardware import ARTY_A7_100T, OperatingPoint, get_profile


@pytest.fixture
def arty():
    return get_profile("arty-a7", OperatingPoint.PERFORMANCE)


class TestSweepParameter:

    def test_clock_sweep_monotonic(self, arty):
        points = sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "riscv_clock_mhz",
                                 np.linspace(50, 200, 7))
        assert len(points) == 7
        latencies = [p.hw_latency_ms for p in points]
        speedups = [p.comparison.speedup for p in points]
        assert all(a > b for a, b in zip(latencies, latencies[1:]))
        assert all(a < b for a, b in zip(speedups, speedups[1:]))
        # the baseline is untouched
        assert len({p.sw_latency_ms for p in points}) == 1

    def test_points_carry_varied_profile(self, arty):
        points = sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "l1_cache_hit_rate", [0.5, 1.0])
        assert [p.profile.l1_cache_hit_rate for p in points] == [0.5, 1.0]
        assert points[0].parameter == "l1_cache_hit_rate"
        assert points[0].hw_latency_ms > points[1].hw_latency_ms

    def test_unknown_field(self, arty):
        with pytest.raises(ValueError, match="Cannot sweep"):
            sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "cycles_hw", [1])

    def test_invalid_value_rejected_by_profile(self, arty):
        with pytest.raises(ValueError):
            sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "l1_cache_hit_rate", [1.5])

    def test_empty_and_non_finite_values(self, arty):
        with pytest.raises(ValueError):
            sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "riscv_clock_mhz", [])
        with pytest.raises(ValueError):
            sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "riscv_clock_mhz", [100, np.inf])

    def test_sweepable_fields(self):
        assert "riscv_clock_mhz" in SWEEPABLE_FIELDS
        assert "name" not in SWEEPABLE_FIELDS
        assert "cycles_hw" not in SWEEPABLE_FIELDS


class TestSweepInstructionCycles:

    def test_slower_conv_lowers_speedup(self, arty):
        points = sweep_instruction_cycles(DEFAULT_INSTRUCTION_MIX, arty, "conv2d.3x3", [1, 4, 16])
        assert points[0].parameter == "cycles_hw[conv2d.3x3]"
        speedups = [p.comparison.speedup for p in points]
        assert speedups[0] > speedups[1] > speedups[2]
        assert points[2].profile.cycles_hw.lookup("conv2d.3x3") == 16
        # other entries unchanged
        assert points[2].profile.cycles_hw.lookup("mac") == arty.cycles_hw.lookup("mac")


class TestSweepOperatingPoints:

    def test_all_points(self):
        points = sweep_operating_points(DEFAULT_INSTRUCTION_MIX, ARTY_A7_100T)
        assert [p.value for p in points] == ["performance", "balanced", "low_power"]
        latencies = [p.hw_latency_ms for p in points]
        assert latencies == sorted(latencies)

    def test_subset(self):
        points = sweep_operating_points(DEFAULT_INSTRUCTION_MIX, ARTY_A7_100T,
                                        [OperatingPoint.LOW_POWER])
        assert len(points) == 1
        assert points[0].profile.name == "Low Power"


class TestSweepTable:

    def test_shape_and_values(self, arty):
        points = sweep_parameter(DEFAULT_INSTRUCTION_MIX, arty, "arm_clock_mhz", [250, 500])
        table = sweep_table(points)
        assert table.shape == (2, 6)
        assert table[0, 2] == pytest.approx(points[0].comparison.speedup)
        assert table[1, 1] == pytest.approx(points[1].sw_latency_ms)

    def test_empty(self):
        assert sweep_table([]).shape == (0, 6)
