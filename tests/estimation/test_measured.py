"""
Tests for measured board results and model deviation.
"""

import json
import math

import pytest

from rvaccel.estimation import (
    DEFAULT_INSTRUCTION_MIX,
    MeasuredResult,
    compare,
    compare_to_model,
    relative_error,
)
from rvaccel.hardware import get_profile


PAYLOAD = {
    "hw_latency_ms": 10.0,
    "sw_latency_ms": 40.0,
    "hw_energy_mj": 2.0,
    "sw_energy_mj": 12.0,
    "hw_power_w": [0.2, 0.3, 0.25],
}


class TestMeasuredResult:

    def test_derived_ratios(self):
        result = MeasuredResult.from_dict(PAYLOAD)
        assert result.speedup == 4.0
        assert result.energy_efficiency == 6.0
        assert result.mean_hw_power_w == pytest.approx(0.25)

    def test_explicit_ratios_kept(self):
        result = MeasuredResult.from_dict(dict(PAYLOAD, speedup=3.5))
        assert result.speedup == 3.5

    def test_zero_hw_latency(self):
        result = MeasuredResult.from_dict(dict(PAYLOAD, hw_latency_ms=0))
        assert result.speedup == math.inf

    def test_missing_field(self):
        data = dict(PAYLOAD)
        del data["sw_energy_mj"]
        with pytest.raises(ValueError, match="sw_energy_mj"):
            MeasuredResult.from_dict(data)

    def test_non_numeric(self):
        with pytest.raises(ValueError, match="hw_latency_ms"):
            MeasuredResult.from_dict(dict(PAYLOAD, hw_latency_ms="fast"))
        with pytest.raises(ValueError):
            MeasuredResult.from_dict(dict(PAYLOAD, hw_power_w="lots"))

    def test_negative(self):
        with pytest.raises(ValueError):
            MeasuredResult.from_dict(dict(PAYLOAD, sw_latency_ms=-1))

    def test_from_file(self, tmp_path):
        path = tmp_path / "result.json"
        path.write_text(json.dumps(PAYLOAD))
        result = MeasuredResult.from_file(path)
        assert MeasuredResult.from_dict(result.to_dict()) == result

    def test_no_power_samples(self):
        data = {k: v for k, v in PAYLOAD.items() if k != "hw_power_w"}
        assert MeasuredResult.from_dict(data).mean_hw_power_w == 0.0


class TestCompareToModel:

    def test_relative_error(self):
        assert relative_error(11, 10) == pytest.approx(0.1)
        assert relative_error(9, 10) == pytest.approx(-0.1)
        assert relative_error(0, 0) == 0.0
        assert relative_error(1, 0) == math.inf

    def test_perfect_model(self):
        model = compare(DEFAULT_INSTRUCTION_MIX, get_profile("pynq-z2"))
        measured = MeasuredResult(
            hw_latency_ms=model.hw.latency_ms,
            sw_latency_ms=model.sw.latency_ms,
            hw_energy_mj=model.hw.total_energy_mj,
            sw_energy_mj=model.sw.total_energy_mj,
            speedup=model.speedup,
            energy_efficiency=model.energy_efficiency_gain,
        )
        deviations = compare_to_model(measured, model)
        assert set(deviations) == {
            "hw_latency_ms", "sw_latency_ms", "hw_energy_mj",
            "sw_energy_mj", "speedup", "energy_efficiency",
        }
        assert all(v == pytest.approx(0.0) for v in deviations.values())

    def test_overestimate_is_positive(self):
        model = compare(DEFAULT_INSTRUCTION_MIX, get_profile("pynq-z2"))
        measured = MeasuredResult.from_dict({
            "hw_latency_ms": model.hw.latency_ms / 2,
            "sw_latency_ms": model.sw.latency_ms,
            "hw_energy_mj": model.hw.total_energy_mj,
            "sw_energy_mj": model.sw.total_energy_mj,
        })
        deviations = compare_to_model(measured, model)
        assert deviations["hw_latency_ms"] == pytest.approx(1.0)
        assert deviations["speedup"] == pytest.approx(-0.5)
