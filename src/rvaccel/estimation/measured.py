"""
Measured Board Results

A benchmark run on a physical board reports latency and energy for both
cores. MeasuredResult holds that payload so it can be shown next to the
model's projection; compare_to_model() gives the relative deviation of the
model from the measurement for each metric.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from rvaccel.documents import load_document

from .performance import ComparisonResult, safe_ratio

logger = logging.getLogger(__name__)


_REQUIRED_KEYS = ("hw_latency_ms", "sw_latency_ms", "hw_energy_mj", "sw_energy_mj")


@dataclass(frozen=True)
class MeasuredResult:
    """Latency/energy measured on hardware for one workload."""
    hw_latency_ms: float
    sw_latency_ms: float
    hw_energy_mj: float
    sw_energy_mj: float
    speedup: float
    energy_efficiency: float
    hw_power_w: List[float] = field(default_factory=list)

    def __post_init__(self):
        for name in _REQUIRED_KEYS:
            value = getattr(self, name)
            if math.isnan(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative number, got {value!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MeasuredResult':
        """
        Parse a board result payload.

        ``speedup`` and ``energy_efficiency`` are derived when absent.
        Raises ValueError for missing or non-numeric fields.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Measured result must be a mapping, got {type(data).__name__}")
        missing = [k for k in _REQUIRED_KEYS if k not in data]
        if missing:
            raise ValueError(f"Measured result is missing field(s): {', '.join(missing)}")

        values = {}
        for key in _REQUIRED_KEYS:
            values[key] = _number(key, data[key])

        speedup = data.get("speedup")
        if speedup is None:
            speedup = safe_ratio(values["sw_latency_ms"], values["hw_latency_ms"])
        efficiency = data.get("energy_efficiency")
        if efficiency is None:
            efficiency = safe_ratio(values["sw_energy_mj"], values["hw_energy_mj"])

        power = data.get("hw_power_w") or []
        if not isinstance(power, (list, tuple)):
            raise ValueError("hw_power_w must be a list of samples")

        return cls(
            speedup=_number("speedup", speedup),
            energy_efficiency=_number("energy_efficiency", efficiency),
            hw_power_w=[_number("hw_power_w", p) for p in power],
            **values,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'MeasuredResult':
        return cls.from_dict(load_document(path))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hw_latency_ms": self.hw_latency_ms,
            "sw_latency_ms": self.sw_latency_ms,
            "hw_energy_mj": self.hw_energy_mj,
            "sw_energy_mj": self.sw_energy_mj,
            "speedup": self.speedup,
            "energy_efficiency": self.energy_efficiency,
            "hw_power_w": list(self.hw_power_w),
        }

    @property
    def mean_hw_power_w(self) -> float:
        if not self.hw_power_w:
            return 0.0
        return sum(self.hw_power_w) / len(self.hw_power_w)


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")


def relative_error(modelled: float, measured: float) -> float:
    """(modelled - measured) / measured; inf when only the measurement is zero."""
    if measured == 0:
        return 0.0 if modelled == 0 else math.inf
    return (modelled - measured) / measured


def compare_to_model(measured: MeasuredResult, model: ComparisonResult) -> Dict[str, float]:
    """
    Relative deviation of the model from the measurement, per metric.

    Positive values mean the model over-estimates.
    """
    deviations = {
        "hw_latency_ms": relative_error(model.hw.latency_ms, measured.hw_latency_ms),
        "sw_latency_ms": relative_error(model.sw.latency_ms, measured.sw_latency_ms),
        "hw_energy_mj": relative_error(model.hw.total_energy_mj, measured.hw_energy_mj),
        "sw_energy_mj": relative_error(model.sw.total_energy_mj, measured.sw_energy_mj),
        "speedup": relative_error(model.speedup, measured.speedup),
        "energy_efficiency": relative_error(model.energy_efficiency_gain, measured.energy_efficiency),
    }
    worst = max(deviations, key=lambda k: abs(deviations[k]))
    logger.info("Model vs. measured: largest deviation %s %+.1f%%", worst, deviations[worst] * 100)
    return deviations
