"""
Parameter Sweeps

Re-run the comparison while varying one knob: a profile field (clock,
penalty, hit rate, ...), one instruction's accelerated cycle count, or the
board's operating point.

Usage:
    import numpy as np
    from rvaccel.estimation import sweep_parameter, DEFAULT_INSTRUCTION_MIX
    from rvaccel.hardware import get_profile

    profile = get_profile("arty-a7")
    points = sweep_parameter(DEFAULT_INSTRUCTION_MIX, profile,
                             "riscv_clock_mhz", np.linspace(50, 200, 7))
    [p.comparison.speedup for p in points]
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from rvaccel.hardware import Board, DVFSProfile, Mnemonic, OperatingPoint, PROFILE_FIELDS

from .mix import InstructionMix
from .performance import ComparisonResult, MixLike, compare

# Scalar profile fields a sweep may vary
SWEEPABLE_FIELDS = tuple(
    f for f in PROFILE_FIELDS
    if f not in ("name", "energy_per_cycle_hw", "cycles_hw")
)


@dataclass(frozen=True)
class SweepPoint:
    """One sweep sample: the varied parameter, its value and the comparison."""
    parameter: str
    value: Union[float, str]
    profile: DVFSProfile
    comparison: ComparisonResult

    @property
    def hw_latency_ms(self) -> float:
        return self.comparison.hw.latency_ms

    @property
    def sw_latency_ms(self) -> float:
        return self.comparison.sw.latency_ms


def _values(values: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    array = np.asarray(values, dtype=float).ravel()
    if array.size == 0:
        raise ValueError("Sweep needs at least one value")
    if not np.all(np.isfinite(array)):
        raise ValueError("Sweep values must be finite")
    return array


def sweep_parameter(
    mix: MixLike,
    profile: DVFSProfile,
    field: str,
    values: Union[Sequence[float], np.ndarray],
    include_dram_energy: bool = False,
) -> List[SweepPoint]:
    """
    Compare both cores for each value of one scalar profile field.

    Raises:
        ValueError: for an unknown field, or a value the profile rejects
    """
    if field not in SWEEPABLE_FIELDS:
        raise ValueError(f"Cannot sweep {field!r} (sweepable: {', '.join(SWEEPABLE_FIELDS)})")

    points = []
    for value in _values(values):
        varied = profile.with_changes(**{field: float(value)})
        points.append(SweepPoint(
            parameter=field,
            value=float(value),
            profile=varied,
            comparison=compare(mix, varied, include_dram_energy=include_dram_energy),
        ))
    return points


def sweep_instruction_cycles(
    mix: MixLike,
    profile: DVFSProfile,
    mnemonic: Union[str, Mnemonic],
    values: Union[Sequence[float], np.ndarray],
) -> List[SweepPoint]:
    """Vary one instruction's accelerated cycle count, holding everything else."""
    name = mnemonic.value if isinstance(mnemonic, Mnemonic) else str(mnemonic).lower()
    points = []
    for value in _values(values):
        varied = profile.with_changes(cycles_hw=profile.cycles_hw.with_entry(name, float(value)))
        points.append(SweepPoint(
            parameter=f"cycles_hw[{name}]",
            value=float(value),
            profile=varied,
            comparison=compare(mix, varied),
        ))
    return points


def sweep_operating_points(
    mix: MixLike,
    board: Board,
    points: Optional[Iterable[OperatingPoint]] = None,
) -> List[SweepPoint]:
    """Compare both cores at each of the board's operating points."""
    if points is None:
        points = board.operating_points
    mix = mix if isinstance(mix, InstructionMix) else InstructionMix(mix)

    results = []
    for point in points:
        profile = board.profile(point)
        results.append(SweepPoint(
            parameter="operating_point",
            value=point.value,
            profile=profile,
            comparison=compare(mix, profile),
        ))
    return results


def sweep_table(points: List[SweepPoint]) -> np.ndarray:
    """
    Numeric summary, one row per point:
    [hw_latency_ms, sw_latency_ms, speedup, hw_energy_mj, sw_energy_mj, efficiency]
    """
    return np.array([
        [
            p.comparison.hw.latency_ms,
            p.comparison.sw.latency_ms,
            p.comparison.speedup,
            p.comparison.hw.total_energy_mj,
            p.comparison.sw.total_energy_mj,
            p.comparison.energy_efficiency_gain,
        ]
        for p in points
    ], dtype=float).reshape(len(points), 6)
