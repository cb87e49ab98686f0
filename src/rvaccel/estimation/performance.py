"""
Cycle-Level Performance and Energy Model

Estimates latency and energy for a dynamic instruction mix on either the
accelerated custom RISC-V core or the software-only baseline core.

Cycle model:
    base cycles
        accelerated: sum(count x cycles_hw[mnemonic])
        baseline:    sum(count x SOFTWARE_EQUIVALENT_CYCLES[mnemonic])
    + cache penalty:  (lw + sw + flw + fsw) x (1 - hit_rate) x miss_penalty
    + branch penalty: beq x (1 - predictor_accuracy) x mispredict_penalty

Energy model:
    dynamic (pJ)
        accelerated: sum(count x cycles_hw x energy_per_cycle_hw[mnemonic])
        baseline:    base cycles x energy_per_cycle_sw
    static (mJ) = static power (mW) x latency (s)
    total (mJ)  = dynamic / 1e9 + static

Penalty cycles add latency (and hence static energy) but no dynamic
energy, unless include_dram_energy is set for the accelerated core.

Usage:
    from rvaccel.estimation import estimate, compare, DEFAULT_INSTRUCTION_MIX
    from rvaccel.hardware import get_profile

    profile = get_profile("pynq-z2", "balanced")
    result = compare(DEFAULT_INSTRUCTION_MIX, profile)
    result.speedup, result.energy_efficiency_gain
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from rvaccel.hardware import CostTable, DVFSProfile

from .mix import InstructionMix

logger = logging.getLogger(__name__)


# Cycles the baseline core spends emulating each NN extension in software.
# Everything else (FPU, integer, control) costs the default.
SOFTWARE_EQUIVALENT_CYCLES = CostTable({
    "mac": 5,
    "relu": 3,
    "conv2d.3x3": 40,
    "dwconv.3x3": 35,
    "maxpool.2x2": 10,
    "sigmoid": 20,
    "tanh": 20,
    "default": 2,
})

MEMORY_MNEMONICS = ("lw", "sw", "flw", "fsw")
BRANCH_MNEMONICS = ("beq",)

PJ_PER_MJ = 1e9


def safe_ratio(numerator: float, denominator: float) -> float:
    """
    numerator / denominator, never NaN.

    A zero denominator gives inf for a positive numerator and 0.0 otherwise.
    """
    if denominator == 0:
        return math.inf if numerator > 0 else 0.0
    return numerator / denominator


@dataclass(frozen=True)
class EstimateResult:
    """Latency, energy and cycle breakdown for one core."""
    accelerated: bool
    total_cycles: float
    latency_ms: float
    total_energy_mj: float

    # Breakdown
    base_cycles: float = 0.0
    cache_penalty_cycles: float = 0.0
    branch_penalty_cycles: float = 0.0
    dynamic_energy_mj: float = 0.0
    static_energy_mj: float = 0.0
    cache_misses: float = 0.0
    branch_mispredicts: float = 0.0

    @property
    def latency_s(self) -> float:
        return self.latency_ms / 1000.0

    @property
    def core_name(self) -> str:
        return "Hardware (Custom ISA)" if self.accelerated else "Software (ARM)"

    @property
    def average_power_mw(self) -> float:
        """Total energy over latency; 0.0 when latency is zero."""
        if self.latency_s == 0:
            return 0.0
        return self.total_energy_mj / self.latency_s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accelerated": self.accelerated,
            "total_cycles": self.total_cycles,
            "latency_ms": self.latency_ms,
            "total_energy_mj": self.total_energy_mj,
            "base_cycles": self.base_cycles,
            "cache_penalty_cycles": self.cache_penalty_cycles,
            "branch_penalty_cycles": self.branch_penalty_cycles,
            "dynamic_energy_mj": self.dynamic_energy_mj,
            "static_energy_mj": self.static_energy_mj,
            "cache_misses": self.cache_misses,
            "branch_mispredicts": self.branch_mispredicts,
        }


MixLike = Union[InstructionMix, Mapping[str, int]]


def _as_mix(mix: MixLike) -> InstructionMix:
    return mix if isinstance(mix, InstructionMix) else InstructionMix(mix)


def estimate(
    mix: MixLike,
    profile: DVFSProfile,
    accelerated: bool,
    include_dram_energy: bool = False,
) -> EstimateResult:
    """
    Estimate one core running ``mix`` at ``profile``.

    Args:
        mix: Dynamic instruction counts (mnemonic -> count)
        profile: Board operating point
        accelerated: True for the custom core, False for the baseline core
        include_dram_energy: Add cache-miss DRAM access energy to the
            accelerated core's dynamic energy

    Returns:
        EstimateResult with totals and breakdown
    """
    mix = _as_mix(mix)

    base_cycles = 0.0
    dynamic_pj = 0.0
    memory_accesses = 0
    branches = 0

    for mnemonic, count in mix.items():
        if count == 0:
            continue
        if accelerated:
            cycles = profile.cycles_hw.lookup(mnemonic)
            base_cycles += count * cycles
            dynamic_pj += count * cycles * profile.energy_per_cycle_hw.lookup(mnemonic)
        else:
            base_cycles += count * SOFTWARE_EQUIVALENT_CYCLES.lookup(mnemonic)

        if mnemonic in MEMORY_MNEMONICS:
            memory_accesses += count
        if mnemonic in BRANCH_MNEMONICS:
            branches += count

    if not accelerated:
        dynamic_pj = base_cycles * profile.energy_per_cycle_sw

    cache_misses = memory_accesses * (1.0 - profile.l1_cache_hit_rate)
    cache_penalty = cache_misses * profile.l1_miss_penalty_cycles
    mispredicts = branches * (1.0 - profile.branch_predictor_accuracy)
    branch_penalty = mispredicts * profile.branch_mispredict_penalty_cycles

    if accelerated and include_dram_energy:
        dynamic_pj += cache_misses * profile.dram_energy_per_access_pj

    total_cycles = base_cycles + cache_penalty + branch_penalty

    clock_mhz = profile.riscv_clock_mhz if accelerated else profile.arm_clock_mhz
    latency_ms = total_cycles / (clock_mhz * 1e6) * 1000.0

    static_mw = profile.static_power_hw_mw if accelerated else profile.static_power_sw_mw
    static_mj = static_mw * (latency_ms / 1000.0)
    dynamic_mj = dynamic_pj / PJ_PER_MJ

    return EstimateResult(
        accelerated=accelerated,
        total_cycles=total_cycles,
        latency_ms=latency_ms,
        total_energy_mj=dynamic_mj + static_mj,
        base_cycles=base_cycles,
        cache_penalty_cycles=cache_penalty,
        branch_penalty_cycles=branch_penalty,
        dynamic_energy_mj=dynamic_mj,
        static_energy_mj=static_mj,
        cache_misses=cache_misses,
        branch_mispredicts=mispredicts,
    )


@dataclass(frozen=True)
class ComparisonResult:
    """Accelerated vs. baseline estimates for the same mix and profile."""
    hw: EstimateResult
    sw: EstimateResult
    speedup: float
    energy_efficiency_gain: float
    hw_throughput_ops: float
    sw_throughput_ops: float
    total_operations: int
    profile_name: str = ""

    def to_dict(self) -> Dict:
        return {
            "profile": self.profile_name,
            "speedup": self.speedup,
            "energy_efficiency_gain": self.energy_efficiency_gain,
            "hw_throughput_ops": self.hw_throughput_ops,
            "sw_throughput_ops": self.sw_throughput_ops,
            "total_operations": self.total_operations,
            "hw": self.hw.to_dict(),
            "sw": self.sw.to_dict(),
        }


def throughput(total_operations: float, latency_ms: float) -> float:
    """Operations per second; 0.0 for zero latency."""
    latency_s = latency_ms / 1000.0
    if latency_s <= 0:
        return 0.0
    return total_operations / latency_s


def compare(
    mix: MixLike,
    profile: DVFSProfile,
    include_dram_energy: bool = False,
) -> ComparisonResult:
    """Estimate both cores and derive speedup, efficiency and throughput."""
    mix = _as_mix(mix)
    hw = estimate(mix, profile, accelerated=True, include_dram_energy=include_dram_energy)
    sw = estimate(mix, profile, accelerated=False)
    total = mix.total

    result = ComparisonResult(
        hw=hw,
        sw=sw,
        speedup=safe_ratio(sw.latency_ms, hw.latency_ms),
        energy_efficiency_gain=safe_ratio(sw.total_energy_mj, hw.total_energy_mj),
        hw_throughput_ops=throughput(total, hw.latency_ms),
        sw_throughput_ops=throughput(total, sw.latency_ms),
        total_operations=total,
        profile_name=profile.name,
    )
    logger.debug("%s: speedup %.2fx, efficiency %.2fx over %d ops",
                 profile.name, result.speedup, result.energy_efficiency_gain, total)
    return result
