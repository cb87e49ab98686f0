"""
Text Formatting for Reports

Human-readable numbers and tables for the CLI tools: instruction counts,
throughput, energy, the accelerated-vs-baseline comparison table and a
snapshot of the pipeline state.
"""

import math
from typing import List, Optional

from rvaccel.estimation import ComparisonResult, InstructionMix, SweepPoint
from rvaccel.pipeline import HazardReport, SimulationState, Stage, classify_hazard


# Column width for formatted tables
COL_WIDTH = 22


def format_count(value: float) -> str:
    """1234567 -> '1.2M'. Values below 1000 are shown as-is."""
    if value >= 1e9:
        return f"{value / 1e9:.1f}B"
    if value >= 1e6:
        return f"{value / 1e6:.1f}M"
    if value >= 1e3:
        return f"{value / 1e3:.1f}K"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_throughput(ops_per_second: float) -> str:
    """Auto-scale to GOPS/MOPS/KOPS with two decimals."""
    if math.isinf(ops_per_second):
        return "inf OPS"
    if ops_per_second >= 1e9:
        return f"{ops_per_second / 1e9:.2f} GOPS"
    if ops_per_second >= 1e6:
        return f"{ops_per_second / 1e6:.2f} MOPS"
    if ops_per_second >= 1e3:
        return f"{ops_per_second / 1e3:.2f} KOPS"
    return f"{ops_per_second:.0f} OPS"


def format_energy_mj(energy_mj: float) -> str:
    """Energy with an appropriate unit (J, mJ or uJ)."""
    if energy_mj >= 1000:
        return f"{energy_mj / 1000:.3f} J"
    if energy_mj >= 1 or energy_mj == 0:
        return f"{energy_mj:.3f} mJ"
    return f"{energy_mj * 1000:.3f} uJ"


def format_ratio(value: float) -> str:
    if math.isinf(value):
        return "inf"
    return f"{value:.2f}x"


def format_comparison_table(result: ComparisonResult, title: Optional[str] = None) -> str:
    """Side-by-side table of the baseline and accelerated estimates."""
    hw, sw = result.hw, result.sw
    lines = []
    lines.append("=" * (20 + 2 * COL_WIDTH))
    lines.append(title or f"Performance & Energy Projection ({result.profile_name})")
    lines.append("=" * (20 + 2 * COL_WIDTH))
    lines.append(f"{'Metric':<20}{sw.core_name:>{COL_WIDTH}}{hw.core_name:>{COL_WIDTH}}")
    lines.append("-" * (20 + 2 * COL_WIDTH))

    rows = [
        ("Total cycles", format_count(sw.total_cycles), format_count(hw.total_cycles)),
        ("  base", format_count(sw.base_cycles), format_count(hw.base_cycles)),
        ("  cache penalty", format_count(sw.cache_penalty_cycles), format_count(hw.cache_penalty_cycles)),
        ("  branch penalty", format_count(sw.branch_penalty_cycles), format_count(hw.branch_penalty_cycles)),
        ("Latency", f"{sw.latency_ms:.3f} ms", f"{hw.latency_ms:.3f} ms"),
        ("Energy", format_energy_mj(sw.total_energy_mj), format_energy_mj(hw.total_energy_mj)),
        ("  dynamic", format_energy_mj(sw.dynamic_energy_mj), format_energy_mj(hw.dynamic_energy_mj)),
        ("  static", format_energy_mj(sw.static_energy_mj), format_energy_mj(hw.static_energy_mj)),
        ("Throughput", format_throughput(result.sw_throughput_ops), format_throughput(result.hw_throughput_ops)),
    ]
    for label, sw_text, hw_text in rows:
        lines.append(f"{label:<20}{sw_text:>{COL_WIDTH}}{hw_text:>{COL_WIDTH}}")

    lines.append("-" * (20 + 2 * COL_WIDTH))
    lines.append(f"Speedup:            {format_ratio(result.speedup)}")
    lines.append(f"Energy efficiency:  {format_ratio(result.energy_efficiency_gain)}")
    lines.append(f"Operations:         {format_count(result.total_operations)}")
    return "\n".join(lines)


def format_mix_table(mix: InstructionMix) -> str:
    """Non-zero mix entries grouped by category totals."""
    lines = [f"{'Category':<20}{'Count':>12}"]
    for category, total in mix.category_totals().items():
        lines.append(f"{category:<20}{format_count(total):>12}")
    lines.append(f"{'Total':<20}{format_count(mix.total):>12}")
    return "\n".join(lines)


def format_sweep_table(points: List[SweepPoint], title: str = "Parameter Sweep") -> str:
    if not points:
        return f"{title}: (no points)"
    lines = [title, "=" * 80]
    header = (f"{points[0].parameter:<24}{'HW latency':>14}{'SW latency':>14}"
              f"{'Speedup':>12}{'Efficiency':>14}")
    lines.append(header)
    lines.append("-" * len(header))
    for p in points:
        value = p.value if isinstance(p.value, str) else f"{p.value:g}"
        lines.append(
            f"{value:<24}{p.hw_latency_ms:>11.3f} ms{p.sw_latency_ms:>11.3f} ms"
            f"{format_ratio(p.comparison.speedup):>12}"
            f"{format_ratio(p.comparison.energy_efficiency_gain):>14}"
        )
    return "\n".join(lines)


def format_pipeline_state(
    state: SimulationState,
    hazard: Optional[HazardReport] = None,
    show_registers: bool = True,
) -> str:
    """Stage contents, hazard status and (non-zero) registers for one cycle."""
    if hazard is None:
        hazard = classify_hazard(state)

    lines = [f"Cycle {state.cycle}  (pc={state.pc})"]
    for stage in Stage:
        latch = state.stage(stage)
        marker = ""
        if hazard.source == stage or hazard.target == stage:
            marker = "  <-"
        lines.append(f"  {stage.name:<4}{latch.describe()}{marker}")
    lines.append(f"  {hazard.message}")

    if show_registers:
        regs = [f"x{i}={v}" for i, v in enumerate(state.registers) if v]
        if state.last_written_reg is not None:
            lines.append(f"  last write: x{state.last_written_reg}")
        lines.append("  regs: " + (" ".join(regs) if regs else "(all zero)"))
    return "\n".join(lines)


def format_memory(state: SimulationState) -> str:
    words = state.memory.as_dict()
    if not words:
        return "mem: (empty)"
    return "mem: " + " ".join(f"[{addr}]={value}" for addr, value in words.items())
