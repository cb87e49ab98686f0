#!/usr/bin/env python
"""
Hardware Emulation: Accelerated Core vs. Software Baseline

Projects latency and energy of an instruction mix on one board at one
DVFS operating point, for the custom RISC-V core with NN extensions and for
the board's baseline core running the same workload in software.

The model accounts for per-instruction cycle counts, L1 cache misses on
memory instructions, branch mispredictions, clock frequency and static
power. Optionally sweeps all operating points of the board, and compares
the projection against a measured result from the physical board.
"""

import argparse
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rvaccel.config import get_config
from rvaccel.estimation import (
    DEFAULT_INSTRUCTION_MIX,
    InstructionMix,
    MeasuredResult,
    compare,
    compare_to_model,
    sweep_operating_points,
)
from rvaccel.hardware import OperatingPoint, get_board, load_boards
from rvaccel.logging import LogConfig, configure_logging, parse_level
from rvaccel.reporting import format_comparison_table, format_mix_table, format_sweep_table


def main():
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Project performance and energy of the custom core vs. a software baseline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default CNN mix on the default board
  python cli/emulate_hardware.py

  # Arty A7 in low-power mode with a custom mix
  python cli/emulate_hardware.py --board arty-a7 --profile low_power --mix mix.yaml

  # All operating points, JSON output
  python cli/emulate_hardware.py --board basys3 --sweep --json

  # Compare against a measured board run
  python cli/emulate_hardware.py --measured results.json
        """
    )
    parser.add_argument("--board", default=config.default_board,
                        help=f"Board id (default: {config.default_board})")
    parser.add_argument("--profile", default=config.default_operating_point,
                        choices=[p.value for p in OperatingPoint],
                        help=f"DVFS operating point (default: {config.default_operating_point})")
    parser.add_argument("--mix", help="Instruction mix file (YAML/JSON); default: built-in CNN mix")
    parser.add_argument("--boards-file", default=config.boards_file,
                        help="Extra board definitions (YAML/JSON)")
    parser.add_argument("--sweep", action="store_true",
                        help="Compare all operating points of the board")
    parser.add_argument("--measured", help="Measured result file (JSON) from the board")
    parser.add_argument("--dram-energy", action="store_true",
                        help="Include DRAM access energy for cache misses on the accelerated core")
    parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args()

    try:
        configure_logging(LogConfig(console_level=parse_level(config.log_level)))
    except ValueError:
        configure_logging()

    try:
        extra = load_boards(args.boards_file) if args.boards_file else None
        board = get_board(args.board, extra)
        profile = board.profile(args.profile)
        mix = InstructionMix.from_file(args.mix) if args.mix else DEFAULT_INSTRUCTION_MIX
        measured = MeasuredResult.from_file(args.measured) if args.measured else None
    except (OSError, KeyError, ValueError) as e:
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"Error: {message}", file=sys.stderr)
        return 1

    result = compare(mix, profile, include_dram_energy=args.dram_energy)
    sweep = sweep_operating_points(mix, board) if args.sweep else None
    deviations = compare_to_model(measured, result) if measured else None

    if args.json:
        report = {
            "board": board.board_id,
            "operating_point": OperatingPoint.from_name(args.profile).value,
            "mix": mix.to_dict(),
            "result": result.to_dict(),
        }
        if sweep is not None:
            report["sweep"] = [
                {"operating_point": p.value, "result": p.comparison.to_dict()} for p in sweep
            ]
        if measured is not None:
            report["measured"] = measured.to_dict()
            report["deviation"] = deviations
        print(json.dumps(report, indent=2))
        return 0

    print(f"Board: {board.name} ({board.fpga})")
    print()
    print(format_mix_table(mix))
    print()
    print(format_comparison_table(
        result, title=f"{board.name} / {profile.name} "
                      f"(RISC-V {profile.riscv_clock_mhz:g} MHz, ARM {profile.arm_clock_mhz:g} MHz)"))

    if sweep is not None:
        print()
        print(format_sweep_table(sweep, title=f"Operating points: {board.name}"))

    if measured is not None:
        print()
        print("Model vs. measured")
        print("-" * 50)
        for key, deviation in deviations.items():
            print(f"  {key:<20}{deviation * 100:>+10.1f}%")

    return 0


if __name__ == "__main__":
    sys.exit(main())
