#!/usr/bin/env python
"""
List Boards

Print the known FPGA boards and the clocks and static power of each
operating point.
"""

import argparse
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rvaccel.config import get_config
from rvaccel.hardware import list_boards, load_boards


def main():
    config = get_config()

    parser = argparse.ArgumentParser(description="List built-in and configured boards")
    parser.add_argument("--boards-file", default=config.boards_file,
                        help="Extra board definitions (YAML/JSON)")
    args = parser.parse_args()

    try:
        extra = load_boards(args.boards_file) if args.boards_file else None
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    header = f"{'Id':<12}{'Board':<16}{'Profile':<14}{'RISC-V MHz':>12}{'ARM MHz':>10}{'Static HW/SW mW':>18}"
    print(header)
    print("-" * len(header))
    for board in list_boards(extra):
        for point in board.operating_points:
            p = board.profile(point)
            static = f"{p.static_power_hw_mw:g}/{p.static_power_sw_mw:g}"
            print(f"{board.board_id:<12}{board.name:<16}{point.display_name:<14}"
                  f"{p.riscv_clock_mhz:>12g}{p.arm_clock_mhz:>10g}{static:>18}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
