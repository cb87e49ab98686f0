#!/usr/bin/env python
"""
Pipeline Simulator

Assemble a program and step it through the 5-stage pipeline, printing the
stage contents and hazard status every cycle, then the final registers and
memory.

Without FILE the built-in hazard demo is run:

    lw   x2, 0(x1)      load-use stall on x2
    addi x3, x2, 4
    sw   x3, 4(x1)      Mem[260] = 46
    add  x5, x4, x1
    sub  x6, x5, x2     EX->ID forwarding of x5
    beq  x4, x0, end    taken, flushes IF/ID
    ...
"""

import argparse
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rvaccel.config import get_config
from rvaccel.isa import SAMPLE_PROGRAM, parse, parse_register
from rvaccel.logging import LogConfig, configure_logging, get_logger, parse_level
from rvaccel.pipeline import PipelineTrace, is_finished, reset, step_clock
from rvaccel.reporting import format_memory, format_pipeline_state


def parse_assignment(text: str, kind: str):
    """'x1=256' / '256=42' -> (key, value). Raises ValueError."""
    if '=' not in text:
        raise ValueError(f"Expected KEY=VALUE for {kind}, got {text!r}")
    key, value = (part.strip() for part in text.split('=', 1))
    if kind == 'register':
        index = parse_register(key)
        if index is None:
            raise ValueError(f"Invalid register {key!r}")
        return index, int(value, 0)
    return int(key, 0), int(value, 0)


def main():
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Step a program through the 5-stage RISC-V pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the built-in hazard demo
  python cli/simulate_pipeline.py

  # Run a program with a custom seed
  python cli/simulate_pipeline.py prog.s --seed-reg x1=512 --seed-mem 512=7

  # Only print the pipeline diagram
  python cli/simulate_pipeline.py prog.s --trace --quiet
        """
    )
    parser.add_argument("file", nargs="?",
                        help="Assembly source file ('-' for stdin; default: built-in demo)")
    parser.add_argument("--cycles", type=int, default=config.max_cycles,
                        help=f"Maximum cycles to simulate (default: {config.max_cycles})")
    parser.add_argument("--seed-reg", action="append", default=[], metavar="xN=VALUE",
                        help="Initial register value (repeatable); replaces the configured seed")
    parser.add_argument("--seed-mem", action="append", default=[], metavar="ADDR=VALUE",
                        help="Initial memory word (repeatable); replaces the configured seed")
    parser.add_argument("--trace", action="store_true",
                        help="Print a pipeline timeline diagram after the run")
    parser.add_argument("--quiet", action="store_true",
                        help="Do not print the per-cycle state")
    parser.add_argument("--log-level", default=config.log_level,
                        help=f"Log level (default: {config.log_level})")

    args = parser.parse_args()

    try:
        configure_logging(LogConfig(console_level=parse_level(args.log_level)))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    log = get_logger("cli.simulate")

    if args.cycles <= 0:
        print("Error: --cycles must be positive", file=sys.stderr)
        return 1

    try:
        if args.file is None:
            source = SAMPLE_PROGRAM
        elif args.file == '-':
            source = sys.stdin.read()
        else:
            with open(args.file) as f:
                source = f.read()
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    seed = config.reset_seed
    try:
        seed_registers = (dict(parse_assignment(s, 'register') for s in args.seed_reg)
                          if args.seed_reg else dict(seed.registers))
        seed_memory = (dict(parse_assignment(s, 'memory') for s in args.seed_mem)
                       if args.seed_mem else dict(seed.memory))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    program = parse(source)
    log.info("Assembled %d instruction(s), %d label(s)", len(program), len(program.labels))

    state = reset(program, seed_registers, seed_memory)
    trace = PipelineTrace(state)

    if not args.quiet:
        print(format_pipeline_state(state, show_registers=False))
        print()

    while not is_finished(trace.final) and len(trace) < args.cycles:
        trace.add(step_clock(trace.final))
        if not args.quiet:
            print(format_pipeline_state(trace.final))
            print()

    final = trace.final
    if not is_finished(final):
        print(f"Stopped after {args.cycles} cycles without draining the pipeline", file=sys.stderr)

    if args.trace:
        print(trace.render_timeline())
        print()

    print("=" * 60)
    print(f"Finished: {is_finished(final)}  cycles={final.cycle}  retired={final.retired}  "
          f"stalls={final.stall_cycles}  flushes={final.flush_count}")
    regs = [f"x{i}={v}" for i, v in enumerate(final.registers) if v]
    print("regs: " + (" ".join(regs) if regs else "(all zero)"))
    print(format_memory(final))
    return 0


if __name__ == "__main__":
    sys.exit(main())
