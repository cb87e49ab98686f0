"""
rvaccel: RISC-V NN accelerator pipeline simulator and performance/energy emulator

Two independent analyses of a conceptual RISC-V core with neural-network
instruction extensions:

- ``rvaccel.isa`` / ``rvaccel.pipeline``: assemble a small RV32I program and
  step it through a 5-stage pipeline with forwarding, load-use stalls and
  branch flushes.
- ``rvaccel.hardware`` / ``rvaccel.estimation``: project latency and energy
  of a dynamic instruction mix on FPGA boards, accelerated core vs. a
  software baseline.
"""

__version__ = "0.1.0"

from rvaccel.isa import parse, Program, SAMPLE_PROGRAM
from rvaccel.pipeline import (
    SimulationState,
    PipelineSession,
    reset,
    step_clock,
    is_finished,
    run,
    classify_hazard,
)
from rvaccel.hardware import DVFSProfile, OperatingPoint, get_board, get_profile
from rvaccel.estimation import InstructionMix, DEFAULT_INSTRUCTION_MIX, estimate, compare

__all__ = [
    '__version__',
    'parse',
    'Program',
    'SAMPLE_PROGRAM',
    'SimulationState',
    'PipelineSession',
    'reset',
    'step_clock',
    'is_finished',
    'run',
    'classify_hazard',
    'DVFSProfile',
    'OperatingPoint',
    'get_board',
    'get_profile',
    'InstructionMix',
    'DEFAULT_INSTRUCTION_MIX',
    'estimate',
    'compare',
]
