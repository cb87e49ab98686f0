"""
5-Stage Pipeline Simulator

Instruction-level model of a classic IF/ID/EX/MEM/WB pipeline with load-use
stalls, operand forwarding and branch flushing. State is an explicit
SimulationState value threaded through step_clock().

Usage:
    from rvaccel.isa import parse, SAMPLE_PROGRAM
    from rvaccel.pipeline import reset, run, classify_hazard

    final = run(reset(parse(SAMPLE_PROGRAM)))
    final.memory[260]      # 46
    final.stall_cycles     # 1
"""

from .state import (
    Stage,
    STAGE_TITLES,
    RegisterFile,
    DataMemory,
    PipelineRegister,
    EMPTY_REGISTER,
    AccessType,
    MemoryAccess,
    ResetSeed,
    SimulationState,
    DEFAULT_SEED_REGISTERS,
    DEFAULT_SEED_MEMORY,
)

from .hazards import (
    FORWARDING_ORDER,
    HazardKind,
    HazardReport,
    NO_HAZARD,
    classify_hazard,
    detect_load_use,
    forward_operand,
    forwarding_source,
)

from .engine import (
    PIPELINE_DEPTH,
    DEFAULT_MAX_CYCLES,
    reset,
    step_clock,
    is_finished,
    run,
    PipelineSession,
)

from .trace import (
    CycleSnapshot,
    PipelineTrace,
)

__all__ = [
    # State
    'Stage',
    'STAGE_TITLES',
    'RegisterFile',
    'DataMemory',
    'PipelineRegister',
    'EMPTY_REGISTER',
    'AccessType',
    'MemoryAccess',
    'ResetSeed',
    'SimulationState',
    'DEFAULT_SEED_REGISTERS',
    'DEFAULT_SEED_MEMORY',
    # Hazards
    'FORWARDING_ORDER',
    'HazardKind',
    'HazardReport',
    'NO_HAZARD',
    'classify_hazard',
    'detect_load_use',
    'forward_operand',
    'forwarding_source',
    # Engine
    'PIPELINE_DEPTH',
    'DEFAULT_MAX_CYCLES',
    'reset',
    'step_clock',
    'is_finished',
    'run',
    'PipelineSession',
    # Trace
    'CycleSnapshot',
    'PipelineTrace',
]
