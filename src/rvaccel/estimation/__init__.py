"""
Performance and Energy Estimation

Aggregate latency/energy model for a dynamic instruction mix on the
accelerated core and the software baseline, plus sweeps and comparison
against measured board results.
"""

from .mix import (
    InstructionMix,
    DEFAULT_INSTRUCTION_MIX,
    INSTRUCTION_CATEGORIES,
    category_of,
)

from .performance import (
    SOFTWARE_EQUIVALENT_CYCLES,
    MEMORY_MNEMONICS,
    BRANCH_MNEMONICS,
    EstimateResult,
    ComparisonResult,
    safe_ratio,
    throughput,
    estimate,
    compare,
)

from .sweep import (
    SWEEPABLE_FIELDS,
    SweepPoint,
    sweep_parameter,
    sweep_instruction_cycles,
    sweep_operating_points,
    sweep_table,
)

from .measured import (
    MeasuredResult,
    relative_error,
    compare_to_model,
)

__all__ = [
    # Mix
    'InstructionMix',
    'DEFAULT_INSTRUCTION_MIX',
    'INSTRUCTION_CATEGORIES',
    'category_of',
    # Model
    'SOFTWARE_EQUIVALENT_CYCLES',
    'MEMORY_MNEMONICS',
    'BRANCH_MNEMONICS',
    'EstimateResult',
    'ComparisonResult',
    'safe_ratio',
    'throughput',
    'estimate',
    'compare',
    # Sweeps
    'SWEEPABLE_FIELDS',
    'SweepPoint',
    'sweep_parameter',
    'sweep_instruction_cycles',
    'sweep_operating_points',
    'sweep_table',
    # Measured
    'MeasuredResult',
    'relative_error',
    'compare_to_model',
]
