"""
Report formatting for the command-line tools.
"""

from .formatting import (
    COL_WIDTH,
    format_count,
    format_throughput,
    format_energy_mj,
    format_ratio,
    format_comparison_table,
    format_mix_table,
    format_sweep_table,
    format_pipeline_state,
    format_memory,
)

__all__ = [
    'COL_WIDTH',
    'format_count',
    'format_throughput',
    'format_energy_mj',
    'format_ratio',
    'format_comparison_table',
    'format_mix_table',
    'format_sweep_table',
    'format_pipeline_state',
    'format_memory',
]
