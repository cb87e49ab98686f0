"""
Instruction Set and Assembler

The seven-opcode RV32I subset executed by the pipeline simulator, and the
permissive assembler that produces it from text.
"""

from .instructions import (
    NUM_REGISTERS,
    Opcode,
    Instruction,
    Add,
    Sub,
    Addi,
    Lw,
    Sw,
    Beq,
    Jal,
    Unknown,
    CONTROL_OPCODES,
)

from .assembler import (
    Program,
    parse,
    parse_line,
    parse_register,
    parse_immediate,
    strip_comment,
    ABI_REGISTER_NAMES,
    SAMPLE_PROGRAM,
)

__all__ = [
    'NUM_REGISTERS',
    'Opcode',
    'Instruction',
    'Add',
    'Sub',
    'Addi',
    'Lw',
    'Sw',
    'Beq',
    'Jal',
    'Unknown',
    'CONTROL_OPCODES',
    # Assembler
    'Program',
    'parse',
    'parse_line',
    'parse_register',
    'parse_immediate',
    'strip_comment',
    'ABI_REGISTER_NAMES',
    'SAMPLE_PROGRAM',
]
