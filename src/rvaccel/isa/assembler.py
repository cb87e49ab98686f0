"""
Assembler for the Pipeline Simulator

Turns assembly text into a Program: an ordered tuple of instruction records
plus a label table (label name -> index of the next instruction).

Parsing is deliberately permissive. The text is usually being edited live,
so a half-typed line must never raise: unknown mnemonics become Unknown
records and malformed operands are left as None.

Usage:
    from rvaccel.isa import parse

    program = parse('''
        lw   x2, 0(x1)
        addi x3, x2, 4
    loop:
        beq  x3, x0, loop
    ''')
    program.instructions[0]   # Lw(pc=0, raw='lw x2, 0(x1)', rd=2, rs1=1, imm=0)
    program.labels            # {'loop': 2}
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .instructions import (
    NUM_REGISTERS,
    Add,
    Addi,
    Beq,
    Instruction,
    Jal,
    Lw,
    Opcode,
    Sub,
    Sw,
    Unknown,
)


LABEL_RE = re.compile(r'^(\w+):')
REGISTER_RE = re.compile(r'^x(\d+)$', re.IGNORECASE)
MEMORY_OPERAND_RE = re.compile(r'^(-?(?:0x[0-9a-f]+|\d+))?\((\w+)\)$', re.IGNORECASE)
COMMENT_CHAR = '#'

# RISC-V ABI register names
ABI_REGISTER_NAMES = {
    'zero': 0, 'ra': 1, 'sp': 2, 'gp': 3, 'tp': 4,
    't0': 5, 't1': 6, 't2': 7,
    's0': 8, 'fp': 8, 's1': 9,
    'a0': 10, 'a1': 11, 'a2': 12, 'a3': 13, 'a4': 14, 'a5': 15, 'a6': 16, 'a7': 17,
    's2': 18, 's3': 19, 's4': 20, 's5': 21, 's6': 22, 's7': 23,
    's8': 24, 's9': 25, 's10': 26, 's11': 27,
    't3': 28, 't4': 29, 't5': 30, 't6': 31,
}


@dataclass(frozen=True)
class Program:
    """Parsed program: instructions indexed by pc, and the label table."""
    instructions: Tuple[Instruction, ...] = ()
    labels: Dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, pc: int) -> Instruction:
        return self.instructions[pc]

    def resolve(self, label: Optional[str]) -> Optional[int]:
        """Instruction index for a label, or None if it is not defined."""
        if label is None:
            return None
        return self.labels.get(label)


def parse_register(token: Optional[str]) -> Optional[int]:
    """
    Parse ``x0``..``x31`` or an ABI name into a register index.

    Returns None for anything else, including out-of-range numbers like x32.
    """
    if not token:
        return None
    token = token.strip()
    match = REGISTER_RE.match(token)
    if match:
        index = int(match.group(1))
        return index if index < NUM_REGISTERS else None
    return ABI_REGISTER_NAMES.get(token.lower())


def parse_immediate(token: Optional[str]) -> Optional[int]:
    """Parse a decimal or 0x-prefixed hex immediate; None if malformed."""
    if not token:
        return None
    token = token.strip()
    try:
        return int(token, 0)
    except ValueError:
        pass
    try:
        # int(..., 0) rejects leading zeros such as "08"
        return int(token, 10)
    except ValueError:
        return None


def _parse_memory_operand(token: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """Split ``imm(rs1)`` into (imm, rs1). A missing offset means 0."""
    if not token:
        return None, None
    match = MEMORY_OPERAND_RE.match(token.strip())
    if not match:
        return None, None
    offset, base = match.groups()
    imm = parse_immediate(offset) if offset is not None else 0
    return imm, parse_register(base)


def _operand(parts: List[str], index: int) -> Optional[str]:
    return parts[index] if index < len(parts) else None


def strip_comment(line: str) -> str:
    return line.split(COMMENT_CHAR, 1)[0].strip()


def parse_line(text: str, pc: int) -> Instruction:
    """
    Parse one instruction line (comment already stripped) at position ``pc``.

    Never raises: the worst case is an Unknown record or None operands.
    """
    parts = text.replace(',', ' ').split()
    name = parts[0].lower() if parts else ''
    opcode = Opcode.from_mnemonic(name)

    def arg(index: int) -> Optional[str]:
        return _operand(parts, index)

    if opcode in (Opcode.ADD, Opcode.SUB):
        cls = Add if opcode == Opcode.ADD else Sub
        return cls(pc=pc, raw=text, rd=parse_register(arg(1)),
                   rs1=parse_register(arg(2)), rs2=parse_register(arg(3)))

    if opcode == Opcode.ADDI:
        return Addi(pc=pc, raw=text, rd=parse_register(arg(1)),
                    rs1=parse_register(arg(2)), imm=parse_immediate(arg(3)))

    if opcode == Opcode.LW:
        imm, rs1 = _parse_memory_operand(arg(2))
        return Lw(pc=pc, raw=text, rd=parse_register(arg(1)), rs1=rs1, imm=imm)

    if opcode == Opcode.SW:
        # The first operand is the value being stored, not a destination.
        imm, rs1 = _parse_memory_operand(arg(2))
        return Sw(pc=pc, raw=text, rs1=rs1, rs2=parse_register(arg(1)), imm=imm)

    if opcode == Opcode.BEQ:
        return Beq(pc=pc, raw=text, rs1=parse_register(arg(1)),
                   rs2=parse_register(arg(2)), label=arg(3))

    if opcode == Opcode.JAL:
        return Jal(pc=pc, raw=text, rd=parse_register(arg(1)), label=arg(2))

    return Unknown(pc=pc, raw=text, name=name)


def parse(text: str) -> Program:
    """
    Assemble ``text`` into a Program.

    Blank and comment-only lines are skipped. A line of the form ``name:``
    defines a label at the index of the next instruction and does not take
    an instruction slot. An instruction may follow the label on the same
    line. Everything else is one instruction.
    """
    instructions: List[Instruction] = []
    labels: Dict[str, int] = {}

    for line in text.splitlines():
        stripped = strip_comment(line)
        if not stripped:
            continue
        label_match = LABEL_RE.match(stripped)
        if label_match:
            labels[label_match.group(1)] = len(instructions)
            stripped = stripped[label_match.end():].strip()
            if not stripped:
                continue
        instructions.append(parse_line(stripped, len(instructions)))

    return Program(instructions=tuple(instructions), labels=labels)


SAMPLE_PROGRAM = """\
# Example with multiple hazard types
# Initial state: x1=256, Mem[256]=42
lw x2, 0(x1)    # LOAD WORD from Mem[256]
addi x3, x2, 4  # LOAD-USE HAZARD: addi needs x2, requires STALL
sw x3, 4(x1)    # STORE WORD to Mem[260]
add x5, x4, x1  # Result for x5 available in EX stage
sub x6, x5, x2  # EX->ID FORWARDING: sub needs x5 from add
beq x4, x0, end # CONTROL HAZARD: Branch
nop             # This instruction will be FLUSHED
end:
add x8, x8, x9
"""
