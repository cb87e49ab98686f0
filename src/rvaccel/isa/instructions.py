"""
Instruction Records for the Pipeline Simulator

The simulator implements a small RV32I subset. Each opcode is its own frozen
dataclass carrying exactly the operand fields it uses:

    add  rd, rs1, rs2        Add
    sub  rd, rs1, rs2        Sub
    addi rd, rs1, imm        Addi
    lw   rd, imm(rs1)        Lw
    sw   rs2, imm(rs1)       Sw   (no destination register)
    beq  rs1, rs2, label     Beq
    jal  rd, label           Jal

Anything else parses to Unknown, which flows through the pipeline as a no-op.

Operand fields are Optional: the assembler is permissive so that a program
being typed in an editor never raises, and a malformed operand simply stays
None. The execute stage reads a None register as zero and a None immediate
as zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


NUM_REGISTERS = 32


class Opcode(Enum):
    """Mnemonics understood by the pipeline simulator."""
    ADD = "add"
    SUB = "sub"
    ADDI = "addi"
    LW = "lw"
    SW = "sw"
    BEQ = "beq"
    JAL = "jal"

    @classmethod
    def from_mnemonic(cls, mnemonic: str) -> Optional['Opcode']:
        """Return the opcode for a mnemonic, or None if unsupported."""
        try:
            return cls(mnemonic.lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Instruction:
    """Common fields: position in the program and the source text."""
    pc: int
    raw: str

    @property
    def mnemonic(self) -> str:
        return self.opcode.value if self.opcode else ""

    @property
    def opcode(self) -> Optional[Opcode]:
        return None

    @property
    def dest_reg(self) -> Optional[int]:
        """Register written in writeback, or None."""
        return None

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        """(rs1, rs2) as read in execute; unused slots are None."""
        return (None, None)

    def reads(self, reg: Optional[int]) -> bool:
        """True if this instruction reads ``reg`` (x0 never counts)."""
        if reg is None or reg == 0:
            return False
        return reg in self.source_regs

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class Add(Instruction):
    rd: Optional[int] = None
    rs1: Optional[int] = None
    rs2: Optional[int] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.ADD

    @property
    def dest_reg(self) -> Optional[int]:
        return self.rd

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, self.rs2)


@dataclass(frozen=True)
class Sub(Instruction):
    rd: Optional[int] = None
    rs1: Optional[int] = None
    rs2: Optional[int] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.SUB

    @property
    def dest_reg(self) -> Optional[int]:
        return self.rd

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, self.rs2)


@dataclass(frozen=True)
class Addi(Instruction):
    rd: Optional[int] = None
    rs1: Optional[int] = None
    imm: Optional[int] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.ADDI

    @property
    def dest_reg(self) -> Optional[int]:
        return self.rd

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, None)


@dataclass(frozen=True)
class Lw(Instruction):
    rd: Optional[int] = None
    rs1: Optional[int] = None
    imm: Optional[int] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.LW

    @property
    def dest_reg(self) -> Optional[int]:
        return self.rd

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, None)


@dataclass(frozen=True)
class Sw(Instruction):
    """Store word. ``rs2`` is the register whose value is stored."""
    rs1: Optional[int] = None
    rs2: Optional[int] = None
    imm: Optional[int] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.SW

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, self.rs2)


@dataclass(frozen=True)
class Beq(Instruction):
    rs1: Optional[int] = None
    rs2: Optional[int] = None
    label: Optional[str] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.BEQ

    @property
    def source_regs(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.rs1, self.rs2)


@dataclass(frozen=True)
class Jal(Instruction):
    rd: Optional[int] = None
    label: Optional[str] = None

    @property
    def opcode(self) -> Opcode:
        return Opcode.JAL

    @property
    def dest_reg(self) -> Optional[int]:
        return self.rd


@dataclass(frozen=True)
class Unknown(Instruction):
    """Unrecognised mnemonic (e.g. ``nop``). Executes as a no-op."""
    name: str = ""

    @property
    def mnemonic(self) -> str:
        return self.name


CONTROL_OPCODES = (Opcode.BEQ, Opcode.JAL)
