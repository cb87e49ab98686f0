"""
Architectural and Pipeline State

Everything a simulation session owns lives in a SimulationState value:
the register file, data memory, the five pipeline registers, the program
counter and the cycle counter. The engine never mutates a state in place;
each clock tick builds a new one, so a caller can keep old states around
for stepping backwards or diffing.

Pipeline Layout:
    IF -> ID -> EX -> MEM -> WB

    Each stage holds one PipelineRegister. A register with no instruction is
    either empty, a bubble (is_stall) inserted for a load-use hazard, or a
    flushed slot (is_flush) squashed by a taken branch.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from rvaccel.isa import NUM_REGISTERS, Instruction, Program

logger = logging.getLogger(__name__)


# Seed used by the example programs: x1 is a base address into data memory.
DEFAULT_BASE_ADDRESS = 256
DEFAULT_SEED_REGISTERS: Dict[int, int] = {1: DEFAULT_BASE_ADDRESS}
DEFAULT_SEED_MEMORY: Dict[int, int] = {DEFAULT_BASE_ADDRESS: 42}


class Stage(Enum):
    """The five pipeline stages, in program order."""
    IF = "if"
    ID = "id"
    EX = "ex"
    MEM = "mem"
    WB = "wb"

    @property
    def title(self) -> str:
        return STAGE_TITLES[self]


STAGE_TITLES = {
    Stage.IF: "Instruction Fetch (IF)",
    Stage.ID: "Instruction Decode (ID)",
    Stage.EX: "Execute (EX)",
    Stage.MEM: "Memory Access (MEM)",
    Stage.WB: "Writeback (WB)",
}


class RegisterFile:
    """
    32 general-purpose integer registers with x0 hardwired to zero.

    Writes to x0 are dropped. Indices outside 0..31 cannot come from the
    assembler, but if one is passed in it is ignored on write (with a
    warning) and reads as zero.
    """

    def __init__(self, values: Optional[Iterable[int]] = None):
        self._values: List[int] = [0] * NUM_REGISTERS
        if values is not None:
            for index, value in enumerate(values):
                if index >= NUM_REGISTERS:
                    break
                self._values[index] = int(value)
        self._values[0] = 0

    def read(self, index: Optional[int]) -> int:
        if index is None or not 0 < index < NUM_REGISTERS:
            return 0
        return self._values[index]

    def write(self, index: Optional[int], value: int) -> None:
        if index is None or index == 0:
            return
        if not 0 < index < NUM_REGISTERS:
            logger.warning("Ignoring write to out-of-range register x%s", index)
            return
        self._values[index] = int(value)

    def copy(self) -> 'RegisterFile':
        return RegisterFile(self._values)

    def as_list(self) -> List[int]:
        return list(self._values)

    def __len__(self) -> int:
        return NUM_REGISTERS

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __getitem__(self, index: int) -> int:
        return self.read(index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegisterFile):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        nonzero = {f"x{i}": v for i, v in enumerate(self._values) if v}
        return f"RegisterFile({nonzero})"


class DataMemory:
    """
    Sparse word-addressed data memory.

    Any integer address is valid; there is no alignment or bounds checking.
    Addresses never written read as zero.
    """

    def __init__(self, words: Optional[Mapping[int, int]] = None):
        self._words: Dict[int, int] = {int(a): int(v) for a, v in (words or {}).items()}

    def read_word(self, address: int) -> int:
        return self._words.get(address, 0)

    def write_word(self, address: int, value: int) -> None:
        self._words[address] = int(value)

    def copy(self) -> 'DataMemory':
        return DataMemory(self._words)

    def as_dict(self) -> Dict[int, int]:
        """Contents sorted by address."""
        return dict(sorted(self._words.items()))

    def __contains__(self, address: int) -> bool:
        return address in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, address: int) -> int:
        return self.read_word(address)

    def __eq__(self, other) -> bool:
        if not isinstance(other, DataMemory):
            return NotImplemented
        return self._words == other._words

    def __repr__(self) -> str:
        return f"DataMemory({self.as_dict()})"


@dataclass(frozen=True)
class PipelineRegister:
    """Contents of one stage for one cycle."""
    instruction: Optional[Instruction] = None
    pc: Optional[int] = None
    is_stall: bool = False
    is_flush: bool = False
    result: Optional[int] = None   # ALU result, loaded word, or value to store
    address: Optional[int] = None  # effective address for lw/sw

    @property
    def is_empty(self) -> bool:
        return self.instruction is None

    @property
    def is_bubble(self) -> bool:
        return self.instruction is None and self.is_stall

    def describe(self) -> str:
        """Short label for display: the instruction text or a marker."""
        if self.is_flush:
            return "-- FLUSH --"
        if self.instruction is None:
            return "-- BUBBLE --" if self.is_stall else "-- empty --"
        return self.instruction.raw


EMPTY_REGISTER = PipelineRegister()


def empty_stages() -> Dict[Stage, PipelineRegister]:
    return {stage: EMPTY_REGISTER for stage in Stage}


class AccessType(Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class MemoryAccess:
    """The data-memory access performed in the last MEM stage."""
    address: int
    access_type: AccessType


@dataclass(frozen=True)
class ResetSeed:
    """Initial register and memory contents applied on reset."""
    registers: Mapping[int, int] = field(default_factory=lambda: dict(DEFAULT_SEED_REGISTERS))
    memory: Mapping[int, int] = field(default_factory=lambda: dict(DEFAULT_SEED_MEMORY))


@dataclass(frozen=True)
class SimulationState:
    """
    One simulation session at a cycle boundary.

    ``pc`` is the index of the next instruction to fetch. ``registers`` and
    ``memory`` are owned by this state; the engine copies them before any
    write so earlier states stay valid.
    """
    program: Program
    registers: RegisterFile
    memory: DataMemory
    stages: Mapping[Stage, PipelineRegister] = field(default_factory=empty_stages)
    pc: int = 0
    cycle: int = 0

    # Observability
    last_written_reg: Optional[int] = None
    last_memory_access: Optional[MemoryAccess] = None

    # Counters
    stall_cycles: int = 0
    flush_count: int = 0
    retired: int = 0

    def stage(self, stage: Stage) -> PipelineRegister:
        return self.stages[stage]

    @property
    def in_flight(self) -> Tuple[Instruction, ...]:
        """Instructions currently occupying a stage, youngest first."""
        return tuple(r.instruction for r in self.stages.values() if r.instruction is not None)

    def with_changes(self, **changes) -> 'SimulationState':
        return replace(self, **changes)
