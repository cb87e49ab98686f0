"""
Hazard Detection and Forwarding

Data hazards:
    LOAD-USE: EX holds an ``lw`` whose destination is read by the instruction
    in ID. The loaded word is not available until the end of MEM, so the ID
    instruction stalls for one cycle and a bubble enters EX.

    Everything else is resolved by forwarding. Operands are looked up in this
    order, falling back to the register file:

        1. MEM stage result
        2. EX stage result
        3. WB stage result
        4. committed register file

Control hazards:
    A ``beq``/``jal`` is resolved when it executes. If it redirects the PC,
    the two younger instructions (in IF and ID) are flushed.

The classifier below reports the single most important condition for the
current cycle, for status lines and highlighting.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from rvaccel.isa import CONTROL_OPCODES, Opcode

from .state import PipelineRegister, RegisterFile, SimulationState, Stage


# Stages consulted for forwarding, highest priority first
FORWARDING_ORDER = (Stage.MEM, Stage.EX, Stage.WB)


class HazardKind(Enum):
    LOAD_USE = "load_use"
    FORWARD_EX = "forward_ex"
    FORWARD_MEM = "forward_mem"
    CONTROL = "control"
    NONE = "none"


@dataclass(frozen=True)
class HazardReport:
    """Hazard or forwarding condition visible in the current pipeline."""
    kind: HazardKind
    message: str
    register: Optional[int] = None
    source: Optional[Stage] = None   # producing stage (forwarding/hazard source)
    target: Optional[Stage] = None   # consuming stage

    @property
    def is_hazard(self) -> bool:
        return self.kind in (HazardKind.LOAD_USE, HazardKind.CONTROL)

    @property
    def is_forwarding(self) -> bool:
        return self.kind in (HazardKind.FORWARD_EX, HazardKind.FORWARD_MEM)


NO_HAZARD = HazardReport(HazardKind.NONE, "Status: No hazards detected.")


def detect_load_use(ex: PipelineRegister, id_: PipelineRegister) -> Optional[int]:
    """
    Return the register causing a load-use hazard between EX and ID, if any.

    x0 never causes a hazard.
    """
    ex_instr, id_instr = ex.instruction, id_.instruction
    if ex_instr is None or id_instr is None or ex_instr.opcode != Opcode.LW:
        return None
    rd = ex_instr.dest_reg
    if id_instr.reads(rd):
        return rd
    return None


def forward_operand(
    reg: Optional[int],
    stages: Mapping[Stage, PipelineRegister],
    registers: RegisterFile,
) -> int:
    """
    Resolve a source register for the instruction entering EX.

    ``stages`` are the pipeline registers at the start of the cycle and
    ``registers`` is the register file before this cycle's writeback.
    """
    if reg is None or reg == 0:
        return 0
    for stage in FORWARDING_ORDER:
        latch = stages[stage]
        instr = latch.instruction
        if instr is not None and instr.dest_reg == reg and latch.result is not None:
            return latch.result
    return registers.read(reg)


def forwarding_source(
    reg: Optional[int],
    stages: Mapping[Stage, PipelineRegister],
) -> Optional[Stage]:
    """Stage a register would be forwarded from, or None for the register file."""
    if reg is None or reg == 0:
        return None
    for stage in FORWARDING_ORDER:
        latch = stages[stage]
        instr = latch.instruction
        if instr is not None and instr.dest_reg == reg and latch.result is not None:
            return stage
    return None


def classify_hazard(state: SimulationState) -> HazardReport:
    """
    Describe the hazard or forwarding path affecting the current cycle.

    Priority: load-use stall, EX->ID forward, MEM->ID forward, control
    hazard in EX, otherwise no hazard.
    """
    id_ = state.stage(Stage.ID)
    ex = state.stage(Stage.EX)
    mem = state.stage(Stage.MEM)
    id_instr = id_.instruction

    load_reg = detect_load_use(ex, id_)
    if load_reg is not None:
        return HazardReport(
            HazardKind.LOAD_USE,
            f"DATA HAZARD: Load-Use dependency on x{load_reg}. Stall required.",
            register=load_reg, source=Stage.EX, target=Stage.ID,
        )

    if id_instr is not None:
        ex_rd = ex.instruction.dest_reg if ex.instruction is not None else None
        if id_instr.reads(ex_rd):
            return HazardReport(
                HazardKind.FORWARD_EX,
                f"FORWARDING: x{ex_rd} forwarded from EX to ID.",
                register=ex_rd, source=Stage.EX, target=Stage.ID,
            )

        mem_rd = mem.instruction.dest_reg if mem.instruction is not None else None
        if id_instr.reads(mem_rd):
            return HazardReport(
                HazardKind.FORWARD_MEM,
                f"FORWARDING: x{mem_rd} forwarded from MEM to ID.",
                register=mem_rd, source=Stage.MEM, target=Stage.ID,
            )

    if ex.instruction is not None and ex.instruction.opcode in CONTROL_OPCODES:
        return HazardReport(
            HazardKind.CONTROL,
            f"CONTROL HAZARD: Branch ('{ex.instruction.raw}') in EX. Flush imminent if taken.",
            source=Stage.EX,
        )

    return NO_HAZARD
