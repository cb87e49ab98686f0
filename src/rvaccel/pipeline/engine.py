"""
5-Stage Pipeline Engine

Advances a SimulationState by one clock cycle. Stages are evaluated back to
front so that each stage consumes what the previous cycle left in the
pipeline registers:

    WB  : commit the result held in MEM to the register file
    MEM : lw reads / sw writes at the address computed in EX
    EX  : load-use check, operand forwarding, ALU, branch resolution
    ID  : receive the instruction from IF (held on stall, squashed on flush)
    IF  : fetch at pc (held on stall, squashed and redirected on branch)

Usage:
    from rvaccel.isa import parse
    from rvaccel.pipeline import reset, step_clock, is_finished

    state = reset(parse(source))
    while not is_finished(state):
        state = step_clock(state)
    state.memory[260]

The engine has no timers and no hidden state; drive it at any cadence.
"""

import logging
from typing import Dict, Mapping, Optional

from rvaccel.isa import (
    Add,
    Addi,
    Beq,
    Instruction,
    Jal,
    Lw,
    Program,
    Sub,
    Sw,
    parse,
)

from .hazards import HazardReport, classify_hazard, detect_load_use, forward_operand
from .state import (
    DEFAULT_SEED_MEMORY,
    DEFAULT_SEED_REGISTERS,
    EMPTY_REGISTER,
    AccessType,
    DataMemory,
    MemoryAccess,
    PipelineRegister,
    RegisterFile,
    SimulationState,
    Stage,
)

logger = logging.getLogger(__name__)


PIPELINE_DEPTH = len(Stage)

# Cycle bound PipelineSession.run() uses when none is given
DEFAULT_MAX_CYCLES = 10_000


def reset(
    program: Program,
    seed_registers: Optional[Mapping[int, int]] = None,
    seed_memory: Optional[Mapping[int, int]] = None,
) -> SimulationState:
    """
    Create a fresh session for ``program``.

    All registers start at zero, then the seed is applied. Without explicit
    seeds, x1 = 256 and mem[256] = 42 (what the example programs expect).
    Pass empty mappings for a completely zeroed machine.
    """
    if seed_registers is None:
        seed_registers = DEFAULT_SEED_REGISTERS
    if seed_memory is None:
        seed_memory = DEFAULT_SEED_MEMORY

    registers = RegisterFile()
    for index, value in seed_registers.items():
        registers.write(int(index), value)

    return SimulationState(
        program=program,
        registers=registers,
        memory=DataMemory(seed_memory),
    )


def is_finished(state: SimulationState) -> bool:
    """True once every instruction has been fetched and the pipeline drained."""
    if state.pc < len(state.program):
        return False
    return all(latch.instruction is None for latch in state.stages.values())


def _execute(
    latch: PipelineRegister,
    stages: Mapping[Stage, PipelineRegister],
    registers: RegisterFile,
    program: Program,
):
    """
    Run the ALU for the instruction leaving ID.

    Returns (result, address, branch_target). ``branch_target`` is None when
    control flow continues sequentially.
    """
    instr = latch.instruction
    rs1, rs2 = instr.source_regs
    val1 = forward_operand(rs1, stages, registers)
    val2 = forward_operand(rs2, stages, registers)

    result: Optional[int] = None
    address: Optional[int] = None
    target: Optional[int] = None

    if isinstance(instr, Add):
        result = val1 + val2
    elif isinstance(instr, Sub):
        result = val1 - val2
    elif isinstance(instr, Addi):
        result = val1 + (instr.imm or 0)
    elif isinstance(instr, (Lw, Sw)):
        address = val1 + (instr.imm or 0)
        if isinstance(instr, Sw):
            result = val2
    elif isinstance(instr, Beq):
        if val1 == val2:
            target = _branch_target(instr, program)
    elif isinstance(instr, Jal):
        result = instr.pc + 1
        target = _branch_target(instr, program)

    return result, address, target


def _branch_target(instr: Instruction, program: Program) -> Optional[int]:
    target = program.resolve(instr.label)
    if target is None:
        logger.warning("Unknown label %r in '%s' (pc=%d); branch ignored",
                       instr.label, instr.raw, instr.pc)
    return target


def step_clock(state: SimulationState) -> SimulationState:
    """
    Advance the pipeline by one cycle and return the new state.

    The input state is not modified. Calling this on a finished state
    returns it unchanged.
    """
    if is_finished(state):
        return state

    stages = state.stages
    if_in, id_in = stages[Stage.IF], stages[Stage.ID]
    ex_in, mem_in = stages[Stage.EX], stages[Stage.MEM]
    program = state.program

    registers = state.registers.copy()
    memory = state.memory
    new: Dict[Stage, PipelineRegister] = {}
    last_written_reg: Optional[int] = None
    memory_access: Optional[MemoryAccess] = None
    retired = state.retired

    # --- WB: what MEM held last cycle writes back now ---
    wb_instr = mem_in.instruction
    if wb_instr is not None:
        rd = wb_instr.dest_reg
        if rd is not None and rd != 0 and mem_in.result is not None:
            registers.write(rd, mem_in.result)
            last_written_reg = rd
        retired += 1
    new[Stage.WB] = PipelineRegister(instruction=wb_instr, pc=mem_in.pc, result=mem_in.result)

    # --- MEM ---
    mem_instr = ex_in.instruction
    mem_result = ex_in.result
    if isinstance(mem_instr, Lw) and ex_in.address is not None:
        mem_result = memory.read_word(ex_in.address)
        memory_access = MemoryAccess(ex_in.address, AccessType.READ)
    elif isinstance(mem_instr, Sw) and ex_in.address is not None:
        memory = memory.copy()
        memory.write_word(ex_in.address, ex_in.result or 0)
        memory_access = MemoryAccess(ex_in.address, AccessType.WRITE)
    new[Stage.MEM] = PipelineRegister(instruction=mem_instr, pc=ex_in.pc,
                                      result=mem_result, address=ex_in.address)

    # --- EX ---
    stall_reg = detect_load_use(ex_in, id_in)
    stall = stall_reg is not None
    target: Optional[int] = None

    if stall:
        logger.debug("cycle %d: load-use on x%d, stalling '%s'",
                     state.cycle + 1, stall_reg, id_in.instruction.raw)
        new[Stage.EX] = PipelineRegister(is_stall=True)
    elif id_in.instruction is not None:
        # Operands see the pipeline and register file as of the start of the cycle
        result, address, target = _execute(id_in, stages, state.registers, program)
        new[Stage.EX] = PipelineRegister(instruction=id_in.instruction, pc=id_in.pc,
                                         result=result, address=address)
    else:
        new[Stage.EX] = EMPTY_REGISTER

    branch_taken = target is not None

    # --- ID ---
    if stall:
        new[Stage.ID] = PipelineRegister(instruction=id_in.instruction, pc=id_in.pc, is_stall=True)
    elif branch_taken:
        new[Stage.ID] = PipelineRegister(pc=if_in.pc, is_flush=True)
    else:
        new[Stage.ID] = PipelineRegister(instruction=if_in.instruction, pc=if_in.pc)

    # --- IF ---
    pc = state.pc
    if branch_taken:
        logger.debug("cycle %d: '%s' taken, flushing IF/ID, pc -> %d",
                     state.cycle + 1, id_in.instruction.raw, target)
        new[Stage.IF] = PipelineRegister(is_flush=True)
        pc = target
    elif stall:
        new[Stage.IF] = if_in
    elif pc < len(program):
        new[Stage.IF] = PipelineRegister(instruction=program[pc], pc=pc)
        pc += 1
    else:
        new[Stage.IF] = EMPTY_REGISTER

    return state.with_changes(
        registers=registers,
        memory=memory,
        stages=new,
        pc=pc,
        cycle=state.cycle + 1,
        last_written_reg=last_written_reg,
        last_memory_access=memory_access,
        stall_cycles=state.stall_cycles + (1 if stall else 0),
        flush_count=state.flush_count + (1 if branch_taken else 0),
        retired=retired,
    )


def run(state: SimulationState, max_cycles: Optional[int] = None) -> SimulationState:
    """
    Step until the pipeline drains or ``max_cycles`` more cycles have run.

    A program with a backward branch can loop forever, so pass a bound
    when running untrusted input.
    """
    steps = 0
    while not is_finished(state):
        if max_cycles is not None and steps >= max_cycles:
            logger.info("Stopped after %d cycles (pc=%d)", steps, state.pc)
            break
        state = step_clock(state)
        steps += 1
    return state


class PipelineSession:
    """
    Mutable wrapper around SimulationState for interactive front ends.

    Holds the current program and state, and remembers the seed so that
    reset() restores the same starting point. run() is bounded by
    ``max_cycles`` so a looping program cannot hang the caller.
    """

    def __init__(
        self,
        source: str = "",
        seed_registers: Optional[Mapping[int, int]] = None,
        seed_memory: Optional[Mapping[int, int]] = None,
        max_cycles: int = DEFAULT_MAX_CYCLES,
    ):
        if max_cycles <= 0:
            raise ValueError(f"max_cycles must be positive, got {max_cycles}")
        self.max_cycles = max_cycles
        self.seed_registers = seed_registers
        self.seed_memory = seed_memory
        self.source = source
        self.program = parse(source)
        self.state = reset(self.program, seed_registers, seed_memory)

    def load(self, source: str) -> SimulationState:
        """Replace the program text and reset."""
        self.source = source
        self.program = parse(source)
        return self.reset()

    def reset(self) -> SimulationState:
        self.state = reset(self.program, self.seed_registers, self.seed_memory)
        return self.state

    def step(self) -> SimulationState:
        self.state = step_clock(self.state)
        return self.state

    def run(self, max_cycles: Optional[int] = None) -> SimulationState:
        self.state = run(self.state, self.max_cycles if max_cycles is None else max_cycles)
        return self.state

    @property
    def finished(self) -> bool:
        return is_finished(self.state)

    @property
    def hazard(self) -> HazardReport:
        return classify_hazard(self.state)
