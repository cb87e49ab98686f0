"""
Pipeline Trace

Records one CycleSnapshot per clock tick so a run can be inspected after the
fact: which instruction sat in which stage, when the pipeline stalled or
flushed, and what hazard was visible at each cycle.

Usage:
    from rvaccel.isa import parse, SAMPLE_PROGRAM
    from rvaccel.pipeline import reset, PipelineTrace

    trace = PipelineTrace.record(reset(parse(SAMPLE_PROGRAM)))
    print(trace.render_timeline())
    trace.cpi
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .engine import is_finished, step_clock
from .hazards import HazardKind, classify_hazard
from .state import SimulationState, Stage


# Single-character cells for the timeline grid
STALL_MARK = "*"
FLUSH_MARK = "x"


@dataclass(frozen=True)
class CycleSnapshot:
    """Stage occupancy and status after one clock tick."""
    cycle: int
    pc: int
    stages: Dict[Stage, str]            # stage -> describe() text
    stage_pcs: Dict[Stage, Optional[int]]
    stalled: bool
    flushed: bool
    hazard: HazardKind
    hazard_message: str
    last_written_reg: Optional[int] = None

    @classmethod
    def from_state(cls, state: SimulationState, previous: SimulationState) -> 'CycleSnapshot':
        report = classify_hazard(state)
        return cls(
            cycle=state.cycle,
            pc=state.pc,
            stages={stage: state.stage(stage).describe() for stage in Stage},
            stage_pcs={
                stage: (latch.pc if latch.instruction is not None else None)
                for stage, latch in state.stages.items()
            },
            stalled=state.stall_cycles > previous.stall_cycles,
            flushed=state.flush_count > previous.flush_count,
            hazard=report.kind,
            hazard_message=report.message,
            last_written_reg=state.last_written_reg,
        )


class PipelineTrace:
    """Ordered list of cycle snapshots plus the final state of the run."""

    def __init__(self, initial: SimulationState):
        self.initial = initial
        self.final = initial
        self.snapshots: List[CycleSnapshot] = []

    @classmethod
    def record(cls, state: SimulationState, max_cycles: Optional[int] = None) -> 'PipelineTrace':
        """Run ``state`` to completion (or ``max_cycles`` ticks), recording every tick."""
        trace = cls(state)
        while not is_finished(trace.final):
            if max_cycles is not None and len(trace.snapshots) >= max_cycles:
                break
            trace.add(step_clock(trace.final))
        return trace

    def add(self, state: SimulationState) -> CycleSnapshot:
        snapshot = CycleSnapshot.from_state(state, self.final)
        self.snapshots.append(snapshot)
        self.final = state
        return snapshot

    def __len__(self) -> int:
        return len(self.snapshots)

    @property
    def cycles(self) -> int:
        return self.final.cycle - self.initial.cycle

    @property
    def retired(self) -> int:
        return self.final.retired - self.initial.retired

    @property
    def stall_cycles(self) -> int:
        return self.final.stall_cycles - self.initial.stall_cycles

    @property
    def flush_count(self) -> int:
        return self.final.flush_count - self.initial.flush_count

    @property
    def cpi(self) -> float:
        """Cycles per retired instruction (0.0 when nothing retired)."""
        if self.retired == 0:
            return 0.0
        return self.cycles / self.retired

    def occupancy(self) -> Dict[int, Dict[int, Stage]]:
        """pc -> {cycle: stage} for every instruction that entered the pipeline."""
        rows: Dict[int, Dict[int, Stage]] = {}
        for snap in self.snapshots:
            for stage, pc in snap.stage_pcs.items():
                if pc is not None:
                    rows.setdefault(pc, {})[snap.cycle] = stage
        return rows

    def render_timeline(self) -> str:
        """
        Classic pipeline diagram: one row per instruction, one column per cycle.

        A stalled instruction repeats its stage; cycles in which a branch
        flushed the front end are marked in the footer row.
        """
        if not self.snapshots:
            return "(no cycles recorded)"

        program = self.initial.program
        cycles = [snap.cycle for snap in self.snapshots]
        rows = self.occupancy()

        label_width = max([len(program[pc].raw) for pc in rows] + [len("cycle")])
        width = max(len(stage.name) for stage in Stage) + 1

        lines = []
        header = "cycle".ljust(label_width) + " |" + "".join(f"{c:>{width}}" for c in cycles)
        lines.append(header)
        lines.append("-" * len(header))

        for pc in sorted(rows):
            cells = rows[pc]
            line = program[pc].raw.ljust(label_width) + " |"
            for cycle in cycles:
                stage = cells.get(cycle)
                line += f"{stage.name if stage else '':>{width}}"
            lines.append(line)

        marks = []
        for snap in self.snapshots:
            if snap.flushed:
                marks.append(FLUSH_MARK)
            elif snap.stalled:
                marks.append(STALL_MARK)
            else:
                marks.append("")
        lines.append("-" * len(header))
        lines.append("events".ljust(label_width) + " |" + "".join(f"{m:>{width}}" for m in marks))
        lines.append(
            f"{self.retired} retired in {self.cycles} cycles "
            f"(CPI {self.cpi:.2f}, {self.stall_cycles} stall, {self.flush_count} flush)"
        )
        return "\n".join(lines)
