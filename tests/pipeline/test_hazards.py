"""
Tests for hazard detection, operand forwarding and hazard classification.
"""

from rvaccel.isa import parse, parse_line
from rvaccel.pipeline import (
    EMPTY_REGISTER,
    HazardKind,
    NO_HAZARD,
    PipelineRegister,
    RegisterFile,
    Stage,
    classify_hazard,
    detect_load_use,
    forward_operand,
    forwarding_source,
    reset,
    step_clock,
)


def latch(text, result=None, pc=0):
    return PipelineRegister(instruction=parse_line(text, pc), pc=pc, result=result)


def stages(**kwargs):
    table = {stage: EMPTY_REGISTER for stage in Stage}
    for name, value in kwargs.items():
        table[Stage[name.upper()]] = value
    return table


def advance(source, cycles):
    state = reset(parse(source))
    for _ in range(cycles):
        state = step_clock(state)
    return state


class TestDetectLoadUse:

    def test_dependent_instruction(self):
        assert detect_load_use(latch("lw x2, 0(x1)"), latch("addi x3, x2, 4")) == 2

    def test_second_operand(self):
        assert detect_load_use(latch("lw x2, 0(x1)"), latch("add x3, x1, x2")) == 2

    def test_store_value_operand(self):
        assert detect_load_use(latch("lw x2, 0(x1)"), latch("sw x2, 4(x1)")) == 2

    def test_independent_instruction(self):
        assert detect_load_use(latch("lw x2, 0(x1)"), latch("addi x3, x4, 4")) is None

    def test_not_a_load(self):
        assert detect_load_use(latch("add x2, x1, x1"), latch("addi x3, x2, 4")) is None

    def test_x0_destination(self):
        assert detect_load_use(latch("lw x0, 0(x1)"), latch("add x3, x0, x0")) is None

    def test_empty_stages(self):
        assert detect_load_use(EMPTY_REGISTER, latch("addi x3, x2, 4")) is None
        assert detect_load_use(latch("lw x2, 0(x1)"), EMPTY_REGISTER) is None


class TestForwardOperand:
    """Lookup order: MEM, EX, WB, register file"""

    def test_register_file_fallback(self):
        registers = RegisterFile([0, 0, 0, 0, 0, 77])
        assert forward_operand(5, stages(), registers) == 77
        assert forwarding_source(5, stages()) is None

    def test_each_stage_forwards(self):
        registers = RegisterFile()
        for stage in ("mem", "ex", "wb"):
            table = stages(**{stage: latch("add x5, x1, x1", result=10)})
            assert forward_operand(5, table, registers) == 10
            assert forwarding_source(5, table) == Stage[stage.upper()]

    def test_mem_has_priority(self):
        table = stages(
            mem=latch("add x5, x1, x1", result=10),
            ex=latch("add x5, x1, x1", result=20),
            wb=latch("add x5, x1, x1", result=30),
        )
        assert forward_operand(5, table, RegisterFile()) == 10

    def test_ex_before_wb(self):
        table = stages(
            ex=latch("add x5, x1, x1", result=20),
            wb=latch("add x5, x1, x1", result=30),
        )
        assert forward_operand(5, table, RegisterFile()) == 20

    def test_no_result_not_forwarded(self):
        # A store has no destination; a stage with no result is skipped
        table = stages(ex=latch("add x5, x1, x1", result=None))
        registers = RegisterFile([0, 0, 0, 0, 0, 3])
        assert forward_operand(5, table, registers) == 3

    def test_zero_register(self):
        table = stages(mem=latch("add x0, x1, x1", result=10))
        assert forward_operand(0, table, RegisterFile()) == 0
        assert forward_operand(None, table, RegisterFile()) == 0


class TestClassifyHazard:

    def test_reset_state_has_no_hazard(self):
        report = classify_hazard(reset(parse("add x1, x2, x3")))
        assert report == NO_HAZARD
        assert report.kind == HazardKind.NONE
        assert not report.is_hazard

    def test_load_use(self):
        report = classify_hazard(advance("lw x2,0(x1)\naddi x3,x2,4", 3))
        assert report.kind == HazardKind.LOAD_USE
        assert report.register == 2
        assert report.message == "DATA HAZARD: Load-Use dependency on x2. Stall required."
        assert report.is_hazard

    def test_forward_from_ex(self):
        report = classify_hazard(advance("add x5,x4,x1\nsub x6,x5,x2", 3))
        assert report.kind == HazardKind.FORWARD_EX
        assert report.register == 5
        assert report.source == Stage.EX
        assert report.message == "FORWARDING: x5 forwarded from EX to ID."
        assert report.is_forwarding

    def test_forward_from_mem(self):
        report = classify_hazard(advance("add x5,x4,x1\nnop\nsub x6,x5,x2", 4))
        assert report.kind == HazardKind.FORWARD_MEM
        assert report.register == 5
        assert report.message == "FORWARDING: x5 forwarded from MEM to ID."

    def test_control(self):
        report = classify_hazard(advance("beq x4,x0,end\nnop\nend:\nadd x8,x8,x9", 3))
        assert report.kind == HazardKind.CONTROL
        assert "beq x4,x0,end" in report.message
        assert report.is_hazard

    def test_load_use_outranks_control(self):
        # EX holds lw, ID holds a dependent branch
        report = classify_hazard(advance("lw x2,0(x1)\nbeq x2,x0,end\nend:\nnop", 3))
        assert report.kind == HazardKind.LOAD_USE
