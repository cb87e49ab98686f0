"""
Tests for the assembler.

Tests cover:
- Operand layout of every supported opcode
- Label table construction
- Comments, blank lines and case handling
- Permissive handling of malformed input
"""

import pytest

from rvaccel.isa import (
    Add,
    Addi,
    Beq,
    Jal,
    Lw,
    Opcode,
    Sub,
    Sw,
    Unknown,
    SAMPLE_PROGRAM,
    parse,
    parse_immediate,
    parse_line,
    parse_register,
)


class TestParseRegister:
    """Register token parsing"""

    def test_numeric_registers(self):
        assert parse_register("x0") == 0
        assert parse_register("x31") == 31
        assert parse_register("X5") == 5

    def test_out_of_range_rejected(self):
        assert parse_register("x32") is None
        assert parse_register("x100") is None

    def test_abi_names(self):
        assert parse_register("zero") == 0
        assert parse_register("ra") == 1
        assert parse_register("sp") == 2
        assert parse_register("t0") == 5
        assert parse_register("a0") == 10
        assert parse_register("t6") == 31

    def test_garbage(self):
        assert parse_register("") is None
        assert parse_register(None) is None
        assert parse_register("r1") is None
        assert parse_register("x") is None


class TestParseImmediate:

    def test_decimal_and_hex(self):
        assert parse_immediate("4") == 4
        assert parse_immediate("-8") == -8
        assert parse_immediate("0x10") == 16

    def test_leading_zero(self):
        assert parse_immediate("08") == 8

    def test_malformed(self):
        assert parse_immediate("abc") is None
        assert parse_immediate(None) is None


class TestParseLine:
    """Operand layout per opcode"""

    def test_add_sub(self):
        add = parse_line("add x5, x4, x1", 3)
        assert isinstance(add, Add)
        assert (add.pc, add.rd, add.rs1, add.rs2) == (3, 5, 4, 1)
        assert add.dest_reg == 5
        assert add.source_regs == (4, 1)

        sub = parse_line("sub x6,x5,x2", 0)
        assert isinstance(sub, Sub)
        assert (sub.rd, sub.rs1, sub.rs2) == (6, 5, 2)

    def test_addi(self):
        instr = parse_line("addi x3, x2, 4", 0)
        assert isinstance(instr, Addi)
        assert (instr.rd, instr.rs1, instr.imm) == (3, 2, 4)
        assert instr.source_regs == (2, None)

    def test_lw(self):
        instr = parse_line("lw x2, 0(x1)", 0)
        assert isinstance(instr, Lw)
        assert (instr.rd, instr.rs1, instr.imm) == (2, 1, 0)

    def test_lw_negative_and_missing_offset(self):
        assert parse_line("lw x2, -4(x1)", 0).imm == -4
        assert parse_line("lw x2, (x1)", 0).imm == 0

    def test_sw_stores_first_operand(self):
        instr = parse_line("sw x3, 4(x1)", 0)
        assert isinstance(instr, Sw)
        assert instr.rs2 == 3
        assert instr.rs1 == 1
        assert instr.imm == 4
        assert instr.dest_reg is None
        assert instr.source_regs == (1, 3)

    def test_beq(self):
        instr = parse_line("beq x4, x0, end", 0)
        assert isinstance(instr, Beq)
        assert (instr.rs1, instr.rs2, instr.label) == (4, 0, "end")
        assert instr.dest_reg is None

    def test_jal(self):
        instr = parse_line("jal x1, func", 2)
        assert isinstance(instr, Jal)
        assert (instr.rd, instr.label) == (1, "func")
        assert instr.dest_reg == 1
        assert instr.source_regs == (None, None)

    def test_mnemonic_case_insensitive(self):
        instr = parse_line("ADD x1, x2, x3", 0)
        assert instr.opcode == Opcode.ADD
        assert instr.raw == "ADD x1, x2, x3"

    def test_unknown_opcode(self):
        instr = parse_line("nop", 4)
        assert isinstance(instr, Unknown)
        assert instr.mnemonic == "nop"
        assert instr.opcode is None
        assert instr.dest_reg is None

    def test_missing_operands_are_none(self):
        instr = parse_line("add x1", 0)
        assert isinstance(instr, Add)
        assert instr.rd == 1
        assert instr.rs1 is None
        assert instr.rs2 is None

    def test_malformed_memory_operand(self):
        instr = parse_line("lw x2, 0[x1]", 0)
        assert isinstance(instr, Lw)
        assert instr.rs1 is None
        assert instr.imm is None

    def test_out_of_range_register_operand(self):
        instr = parse_line("addi x40, x1, 1", 0)
        assert instr.rd is None


class TestParse:
    """Whole-program assembly"""

    def test_labels_point_at_next_instruction(self):
        program = parse("add x1, x0, x0\nloop:\naddi x1, x1, 1\nbeq x1, x0, loop\n")
        assert len(program) == 3
        assert program.labels == {"loop": 1}
        assert program.resolve("loop") == 1
        assert program.resolve("missing") is None

    def test_label_and_instruction_on_one_line(self):
        program = parse("start: addi x1, x0, 1\nbeq x0, x0, start")
        assert program.labels == {"start": 0}
        assert isinstance(program[0], Addi)
        assert len(program) == 2

    def test_comments_and_blank_lines_skipped(self):
        program = parse("""
            # header comment

            lw x2, 0(x1)   # trailing comment
            # another
        """)
        assert len(program) == 1
        assert program[0].raw == "lw x2, 0(x1)"

    def test_pc_is_instruction_index(self):
        program = parse("add x1, x0, x0\nend:\nsub x2, x0, x0")
        assert [i.pc for i in program.instructions] == [0, 1]

    def test_sample_program(self):
        program = parse(SAMPLE_PROGRAM)
        assert len(program) == 8
        assert program.labels == {"end": 7}
        assert isinstance(program[6], Unknown)

    @pytest.mark.parametrize("text", [
        "",
        "add",
        "lw x1, 4(",
        "beq x1,",
        ":",
        "x1, x2, x3",
        "jal",
        "sw , (x1)",
        "addi x1, x2, notanumber",
    ])
    def test_never_raises(self, text):
        program = parse(text)
        assert len(program) <= 1
