"""Tests for Hack instruction execution."""

import logging

import pytest
from tcsim.errors import NoInstruction
from tcsim.instructions import (
    COMP_EVALUATORS,
    JUMP_CONDITIONS,
    Comp,
    Jump,
    compute,
    fetch,
    parse_dest,
    should_jump,
    step,
)
from tcsim.machine import MachineState
from tcsim.parser import parse_program


def _state(A=3, D=5, ram=None, pc=0):
    return MachineState(A=A, D=D, ram=dict(ram if ram is not None else {3: 7}), pc=pc)


def _instr(text):
    return parse_program(text).instructions[0]


class TestCoverage:
    """Every table entry has an implementation."""

    def test_all_comps_have_evaluators(self):
        """COMP_EVALUATORS covers the whole Comp enum."""
        assert set(COMP_EVALUATORS) == set(Comp)

    def test_all_jumps_have_conditions(self):
        """JUMP_CONDITIONS covers the whole Jump enum."""
        assert set(JUMP_CONDITIONS) == set(Jump)

    def test_twenty_eight_expressions(self):
        """The ALU table has 28 expressions besides UNKNOWN."""
        assert len([c for c in Comp if c is not Comp.UNKNOWN]) == 28


class TestCompute:
    """ALU expression tests with A=3, D=5, M=RAM[3]=7."""

    @pytest.mark.parametrize("comp,expected", [
        ("0", 0), ("1", 1), ("-1", -1),
        ("D", 5), ("A", 3), ("M", 7),
        ("!D", -6), ("!A", -4), ("!M", -8),
        ("-D", -5), ("-A", -3), ("-M", -7),
        ("D+1", 6), ("A+1", 4), ("M+1", 8),
        ("D-1", 4), ("A-1", 2), ("M-1", 6),
        ("D+A", 8), ("D+M", 12), ("D-A", 2), ("D-M", -2),
        ("A-D", -2), ("M-D", 2),
        ("D&A", 1), ("D&M", 5), ("D|A", 7), ("D|M", 7),
    ])
    def test_expression(self, comp, expected):
        """Each expression evaluates to its signed 16-bit result."""
        assert compute(comp, _state()) == expected

    def test_overflow_wraps(self):
        """32767 + 1 wraps to -32768."""
        assert compute("D+1", _state(D=32767)) == -32768

    def test_negative_register_pattern(self):
        """Stored 0xFFFF reads as -1."""
        assert compute("D+1", _state(D=0xFFFF)) == 0
        assert compute("D", _state(D=0xFFFF)) == -1

    def test_unknown_comp_logs_warning(self, caplog):
        """Unknown expressions evaluate to 0 with a warning."""
        with caplog.at_level(logging.WARNING, logger="tcsim.instructions"):
            assert compute("X+Y", _state()) == 0
        assert "Unknown computation: X+Y" in caplog.text

    def test_unknown_comp_quiet(self, caplog):
        """warn=False suppresses the warning."""
        with caplog.at_level(logging.WARNING, logger="tcsim.instructions"):
            compute("X+Y", _state(), warn=False)
        assert caplog.text == ""

    def test_enum_lookup(self):
        """from_text maps unknown text to UNKNOWN."""
        assert Comp.from_text("D+M") is Comp.D_PLUS_M
        assert Comp.from_text("M+D") is Comp.UNKNOWN
        assert Comp.from_text(None) is Comp.UNKNOWN
        assert Jump.from_text(None) is Jump.NONE
        assert Jump.from_text("JXX") is Jump.UNKNOWN


class TestJumps:
    """Jump condition tests."""

    @pytest.mark.parametrize("jump,negative,zero,positive", [
        ("JGT", False, False, True),
        ("JEQ", False, True, False),
        ("JGE", False, True, True),
        ("JLT", True, False, False),
        ("JLE", True, True, False),
        ("JNE", True, False, True),
        ("JMP", True, True, True),
        (None, False, False, False),
        ("JXX", False, False, False),
    ])
    def test_conditions(self, jump, negative, zero, positive):
        """Conditions compare the signed result with 0."""
        assert should_jump(jump, -3) is negative
        assert should_jump(jump, 0) is zero
        assert should_jump(jump, 3) is positive

    def test_parse_dest(self):
        """dest is any subset of A, D and M."""
        assert parse_dest("AMD") == {"A", "D", "M"}
        assert parse_dest("M") == {"M"}
        assert parse_dest(None) == set()


class TestStep:
    """Single-step execution tests."""

    def test_a_instruction(self):
        """@value sets A and advances PC."""
        new = step(_state(), _instr("@100"))
        assert new.A == 100
        assert new.pc == 1

    def test_dest_d(self):
        """D=M reads RAM[A]."""
        new = step(_state(), _instr("D=M"))
        assert new.D == 7
        assert new.pc == 1

    def test_dest_m_writes_at_a(self):
        """M=D writes RAM[A]."""
        new = step(_state(), _instr("M=D"))
        assert new.read(3) == 5

    def test_multiple_destinations_use_old_a(self):
        """AM=M+1 writes M at the address held before the instruction."""
        new = step(_state(), _instr("AM=M+1"))
        assert new.A == 8
        assert new.read(3) == 8
        assert new.read(8) == 0

    def test_negative_result_is_stored_as_word(self):
        """D=-1 stores the 16-bit pattern."""
        new = step(_state(), _instr("D=-1"))
        assert new.D == 0xFFFF
        assert new.signed(new.D) == -1

    def test_jump_taken(self):
        """A taken jump sets PC to A."""
        new = step(_state(D=0, pc=4), _instr("D;JEQ"))
        assert new.pc == 3

    def test_jump_not_taken(self):
        """An untaken jump advances PC."""
        new = step(_state(D=1, pc=4), _instr("D;JEQ"))
        assert new.pc == 5

    def test_jump_target_is_written_a(self):
        """A=A+1;JMP jumps to the A it just wrote."""
        new = step(_state(pc=0), _instr("A=A+1;JMP"))
        assert new.A == 4
        assert new.pc == 4

    def test_jump_after_a_instruction(self):
        """@5 then A=A+1;JMP lands on 6."""
        state = step(_state(), _instr("@5"))
        state = step(state, _instr("A=A+1;JMP"))
        assert state.pc == state.A == 6

    def test_unknown_comp_executes_as_zero(self):
        """Unknown expressions write 0 and advance."""
        new = step(_state(), _instr("D=X+Y"))
        assert new.D == 0
        assert new.pc == 1

    def test_input_state_is_not_mutated(self):
        """step returns a new state and leaves its input alone."""
        state = _state()
        before = state.clone()
        step(state, _instr("AM=M+1;JMP"))
        assert state == before

    def test_fetch_past_end(self):
        """Fetching once halted raises NoInstruction."""
        instructions = parse_program("@1").instructions
        assert fetch(_state(pc=0), instructions).value == 1
        with pytest.raises(NoInstruction):
            fetch(_state(pc=1), instructions)

    def test_fetch_negative_pc(self):
        """A negative PC never wraps to the end of the program."""
        instructions = parse_program("@1\n@2\n@3").instructions
        state = MachineState.from_dict({"PC": -1})
        assert not state.is_halted(len(instructions))
        with pytest.raises(NoInstruction):
            fetch(state, instructions)
