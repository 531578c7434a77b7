"""Instruction execution for the Hack machine."""

import enum
import logging
from typing import Callable, Optional

from .errors import NoInstruction
from .machine import MachineState, normalize, to_word
from .parser import Instruction


logger = logging.getLogger(__name__)


class Comp(enum.Enum):
    """Supported ALU expressions; anything else is UNKNOWN."""
    ZERO = "0"
    ONE = "1"
    MINUS_ONE = "-1"
    D = "D"
    A = "A"
    M = "M"
    NOT_D = "!D"
    NOT_A = "!A"
    NOT_M = "!M"
    NEG_D = "-D"
    NEG_A = "-A"
    NEG_M = "-M"
    D_PLUS_1 = "D+1"
    A_PLUS_1 = "A+1"
    M_PLUS_1 = "M+1"
    D_MINUS_1 = "D-1"
    A_MINUS_1 = "A-1"
    M_MINUS_1 = "M-1"
    D_PLUS_A = "D+A"
    D_PLUS_M = "D+M"
    D_MINUS_A = "D-A"
    D_MINUS_M = "D-M"
    A_MINUS_D = "A-D"
    M_MINUS_D = "M-D"
    D_AND_A = "D&A"
    D_AND_M = "D&M"
    D_OR_A = "D|A"
    D_OR_M = "D|M"
    UNKNOWN = "?"

    @classmethod
    def from_text(cls, text: Optional[str]) -> "Comp":
        if text is None or text == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


class Jump(enum.Enum):
    """Jump conditions; NONE when the instruction has no jump field."""
    NONE = ""
    JGT = "JGT"
    JEQ = "JEQ"
    JGE = "JGE"
    JLT = "JLT"
    JLE = "JLE"
    JNE = "JNE"
    JMP = "JMP"
    UNKNOWN = "?"

    @classmethod
    def from_text(cls, text: Optional[str]) -> "Jump":
        if not text:
            return cls.NONE
        if text == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


# Operand order for every evaluator: (A, D, M)
CompEvaluator = Callable[[int, int, int], int]

COMP_EVALUATORS: dict[Comp, CompEvaluator] = {
    Comp.ZERO: lambda a, d, m: 0,
    Comp.ONE: lambda a, d, m: 1,
    Comp.MINUS_ONE: lambda a, d, m: -1,
    Comp.D: lambda a, d, m: d,
    Comp.A: lambda a, d, m: a,
    Comp.M: lambda a, d, m: m,
    Comp.NOT_D: lambda a, d, m: ~d,
    Comp.NOT_A: lambda a, d, m: ~a,
    Comp.NOT_M: lambda a, d, m: ~m,
    Comp.NEG_D: lambda a, d, m: -d,
    Comp.NEG_A: lambda a, d, m: -a,
    Comp.NEG_M: lambda a, d, m: -m,
    Comp.D_PLUS_1: lambda a, d, m: d + 1,
    Comp.A_PLUS_1: lambda a, d, m: a + 1,
    Comp.M_PLUS_1: lambda a, d, m: m + 1,
    Comp.D_MINUS_1: lambda a, d, m: d - 1,
    Comp.A_MINUS_1: lambda a, d, m: a - 1,
    Comp.M_MINUS_1: lambda a, d, m: m - 1,
    Comp.D_PLUS_A: lambda a, d, m: d + a,
    Comp.D_PLUS_M: lambda a, d, m: d + m,
    Comp.D_MINUS_A: lambda a, d, m: d - a,
    Comp.D_MINUS_M: lambda a, d, m: d - m,
    Comp.A_MINUS_D: lambda a, d, m: a - d,
    Comp.M_MINUS_D: lambda a, d, m: m - d,
    Comp.D_AND_A: lambda a, d, m: d & a,
    Comp.D_AND_M: lambda a, d, m: d & m,
    Comp.D_OR_A: lambda a, d, m: d | a,
    Comp.D_OR_M: lambda a, d, m: d | m,
    Comp.UNKNOWN: lambda a, d, m: 0,
}

JUMP_CONDITIONS: dict[Jump, Callable[[int], bool]] = {
    Jump.NONE: lambda v: False,
    Jump.JGT: lambda v: v > 0,
    Jump.JEQ: lambda v: v == 0,
    Jump.JGE: lambda v: v >= 0,
    Jump.JLT: lambda v: v < 0,
    Jump.JLE: lambda v: v <= 0,
    Jump.JNE: lambda v: v != 0,
    Jump.JMP: lambda v: True,
    Jump.UNKNOWN: lambda v: False,
}


def compute(comp_text: Optional[str], state: MachineState, warn: bool = True) -> int:
    """Evaluate a comp expression against A, D and M=RAM[A].

    The result is a 16-bit signed integer. Unknown expressions evaluate to 0.
    """
    comp = Comp.from_text(comp_text)
    if comp is Comp.UNKNOWN and warn:
        logger.warning("Unknown computation: %s", comp_text)
    value = COMP_EVALUATORS[comp](state.A, state.D, state.M)
    return normalize(value)


def should_jump(jump_text: Optional[str], value: int) -> bool:
    """Check if the jump condition holds for the computed value."""
    return JUMP_CONDITIONS[Jump.from_text(jump_text)](value)


def parse_dest(dest: Optional[str]) -> set[str]:
    """Registers named in a dest field (any subset of A, D, M)."""
    if not dest:
        return set()
    return {reg for reg in "ADM" if reg in dest}


# Instruction executor type: mutates the given copy
InstructionExecutor = Callable[[Instruction, MachineState, MachineState], None]


def execute_a(instr: Instruction, old: MachineState, new: MachineState) -> None:
    """@value: A := value"""
    new.A = to_word(instr.value)
    new.pc += 1


def execute_c(instr: Instruction, old: MachineState, new: MachineState) -> None:
    """dest=comp;jump"""
    value = compute(instr.comp, old)
    targets = parse_dest(instr.dest)
    if "A" in targets:
        new.A = to_word(value)
    if "D" in targets:
        new.D = to_word(value)
    if "M" in targets:
        new.write(old.A, value)

    if should_jump(instr.jump, value):
        new.pc = new.A
    else:
        new.pc += 1


INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "A": execute_a,
    "C": execute_c,
}


def step(state: MachineState, instr: Instruction) -> MachineState:
    """Execute a single instruction and return the next state.

    ``state`` is never modified.
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.type)
    if executor is None:
        raise ValueError(f"No executor for instruction type: {instr.type}")
    new_state = state.clone()
    executor(instr, state, new_state)
    logger.debug("pc=%d %s -> A=%d D=%d", state.pc, instr.source_text, new_state.A, new_state.D)
    return new_state


def fetch(state: MachineState, instructions: list[Instruction]) -> Instruction:
    """Instruction at PC, raising NoInstruction once halted or for a negative PC."""
    if state.pc < 0 or state.is_halted(len(instructions)):
        raise NoInstruction(f"No instruction at address {state.pc}", pc=state.pc)
    return instructions[state.pc]
