"""Program runner with tracing and step history for the Hack machine."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import ErrorInfo, HackRuntimeError, StepLimitExceeded, TraceError
from .instructions import fetch, step
from .machine import MachineState
from .parser import Instruction, ParsedProgram, parse_program


logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for program execution."""
    max_steps: int = 1000
    initial_ram: dict[int, int] = field(default_factory=dict)
    trace: bool = True
    trace_watch: list[int] = field(default_factory=list)


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    pc: int
    A: int
    D: int
    ram: dict[str, int]
    instr_text: str = ""

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "pc": self.pc,
            "A": self.A,
            "D": self.D,
            "ram": self.ram,
            "instr_text": self.instr_text,
        }


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    steps_executed: int
    final_state: dict
    trace: list[dict]
    pc_history: list[int] = field(default_factory=list)
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "steps_executed": self.steps_executed,
            "final_state": self.final_state,
            "trace": self.trace,
            "pc_history": self.pc_history,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


class HackSession:
    """A parsed program, its current machine state and the snapshot history.

    ``step`` appends the pre-step state to ``history``; ``back`` pops it.
    Nothing is ever executed in reverse.
    """

    def __init__(self, program: ParsedProgram, initial_ram: Optional[dict[int, int]] = None):
        self.program = program
        self.initial_ram = dict(initial_ram or {})
        self.state = MachineState.with_ram(self.initial_ram)
        self.history: list[MachineState] = []

    @classmethod
    def from_source(cls, text: str, initial_ram: Optional[dict[int, int]] = None) -> "HackSession":
        return cls(parse_program(text), initial_ram)

    @property
    def instructions(self) -> list[Instruction]:
        return self.program.instructions

    @property
    def halted(self) -> bool:
        return self.state.is_halted(len(self.instructions))

    @property
    def current_instruction(self) -> Optional[Instruction]:
        if self.halted:
            return None
        return self.instructions[self.state.pc]

    def step(self) -> MachineState:
        """Execute the instruction at PC."""
        instr = fetch(self.state, self.instructions)
        self.history.append(self.state)
        self.state = step(self.state, instr)
        return self.state

    def back(self) -> bool:
        """Return to the state before the last step; False if there is none."""
        if not self.history:
            return False
        self.state = self.history.pop()
        return True

    def reset(self) -> None:
        self.state = MachineState.with_ram(self.initial_ram)
        self.history = []

    def run(self, max_steps: int = 1000) -> int:
        """Step until halted, returning the number of steps taken."""
        executed = 0
        while not self.halted:
            if executed >= max_steps:
                logger.warning("step limit %d exceeded at pc=%d", max_steps, self.state.pc)
                raise StepLimitExceeded(
                    f"Step limit exceeded: {max_steps}",
                    step=executed,
                    pc=self.state.pc,
                )
            self.step()
            executed += 1
        return executed


def run_program(
    program_text: str,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a Hack program until PC passes the last instruction.

    Args:
        program_text: Program source code
        options: Execution options

    Returns:
        RunResult with execution status, trace and final state
    """
    if options is None:
        options = RunOptions()

    state = MachineState.with_ram(options.initial_ram)
    trace_rows: list[dict] = []
    pc_history: list[int] = []
    error_info: Optional[ErrorInfo] = None
    steps_executed = 0

    # Parse program
    try:
        program = parse_program(program_text)
    except TraceError as e:
        return RunResult(
            status="error",
            steps_executed=0,
            final_state=state.get_state(),
            trace=[],
            error=e.to_error_info(),
        )

    instructions = program.instructions
    watch = sorted(set(options.trace_watch))
    current_instr: Optional[Instruction] = None

    try:
        while not state.is_halted(len(instructions)):
            if steps_executed >= options.max_steps:
                logger.warning("step limit %d exceeded at pc=%d", options.max_steps, state.pc)
                raise StepLimitExceeded(
                    f"Step limit exceeded: {options.max_steps}",
                    step=steps_executed,
                    pc=state.pc,
                )

            current_instr = fetch(state, instructions)
            instr_pc = state.pc
            pc_history.append(instr_pc)
            state = step(state, current_instr)
            steps_executed += 1

            if options.trace:
                row = TraceRow(
                    step=steps_executed,
                    pc=instr_pc,
                    A=state.A,
                    D=state.D,
                    ram={str(addr): state.read(addr) for addr in watch},
                    instr_text=current_instr.source_text,
                )
                trace_rows.append(row.to_dict())

    except HackRuntimeError as e:
        if current_instr is None:
            error_info = e.with_context(steps_executed, None, None).to_error_info()
        else:
            error_info = e.with_context(
                steps_executed, current_instr.source_line_no, current_instr.source_text
            ).to_error_info()

    return RunResult(
        status="ok" if error_info is None else "error",
        steps_executed=steps_executed,
        final_state=state.get_state(),
        trace=trace_rows,
        pc_history=pc_history,
        error=error_info,
    )
