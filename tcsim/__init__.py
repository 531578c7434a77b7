"""Step-by-step trace generators for Technical Computer Science topics."""

from .adders import generate_steps
from .division import generate_division_steps
from .errors import TraceError, ParseError, HackRuntimeError, StepLimitExceeded
from .ieee754 import decimal_to_ieee754, FloatEncoding
from .machine import MachineState
from .normal_form import generate_dnf_steps, generate_knf_steps, generate_truth_table
from .parser import parse_program
from .runner import run_program, RunOptions, RunResult, HackSession
from .steps import Step
from .twos_complement import generate_addition_steps, generate_conversion_steps

__all__ = [
    "generate_steps",
    "generate_division_steps",
    "decimal_to_ieee754",
    "FloatEncoding",
    "generate_dnf_steps",
    "generate_knf_steps",
    "generate_truth_table",
    "generate_addition_steps",
    "generate_conversion_steps",
    "parse_program",
    "run_program",
    "RunOptions",
    "RunResult",
    "HackSession",
    "MachineState",
    "Step",
    "TraceError",
    "ParseError",
    "HackRuntimeError",
    "StepLimitExceeded",
]
