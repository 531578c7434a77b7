"""Exceptions raised by the Hack parser and executor.

The arithmetic trace generators never raise for bad input; they return an
error step instead (see ``tcsim.steps.error_step``).
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Serialisable error description for API responses."""
    type: str
    message: str
    step: int = 0
    pc: int = 0
    source_line_no: Optional[int] = None
    source_text: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class TraceError(Exception):
    """Base exception for all tcsim errors."""

    def __init__(
        self,
        message: str,
        *,
        step: int = 0,
        pc: int = 0,
        source_line_no: Optional[int] = None,
        source_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.pc = pc
        self.source_line_no = source_line_no
        self.source_text = source_text

    def with_context(self, step: int, source_line_no: Optional[int], source_text: Optional[str]) -> "TraceError":
        """Attach the execution position at which the error surfaced."""
        self.step = step
        if source_line_no is not None:
            self.source_line_no = source_line_no
            self.source_text = source_text
        return self

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=type(self).__name__,
            message=self.message,
            step=self.step,
            pc=self.pc,
            source_line_no=self.source_line_no,
            source_text=self.source_text,
        )


class ParseError(TraceError):
    """Malformed Hack assembly."""


class InvalidLabel(ParseError):
    """Unbalanced, badly named or duplicate ``(LABEL)`` declaration."""


class InvalidAddress(ParseError):
    """``@`` operand that is neither a 15-bit constant nor a symbol."""


class HackRuntimeError(TraceError):
    """Error while executing a Hack program."""


class StepLimitExceeded(HackRuntimeError):
    """The run loop hit ``max_steps`` before the program halted."""


class NoInstruction(HackRuntimeError):
    """Step requested on a machine whose PC is past the last instruction."""
