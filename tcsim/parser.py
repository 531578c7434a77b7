"""Two-pass parser for Hack assembly with symbol table and label resolution."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidAddress, InvalidLabel


logger = logging.getLogger(__name__)

PREDEFINED_SYMBOLS: dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    **{f"R{i}": i for i in range(16)},
    "SCREEN": 16384,
    "KBD": 24576,
}

VARIABLE_BASE = 16
MAX_CONSTANT = (1 << 15) - 1

_SYMBOL_RE = re.compile(r"^[A-Za-z_.$:][A-Za-z0-9_.$:]*$")
_DECIMAL_LITERAL_RE = re.compile(r"^\d+$")


@dataclass
class Instruction:
    """Parsed instruction with source metadata."""
    type: str  # "A" | "C"
    source_line_no: int
    source_text: str
    value: Optional[int] = None
    symbol: Optional[str] = None
    dest: Optional[str] = None
    comp: Optional[str] = None
    jump: Optional[str] = None

    def to_dict(self) -> dict:
        if self.type == "A":
            return {
                "type": "A",
                "value": self.value,
                "symbol": self.symbol,
                "line": self.source_line_no,
                "raw": self.source_text,
            }
        return {
            "type": "C",
            "dest": self.dest,
            "comp": self.comp,
            "jump": self.jump,
            "line": self.source_line_no,
            "raw": self.source_text,
        }


@dataclass
class ParsedProgram:
    """Result of parsing a program."""
    instructions: list[Instruction]
    symbol_table: dict[str, int]

    @property
    def labels(self) -> dict[str, int]:
        """User-declared labels and variables, without the predefined symbols."""
        return {
            name: addr
            for name, addr in self.symbol_table.items()
            if name not in PREDEFINED_SYMBOLS or PREDEFINED_SYMBOLS[name] != addr
        }


def parse_program(text: str) -> ParsedProgram:
    """Parse Hack assembly source.

    Pass 1 binds every ``(LABEL)`` to the ROM index of the instruction that
    follows it. Pass 2 builds the instructions, allocating unknown ``@name``
    symbols as variables from RAM[16] upwards.

    Raises:
        InvalidLabel: malformed or duplicate label declaration
        InvalidAddress: malformed A-instruction operand
    """
    symbol_table = dict(PREDEFINED_SYMBOLS)
    declared: set[str] = set()
    pending: list[tuple[int, str, str]] = []  # (line_no, clean, original)

    # First pass: labels -> ROM addresses
    for line_no, line in enumerate(text.split("\n"), 1):
        clean = _strip_comment(line).strip()
        if not clean:
            continue

        if clean.startswith("(") or clean.endswith(")"):
            label = _parse_label(clean, line_no, line.strip())
            if label in declared:
                raise InvalidLabel(
                    f"Duplicate label: {label}",
                    source_line_no=line_no,
                    source_text=line.strip(),
                )
            declared.add(label)
            symbol_table[label] = len(pending)
            continue

        pending.append((line_no, clean, line.strip()))

    logger.debug("pass 1: %d instructions, %d labels", len(pending), len(declared))

    # Second pass: instructions and variables
    instructions: list[Instruction] = []
    next_variable = VARIABLE_BASE
    for line_no, clean, original in pending:
        if clean.startswith("@"):
            symbol = clean[1:].strip()
            value = _parse_constant(symbol, line_no, original)
            if value is None:
                if symbol not in symbol_table:
                    symbol_table[symbol] = next_variable
                    logger.debug("allocated variable %s at RAM[%d]", symbol, next_variable)
                    next_variable += 1
                value = symbol_table[symbol]
                instructions.append(Instruction(
                    type="A",
                    value=value,
                    symbol=symbol,
                    source_line_no=line_no,
                    source_text=original,
                ))
            else:
                instructions.append(Instruction(
                    type="A",
                    value=value,
                    source_line_no=line_no,
                    source_text=original,
                ))
        else:
            dest, comp, jump = _split_c_instruction(clean)
            instructions.append(Instruction(
                type="C",
                dest=dest,
                comp=comp,
                jump=jump,
                source_line_no=line_no,
                source_text=original,
            ))

    return ParsedProgram(instructions=instructions, symbol_table=symbol_table)


def parse(text: str) -> ParsedProgram:
    return parse_program(text)


def _strip_comment(line: str) -> str:
    """Remove ``//`` comment from line."""
    idx = line.find("//")
    if idx >= 0:
        return line[:idx]
    return line


def _parse_label(clean: str, line_no: int, source_text: str) -> str:
    if not (clean.startswith("(") and clean.endswith(")")):
        raise InvalidLabel(
            f"Unbalanced label declaration: {clean}",
            source_line_no=line_no,
            source_text=source_text,
        )
    label = clean[1:-1].strip()
    if not _SYMBOL_RE.fullmatch(label):
        raise InvalidLabel(
            f"Invalid label name: {label!r}",
            source_line_no=line_no,
            source_text=source_text,
        )
    return label


def _parse_constant(symbol: str, line_no: int, source_text: str) -> Optional[int]:
    """Return the value of a decimal constant, or None for a symbol."""
    if not symbol:
        raise InvalidAddress(
            "A-instruction without operand",
            source_line_no=line_no,
            source_text=source_text,
        )
    if _DECIMAL_LITERAL_RE.fullmatch(symbol):
        value = int(symbol, 10)
        if value > MAX_CONSTANT:
            raise InvalidAddress(
                f"Constant out of range (0..{MAX_CONSTANT}): {value}",
                source_line_no=line_no,
                source_text=source_text,
            )
        return value
    if not _SYMBOL_RE.fullmatch(symbol):
        raise InvalidAddress(
            f"Invalid symbol: {symbol}",
            source_line_no=line_no,
            source_text=source_text,
        )
    return None


def _split_c_instruction(text: str) -> tuple[Optional[str], str, Optional[str]]:
    """Split ``dest=comp;jump``; dest and jump are optional."""
    text = "".join(text.split())
    dest = None
    jump = None

    eq = text.find("=")
    if eq >= 0:
        dest = text[:eq]
        text = text[eq + 1:]

    semi = text.find(";")
    if semi >= 0:
        jump = text[semi + 1:]
        text = text[:semi]

    return dest, text, jump
