"""Hack machine state: A and D registers, sparse RAM and the program counter."""

from dataclasses import dataclass, field
from typing import Optional


WORD_BITS = 16
WORD_MASK = (1 << WORD_BITS) - 1
SIGN_BIT = 1 << (WORD_BITS - 1)


def normalize(value: int) -> int:
    """Coerce to a 16-bit signed integer (values >= 2**15 become negative)."""
    value &= WORD_MASK
    if value & SIGN_BIT:
        value -= 1 << WORD_BITS
    return value


def to_word(value: int) -> int:
    """Mask to the stored 16-bit pattern."""
    return value & WORD_MASK


@dataclass
class MachineState:
    """Register and memory snapshot.

    Registers and RAM cells hold masked 16-bit patterns; use ``signed`` to
    read them as two's complement. Unset RAM cells read as 0.
    """
    A: int = 0
    D: int = 0
    ram: dict[int, int] = field(default_factory=dict)
    pc: int = 0

    @classmethod
    def create(cls) -> "MachineState":
        return cls()

    @classmethod
    def with_ram(cls, initial_ram: Optional[dict[int, int]] = None) -> "MachineState":
        """Fresh state with preset RAM cells."""
        ram = {}
        if initial_ram:
            for addr, val in initial_ram.items():
                ram[int(addr)] = to_word(val)
        return cls(ram=ram)

    def clone(self) -> "MachineState":
        return MachineState(A=self.A, D=self.D, ram=dict(self.ram), pc=self.pc)

    def read(self, addr: int) -> int:
        """Read a RAM cell (0 when never written)."""
        return self.ram.get(addr, 0)

    def write(self, addr: int, value: int) -> None:
        self.ram[addr] = to_word(value)

    @property
    def M(self) -> int:
        return self.read(self.A)

    def signed(self, value: int) -> int:
        return normalize(value)

    def is_halted(self, instruction_count: int) -> bool:
        return self.pc >= instruction_count

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "A": self.A,
            "D": self.D,
            "PC": self.pc,
            "RAM": {str(addr): val for addr, val in sorted(self.ram.items())},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MachineState":
        return cls(
            A=to_word(int(data.get("A", 0))),
            D=to_word(int(data.get("D", 0))),
            ram={int(k): to_word(int(v)) for k, v in data.get("RAM", {}).items()},
            pc=int(data.get("PC", 0)),
        )


def is_halted(state: MachineState, instruction_count: int) -> bool:
    """True once PC has run past the last instruction."""
    return state.is_halted(instruction_count)


def get_changes(old: MachineState, new: MachineState) -> list[dict]:
    """Registers and RAM cells whose value differs between two snapshots."""
    changes = []
    for name, before, after in (("A", old.A, new.A), ("D", old.D, new.D), ("PC", old.pc, new.pc)):
        if before != after:
            changes.append({"register": name, "from": before, "to": after})
    for addr in sorted(set(old.ram) | set(new.ram)):
        before, after = old.read(addr), new.read(addr)
        if before != after:
            changes.append({"register": f"RAM[{addr}]", "from": before, "to": after})
    return changes
