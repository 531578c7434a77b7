"""Fixed-width bit-vector helpers shared by every trace generator.

Bit vectors are plain lists of 0/1 ints, most significant bit first.
"""

from typing import Sequence


def mask(width: int) -> int:
    """Return the all-ones mask for ``width`` bits."""
    return (1 << width) - 1


def wrap(value: int, width: int) -> int:
    """Reduce ``value`` modulo 2**width (two's complement wrap)."""
    return value & mask(width)


def to_signed(value: int, width: int) -> int:
    """Interpret the low ``width`` bits of ``value`` as two's complement."""
    value = wrap(value, width)
    if value & (1 << (width - 1)):
        value -= 1 << width
    return value


def is_negative(value: int, width: int) -> bool:
    """True when the sign bit of the ``width``-bit pattern is set."""
    return bool(wrap(value, width) & (1 << (width - 1)))


def bits_of(value: int, width: int) -> list[int]:
    """Extract ``width`` bits MSB-first; negative values wrap first."""
    value = wrap(value, width)
    return [(value >> i) & 1 for i in range(width - 1, -1, -1)]


def value_of_bits(bits: Sequence[int]) -> int:
    """Unsigned reconstruction of an MSB-first bit sequence."""
    value = 0
    for bit in bits:
        value = (value << 1) | (bit & 1)
    return value


def to_binary_string(value: int, width: int) -> str:
    """Zero-padded binary text of an unsigned value.

    Values wider than ``width`` are rendered in full, never truncated.
    """
    return format(value, "b").zfill(width)


def invert_bits(binary: str) -> str:
    """Flip every digit of a binary string."""
    return "".join("1" if digit == "0" else "0" for digit in binary)


def majority(a: int, b: int, c: int) -> int:
    """Carry-out of a full adder."""
    return (a & b) | (a & c) | (b & c)
