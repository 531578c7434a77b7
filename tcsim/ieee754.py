"""Decimal to IEEE-754 single precision conversion with an explanation trace."""

import math
from dataclasses import dataclass, field
from typing import Optional, Union

from .bits import to_binary_string
from .steps import Step


BIAS = 127
EXPONENT_BITS = 8
MANTISSA_BITS = 23
FRACTION_ITERATIONS = 24
# 2**-149 is the smallest single precision denormal
MAX_FRACTION_POSITIONS = BIAS - 1 + MANTISSA_BITS
FRACTION_SUBSTEPS_SHOWN = 5

ZERO_MANTISSA = "0" * MANTISSA_BITS


@dataclass
class FloatEncoding:
    """Result of an IEEE-754 conversion, including the explanation steps."""
    sign: int = 0
    exponent: str = "0" * EXPONENT_BITS
    mantissa: str = ZERO_MANTISSA
    decimal: float = 0.0
    hex: str = "0x00000000"
    steps: list[Step] = field(default_factory=list)
    special: Optional[str] = None  # "zero" | "infinity" | "denormalized"
    biased_exponent: Optional[int] = None
    real_exponent: Optional[int] = None
    error: Optional[str] = None

    @property
    def bits(self) -> str:
        return f"{self.sign}{self.exponent}{self.mantissa}"

    def to_dict(self) -> dict:
        result = {
            "sign": self.sign,
            "exponent": self.exponent,
            "mantissa": self.mantissa,
            "decimal": self.decimal if math.isfinite(self.decimal) else str(self.decimal),
            "hex": self.hex,
            "steps": [s.to_dict() for s in self.steps],
            "special": self.special,
            "biased_exponent": self.biased_exponent,
            "real_exponent": self.real_exponent,
        }
        if self.error:
            result["error"] = self.error
        return result


def bits_to_hex(sign: int, exponent: str, mantissa: str) -> str:
    """Render sign|exponent|mantissa as 0x-prefixed, 8-digit upper-case hex."""
    return "0x" + format(int(f"{sign}{exponent}{mantissa}", 2), "08X")


def _parse(value: Union[str, float, int]) -> Optional[float]:
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(value.strip())
        except ValueError:
            return None
    if math.isnan(number):
        return None
    return number


def _fraction_bits(fraction: float, has_integer_part: bool) -> tuple[str, list[str]]:
    """Expand a fraction by repeated doubling.

    With an integer part the expansion stops after 24 digits; for pure
    fractions the 24 digits are counted from the first 1, so leading zeros
    of small numbers do not use up the precision.
    """
    digits: list[str] = []
    substeps: list[str] = []
    first_one: Optional[int] = None
    for position in range(MAX_FRACTION_POSITIONS):
        if fraction == 0:
            break
        if has_integer_part and position >= FRACTION_ITERATIONS:
            break
        if first_one is not None and position - first_one >= FRACTION_ITERATIONS:
            break
        fraction *= 2
        if fraction >= 1:
            digits.append("1")
            substeps.append(f"{fraction:.6f} >= 1 -> 1")
            fraction -= 1
            if first_one is None:
                first_one = position
        else:
            digits.append("0")
            substeps.append(f"{fraction:.6f} < 1 -> 0")
    return "".join(digits), substeps


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def decimal_to_ieee754(value: Union[str, float, int]) -> FloatEncoding:
    """Convert a decimal number (text or number) to single precision.

    Non-numeric text and NaN give an encoding with ``error`` set and no steps.
    """
    number = _parse(value)
    if number is None:
        return FloatEncoding(error="Invalid input", decimal=math.nan)

    steps: list[Step] = []
    sign = 1 if math.copysign(1.0, number) < 0 else 0
    magnitude = abs(number)
    steps.append(
        Step(
            title="Determine sign",
            description=f"{number} is {'negative' if sign else 'positive'}",
            detail=f"Sign bit S = {sign}",
            highlight="sign",
        )
    )

    if magnitude == 0:
        steps.append(
            Step(
                title="Special case: zero",
                description="Zero has a dedicated representation",
                detail="E = 0, M = 0 (all bits 0)",
                highlight="special",
                is_final=True,
            )
        )
        return FloatEncoding(
            sign=sign,
            decimal=number,
            hex=bits_to_hex(sign, "0" * EXPONENT_BITS, ZERO_MANTISSA),
            steps=steps,
            special="zero",
        )

    if math.isinf(magnitude):
        steps.append(
            Step(
                title="Special case: infinity",
                description="Infinity is stored as E=255, M=0",
                detail=f"{'-' if sign else '+'}Infinity",
                highlight="special",
                is_final=True,
            )
        )
        return _infinity(sign, number, steps)

    int_part = math.floor(magnitude)
    frac_part = magnitude - int_part
    int_binary = format(int_part, "b")
    steps.append(
        Step(
            title="Integer part in binary",
            description=f"Integer part: {int_part}",
            detail=f"{int_part} (decimal) = {int_binary} (binary)",
            values={"integer_bits": int_binary},
            highlight="integer",
        )
    )

    frac_binary, frac_substeps = _fraction_bits(frac_part, int_part > 0)
    if frac_part > 0:
        steps.append(
            Step(
                title="Fractional part in binary",
                description=f"Fractional part: {frac_part!r}",
                detail=f"{frac_part!r} (decimal) = 0.{_truncate(frac_binary, 12)} (binary)",
                values={
                    "fraction_bits": frac_binary,
                    "substeps": frac_substeps[:FRACTION_SUBSTEPS_SHOWN],
                },
                highlight="fraction",
            )
        )

    shown_fraction = _truncate(frac_binary, 10)
    full_binary = f"0.{shown_fraction}" if int_part == 0 else f"{int_binary}.{shown_fraction or '0'}"
    steps.append(
        Step(
            title="Complete binary representation",
            description=f"|{number}| in binary",
            detail=full_binary,
            highlight="full",
        )
    )

    denormal = False
    if int_part > 0:
        exponent = len(int_binary) - 1
        normalized = int_binary[1:] + frac_binary
    else:
        first_one = frac_binary.find("1")
        if first_one == -1:
            # nothing representable: denormal path, exponent pinned
            exponent = 1 - BIAS
            normalized = ""
            denormal = True
        else:
            exponent = -(first_one + 1)
            normalized = frac_binary[first_one + 1:]

    steps.append(
        Step(
            title="Normalize",
            description="Bring into the form 1.M x 2^e",
            detail=f"1.{normalized[:10]}... x 2^{exponent}",
            values={"exponent": exponent, "normalized": normalized},
            highlight="normalize",
        )
    )

    biased = exponent + BIAS
    if biased >= 255:
        steps.append(
            Step(
                title="Exponent overflow",
                description=f"Exponent {exponent} + bias {BIAS} = {biased} >= 255",
                detail="Result: infinity",
                highlight="overflow",
                is_final=True,
            )
        )
        return _infinity(sign, -math.inf if sign else math.inf, steps)

    if biased <= 0 or denormal:
        # 0.M x 2^-126: the mantissa is the fraction from position 127 on
        mantissa = frac_binary[BIAS - 1:BIAS - 1 + MANTISSA_BITS].ljust(MANTISSA_BITS, "0")
        exponent_bits = "0" * EXPONENT_BITS
        steps.append(
            Step(
                title="Denormalized number",
                description=f"Exponent {exponent} + bias {BIAS} = {biased} <= 0",
                detail=f"E = 0, value = 0.M x 2^{1 - BIAS}, M = {mantissa[:8]}...",
                values={"mantissa": mantissa},
                highlight="denorm",
                is_final=True,
            )
        )
        return FloatEncoding(
            sign=sign,
            exponent=exponent_bits,
            mantissa=mantissa,
            decimal=number,
            hex=bits_to_hex(sign, exponent_bits, mantissa),
            steps=steps,
            special="denormalized",
            biased_exponent=0,
            real_exponent=1 - BIAS,
        )

    exponent_bits = to_binary_string(biased, EXPONENT_BITS)
    steps.append(
        Step(
            title="Compute biased exponent",
            description=f"E = e + bias = {exponent} + {BIAS}",
            detail=f"E = {biased} (decimal) = {exponent_bits} (binary)",
            values={"biased_exponent": biased, "exponent_bits": exponent_bits},
            highlight="exponent",
        )
    )

    mantissa = normalized.ljust(MANTISSA_BITS, "0")[:MANTISSA_BITS]
    steps.append(
        Step(
            title="Extract mantissa",
            description="The hidden bit (1.) is not stored",
            detail=f"M = {mantissa[:8]}...",
            values={"mantissa": mantissa},
            highlight="mantissa",
        )
    )

    hex_value = bits_to_hex(sign, exponent_bits, mantissa)
    steps.append(
        Step(
            title="Assemble",
            description="Concatenate S | E | M",
            detail=f"{sign} | {exponent_bits} | {mantissa[:8]}... = {hex_value}",
            values={"bits": f"{sign}{exponent_bits}{mantissa}", "hex": hex_value},
            highlight="assemble",
            is_final=True,
        )
    )
    return FloatEncoding(
        sign=sign,
        exponent=exponent_bits,
        mantissa=mantissa,
        decimal=number,
        hex=hex_value,
        steps=steps,
        biased_exponent=biased,
        real_exponent=exponent,
    )


def _infinity(sign: int, decimal: float, steps: list[Step]) -> FloatEncoding:
    exponent_bits = "1" * EXPONENT_BITS
    return FloatEncoding(
        sign=sign,
        exponent=exponent_bits,
        mantissa=ZERO_MANTISSA,
        decimal=decimal,
        hex=bits_to_hex(sign, exponent_bits, ZERO_MANTISSA),
        steps=steps,
        special="infinity",
        biased_exponent=255,
    )
