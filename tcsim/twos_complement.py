"""Two's complement encoding, decoding and addition traces."""

from .bits import invert_bits, to_binary_string
from .steps import Step, error_step


TWOS_COMPLEMENT_WIDTHS = (4, 8)


def to_twos_complement(decimal: int, bit_width: int) -> str:
    """Render ``decimal`` as a two's complement bit string.

    Out-of-range input is not truncated: the result is then longer than
    ``bit_width``.
    """
    if decimal >= 0:
        return to_binary_string(decimal, bit_width)
    return format((1 << bit_width) + decimal, "b")


def from_twos_complement(binary: str) -> int:
    """Interpret a bit string as two's complement; its length is the width.

    Raises ValueError for an empty or non-binary string.
    """
    if not binary:
        raise ValueError("empty bit string")
    value = int(binary, 2)
    if binary[0] == "1":
        return value - (1 << len(binary))
    return value


def get_valid_range(bit_width: int) -> tuple[int, int]:
    """Inclusive (min, max) of a signed ``bit_width``-bit integer."""
    return -(1 << (bit_width - 1)), (1 << (bit_width - 1)) - 1


def changed_bits(previous: str, current: str) -> list[int]:
    """Indices (MSB = 0) at which two equally long bit strings differ."""
    if not previous:
        return []
    return [i for i, (old, new) in enumerate(zip(previous, current)) if old != new]


def generate_conversion_steps(decimal: int, bit_width: int) -> list[Step]:
    """Trace the magnitude -> invert -> +1 encoding of ``decimal``."""
    low, high = get_valid_range(bit_width)
    if not low <= decimal <= high:
        return [
            error_step(
                "Invalid input",
                f"Number must lie between {low} and {high}",
                detail=f"Input: {decimal}",
                binary="0" * bit_width,
                changed_bits=[],
            )
        ]

    result = to_twos_complement(decimal, bit_width)
    if decimal >= 0:
        return [
            Step(
                title="Final result",
                description=f"{decimal} >= 0 -> plain binary representation",
                detail=result,
                values={"binary": result, "changed_bits": []},
                is_final=True,
                result=decimal,
            )
        ]

    magnitude = to_binary_string(abs(decimal), bit_width)
    inverted = invert_bits(magnitude)
    return [
        Step(
            title="Magnitude in binary",
            description=f"|{decimal}| = {abs(decimal)}",
            detail=magnitude,
            values={"binary": magnitude, "changed_bits": []},
            highlight="magnitude",
        ),
        Step(
            title="Invert bits",
            description="Flip every bit (0 <-> 1)",
            detail=f"{magnitude} -> {inverted}",
            values={"binary": inverted, "changed_bits": changed_bits(magnitude, inverted)},
            highlight="invert",
        ),
        Step(
            title="Add 1",
            description="Add 1 to the inverted value",
            detail=f"{inverted} + 1 = {result}",
            values={"binary": result, "changed_bits": changed_bits(inverted, result)},
            highlight="increment",
        ),
        Step(
            title="Final result",
            description=f"{decimal} in two's complement",
            detail=result,
            values={"binary": result, "changed_bits": []},
            is_final=True,
            result=decimal,
        ),
    ]


def generate_full_table(bit_width: int) -> list[dict]:
    """Every code of ``bit_width`` bits with its unsigned and signed reading."""
    rows = []
    for code in range(1 << bit_width):
        binary = to_binary_string(code, bit_width)
        rows.append({
            "binary": binary,
            "unsigned": code,
            "twos_complement": from_twos_complement(binary),
        })
    return rows


def generate_addition_steps(x: int, y: int, bit_width: int) -> list[Step]:
    """Trace x + y in ``bit_width``-bit two's complement with overflow detection."""
    low, high = get_valid_range(bit_width)
    if not (low <= x <= high and low <= y <= high):
        return [
            error_step(
                "Invalid input",
                f"Numbers must lie between {low} and {high}",
                detail=f"x = {x}, y = {y}",
            )
        ]

    x_binary = to_twos_complement(x, bit_width)
    y_binary = to_twos_complement(y, bit_width)
    steps = [
        Step(
            title="Convert operands",
            description=f"x = {x}, y = {y}",
            detail=f"x = {x_binary}, y = {y_binary}",
            values={"x_binary": x_binary, "y_binary": y_binary, "phase": "convert"},
        )
    ]

    # carry_bits[i] is the carry into position i (MSB = 0); the last entry is c_in = 0
    carry = 0
    carry_in = [0] * bit_width
    result_bits = [0] * bit_width
    for i in range(bit_width - 1, -1, -1):
        carry_in[i] = carry
        total = int(x_binary[i]) + int(y_binary[i]) + carry
        result_bits[i] = total % 2
        carry = total // 2
    final_carry = carry
    result_binary = "".join(map(str, result_bits))

    steps.append(
        Step(
            title="Binary addition",
            description="Bit by bit from right to left",
            detail=f"Carry out: {final_carry}",
            values={
                "x_binary": x_binary,
                "y_binary": y_binary,
                "result_binary": result_binary,
                "carry_bits": [final_carry] + carry_in,
                "phase": "addition",
            },
        )
    )

    result_decimal = from_twos_complement(result_binary)
    expected = x + y
    overflow = x_binary[0] == y_binary[0] and result_binary[0] != x_binary[0]
    if overflow:
        explanation = f"The mathematical result {expected} lies outside [{low}, {high}]"
    elif final_carry:
        explanation = f"The carry {final_carry} is discarded (mod 2^{bit_width})"
    else:
        explanation = "Addition correct"

    steps.append(
        Step(
            title="Result (overflow!)" if overflow else "Result",
            description=(
                f"Overflow: {x} + {y} = {expected} does not fit into {bit_width} bits"
                if overflow
                else f"{x} + {y} = {result_decimal}"
            ),
            detail=f"{result_binary} = {result_decimal}",
            values={
                "result_binary": result_binary,
                "result_decimal": result_decimal,
                "expected": expected,
                "overflow": overflow,
                "carry_out": final_carry,
                "explanation": explanation,
                "phase": "result",
            },
            is_final=True,
            result=result_decimal,
        )
    )
    return steps
