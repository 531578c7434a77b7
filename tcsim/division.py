"""Restoring and non-restoring binary division traces.

Registers follow the lecture notation: ``x`` accumulates the remainder,
``y`` starts as the dividend and ends as the quotient, ``z`` holds the
divisor and ``c`` is the carry/borrow bit left of ``x``.
"""

from .bits import mask, to_binary_string, to_signed, wrap
from .steps import Step, error_step


DIVISION_WIDTHS = (4, 5, 6, 8)
METHODS = ("restoring", "non-restoring")


def _registers(x: int, y: int, z: int, c: int, width: int) -> dict:
    return {
        "x": x,
        "y": y,
        "z": z,
        "c": c,
        "x_bits": to_binary_string(x, width),
        "y_bits": to_binary_string(y, width),
        "z_bits": to_binary_string(z, width),
    }


def _validate(dividend: int, divisor: int, bit_width: int, method: str):
    if bit_width not in DIVISION_WIDTHS:
        return error_step(
            "Invalid bit width",
            f"Bit width must be one of {', '.join(map(str, DIVISION_WIDTHS))}",
            detail=f"Input: {bit_width}",
        )
    if method not in METHODS:
        return error_step(
            "Invalid method",
            f"Method must be one of {', '.join(METHODS)}",
            detail=f"Input: {method}",
        )
    if divisor == 0:
        return error_step("Division by zero", "Division by 0 is not possible")
    limit = mask(bit_width)
    for name, value in (("Dividend", dividend), ("Divisor", divisor)):
        if not 0 <= value <= limit:
            return error_step(
                "Invalid input",
                f"{name} must lie between 0 and {limit} for {bit_width} bits",
                detail=f"Input: {value}",
            )
    return None


def generate_division_steps(
    dividend: int,
    divisor: int,
    bit_width: int = 4,
    method: str = "restoring",
) -> list[Step]:
    """Trace an N-cycle shift/subtract division.

    Invalid input (including ``divisor == 0``) yields a single error step.
    """
    invalid = _validate(dividend, divisor, bit_width, method)
    if invalid is not None:
        return [invalid]

    steps = [
        Step(
            title="Start",
            description="Initialisation. Dividend in y, divisor in z, x = 0.",
            values=_registers(0, dividend, divisor, 0, bit_width),
            highlight="init",
        )
    ]
    if method == "restoring":
        x, y, c = _restoring_cycles(steps, dividend, divisor, bit_width)
    else:
        x, y, c = _non_restoring_cycles(steps, dividend, divisor, bit_width)

    final = _registers(x, y, divisor, c, bit_width)
    final.update({"quotient": y, "remainder": x})
    steps.append(
        Step(
            title="Done",
            description=f"Q={y}, R={x}",
            detail=f"{dividend} / {divisor} = {y} remainder {x}",
            values=final,
            highlight="finish",
            is_final=True,
            result=y,
        )
    )
    return steps


def _restoring_cycles(steps: list[Step], dividend: int, divisor: int, n: int) -> tuple[int, int, int]:
    word = mask(n)
    x, y, z, c = 0, dividend, divisor, 0

    for cycle in range(1, n + 1):
        msb_y = (y >> (n - 1)) & 1
        c = (x >> (n - 1)) & 1
        x = ((x << 1) | msb_y) & word
        y = (y << 1) & word
        steps.append(
            Step(
                title=f"Cycle {cycle}: shift",
                description="Shift c|x|y one position to the left.",
                detail=f"c={c}, x={to_binary_string(x, n)}, y={to_binary_string(y, n)}",
                values=_registers(x, y, z, c, n),
                highlight="shift",
            )
        )

        saved_x, saved_c = x, c
        cx = (c << n) + x
        diff = cx - z
        if diff < 0:
            c = 1
            x = wrap(diff, n + 1) & word
        else:
            c = 0
            x = diff & word
        steps.append(
            Step(
                title=f"Cycle {cycle}: subtract",
                description=f"c|x = c|x - z ({'negative' if diff < 0 else 'non-negative'})",
                detail=f"{cx} - {z} = {diff}",
                values=_registers(x, y, z, c, n),
                highlight="sub",
            )
        )

        if c == 1:
            steps.append(
                Step(
                    title=f"Cycle {cycle}: quotient bit",
                    description="c=1 -> y0 = 0",
                    values={**_registers(x, y, z, c, n), "q_bit": 0},
                    highlight="check-neg",
                )
            )
            # roll back to the pre-subtraction snapshot
            x, c = saved_x, saved_c
            steps.append(
                Step(
                    title=f"Cycle {cycle}: restore",
                    description="Restore x to its value before the subtraction.",
                    detail=f"x = {to_binary_string(x, n)}, c = {c}",
                    values=_registers(x, y, z, c, n),
                    highlight="restore",
                )
            )
        else:
            y |= 1
            steps.append(
                Step(
                    title=f"Cycle {cycle}: quotient bit",
                    description="c=0 -> y0 = 1",
                    values={**_registers(x, y, z, c, n), "q_bit": 1},
                    highlight="check-pos",
                )
            )

    return x, y, c


def _non_restoring_cycles(steps: list[Step], dividend: int, divisor: int, n: int) -> tuple[int, int, int]:
    # The accumulator keeps one sign bit above x, shown as c.
    acc_width = n + 1
    word = mask(n)
    acc, y, z = 0, dividend, divisor

    def regs(q_bit=None) -> dict:
        sign = (acc >> n) & 1
        values = _registers(acc & word, y, z, sign, n)
        values["x_signed"] = to_signed(acc, acc_width)
        if q_bit is not None:
            values["q_bit"] = q_bit
        return values

    for cycle in range(1, n + 1):
        was_negative = to_signed(acc, acc_width) < 0
        msb_y = (y >> (n - 1)) & 1
        acc = wrap((acc << 1) | msb_y, acc_width)
        y = (y << 1) & word
        steps.append(
            Step(
                title=f"Cycle {cycle}: shift",
                description="Shift x|y one position to the left.",
                detail=f"x={to_signed(acc, acc_width)}, y={to_binary_string(y, n)}",
                values=regs(),
                highlight="shift",
            )
        )

        before = to_signed(acc, acc_width)
        if was_negative:
            after = before + z
            description = "x negative -> x + z"
            detail = f"{before} + {z} = {after}"
        else:
            after = before - z
            description = "x non-negative -> x - z"
            detail = f"{before} - {z} = {after}"
        acc = wrap(after, acc_width)
        steps.append(
            Step(
                title=f"Cycle {cycle}: operation",
                description=description,
                detail=detail,
                values=regs(),
                highlight="calc",
            )
        )

        if to_signed(acc, acc_width) >= 0:
            y |= 1
            steps.append(
                Step(
                    title=f"Cycle {cycle}: quotient bit",
                    description="x non-negative -> y0 = 1",
                    values=regs(q_bit=1),
                    highlight="q-set",
                )
            )
        else:
            steps.append(
                Step(
                    title=f"Cycle {cycle}: quotient bit",
                    description="x negative -> y0 = 0",
                    values=regs(q_bit=0),
                    highlight="q-set",
                )
            )

    if to_signed(acc, acc_width) < 0:
        before = to_signed(acc, acc_width)
        acc = wrap(before + z, acc_width)
        steps.append(
            Step(
                title="Correction",
                description="Remainder negative -> x = x + z",
                detail=f"{before} + {z} = {to_signed(acc, acc_width)}",
                values=regs(),
                highlight="correction-done",
            )
        )

    return acc & word, y, (acc >> n) & 1
