"""Trace generators for the five adder architectures.

Bit indices in ``carries``/``sums`` lists are LSB-first: ``carries[i]`` is
c_i (``carries[0]`` is the carry-in) and ``sums[i]`` is s_i. Bit vectors
shown to the reader (``a_bits``, ``sum_bits``...) are MSB-first.
"""

from dataclasses import dataclass
from typing import Callable

from .bits import bits_of, majority, to_binary_string, value_of_bits
from .steps import Step


ADDER_WIDTH = 4

ADDER_TYPES = [
    {"id": "ripple", "name": "Ripple Carry", "description": "Sequential carry propagation"},
    {"id": "bypass", "name": "Carry Bypass", "description": "Propagate bypass around the ripple chain"},
    {"id": "select", "name": "Carry Select", "description": "Two precomputed adders and a MUX"},
    {"id": "prefix", "name": "Parallel Prefix", "description": "Generate/propagate tree"},
    {"id": "wallace", "name": "Wallace Tree", "description": "Carry-save reduction of three operands"},
]

DEFAULT_VALUES = {
    "ripple": {"a": 7, "b": 9},
    "bypass": {"a": 7, "b": 9},
    "select": {"a": 11, "b": 6},
    "prefix": {"a": 13, "b": 7},
    "wallace": {"a": 7, "b": 9, "c": 5},
}

ALL_ADDERS = [f"adder-{i}" for i in range(ADDER_WIDTH)]


def _lsb_first(value: int, width: int) -> list[int]:
    return bits_of(value, width)[::-1]


def ripple_add(a_bits: list[int], b_bits: list[int], cin: int) -> tuple[list[int], list[int]]:
    """Add two LSB-first bit lists, returning (sums, carries).

    ``carries`` has one more entry than ``sums``; the last one is the carry-out.
    """
    carries = [cin]
    sums = []
    for ai, bi in zip(a_bits, b_bits):
        ci = carries[-1]
        sums.append(ai ^ bi ^ ci)
        carries.append(majority(ai, bi, ci))
    return sums, carries


def _sum_value(sums: list[int]) -> int:
    return value_of_bits(sums[::-1])


def _intro_detail(a: int, b: int) -> str:
    return (
        f"A = {a} ({to_binary_string(a, ADDER_WIDTH)}), "
        f"B = {b} ({to_binary_string(b, ADDER_WIDTH)})"
    )


# ============================================================ ripple carry

def generate_ripple_carry_steps(a: int, b: int, cin: int = 0) -> list[Step]:
    """Trace a 4-bit ripple-carry addition one full adder at a time."""
    a_bits = _lsb_first(a, ADDER_WIDTH)
    b_bits = _lsb_first(b, ADDER_WIDTH)

    steps = [
        Step(
            title="Start",
            description=(
                "The ripple-carry adder computes the sum from right to left. "
                "The carry ripples through every stage."
            ),
            detail=_intro_detail(a, b),
            values={"carries": [cin], "sums": [], "computed": []},
        )
    ]

    carries = [cin]
    sums: list[int] = []
    for i in range(ADDER_WIDTH):
        ai, bi, ci = a_bits[i], b_bits[i], carries[i]
        s = ai ^ bi ^ ci
        cout = majority(ai, bi, ci)
        sums.append(s)
        carries.append(cout)

        half_adder = i == 0 and cin == 0
        if half_adder:
            title = "Half adder (bit 0)"
            description = "The half adder computes s0 and c1 from a0 and b0 (no carry-in)."
            detail = f"{ai} XOR {bi} = s0={s}, {ai} AND {bi} = c1={cout}"
        else:
            title = f"Full adder {i}"
            description = (
                f"The full adder computes s{i} and c{i + 1} from a{i}, b{i} and carry c{i}."
            )
            detail = f"{ai} XOR {bi} XOR {ci} = s{i}={s}, c{i + 1}={cout}"

        steps.append(
            Step(
                title=title,
                description=description,
                detail=detail,
                active_components=[f"adder-{i}"],
                values={
                    "carries": carries,
                    "sums": sums,
                    "computed": list(range(i + 1)),
                    "current_bit": i,
                },
            )
        )

    result = a + b + cin
    steps.append(
        Step(
            title="Result",
            description="Addition complete. The final carry c4 is the overflow bit.",
            detail=f"{a} + {b} = {result} ({to_binary_string(result, ADDER_WIDTH + 1)})",
            active_components=ALL_ADDERS,
            values={
                "carries": carries,
                "sums": sums,
                "computed": list(range(ADDER_WIDTH)),
                "carry_out": carries[-1],
                "result_bits": to_binary_string(result, ADDER_WIDTH + 1),
            },
            is_final=True,
            result=result,
        )
    )
    return steps


# ============================================================ carry bypass

def generate_carry_bypass_steps(a: int, b: int, cin: int = 0) -> list[Step]:
    """Trace a 4-bit carry-bypass (carry-skip) addition.

    The bypass only shortens carry propagation time; sums always come from
    the bit-exact ripple chain.
    """
    a_bits = _lsb_first(a, ADDER_WIDTH)
    b_bits = _lsb_first(b, ADDER_WIDTH)

    steps = [
        Step(
            title="Carry-bypass concept",
            description=(
                "Propagate signals are computed first. If every P is 1 the carry-in "
                "is passed straight to the carry-out."
            ),
            detail=_intro_detail(a, b),
            values={"carries": [cin], "sums": [], "propagate": [], "computed": []},
        )
    ]

    p = [ai ^ bi for ai, bi in zip(a_bits, b_bits)]
    steps.append(
        Step(
            title="Compute propagate signals",
            description="P_i = a_i XOR b_i tells whether an incoming carry is passed on.",
            detail=f"P = [{', '.join(map(str, p))}]",
            active_components=["p-calc"],
            values={"carries": [cin], "sums": [], "propagate": p, "computed": []},
        )
    )

    bypass_active = all(pi == 1 for pi in p)
    steps.append(
        Step(
            title="Check bypass condition",
            description=(
                "All P are 1: the bypass is active and c4 = c0."
                if bypass_active
                else "Not all P are 1: the bypass is inactive, carries ripple normally."
            ),
            detail=f"P_all = {' AND '.join(map(str, p))} = {int(bypass_active)}",
            active_components=["bypass-path"] if bypass_active else ["ripple-path"],
            values={
                "carries": [cin],
                "sums": [],
                "propagate": p,
                "bypass_active": bypass_active,
                "bypass_carry": cin if bypass_active else None,
                "computed": [],
            },
        )
    )

    carries = [cin]
    sums: list[int] = []
    for i in range(ADDER_WIDTH):
        ai, bi, ci = a_bits[i], b_bits[i], carries[i]
        s = ai ^ bi ^ ci
        sums.append(s)
        carries.append(majority(ai, bi, ci))
        steps.append(
            Step(
                title=f"Compute bit {i}",
                description=f"Sum s{i} = a{i} XOR b{i} XOR c{i}",
                detail=f"{ai} XOR {bi} XOR {ci} = {s}",
                active_components=[f"adder-{i}"],
                values={
                    "carries": carries,
                    "sums": sums,
                    "propagate": p,
                    "bypass_active": bypass_active,
                    "computed": list(range(i + 1)),
                    "current_bit": i,
                },
            )
        )

    result = a + b + cin
    steps.append(
        Step(
            title="Result",
            description=(
                "With the bypass active c4 was known immediately; only the sums had to be computed."
                if bypass_active
                else "The bypass was inactive; the computation matched the ripple-carry adder."
            ),
            detail=f"{a} + {b} = {result}",
            active_components=ALL_ADDERS,
            values={
                "carries": carries,
                "sums": sums,
                "propagate": p,
                "bypass_active": bypass_active,
                "computed": list(range(ADDER_WIDTH)),
                "carry_out": carries[-1],
            },
            is_final=True,
            result=result,
        )
    )
    return steps


# ============================================================ carry select

def _branch(a_bits: list[int], b_bits: list[int], cin: int) -> dict:
    sums, carries = ripple_add(a_bits, b_bits, cin)
    return {
        "cin": cin,
        "sums": sums,
        "carries": carries,
        "result": _sum_value(sums),
        "cout": carries[-1],
    }


def generate_carry_select_steps(a: int, b: int, cin: int = 0) -> list[Step]:
    """Trace a carry-select adder: two precomputed branches and a MUX."""
    a_bits = _lsb_first(a, ADDER_WIDTH)
    b_bits = _lsb_first(b, ADDER_WIDTH)

    steps = [
        Step(
            title="Carry-select concept",
            description=(
                "Two adders run in parallel, one assuming c_in=0 and one assuming c_in=1. "
                "A MUX picks the result using the real carry-in."
            ),
            detail=_intro_detail(a, b),
            values={"phase": "intro"},
        )
    ]

    result0 = _branch(a_bits, b_bits, 0)
    steps.append(
        Step(
            title="Adder with c_in=0",
            description="The first adder assumes there is no incoming carry.",
            detail=(
                f"Result: S={to_binary_string(result0['result'], ADDER_WIDTH)}, "
                f"c_out={result0['cout']}"
            ),
            active_components=["adder-block-0"],
            values={"phase": "compute0", "result0": result0},
        )
    )

    result1 = _branch(a_bits, b_bits, 1)
    steps.append(
        Step(
            title="Adder with c_in=1",
            description="The second adder assumes an incoming carry. Both run at the same time.",
            detail=(
                f"Result: S={to_binary_string(result1['result'], ADDER_WIDTH)}, "
                f"c_out={result1['cout']}"
            ),
            active_components=["adder-block-1"],
            values={"phase": "compute1", "result0": result0, "result1": result1},
        )
    )

    selected = (result0, result1)[cin]
    steps.append(
        Step(
            title="MUX selection",
            description=f"The actual c_in is {cin}; the MUX forwards adder {cin}.",
            detail=f"Selected: S={to_binary_string(selected['result'], ADDER_WIDTH)} from adder {cin}",
            active_components=["mux", f"adder-block-{cin}"],
            values={
                "phase": "mux",
                "result0": result0,
                "result1": result1,
                "selected": cin,
                "selected_result": selected,
            },
        )
    )

    result = selected["result"] + (selected["cout"] << ADDER_WIDTH)
    steps.append(
        Step(
            title="Result",
            description=(
                "Carry select cuts latency: instead of waiting for the carry, "
                "both outcomes are precomputed."
            ),
            detail=f"{a} + {b} + {cin} = {result}",
            active_components=["mux", f"adder-block-{cin}"],
            values={
                "phase": "final",
                "result0": result0,
                "result1": result1,
                "selected": cin,
                "selected_result": selected,
                "carry_out": selected["cout"],
            },
            is_final=True,
            result=result,
        )
    )
    return steps


# ============================================================ parallel prefix

@dataclass(frozen=True)
class GroupSignal:
    """Generate/propagate pair for the bit span hi:lo."""
    hi: int
    lo: int
    g: int
    p: int

    @property
    def label(self) -> str:
        return f"{self.hi}:{self.lo}"

    def combine(self, lower: "GroupSignal") -> "GroupSignal":
        """Prefix operator: (G, P) o (G', P') = (G + P.G', P.P')."""
        return GroupSignal(
            hi=self.hi,
            lo=lower.lo,
            g=self.g | (self.p & lower.g),
            p=self.p & lower.p,
        )

    def to_dict(self) -> dict:
        return {"g": self.g, "p": self.p}


def prefix_levels(g: list[int], p: list[int]) -> tuple[list[GroupSignal], list[dict[str, dict]]]:
    """Build a Sklansky prefix tree over LSB-first g/p signals.

    Returns the final span for every position (always i:0) and, per level,
    the groups that level produced. The tree has ceil(log2(width)) levels.
    """
    width = len(g)
    spans = [GroupSignal(i, i, g[i], p[i]) for i in range(width)]
    levels: list[dict[str, dict]] = []
    half = 1
    while half < width:
        produced: dict[str, dict] = {}
        updated = list(spans)
        for i in range(width):
            block_start = (i // (2 * half)) * (2 * half)
            if i - block_start < half:
                continue
            combined = spans[i].combine(spans[block_start + half - 1])
            updated[i] = combined
            produced[combined.label] = combined.to_dict()
        spans = updated
        levels.append(produced)
        half *= 2
    return spans, levels


def generate_parallel_prefix_steps(
    a: int, b: int, cin: int = 0, width: int = ADDER_WIDTH
) -> list[Step]:
    """Trace a parallel-prefix adder of any width (4 by default)."""
    a_bits = _lsb_first(a, width)
    b_bits = _lsb_first(b, width)

    steps = [
        Step(
            title="Parallel prefix concept",
            description=(
                "The parallel-prefix adder uses generate (G) and propagate (P) signals. "
                "A prefix tree makes every carry available at once."
            ),
            detail=(
                f"A = {a} ({to_binary_string(a, width)}), "
                f"B = {b} ({to_binary_string(b, width)})"
            ),
            values={"phase": "intro"},
        )
    ]

    g = [ai & bi for ai, bi in zip(a_bits, b_bits)]
    p = [ai ^ bi for ai, bi in zip(a_bits, b_bits)]
    steps.append(
        Step(
            title="Compute G/P signals",
            description="Generate g_i = a_i AND b_i, propagate p_i = a_i XOR b_i.",
            detail=f"G = [{','.join(map(str, g))}], P = [{','.join(map(str, p))}]",
            active_components=["gp-initial"],
            values={"phase": "gp", "generate": g, "propagate": p},
        )
    )

    spans, levels = prefix_levels(g, p)
    groups: dict[str, dict] = {}
    for depth, produced in enumerate(levels, 1):
        groups.update(produced)
        last = depth == len(levels)
        steps.append(
            Step(
                title=f"Prefix level {depth}",
                description=(
                    f"Final prefix combination: G_{{{width - 1}:0}} holds the information for c{width}."
                    if last
                    else "Combine neighbouring groups: G_{i:k} = G_{i:j} + P_{i:j}.G_{j-1:k}, "
                    "P_{i:k} = P_{i:j}.P_{j-1:k}"
                ),
                detail=" | ".join(
                    f"G_{{{label}}}={sig['g']}, P_{{{label}}}={sig['p']}"
                    for label, sig in produced.items()
                ),
                active_components=[f"prefix-level-{depth}"],
                values={
                    "phase": f"prefix{depth}",
                    "generate": g,
                    "propagate": p,
                    "level": depth,
                    "groups": groups,
                },
            )
        )

    carries = [cin] + [span.g | (span.p & cin) for span in spans]
    steps.append(
        Step(
            title="Compute carries",
            description="Every carry is available in parallel: c_i = G_{i-1:0} + P_{i-1:0}.c0",
            detail=f"Carries: c=[{','.join(map(str, carries))}]",
            active_components=["carry-calc"],
            values={
                "phase": "carries",
                "generate": g,
                "propagate": p,
                "groups": groups,
                "carries": carries,
            },
        )
    )

    sums = [p[i] ^ carries[i] for i in range(width)]
    steps.append(
        Step(
            title="Compute sums",
            description="s_i = p_i XOR c_i, all sums in parallel.",
            detail=f"S = [{','.join(map(str, sums))}] = {to_binary_string(_sum_value(sums), width)}",
            active_components=["sum-xor"],
            values={
                "phase": "sums",
                "generate": g,
                "propagate": p,
                "carries": carries,
                "sums": sums,
            },
        )
    )

    result = _sum_value(sums) + (carries[-1] << width)
    steps.append(
        Step(
            title="Result",
            description=(
                f"The prefix tree needed {len(levels)} levels: O(log n) depth "
                "instead of O(n) for ripple carry."
            ),
            detail=f"{a} + {b} = {result}",
            active_components=["gp-initial"]
            + [f"prefix-level-{d}" for d in range(1, len(levels) + 1)]
            + ["carry-calc", "sum-xor"],
            values={
                "phase": "final",
                "generate": g,
                "propagate": p,
                "carries": carries,
                "sums": sums,
                "depth": len(levels),
                "carry_out": carries[-1],
            },
            is_final=True,
            result=result,
        )
    )
    return steps


# ============================================================ carry save

def generate_carry_save_steps(a: int, b: int, c: int) -> list[Step]:
    """Trace a carry-save reduction of three operands followed by one final add."""
    a_bits = bits_of(a, ADDER_WIDTH)
    b_bits = bits_of(b, ADDER_WIDTH)
    c_bits = bits_of(c, ADDER_WIDTH)
    operands = {"a_bits": a_bits, "b_bits": b_bits, "c_bits": c_bits}

    steps = [
        Step(
            title="Carry-save / Wallace tree concept",
            description=(
                "A carry-save adder reduces 3 inputs to 2 outputs (sum and carry vector) "
                "without any carry propagation."
            ),
            detail=(
                f"A={a} ({to_binary_string(a, ADDER_WIDTH)}), "
                f"B={b} ({to_binary_string(b, ADDER_WIDTH)}), "
                f"C={c} ({to_binary_string(c, ADDER_WIDTH)})"
            ),
            values={"phase": "intro", **operands},
        ),
        Step(
            title="CSA principle",
            description=(
                "Per bit position: s = a XOR b XOR c, cv = majority(a, b, c). "
                "No carry ripples, all positions work in parallel."
            ),
            detail="s_i = a_i XOR b_i XOR c_i, cv_i = (a AND b) OR (a AND c) OR (b AND c)",
            active_components=["csa-explain"],
            values={"phase": "explain", **operands},
        ),
    ]

    sum_bits = [x ^ y ^ z for x, y, z in zip(a_bits, b_bits, c_bits)]
    carry_bits = [majority(x, y, z) for x, y, z in zip(a_bits, b_bits, c_bits)]
    sum_value = value_of_bits(sum_bits)
    # carries weigh one position more than the sum bits they sit under
    carry_value = value_of_bits(carry_bits) << 1

    steps.append(
        Step(
            title="Compute CSA layer",
            description=f"All {ADDER_WIDTH} CSAs work in parallel; 3 numbers become 2.",
            detail=(
                f"S = {sum_value} ({to_binary_string(sum_value, ADDER_WIDTH)}), "
                f"CV = {carry_value} ({to_binary_string(carry_value, ADDER_WIDTH + 1)}, shifted left)"
            ),
            active_components=[f"csa-{i}" for i in range(ADDER_WIDTH)],
            values={
                "phase": "csa",
                **operands,
                "sum_bits": sum_bits,
                "carry_bits": carry_bits,
                "sum_value": sum_value,
                "carry_value": carry_value,
            },
        )
    )

    steps.append(
        Step(
            title="Intermediate result",
            description=(
                "Only two numbers remain. The carry vector is shifted one position "
                "to the left to respect its weight."
            ),
            detail=f"Sum S = {sum_value}, carry CV = {carry_value}",
            active_components=["intermediate"],
            values={
                "phase": "intermediate",
                "sum_bits": sum_bits,
                "carry_bits": carry_bits,
                "sum_value": sum_value,
                "carry_value": carry_value,
            },
        )
    )

    final_width = ADDER_WIDTH + 2
    final_sums, final_carries = ripple_add(
        _lsb_first(sum_value, final_width), _lsb_first(carry_value, final_width), 0
    )
    final_result = _sum_value(final_sums) + (final_carries[-1] << final_width)
    steps.append(
        Step(
            title="Final addition",
            description=(
                "S + CV goes through an ordinary ripple-carry adder. "
                "Only this last stage propagates carries."
            ),
            detail=f"{sum_value} + {carry_value} = {final_result}",
            active_components=["final-adder"],
            values={
                "phase": "final-add",
                "sum_value": sum_value,
                "carry_value": carry_value,
                "final_carries": final_carries,
                "final_result": final_result,
            },
        )
    )

    expected = a + b + c
    verified = final_result == expected
    steps.append(
        Step(
            title="Result",
            description=(
                f"Check: {a} + {b} + {c} = {expected}. Wallace trees use this to add "
                "many partial products of a multiplication efficiently."
            ),
            detail="Correct!" if verified else f"Expected: {expected}",
            active_components=["final-adder"],
            values={
                "phase": "result",
                "sum_value": sum_value,
                "carry_value": carry_value,
                "final_result": final_result,
                "expected": expected,
                "verified": verified,
            },
            is_final=True,
            result=final_result,
        )
    )
    return steps


# ============================================================ dispatch

AdderGenerator = Callable[..., list[Step]]

ADDER_GENERATORS: dict[str, AdderGenerator] = {
    "ripple": generate_ripple_carry_steps,
    "bypass": generate_carry_bypass_steps,
    "select": generate_carry_select_steps,
    "prefix": generate_parallel_prefix_steps,
}


def generate_steps(adder_type: str, a: int, b: int, c: int = 0, cin: int = 0) -> list[Step]:
    """Generate the trace for ``adder_type``; unknown types fall back to ripple carry."""
    if adder_type == "wallace":
        return generate_carry_save_steps(a, b, c)
    generator = ADDER_GENERATORS.get(adder_type, generate_ripple_carry_steps)
    return generator(a, b, cin)
