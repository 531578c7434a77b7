"""Human-readable commentary for Hack instructions.

Nothing here touches the machine state; it only reads it.
"""

from typing import Optional

from .instructions import Jump, compute, parse_dest, should_jump
from .machine import MachineState, WORD_MASK
from .parser import Instruction


JUMP_DESCRIPTIONS = {
    Jump.JGT: "jump if > 0",
    Jump.JEQ: "jump if = 0",
    Jump.JGE: "jump if >= 0",
    Jump.JLT: "jump if < 0",
    Jump.JLE: "jump if <= 0",
    Jump.JNE: "jump if != 0",
    Jump.JMP: "jump always",
}

JUMP_CONDITIONS_TEXT = {
    Jump.JGT: "> 0",
    Jump.JEQ: "= 0",
    Jump.JGE: ">= 0",
    Jump.JLT: "< 0",
    Jump.JLE: "<= 0",
    Jump.JNE: "!= 0",
    Jump.JMP: "always",
}


def describe_comp(comp: Optional[str], state: MachineState) -> str:
    a, d, m = state.A, state.D, state.M
    ram = f"RAM[{a}]"
    descriptions = {
        "D": f"D (={d})",
        "A": f"A (={a})",
        "M": f"{ram} (={m})",
        "!D": f"!D (={~d & WORD_MASK})",
        "!A": f"!A (={~a & WORD_MASK})",
        "!M": f"!{ram} (={~m & WORD_MASK})",
        "-D": f"-D (={-d & WORD_MASK})",
        "-A": f"-A (={-a & WORD_MASK})",
        "-M": f"-{ram} (={-m & WORD_MASK})",
        "D+1": f"D+1 (={d}+1)",
        "A+1": f"A+1 (={a}+1)",
        "M+1": f"{ram}+1 (={m}+1)",
        "D-1": f"D-1 (={d}-1)",
        "A-1": f"A-1 (={a}-1)",
        "M-1": f"{ram}-1 (={m}-1)",
        "D+A": f"D+A (={d}+{a})",
        "D+M": f"D+{ram} (={d}+{m})",
        "D-A": f"D-A (={d}-{a})",
        "D-M": f"D-{ram} (={d}-{m})",
        "A-D": f"A-D (={a}-{d})",
        "M-D": f"{ram}-D (={m}-{d})",
        "D&A": f"D&A (={d}&{a})",
        "D&M": f"D&{ram} (={d}&{m})",
        "D|A": f"D|A (={d}|{a})",
        "D|M": f"D|{ram} (={d}|{m})",
    }
    return descriptions.get(comp or "", comp or "")


def describe_jump(jump: Optional[str]) -> str:
    return JUMP_DESCRIPTIONS.get(Jump.from_text(jump), jump or "")


def jump_condition(jump: Optional[str]) -> str:
    return JUMP_CONDITIONS_TEXT.get(Jump.from_text(jump), jump or "")


def explain(instr: Instruction, state: MachineState) -> str:
    """One-line commentary for ``instr`` executed on ``state``."""
    if instr.type == "A":
        symbol_part = f" ({instr.symbol})" if instr.symbol else ""
        return f"A = {instr.value}{symbol_part}"

    parts = []
    comp_desc = describe_comp(instr.comp, state)
    targets = parse_dest(instr.dest)
    if targets:
        names = [name for name in ("A", "D") if name in targets]
        if "M" in targets:
            names.append(f"RAM[{state.A}]")
        parts.append(f"{', '.join(names)} = {comp_desc}")

    if instr.jump:
        if targets:
            parts.append(f"then {describe_jump(instr.jump)}")
        else:
            parts.append(f"{comp_desc}; {describe_jump(instr.jump)}")

    return ", ".join(parts) or (instr.comp or "")


def explain_step(instr: Instruction, state: MachineState) -> dict:
    """Structured explanation: ``{"title", "description", "detail"}``."""
    a, m = state.A, state.M

    if instr.type == "A":
        symbol_part = f" ({instr.symbol})" if instr.symbol else ""
        return {
            "title": "A-instruction",
            "description": "Load a value into the A register",
            "detail": f"A = {instr.value}{symbol_part}",
        }

    dest, comp, jump = instr.dest, instr.comp or "", instr.jump
    targets = parse_dest(dest)
    value = compute(comp, state, warn=False)

    if targets == {"M"} and not jump:
        return {
            "title": "Write to memory",
            "description": f"Store a value in RAM[{a}]",
            "detail": f"RAM[{a}] = {comp} = {value}",
        }

    if targets == {"D"} and comp == "M" and not jump:
        return {
            "title": "Read from memory",
            "description": f"Load RAM[{a}] into D",
            "detail": f"D = RAM[{a}] = {m}",
        }

    if "A" in targets and comp == "M" and not jump:
        return {
            "title": "Follow pointer",
            "description": f"Load RAM[{a}] as the new address",
            "detail": f"A = RAM[{a}] = {m}",
        }

    if "D" in targets and "M" not in comp and not jump:
        return {
            "title": "Computation",
            "description": f"Compute {comp} and store it in D",
            "detail": f"D = {comp} = {value}",
        }

    if jump and not targets:
        if Jump.from_text(jump) is Jump.JMP:
            return {
                "title": "Unconditional jump",
                "description": "Jump to the address in A",
                "detail": f"Jump to {a}",
            }
        taken = should_jump(jump, value)
        condition = jump_condition(jump)
        return {
            "title": "Conditional jump",
            "description": f"Jump if {comp} {condition}",
            "detail": (
                f"{comp} = {value} {condition}? {'yes' if taken else 'no'} -> "
                f"{f'jump to {a}' if taken else 'continue'}"
            ),
        }

    if targets and jump:
        taken = should_jump(jump, value)
        return {
            "title": "Computation with jump",
            "description": f"{dest} = {comp}, then {describe_jump(jump)}",
            "detail": (
                f"{dest} = {value}, {value} {jump_condition(jump)}? "
                f"{'yes -> jump' if taken else 'no -> continue'}"
            ),
        }

    if targets:
        return {
            "title": "C-instruction",
            "description": f"{dest} = {comp}",
            "detail": f"{dest} = {value}",
        }

    return {"title": "Instruction", "description": instr.source_text, "detail": ""}
