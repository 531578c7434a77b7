"""FastAPI web adapter for the tcsim trace generators."""

import logging
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from tcsim import adders, division, ieee754, normal_form, twos_complement
from tcsim.errors import TraceError
from tcsim.examples import EXAMPLES
from tcsim.explain import explain_step
from tcsim.instructions import fetch, step
from tcsim.machine import MachineState, get_changes
from tcsim.parser import parse_program
from tcsim.runner import RunOptions, run_program
from tcsim.steps import steps_to_dicts


# Constants
MAX_PROGRAM_SIZE = 50 * 1024  # 50KB
STATIC_DIR = Path(__file__).parent.parent / "static"

TOOLS = [
    {"id": "adder", "name": "Adders", "description": "Ripple, bypass, select, prefix and Wallace tree"},
    {"id": "division", "name": "Binary Division", "description": "Restoring and non-restoring division"},
    {"id": "hack", "name": "Hack Assembly", "description": "Registers and memory step by step"},
    {"id": "float", "name": "IEEE 754 Float", "description": "Single precision encoding"},
    {"id": "normalform", "name": "Normal Forms", "description": "DNF and KNF from a truth table"},
    {"id": "twoscomplement", "name": "Two's Complement", "description": "Negative number representation"},
]


# Request/Response models
class AdderRequest(BaseModel):
    adder_type: Literal["ripple", "bypass", "select", "prefix", "wallace"] = "ripple"
    a: int = Field(default=7, ge=0, le=15)
    b: int = Field(default=9, ge=0, le=15)
    c: int = Field(default=0, ge=0, le=15)
    cin: int = Field(default=0, ge=0, le=1)


class DivisionRequest(BaseModel):
    dividend: int = Field(default=11, ge=0, le=255)
    divisor: int = Field(default=3, ge=0, le=255)
    bit_width: Literal[4, 5, 6, 8] = 4
    method: Literal["restoring", "non-restoring"] = "restoring"


class ConversionRequest(BaseModel):
    decimal: int
    bit_width: Literal[4, 8] = 8


class TwosAdditionRequest(BaseModel):
    x: int
    y: int
    bit_width: Literal[4, 8] = 8


class NormalFormRequest(BaseModel):
    num_vars: Literal[2, 3] = 3
    outputs: list[int] = Field(default_factory=list)


class FloatRequest(BaseModel):
    value: str


class HackRunRequest(BaseModel):
    program: str
    initial_ram: dict[str, int] = Field(default_factory=dict)
    max_steps: int = Field(default=1000, ge=1, le=100000)
    trace_watch: list[int] = Field(default_factory=list)


class HackStepRequest(BaseModel):
    program: str
    state: Optional[dict] = None
    initial_ram: dict[str, int] = Field(default_factory=dict)


class StepsResponse(BaseModel):
    steps: list[dict]


# Create FastAPI app
app = FastAPI(
    title="tcsim",
    description="Step-by-step traces for Technical Computer Science visualizers",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _check_program_size(program: str) -> None:
    if len(program) > MAX_PROGRAM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program size exceeds limit of {MAX_PROGRAM_SIZE} bytes",
        )


def _ram_keys(ram: dict[str, int]) -> dict[int, int]:
    """Convert RAM keys from string to int."""
    result = {}
    for k, v in ram.items():
        try:
            result[int(k)] = v
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid memory address key: {k}",
            )
    return result


@app.get("/api/tools")
async def list_tools():
    return {"tools": TOOLS, "adder_types": adders.ADDER_TYPES, "adder_defaults": adders.DEFAULT_VALUES}


@app.post("/api/adder", response_model=StepsResponse)
async def adder_steps(request: AdderRequest):
    steps = adders.generate_steps(request.adder_type, request.a, request.b, request.c, request.cin)
    return {"steps": steps_to_dicts(steps)}


@app.post("/api/division", response_model=StepsResponse)
async def division_steps(request: DivisionRequest):
    steps = division.generate_division_steps(
        request.dividend, request.divisor, request.bit_width, request.method
    )
    return {"steps": steps_to_dicts(steps)}


@app.post("/api/twos-complement/convert", response_model=StepsResponse)
async def twos_complement_convert(request: ConversionRequest):
    steps = twos_complement.generate_conversion_steps(request.decimal, request.bit_width)
    return {"steps": steps_to_dicts(steps)}


@app.post("/api/twos-complement/add", response_model=StepsResponse)
async def twos_complement_add(request: TwosAdditionRequest):
    steps = twos_complement.generate_addition_steps(request.x, request.y, request.bit_width)
    return {"steps": steps_to_dicts(steps)}


@app.get("/api/twos-complement/table/{bit_width}")
async def twos_complement_table(bit_width: int):
    if bit_width not in twos_complement.TWOS_COMPLEMENT_WIDTHS:
        raise HTTPException(status_code=400, detail=f"Unsupported bit width: {bit_width}")
    return {"rows": twos_complement.generate_full_table(bit_width)}


@app.post("/api/normal-form")
async def normal_form_steps(request: NormalFormRequest):
    size = 1 << request.num_vars
    outputs = request.outputs or [0] * size
    if len(outputs) != size or any(o not in (0, 1) for o in outputs):
        raise HTTPException(
            status_code=400,
            detail=f"Expected {size} outputs of 0 or 1",
        )
    table = normal_form.generate_truth_table(request.num_vars, outputs)
    return {
        "table": [row.to_dict() for row in table],
        "variables": normal_form.variable_names(request.num_vars),
        "dnf": normal_form.format_dnf(table),
        "knf": normal_form.format_knf(table),
        "dnf_steps": steps_to_dicts(normal_form.generate_dnf_steps(table)),
        "knf_steps": steps_to_dicts(normal_form.generate_knf_steps(table)),
    }


@app.post("/api/float")
async def float_encoding(request: FloatRequest):
    return ieee754.decimal_to_ieee754(request.value).to_dict()


@app.get("/api/hack/examples")
async def hack_examples():
    return {"examples": EXAMPLES}


@app.post("/api/hack/run")
async def hack_run(request: HackRunRequest):
    """Run a Hack program to completion (or the step limit)."""
    _check_program_size(request.program)
    options = RunOptions(
        max_steps=request.max_steps,
        initial_ram=_ram_keys(request.initial_ram),
        trace_watch=request.trace_watch,
    )
    return run_program(request.program, options).to_dict()


@app.post("/api/hack/step")
async def hack_step(request: HackStepRequest):
    """Execute one instruction; the caller keeps the state history."""
    _check_program_size(request.program)
    try:
        program = parse_program(request.program)
    except TraceError as e:
        return {"status": "error", "error": e.to_error_info().to_dict()}

    if request.state is None:
        state = MachineState.with_ram(_ram_keys(request.initial_ram))
    else:
        state = MachineState.from_dict(request.state)

    count = len(program.instructions)
    if state.is_halted(count):
        return {"status": "ok", "state": state.get_state(), "changes": [], "halted": True}

    try:
        instr = fetch(state, program.instructions)
    except TraceError as e:
        return {"status": "error", "error": e.to_error_info().to_dict()}
    explanation = explain_step(instr, state)
    new_state = step(state, instr)
    return {
        "status": "ok",
        "instruction": instr.to_dict(),
        "explanation": explanation,
        "state": new_state.get_state(),
        "changes": get_changes(state, new_state),
        "halted": new_state.is_halted(count),
    }


# Mount static files AFTER API routes to prevent shadowing
if STATIC_DIR.exists():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8080)
