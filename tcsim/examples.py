"""Bundled Hack example programs with their initial RAM."""

POINTER_DEREFERENCE = """\
// R1 = RAM[R0]
// Start: R0=5, RAM[5]=42
// Result: R1 holds 42

@R0      // A = 0 (address of R0)
A=M      // A = RAM[0] = 5 (follow the pointer)
D=M      // D = RAM[5] = 42 (read the value)
@R1      // A = 1 (address of R1)
M=D      // RAM[1] = D = 42 (store the result)
"""

ADDITION = """\
// R2 = R0 + R1
// Start: R0=10, R1=25
// Result: R2 holds 35

@R0      // A = 0
D=M      // D = RAM[0] = 10
@R1      // A = 1
D=D+M    // D = D + RAM[1] = 10 + 25 = 35
@R2      // A = 2
M=D      // RAM[2] = 35
"""

COUNTDOWN = """\
// Count R0 down to 0
// Start: R0=5

(LOOP)
@R0      // A = 0
D=M      // D = RAM[0] (current value)
@END     // A = address of END
D;JEQ    // jump to END when D=0

@R0      // A = 0
M=M-1    // RAM[0] = RAM[0] - 1
@LOOP    // A = address of LOOP
0;JMP    // jump back to LOOP

(END)
@END     // endless loop (halt)
0;JMP
"""

EXAMPLES = [
    {
        "name": "Pointer Dereference",
        "description": "R1 = RAM[R0]",
        "initial_ram": {0: 5, 5: 42},
        "code": POINTER_DEREFERENCE,
    },
    {
        "name": "Addition",
        "description": "R2 = R0 + R1",
        "initial_ram": {0: 10, 1: 25},
        "code": ADDITION,
    },
    {
        "name": "Countdown Loop",
        "description": "Count R0 down to 0",
        "initial_ram": {0: 5},
        "code": COUNTDOWN,
    },
]
