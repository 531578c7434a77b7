"""Disjunctive (DNF) and conjunctive (KNF) normal forms from a truth table."""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .bits import bits_of
from .steps import Step


NOT = "¬"
AND = "·"
OR = "+"


@dataclass
class TruthRow:
    """One row of a truth table; ``vars`` is MSB-first and encodes ``index``."""
    index: int
    vars: list[int]
    output: int = 0

    def to_dict(self) -> dict:
        return {"index": self.index, "vars": self.vars, "output": self.output}


@dataclass(frozen=True)
class Literal:
    """A variable, optionally negated."""
    name: str
    position: int
    negated: bool

    def __str__(self) -> str:
        return f"{NOT}{self.name}" if self.negated else self.name

    def evaluate(self, assignment: Sequence[int]) -> int:
        value = assignment[self.position]
        return 1 - value if self.negated else value


@dataclass
class Term:
    """Minterm (conjunction) or maxterm (disjunction) of a single row."""
    row: int
    literals: list[Literal]
    conjunctive: bool
    label: str = field(init=False)

    def __post_init__(self) -> None:
        self.label = f"m{self.row}" if self.conjunctive else f"M{self.row}"

    def __str__(self) -> str:
        if self.conjunctive:
            return AND.join(map(str, self.literals))
        return f"({OR.join(map(str, self.literals))})"

    def evaluate(self, assignment: Sequence[int]) -> int:
        values = [literal.evaluate(assignment) for literal in self.literals]
        return int(all(values)) if self.conjunctive else int(any(values))


def variable_names(num_vars: int) -> list[str]:
    """Variable names, highest index first (x₂, x₁, x₀)."""
    subscripts = "₀₁₂₃₄₅₆₇₈₉"
    return [f"x{subscripts[i]}" for i in range(num_vars - 1, -1, -1)]


def generate_truth_table(num_vars: int, outputs: Optional[Sequence[int]] = None) -> list[TruthRow]:
    """All 2**num_vars rows in index order, outputs defaulting to 0."""
    rows = []
    for index in range(1 << num_vars):
        output = outputs[index] if outputs is not None else 0
        rows.append(TruthRow(index=index, vars=bits_of(index, num_vars), output=int(output)))
    return rows


def _names_for(table: Sequence[TruthRow], names: Optional[Sequence[str]]) -> list[str]:
    if names is not None:
        return list(names)
    return variable_names(len(table[0].vars)) if table else []


def construct_minterm(row: TruthRow, names: Sequence[str]) -> Term:
    """0-valued variables appear negated, 1-valued ones bare."""
    literals = [Literal(name, i, value == 0) for i, (name, value) in enumerate(zip(names, row.vars))]
    return Term(row=row.index, literals=literals, conjunctive=True)


def construct_maxterm(row: TruthRow, names: Sequence[str]) -> Term:
    """0-valued variables appear bare, 1-valued ones negated."""
    literals = [Literal(name, i, value == 1) for i, (name, value) in enumerate(zip(names, row.vars))]
    return Term(row=row.index, literals=literals, conjunctive=False)


def explain_construction(term: Term, row: TruthRow) -> list[dict]:
    """Literal-by-literal explanation of how ``term`` was built from ``row``."""
    explanation = []
    for literal, value in zip(term.literals, row.vars):
        action = f"negated to {literal}" if literal.negated else f"stays {literal.name}"
        explanation.append({
            "variable": literal.name,
            "value": value,
            "result": str(literal),
            "explanation": f"{literal.name}={value} -> {action}",
        })
    return explanation


def minterms(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> list[Term]:
    names = _names_for(table, names)
    return [construct_minterm(row, names) for row in table if row.output == 1]


def maxterms(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> list[Term]:
    names = _names_for(table, names)
    return [construct_maxterm(row, names) for row in table if row.output == 0]


def format_dnf(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> str:
    terms = minterms(table, names)
    if not terms:
        return "0"
    return f" {OR} ".join(map(str, terms))


def format_knf(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> str:
    terms = maxterms(table, names)
    if not terms:
        return "1"
    return f" {AND} ".join(map(str, terms))


def evaluate_dnf(terms: Sequence[Term], assignment: Sequence[int]) -> int:
    """Disjunction of minterms; the empty DNF is constant 0."""
    return int(any(term.evaluate(assignment) for term in terms))


def evaluate_knf(terms: Sequence[Term], assignment: Sequence[int]) -> int:
    """Conjunction of maxterms; the empty KNF is constant 1."""
    return int(all(term.evaluate(assignment) for term in terms))


def _generate_steps(
    table: Sequence[TruthRow],
    names: Optional[Sequence[str]],
    dnf: bool,
) -> list[Step]:
    names = _names_for(table, names)
    target = 1 if dnf else 0
    rows = [row for row in table if row.output == target]
    terms = minterms(table, names) if dnf else maxterms(table, names)
    indices = [row.index for row in rows]
    kind = "minterm" if dnf else "maxterm"
    joiner = f" {OR} " if dnf else f" {AND} "
    constant = "0" if dnf else "1"

    labels = ", ".join(term.label for term in terms)
    steps = [
        Step(
            title=f"Find rows with f={target}",
            description=(
                f"{len(rows)} row(s) with output {target}: {labels}"
                if rows
                else f"No rows with output {target}. The function is constant {constant}."
            ),
            values={"highlight_rows": indices, "current_row": None, "type": "overview"},
            active_components=["truth-table"],
        )
    ]

    for row, term in zip(rows, terms):
        steps.append(
            Step(
                title=f"Construct {kind} {term.label}",
                description=(
                    f"Row {row.index}: combine the variables so the term is 1 only here"
                    if dnf
                    else f"Row {row.index}: combine the inverted variables so the term is 0 only here"
                ),
                detail=str(term),
                values={
                    "type": kind,
                    "highlight_rows": indices,
                    "current_row": row.index,
                    "vars": row.vars,
                    "term": str(term),
                    "term_label": term.label,
                    "construction": explain_construction(term, row),
                },
                active_components=[f"row-{row.index}"],
            )
        )

    formula = joiner.join(map(str, terms)) if terms else constant
    formula_with_labels = joiner.join(term.label for term in terms) if terms else constant
    steps.append(
        Step(
            title=f"Combine {kind}s with {'OR' if dnf else 'AND'}",
            description=f"{'DNF' if dnf else 'KNF'}: {formula_with_labels}",
            detail=formula,
            values={
                "type": "combine",
                "highlight_rows": indices,
                "current_row": None,
                "formula": formula,
                "formula_with_labels": formula_with_labels,
                "all_terms": [str(term) for term in terms],
            },
            active_components=["formula"],
            is_final=True,
        )
    )
    return steps


def generate_dnf_steps(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> list[Step]:
    """Overview, one step per minterm and the final disjunction."""
    return _generate_steps(table, names, dnf=True)


def generate_knf_steps(table: Sequence[TruthRow], names: Optional[Sequence[str]] = None) -> list[Step]:
    """Overview, one step per maxterm and the final conjunction."""
    return _generate_steps(table, names, dnf=False)
