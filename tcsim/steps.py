"""Trace step model shared by the eager trace generators."""

import copy
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Step:
    """Single point in an algorithm's execution trace."""
    title: str
    description: str = ""
    detail: str = ""
    values: dict[str, Any] = field(default_factory=dict)
    active_components: list[str] = field(default_factory=list)
    highlight: Optional[str] = None
    is_final: bool = False
    result: Optional[int] = None
    kind: Optional[str] = None  # "error" marks the invalid-input sentinel

    def __post_init__(self) -> None:
        # Every step owns its state; callers may keep mutating their locals.
        self.values = copy.deepcopy(self.values)
        self.active_components = list(self.active_components)

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    def to_dict(self) -> dict:
        result = {
            "title": self.title,
            "description": self.description,
            "detail": self.detail,
            "values": self.values,
            "activeComponents": self.active_components,
            "isFinal": self.is_final,
        }
        if self.highlight is not None:
            result["highlight"] = self.highlight
        if self.result is not None:
            result["result"] = self.result
        if self.kind is not None:
            result["type"] = self.kind
        return result


def error_step(title: str, description: str, detail: str = "", **values: Any) -> Step:
    """Build the sentinel step returned for invalid generator input."""
    return Step(
        title=title,
        description=description,
        detail=detail,
        values=values,
        kind="error",
    )


def steps_to_dicts(steps: list[Step]) -> list[dict]:
    return [s.to_dict() for s in steps]
