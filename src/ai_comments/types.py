from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Operator(str, Enum):
    """Prefix operator of an AI Comment. Closed set."""
    NONE = "none"
    RATIONALE = "?"
    RULE = "~"
    INSTRUCTION = ">"
    COMPLETED = ":"

    @property
    def category(self) -> str:
        return _CATEGORIES[self]

    @property
    def symbol(self) -> str:
        return "" if self is Operator.NONE else self.value

    @staticmethod
    def from_char(ch: str) -> Optional["Operator"]:
        """Map a leading payload character to an operator, or None."""
        return _BY_CHAR.get(ch)


_CATEGORIES = {
    Operator.NONE: "intent",
    Operator.RATIONALE: "rationale",
    Operator.RULE: "rule",
    Operator.INSTRUCTION: "instruction",
    Operator.COMPLETED: "completed_instruction",
}

_BY_CHAR = {op.value: op for op in Operator if op is not Operator.NONE}

OPERATOR_CHARS = frozenset(_BY_CHAR)

# normalization findings
MISSING_SPACE = "missing_space"
EXTRA_SPACE = "extra_space"


@dataclass
class Annotation:
    """One matched AI Comment.

    Equality covers wrapper, kind, operator and text. Location, raw text and the
    normalization flag are excluded so that a re-serialized annotation compares
    equal to the one it came from.
    """
    wrapper: str
    kind: str                   # "block" | "line"
    operator: Operator
    text: str
    raw: str = field(default="", compare=False)
    offset: int = field(default=0, compare=False)
    end_offset: int = field(default=0, compare=False)
    line: int = field(default=1, compare=False)
    column: int = field(default=1, compare=False)
    end_line: int = field(default=1, compare=False)
    fix: Optional[str] = field(default=None, compare=False)  # MISSING_SPACE | EXTRA_SPACE

    @property
    def category(self) -> str:
        return self.operator.category

    @property
    def needs_normalization(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wrapper": self.wrapper,
            "kind": self.kind,
            "operator": self.operator.value,
            "category": self.category,
            "text": self.text,
            "raw": self.raw,
            "offset": self.offset,
            "end_offset": self.end_offset,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "fix": self.fix,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Annotation":
        return Annotation(
            wrapper=str(d["wrapper"]),
            kind=str(d["kind"]),
            operator=Operator(d.get("operator", "none")),
            text=str(d.get("text", "")),
            raw=str(d.get("raw", "")),
            offset=int(d.get("offset", 0)),
            end_offset=int(d.get("end_offset", 0)),
            line=int(d.get("line", 1)),
            column=int(d.get("column", 1)),
            end_line=int(d.get("end_line", 1)),
            fix=d.get("fix"),
        )


@dataclass
class AnnotationRecord:
    """An annotation located in a repository file, as written to JSONL."""
    id: str
    file_path: str
    annotation: Annotation
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = {"id": self.id, "file_path": self.file_path}
        d.update(self.annotation.to_dict())
        d["meta"] = dict(self.meta)
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AnnotationRecord":
        return AnnotationRecord(
            id=str(d["id"]),
            file_path=str(d["file_path"]),
            annotation=Annotation.from_dict(d),
            meta=dict(d.get("meta", {})),
        )
