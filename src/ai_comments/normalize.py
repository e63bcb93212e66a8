from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .scanner import scan_text
from .types import Annotation, Operator
from .wrappers import DEFAULT_WRAPPERS, KNOWN_WRAPPERS, WrapperSpec, find_wrapper


class AnnotationNotFound(LookupError):
    """No annotation of the requested kind at the requested location."""


def serialize(annotation: Annotation, wrapper: Optional[WrapperSpec] = None) -> str:
    """Canonical text of an annotation: open, operator and one space, text, close."""
    spec = wrapper or KNOWN_WRAPPERS[annotation.wrapper]
    parts = [spec.open, " "]
    if annotation.operator is not Operator.NONE:
        parts.append(annotation.operator.symbol + " ")
    parts.append(annotation.text)
    parts.append(" " + spec.close)
    return "".join(parts)


def _operator_pos(annotation: Annotation, spec: WrapperSpec) -> int:
    """Absolute offset of the operator character inside the scanned text."""
    payload = annotation.raw[len(spec.open):]
    lead = len(payload) - len(payload.lstrip())
    return annotation.offset + len(spec.open) + lead


def _separator_end(text: str, pos: int) -> int:
    end = pos
    while end < len(text) and text[end].isspace():
        end += 1
    return end


def normalize_text(
    text: str,
    wrappers: Optional[Sequence[WrapperSpec]] = None,
) -> Tuple[str, List[Annotation]]:
    """Rewrite operator spacing to exactly one space.

    Returns (new_text, flagged annotations). Only the separator between the
    operator and its payload changes; all other characters are kept.
    """
    specs = list(wrappers) if wrappers else list(DEFAULT_WRAPPERS)
    flagged = [a for a in scan_text(text, specs) if a.needs_normalization]
    if not flagged:
        return text, []

    out: List[str] = []
    pos = 0
    for a in flagged:
        spec = find_wrapper(a.wrapper, specs)
        op_pos = _operator_pos(a, spec)
        sep_start = op_pos + 1
        sep_end = _separator_end(text, sep_start)
        out.append(text[pos:sep_start])
        out.append(" ")
        pos = sep_end
    out.append(text[pos:])
    return "".join(out), flagged


def complete_instruction(
    text: str,
    line: int,
    wrappers: Optional[Sequence[WrapperSpec]] = None,
) -> Tuple[str, Annotation]:
    """Turn the open instruction starting on `line` into a completed one (">" -> ":").

    Raises AnnotationNotFound when no open instruction starts on that line.
    """
    specs = list(wrappers) if wrappers else list(DEFAULT_WRAPPERS)
    for a in scan_text(text, specs):
        if a.line != line or a.operator is not Operator.INSTRUCTION:
            continue
        spec = find_wrapper(a.wrapper, specs)
        op_pos = _operator_pos(a, spec)
        new_text = text[:op_pos] + Operator.COMPLETED.value + text[op_pos + 1:]
        done = Annotation(
            wrapper=a.wrapper,
            kind=a.kind,
            operator=Operator.COMPLETED,
            text=a.text,
            raw=new_text[a.offset:a.end_offset],
            offset=a.offset,
            end_offset=a.end_offset,
            line=a.line,
            column=a.column,
            end_line=a.end_line,
            fix=a.fix,
        )
        return new_text, done
    raise AnnotationNotFound(f"No open instruction starts on line {line}")
