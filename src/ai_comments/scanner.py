# src/ai_comments/scanner.py
from __future__ import annotations

import heapq
from typing import Iterator, List, Optional, Sequence, Tuple

from .types import EXTRA_SPACE, MISSING_SPACE, Annotation, Operator
from .wrappers import DEFAULT_WRAPPERS, WrapperSpec, compile_wrapper

# =============================================================================
# AI Comment scanner / classifier.
#
# - every wrapper pattern is applied to the whole text
# - matches are merged in document order; a match starting inside an emitted
#   one is dropped (payloads are never re-parsed)
# - the payload's leading character selects the operator
#
# Nothing here raises on odd input: unmatched text is skipped and spacing
# problems are reported through Annotation.fix.
# =============================================================================


def classify_payload(payload: str) -> Tuple[Operator, str, Optional[str]]:
    """Split a wrapper's interior into (operator, text, fix).

    Examples:
      - " ~ Must cache "   -> (RULE, "Must cache", None)
      - " >Do this "       -> (INSTRUCTION, "Do this", "missing_space")
      - " >   Do this "    -> (INSTRUCTION, "Do this", "extra_space")
      - " !bang "          -> (NONE, "!bang", None)
      - "  "               -> (NONE, "", None)
    """
    s = payload.strip()
    if not s:
        return Operator.NONE, "", None

    op = Operator.from_char(s[0])
    if op is None:
        return Operator.NONE, s, None

    rest = s[1:]
    if not rest:
        return op, "", None
    if not rest[0].isspace():
        return op, rest.strip(), MISSING_SPACE

    sep = rest[: len(rest) - len(rest.lstrip())]
    return op, rest.strip(), (None if sep == " " else EXTRA_SPACE)


def _wrapper_matches(text: str, idx: int, spec: WrapperSpec):
    for m in compile_wrapper(spec).finditer(text):
        yield m.start(), idx, m, spec


def _iter_matches(text: str, wrappers: Sequence[WrapperSpec]):
    streams = [_wrapper_matches(text, idx, spec) for idx, spec in enumerate(wrappers)]
    return heapq.merge(*streams, key=lambda t: (t[0], t[1]))


def scan_text(text: str, wrappers: Optional[Sequence[WrapperSpec]] = None) -> Iterator[Annotation]:
    """Yield annotations found in `text`, in document order.

    `wrappers` defaults to DEFAULT_WRAPPERS. Each call starts fresh.
    """
    specs = list(wrappers) if wrappers else list(DEFAULT_WRAPPERS)
    cursor = 0      # end offset of the last emitted match
    line = 1
    line_pos = 0    # offset up to which newlines were counted

    for start, _idx, m, spec in _iter_matches(text, specs):
        if start < cursor:
            continue

        line += text.count("\n", line_pos, start)
        line_pos = start
        column = start - (text.rfind("\n", 0, start) + 1) + 1

        raw = m.group(0)
        op, body, fix = classify_payload(m.group("payload"))
        cursor = m.end()

        yield Annotation(
            wrapper=spec.name,
            kind=spec.kind,
            operator=op,
            text=body,
            raw=raw,
            offset=start,
            end_offset=m.end(),
            line=line,
            column=column,
            end_line=line + raw.count("\n"),
            fix=fix,
        )


def scan_annotations(text: str, wrappers: Optional[Sequence[WrapperSpec]] = None) -> List[Annotation]:
    """Eager variant of scan_text()."""
    return list(scan_text(text, wrappers))
