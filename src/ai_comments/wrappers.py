from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

# ---------------------------
# Wrapper definitions
# ---------------------------

@dataclass(frozen=True)
class WrapperSpec:
    """Delimiter pair that marks an AI Comment.

    `open`/`close` include the brackets, e.g. "/*[" and "]*/".
    `terminator` is the bare comment terminator a block payload may not contain,
    so a malformed "/*[ ... */" is never stitched to a later "]*/".
    """
    name: str
    kind: str  # "block" | "line"
    open: str
    close: str
    terminator: str = ""


BLOCK = WrapperSpec(name="block", kind="block", open="/*[", close="]*/", terminator="*/")
SLASH = WrapperSpec(name="slash", kind="line", open="//[", close="]")
HASH = WrapperSpec(name="hash", kind="line", open="#[", close="]")
DASH = WrapperSpec(name="dash", kind="line", open="--[", close="]")
SEMI = WrapperSpec(name="semi", kind="line", open=";[", close="]")
HTML = WrapperSpec(name="html", kind="block", open="<!--[", close="]-->", terminator="-->")

DEFAULT_WRAPPERS: List[WrapperSpec] = [BLOCK, SLASH, HASH, DASH, SEMI]

KNOWN_WRAPPERS: Dict[str, WrapperSpec] = {w.name: w for w in DEFAULT_WRAPPERS + [HTML]}


def resolve_wrappers(names: Optional[Iterable[str]]) -> List[WrapperSpec]:
    """Look up wrappers by name. None/empty means the defaults."""
    if not names:
        return list(DEFAULT_WRAPPERS)
    out: List[WrapperSpec] = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        if name not in KNOWN_WRAPPERS:
            raise ValueError(f"Unknown wrapper: {name!r} (known: {', '.join(sorted(KNOWN_WRAPPERS))})")
        out.append(KNOWN_WRAPPERS[name])
    return out or list(DEFAULT_WRAPPERS)


def find_wrapper(name: str, wrappers: Optional[Sequence[WrapperSpec]] = None) -> WrapperSpec:
    for w in wrappers or KNOWN_WRAPPERS.values():
        if w.name == name:
            return w
    raise KeyError(name)


# ---------------------------
# Patterns
# ---------------------------

@lru_cache(maxsize=64)
def compile_wrapper(spec: WrapperSpec) -> Pattern[str]:
    """Non-greedy pattern for one wrapper. The payload is captured as group "payload".

    Block: may span lines, payload must not contain the terminator.
    Line: opener at line start or after whitespace, closing bracket last on the line.
    """
    op = re.escape(spec.open)
    cl = re.escape(spec.close)
    if spec.kind == "block":
        if spec.terminator:
            body = rf"(?:(?!{re.escape(spec.terminator)}).)*?"
        else:
            body = r".*?"
        return re.compile(rf"{op}(?P<payload>{body}){cl}", re.DOTALL)
    if spec.kind == "line":
        return re.compile(rf"(?:^|(?<=\s)){op}(?P<payload>[^\r\n]*?){cl}[ \t]*(?=\r?\n|\Z)", re.MULTILINE)
    raise ValueError(f"Unknown wrapper kind: {spec.kind!r}")
