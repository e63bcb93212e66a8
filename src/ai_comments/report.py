"""Reports over an AnnotationIndex.

All functions are pure: they read the index and return plain data that the
report pipeline prints as text or JSON.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .repo_scan import AnnotationIndex, to_record
from .types import Annotation, Operator

Located = Tuple[str, Annotation]


def summarize(index: AnnotationIndex) -> Dict[str, Any]:
    counts = {op.category: 0 for op in Operator}
    flagged = 0
    for _fp, a in index.iter_annotations():
        counts[a.category] += 1
        if a.needs_normalization:
            flagged += 1
    return {
        "repo_dir": index.repo_dir,
        "files": len(index.files),
        "files_with_annotations": sum(1 for sf in index.files if sf.annotations),
        "annotations": index.annotation_count,
        "by_category": counts,
        "needs_normalization": flagged,
    }


def open_instructions(index: AnnotationIndex) -> List[Located]:
    return index.by_operator(Operator.INSTRUCTION)


def rule_list(index: AnnotationIndex) -> List[Located]:
    return index.by_operator(Operator.RULE)


def lint_findings(index: AnnotationIndex) -> List[Located]:
    return [(fp, a) for fp, a in index.iter_annotations() if a.needs_normalization]


def files_without_intent_header(index: AnnotationIndex) -> List[str]:
    """Files whose first annotation is not an intent comment (or that have none)."""
    out: List[str] = []
    for sf in index.files:
        if not sf.annotations or sf.annotations[0].operator is not Operator.NONE:
            out.append(sf.file_path)
    return out


def format_located(file_path: str, a: Annotation) -> str:
    tag = a.operator.symbol or "-"
    line = f"{file_path}:{a.line}:{a.column}  [{tag}] {a.text}"
    if a.needs_normalization:
        line += f"  ({a.fix})"
    return line


def render_text(kind: str, index: AnnotationIndex) -> List[str]:
    """Plain-text report lines for one report kind."""
    if kind == "summary":
        s = summarize(index)
        lines = [
            f"repo: {s['repo_dir']}",
            f"files: {s['files']} (with annotations: {s['files_with_annotations']})",
            f"annotations: {s['annotations']}",
        ]
        for cat, n in s["by_category"].items():
            lines.append(f"  {cat}: {n}")
        lines.append(f"needs normalization: {s['needs_normalization']}")
        return lines
    if kind == "headers":
        return files_without_intent_header(index)
    return [format_located(fp, a) for fp, a in _located_for(kind, index)]


def render_json(kind: str, index: AnnotationIndex) -> Any:
    if kind == "summary":
        return summarize(index)
    if kind == "headers":
        return files_without_intent_header(index)
    return [to_record(fp, a).to_dict() for fp, a in _located_for(kind, index)]


def _located_for(kind: str, index: AnnotationIndex) -> List[Located]:
    if kind == "instructions":
        return open_instructions(index)
    if kind == "rules":
        return rule_list(index)
    if kind == "lint":
        return lint_findings(index)
    if kind == "all":
        return list(index.iter_annotations())
    raise ValueError(f"Unknown report kind: {kind!r}")


REPORT_KINDS = ("summary", "instructions", "rules", "lint", "headers", "all")
