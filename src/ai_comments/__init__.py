"""Scanner and tooling for AI Comments.

An AI Comment is a bracketed comment such as `/*[ ~ rule ]*/` or `//[ intent ]`
whose optional leading operator selects its category: intent (none),
rationale (?), rule (~), instruction (>) or completed instruction (:).
"""

from .normalize import AnnotationNotFound, complete_instruction, normalize_text, serialize
from .scanner import classify_payload, scan_annotations, scan_text
from .types import Annotation, AnnotationRecord, Operator
from .wrappers import DEFAULT_WRAPPERS, WrapperSpec

__all__ = [
    "Annotation",
    "AnnotationNotFound",
    "AnnotationRecord",
    "DEFAULT_WRAPPERS",
    "Operator",
    "WrapperSpec",
    "classify_payload",
    "complete_instruction",
    "normalize_text",
    "scan_annotations",
    "scan_text",
    "serialize",
]
