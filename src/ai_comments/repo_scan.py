# src/ai_comments/repo_scan.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .config import ScanConfig
from .scanner import scan_annotations
from .types import Annotation, AnnotationRecord, Operator
from .utils import iter_source_files, read_text, snippet_from_lines, stable_id
from .wrappers import WrapperSpec

# ---------------------------
# Data structures
# ---------------------------

@dataclass
class ScannedFile:
    """Annotations found in one repository file."""
    file_path: str                 # repo-relative POSIX path, e.g. "src/service.ts"
    annotations: List[Annotation] = field(default_factory=list)
    line_count: int = 0


@dataclass
class AnnotationIndex:
    """
    Repository-wide annotation index used by reports and pipelines.

    Files are sorted by path; annotations inside a file keep document order.
    """
    repo_dir: str
    files: List[ScannedFile]

    def get_file(self, rel_path: str) -> Optional[ScannedFile]:
        for sf in self.files:
            if sf.file_path == rel_path:
                return sf
        return None

    def iter_annotations(self) -> Iterator[Tuple[str, Annotation]]:
        for sf in self.files:
            for a in sf.annotations:
                yield sf.file_path, a

    def by_operator(self, op: Operator) -> List[Tuple[str, Annotation]]:
        return [(fp, a) for fp, a in self.iter_annotations() if a.operator is op]

    def records(self) -> List[AnnotationRecord]:
        return [to_record(fp, a) for fp, a in self.iter_annotations()]

    @property
    def annotation_count(self) -> int:
        return sum(len(sf.annotations) for sf in self.files)


# ---------------------------
# Helpers
# ---------------------------

def to_record(file_path: str, annotation: Annotation) -> AnnotationRecord:
    rid = f"aic_{stable_id(file_path, str(annotation.offset), annotation.raw)}"
    return AnnotationRecord(id=rid, file_path=file_path, annotation=annotation)


def scan_file(repo_dir: str, rel_path: str, wrappers: Optional[Sequence[WrapperSpec]] = None) -> ScannedFile:
    """Scan one file. Unreadable files scan as empty."""
    text = read_text(Path(repo_dir) / rel_path)
    return ScannedFile(
        file_path=rel_path,
        annotations=scan_annotations(text, wrappers),
        line_count=len(text.splitlines()),
    )


def annotation_snippet(repo_dir: str, rel_path: str, annotation: Annotation, context: int = 8) -> str:
    """Numbered snippet around an annotation (annotation lines plus `context` lines after)."""
    lines = read_text(Path(repo_dir) / rel_path).splitlines()
    return snippet_from_lines(lines, annotation.line, annotation.end_line + context, with_lineno=True)


# ---------------------------
# Public APIs
# ---------------------------

def build_annotation_index(repo_dir: str, config: Optional[ScanConfig] = None) -> AnnotationIndex:
    """
    Scan every source file under repo_dir.

    Files are independent, so they are scanned on a thread pool; the result is
    sorted by path regardless of completion order.
    """
    cfg = config or ScanConfig()
    root = Path(repo_dir).resolve()
    wrappers = cfg.wrappers()
    paths = list(iter_source_files(str(root), cfg.extensions, cfg.skip_dirs))

    files: Dict[str, ScannedFile] = {}
    pbar = tqdm(total=len(paths), desc="Scan AI comments", unit="file", disable=not cfg.progress)
    with ThreadPoolExecutor(max_workers=max(1, cfg.workers)) as ex:
        for sf in ex.map(lambda p: scan_file(str(root), p, wrappers), paths):
            files[sf.file_path] = sf
            pbar.update(1)
    pbar.close()

    return AnnotationIndex(
        repo_dir=str(root),
        files=[files[p] for p in sorted(files)],
    )


def iter_repo_annotations(repo_dir: str, config: Optional[ScanConfig] = None) -> Iterable[AnnotationRecord]:
    """Convenience: records for every annotation in the repository."""
    yield from build_annotation_index(repo_dir, config).records()
