from __future__ import annotations
import hashlib
from pathlib import Path
from typing import Iterable, List, Sequence

DEFAULT_EXTENSIONS = (
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
    ".py", ".rb", ".sh",
    ".c", ".h", ".cc", ".cpp", ".hpp", ".cs", ".java", ".kt", ".go", ".swift", ".scala",
    ".sql", ".hs",
    ".clj", ".lisp", ".el", ".asm", ".ini",
    ".css", ".scss", ".php",
)

DEFAULT_SKIP_DIRS = (
    ".git", ".venv", "venv", "node_modules", "__pycache__", "build", "dist",
    ".mypy_cache", ".pytest_cache", ".tox",
)


def iter_source_files(
    repo_dir: str,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    skip_dirs: Sequence[str] = DEFAULT_SKIP_DIRS,
) -> Iterable[str]:
    """Yield repo-relative POSIX paths of source files (skip venv, build, hidden dirs)."""
    root = Path(repo_dir).resolve()
    exts = {e.lower() for e in extensions}
    skip = set(skip_dirs)
    for p in sorted(root.rglob("*")):
        if not p.is_file() or p.suffix.lower() not in exts:
            continue
        rel = p.relative_to(root)
        dirs = rel.parts[:-1]
        if any(d in skip or d.startswith(".") for d in dirs):
            continue
        yield rel.as_posix()


def stable_id(*parts: str) -> str:
    h = hashlib.sha1("||".join(parts).encode("utf-8")).hexdigest()[:16]
    return h


def read_text(path: Path) -> str:
    """Read a file as text for scanning; unreadable files read as empty.

    Line endings are kept as-is so offsets match the file's characters.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()
    except OSError:
        return ""


def read_source(path: Path) -> str:
    """Read a file for in-place rewriting.

    Newlines are untranslated and undecodable bytes survive as surrogates, so
    write_source() puts back exactly the bytes that were not edited.
    """
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def write_source(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)


def snippet_from_lines(lines: List[str], start_line: int, end_line: int, with_lineno: bool=True) -> str:
    start = max(1, start_line)
    end = min(len(lines), max(start, end_line))
    out=[]
    for i in range(start, end+1):
        s = lines[i-1]
        out.append(f"{i:4d}: {s}" if with_lineno else s)
    return "\n".join(out)
