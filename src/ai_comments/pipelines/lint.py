from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from ..config import ScanConfig
from ..normalize import normalize_text
from ..report import format_located, lint_findings
from ..repo_scan import build_annotation_index
from ..utils import read_source, write_source


def fix_file(path: Path, cfg: ScanConfig) -> int:
    """Normalize operator spacing in place. Returns the number of fixes.

    Bytes outside the rewritten separators (line endings, non-UTF-8 text) are kept.
    """
    text = read_source(path)
    new_text, flagged = normalize_text(text, cfg.wrappers())
    if flagged:
        write_source(path, new_text)
    return len(flagged)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check AI Comment operator spacing; optionally fix it in place.")
    parser.add_argument("--repo_dir", type=str, required=True, help="Local repository root directory.")
    parser.add_argument("--fix", action="store_true", help="Rewrite files so every operator is followed by one space.")
    parser.add_argument("--wrappers", type=str, default=None, help="Comma-separated wrapper names.")
    parser.add_argument("--no_progress", action="store_true", help="Disable the progress bar.")
    args = parser.parse_args(argv)

    cfg = ScanConfig().with_overrides(wrappers=args.wrappers, progress=False if args.no_progress else None)
    repo_dir = Path(args.repo_dir).resolve()
    index = build_annotation_index(str(repo_dir), cfg)
    findings = lint_findings(index)

    for fp, a in findings:
        print(format_located(fp, a), flush=True)

    if not args.fix:
        print(f"[LINT] repo={repo_dir} findings={len(findings)}", flush=True)
        return 1 if findings else 0

    fixed = 0
    for fp in sorted({fp for fp, _a in findings}):
        fixed += fix_file(repo_dir / fp, cfg)
    print(f"[LINT] repo={repo_dir} findings={len(findings)} fixed={fixed}", flush=True)
    return 0 if fixed == len(findings) else 1


if __name__ == "__main__":
    raise SystemExit(main())
