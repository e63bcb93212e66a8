from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import ScanConfig
from ..repo_scan import build_annotation_index
from ..types import AnnotationRecord


def write_jsonl(records: Iterable[AnnotationRecord], out_path: Path) -> int:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with out_path.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec.to_dict(), ensure_ascii=False) + "\n")
            n += 1
    return n


def read_jsonl(path: Path) -> List[AnnotationRecord]:
    out: List[AnnotationRecord] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            out.append(AnnotationRecord.from_dict(json.loads(line)))
    return out


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Scan a repository for AI Comments and write them as JSONL.")
    parser.add_argument("--repo_dir", type=str, required=True, help="Local repository root directory.")
    parser.add_argument("--out_jsonl", type=str, required=True, help="Output JSONL path.")
    parser.add_argument("--extensions", type=str, default=None, help="Comma-separated file extensions, e.g. ts,py.")
    parser.add_argument("--wrappers", type=str, default=None, help="Comma-separated wrapper names, e.g. block,slash.")
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--no_progress", action="store_true", help="Disable the progress bar.")
    args = parser.parse_args(argv)

    cfg = ScanConfig().with_overrides(
        extensions=args.extensions,
        wrappers=args.wrappers,
        workers=args.workers,
        progress=False if args.no_progress else None,
    )
    repo_dir = Path(args.repo_dir).resolve()
    out_jsonl = Path(args.out_jsonl).resolve()

    index = build_annotation_index(str(repo_dir), cfg)
    n = write_jsonl(index.records(), out_jsonl)

    print(f"[SCAN] repo={repo_dir} files={len(index.files)} items={n} out={out_jsonl}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
