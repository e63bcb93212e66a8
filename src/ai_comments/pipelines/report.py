from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from ..config import ScanConfig
from ..report import REPORT_KINDS, render_json, render_text
from ..repo_scan import build_annotation_index


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Report AI Comments found in a repository.")
    parser.add_argument("--repo_dir", type=str, required=True, help="Local repository root directory.")
    parser.add_argument("--kind", choices=REPORT_KINDS, default="summary")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text lines.")
    parser.add_argument("--wrappers", type=str, default=None, help="Comma-separated wrapper names.")
    parser.add_argument("--no_progress", action="store_true", help="Disable the progress bar.")
    args = parser.parse_args(argv)

    cfg = ScanConfig().with_overrides(wrappers=args.wrappers, progress=False if args.no_progress else None)
    index = build_annotation_index(str(Path(args.repo_dir).resolve()), cfg)

    if args.json:
        print(json.dumps(render_json(args.kind, index), ensure_ascii=False, indent=2), flush=True)
    else:
        for line in render_text(args.kind, index):
            print(line, flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
