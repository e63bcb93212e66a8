from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from ..normalize import AnnotationNotFound, complete_instruction
from ..utils import read_source, write_source
from ..wrappers import resolve_wrappers


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Mark the '>' instruction on a line as completed (':').")
    parser.add_argument("--file", type=str, required=True, help="Source file containing the instruction.")
    parser.add_argument("--line", type=int, required=True, help="1-based line where the instruction starts.")
    parser.add_argument("--wrappers", type=str, default=None, help="Comma-separated wrapper names.")
    args = parser.parse_args(argv)

    path = Path(args.file).resolve()
    wrappers = resolve_wrappers(args.wrappers.split(",") if args.wrappers else None)
    if not path.is_file():
        print(f"[COMPLETE] error: file not found file={path}", flush=True)
        return 1
    try:
        new_text, done = complete_instruction(read_source(path), args.line, wrappers)
    except AnnotationNotFound as e:
        print(f"[COMPLETE] error: {e} file={path}", flush=True)
        return 1

    write_source(path, new_text)
    print(f"[COMPLETE] {path}:{done.line} {done.text}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
