from __future__ import annotations

import argparse
import json
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Set, Tuple

from tqdm import tqdm

from ..config import ScanConfig
from ..llm.client import LLMConfig, OpenAIChatClient, extract_first_json_object
from ..repo_scan import AnnotationIndex, annotation_snippet, build_annotation_index, to_record
from ..types import AnnotationRecord, Operator

# =============================================================================
# Instruction planning:
#
# Every open ">" instruction is sent to an OpenAI-compatible endpoint together
# with the "~" rules, "?" rationale and intent header of the same file and a
# numbered code snippet. The model answers with a JSON plan which is stored
# on the record (meta.plan). Output is streaming + resumable by record id.
# =============================================================================

SYSTEM_PROMPT = """You are a careful software engineer reading "AI Comments" in a codebase.
Comment categories: intent (no prefix), "?" rationale, "~" rule (hard constraint), ">" open instruction, ":" completed instruction.

Your task: write an implementation plan for ONE open instruction.

Hard constraints:
1) Every "~" rule listed for the file is binding. The plan must not violate any of them.
2) Use only names (files, functions, types) that appear in the instruction, the rules or the code snippet.
3) If the snippet is insufficient, say 'insufficient information' in summary and list what is missing.

Output MUST be a JSON object with fields:
- summary: string (one or two sentences)
- steps: [string] (ordered, 1-8 concrete edits)
- respects_rules: [string] (the rules the plan had to honour, copied verbatim)
""".strip()

MAX_SNIPPET_CHARS = 6000


def build_plan_records(repo_dir: str, index: AnnotationIndex, context_lines: int = 8) -> List[AnnotationRecord]:
    """One record per open instruction, with same-file context in meta.context."""
    out: List[AnnotationRecord] = []
    for sf in index.files:
        instructions = [a for a in sf.annotations if a.operator is Operator.INSTRUCTION]
        if not instructions:
            continue
        rules = [a.text for a in sf.annotations if a.operator is Operator.RULE]
        rationale = [a.text for a in sf.annotations if a.operator is Operator.RATIONALE]
        header = sf.annotations[0].text if sf.annotations[0].operator is Operator.NONE else ""
        for a in instructions:
            rec = to_record(sf.file_path, a)
            rec.meta["context"] = {
                "intent": header,
                "rules": rules,
                "rationale": rationale,
                "snippet": annotation_snippet(repo_dir, sf.file_path, a, context=context_lines),
            }
            out.append(rec)
    return out


def _build_user_prompt(rec: AnnotationRecord) -> str:
    ctx = rec.meta.get("context", {})
    rules = "\n".join(f"- {r}" for r in ctx.get("rules", [])) or "(none)"
    rationale = "\n".join(f"- {r}" for r in ctx.get("rationale", [])) or "(none)"
    snippet = str(ctx.get("snippet", ""))
    if len(snippet) > MAX_SNIPPET_CHARS:
        snippet = snippet[:MAX_SNIPPET_CHARS] + "\n...<truncated>..."

    return f"""--- File ---
{rec.file_path} (instruction at line {rec.annotation.line})
Intent: {ctx.get("intent") or "(none)"}

--- Open instruction ---
{rec.annotation.text}

--- Rules (~) ---
{rules}

--- Rationale (?) ---
{rationale}

--- Code ---
{snippet}
""".strip()


def _validate_and_apply(rec: AnnotationRecord, j: Dict[str, Any]) -> AnnotationRecord:
    if not isinstance(j, dict) or "summary" not in j or "steps" not in j:
        raise ValueError("Bad JSON schema (expect summary/steps)")
    steps = j["steps"]
    if not isinstance(steps, list) or not steps:
        raise ValueError("steps must be a non-empty list")
    rec.meta["plan"] = {
        "summary": str(j["summary"]).strip(),
        "steps": [str(s).strip() for s in steps if str(s).strip()],
        "respects_rules": [str(r).strip() for r in j.get("respects_rules", []) or []],
    }
    rec.meta["llm_planned"] = True
    return rec


def _plan_one(client: OpenAIChatClient, rec: AnnotationRecord) -> Tuple[AnnotationRecord, Optional[str]]:
    try:
        raw = client.chat_text(SYSTEM_PROMPT, _build_user_prompt(rec))
        j = extract_first_json_object(raw)
        rec = _validate_and_apply(rec, j)
        return rec, None
    except Exception as e:
        rec.meta["llm_planned"] = False
        rec.meta["llm_error"] = str(e)
        return rec, f"{rec.id}: {e}"


def _read_done_ids(out_jsonl: str) -> Set[str]:
    done: Set[str] = set()
    if not os.path.exists(out_jsonl):
        return done
    with open(out_jsonl, "r", encoding="utf-8") as f:
        for line in f:
            try:
                d = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(d, dict) and "id" in d:
                done.add(str(d["id"]))
    return done


def plan_records_streaming(
    client: OpenAIChatClient,
    records: List[AnnotationRecord],
    out_jsonl: str,
    err_log: str,
    workers: int = 4,
    progress: bool = True,
) -> Tuple[int, int, int]:
    """Plan every record not already in out_jsonl. Returns (skipped, ok, fail)."""
    os.makedirs(os.path.dirname(out_jsonl) or ".", exist_ok=True)
    os.makedirs(os.path.dirname(err_log) or ".", exist_ok=True)

    done_ids = _read_done_ids(out_jsonl)
    remaining = [r for r in records if r.id not in done_ids]
    skipped = len(records) - len(remaining)
    ok = 0
    fail = 0

    with open(out_jsonl, "a", encoding="utf-8") as out_f, open(err_log, "a", encoding="utf-8") as err_f:
        pbar = tqdm(total=len(remaining), desc="Plan instructions", unit="item", disable=not progress)
        with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
            futs = [ex.submit(_plan_one, client, r) for r in remaining]
            for fut in as_completed(futs):
                rec, err = fut.result()
                out_f.write(json.dumps(rec.to_dict(), ensure_ascii=False) + "\n")
                out_f.flush()
                if err:
                    err_f.write(err + "\n")
                    err_f.flush()
                    fail += 1
                else:
                    ok += 1
                pbar.update(1)
        pbar.close()

    return skipped, ok, fail


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Draft implementation plans for open '>' instructions (LLM, resumable).")
    ap.add_argument("--repo_dir", required=True, help="Repository root to scan.")
    ap.add_argument("--out_jsonl", required=True, help="Output plans jsonl (append/resume).")
    ap.add_argument("--err_log", required=True, help="Error log path (append).")
    ap.add_argument("--workers", type=int, default=None, help="Concurrency (threads).")
    ap.add_argument("--context_lines", type=int, default=8, help="Code lines after the instruction to include.")
    ap.add_argument("--wrappers", type=str, default=None, help="Comma-separated wrapper names.")
    args = ap.parse_args(argv)

    scan_cfg = ScanConfig().with_overrides(wrappers=args.wrappers, workers=args.workers)
    cfg = LLMConfig()
    client = OpenAIChatClient(cfg)
    print(f"[LLM] base_url={cfg.base_url} model={cfg.model} timeout_s={cfg.timeout_s} disable_env_proxy={cfg.disable_env_proxy}", flush=True)

    index = build_annotation_index(args.repo_dir, scan_cfg)
    records = build_plan_records(index.repo_dir, index, context_lines=args.context_lines)
    print(f"[PIPE] open_instructions={len(records)} repo={index.repo_dir}", flush=True)

    skipped, ok, fail = plan_records_streaming(
        client, records, args.out_jsonl, args.err_log,
        workers=scan_cfg.workers, progress=scan_cfg.progress,
    )
    print(f"[DONE] total={len(records)} skipped={skipped} ok={ok} fail={fail} out={args.out_jsonl} err={args.err_log}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
