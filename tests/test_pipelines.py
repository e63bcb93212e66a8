"""Tests for the command-line pipelines."""

import json
from pathlib import Path

import pytest

from ai_comments.pipelines import complete, lint, report, scan
from ai_comments.scanner import scan_annotations
from ai_comments.types import Operator


class TestScanPipeline:
    def test_writes_jsonl(self, sample_repo: Path, tmp_path: Path, capsys):
        out = tmp_path / "out" / "annotations.jsonl"
        rc = scan.main(["--repo_dir", str(sample_repo), "--out_jsonl", str(out), "--no_progress"])
        assert rc == 0
        rows = [json.loads(line) for line in out.read_text().splitlines()]
        assert len(rows) == 17
        assert rows[0]["file_path"] == "src/index.ts"
        assert "[SCAN]" in capsys.readouterr().out

        back = scan.read_jsonl(out)
        assert back[0].annotation.operator is Operator.NONE

    def test_extension_filter(self, sample_repo: Path, tmp_path: Path):
        out = tmp_path / "a.jsonl"
        scan.main(["--repo_dir", str(sample_repo), "--out_jsonl", str(out), "--extensions", "py"])
        assert out.read_text() == ""

    def test_missing_args_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            scan.main([])
        assert exc.value.code == 2


class TestReportPipeline:
    def test_text_instructions(self, sample_repo: Path, capsys):
        rc = report.main(["--repo_dir", str(sample_repo), "--kind", "instructions"])
        assert rc == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0].startswith("src/index.ts:8:1  [>] Add a file-backed repository")
        assert len(out) == 3

    def test_json_summary(self, sample_repo: Path, capsys):
        report.main(["--repo_dir", str(sample_repo), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["annotations"] == 17
        assert data["by_category"]["rule"] == 8


class TestLintPipeline:
    def test_clean_repo_passes(self, sample_repo: Path, capsys):
        assert lint.main(["--repo_dir", str(sample_repo)]) == 0
        assert "findings=0" in capsys.readouterr().out

    def test_findings_fail_then_fix(self, sample_repo: Path, capsys):
        target = sample_repo / "src" / "service.ts"
        target.write_text(target.read_text().replace("/*[ ~ `addTask`", "/*[ ~`addTask`"))

        assert lint.main(["--repo_dir", str(sample_repo)]) == 1
        assert "src/service.ts:10:3  [~]" in capsys.readouterr().out

        assert lint.main(["--repo_dir", str(sample_repo), "--fix"]) == 0
        assert "/*[ ~ `addTask` must trim" in target.read_text()
        assert lint.main(["--repo_dir", str(sample_repo)]) == 0


class TestCompletePipeline:
    def test_marks_done(self, sample_repo: Path, capsys):
        target = sample_repo / "src" / "utils.ts"
        rc = complete.main(["--file", str(target), "--line", "17"])
        assert rc == 0
        anns = scan_annotations(target.read_text())
        done = [a for a in anns if a.line == 17]
        assert done[0].operator is Operator.COMPLETED
        assert "[COMPLETE]" in capsys.readouterr().out

    def test_wrong_line(self, sample_repo: Path, capsys):
        target = sample_repo / "src" / "utils.ts"
        before = target.read_text()
        assert complete.main(["--file", str(target), "--line", "1"]) == 1
        assert target.read_text() == before
        assert "error" in capsys.readouterr().out


class TestRewritesPreserveBytes:
    def test_lint_fix_keeps_crlf(self, tmp_path: Path):
        repo = tmp_path / "crlf"
        repo.mkdir()
        target = repo / "a.ts"
        target.write_bytes(b"/*[ >Do this ]*/\r\nconst x = 1;\r\n")

        assert lint.main(["--repo_dir", str(repo), "--fix"]) == 0
        assert target.read_bytes() == b"/*[ > Do this ]*/\r\nconst x = 1;\r\n"

    def test_lint_fix_keeps_latin1_bytes(self, tmp_path: Path):
        repo = tmp_path / "latin1"
        repo.mkdir()
        target = repo / "a.c"
        target.write_bytes(b"/*[ ~must hold ]*/\n/* caf\xe9 */\n")

        assert lint.main(["--repo_dir", str(repo), "--fix"]) == 0
        assert target.read_bytes() == b"/*[ ~ must hold ]*/\n/* caf\xe9 */\n"

    def test_complete_keeps_crlf(self, tmp_path: Path):
        target = tmp_path / "b.ts"
        target.write_bytes(b"//[ > x ]\r\ny();\r\n")

        assert complete.main(["--file", str(target), "--line", "1"]) == 0
        assert target.read_bytes() == b"//[ : x ]\r\ny();\r\n"

    def test_complete_missing_file(self, tmp_path: Path, capsys):
        missing = tmp_path / "nope.ts"
        assert complete.main(["--file", str(missing), "--line", "1"]) == 1
        out = capsys.readouterr().out
        assert "file not found" in out
        assert "No open instruction" not in out
        assert not missing.exists()
