import shutil
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """A copy of the annotated sample app plus one unannotated file."""
    repo = tmp_path / "repo"
    shutil.copytree(FIXTURES / "sample_app", repo)
    shutil.copy(FIXTURES / "plain_app" / "src" / "models.ts", repo / "src" / "plain.ts")
    (repo / "node_modules" / "dep").mkdir(parents=True)
    (repo / "node_modules" / "dep" / "index.js").write_text("/*[ ~ vendored, never scanned ]*/\n")
    (repo / "README.md").write_text("/*[ not a source file ]*/\n")
    return repo


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ["AIC_EXTENSIONS", "AIC_SKIP_DIRS", "AIC_WRAPPERS", "AIC_WORKERS", "AIC_PROGRESS"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("AIC_PROGRESS", "0")
