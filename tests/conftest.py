import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'stackforge' and tests/ importable for helpers
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_stackforge_caches


@pytest.fixture(autouse=True)
def _isolate_stackforge(monkeypatch: pytest.MonkeyPatch):
    """Give every test a clean environment and empty config caches."""
    for key in list(os.environ):
        if key.startswith("STACKFORGE_"):
            monkeypatch.delenv(key, raising=False)
    reset_stackforge_caches()
    yield
    reset_stackforge_caches()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory used as the working directory."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(root)
    return root
