"""Shared test fixtures and utilities."""

from datetime import datetime, timedelta, timezone
import pytest

from treefreeze.context import ProjectContext
from treefreeze.core import FingerprintStore


@pytest.fixture
def root(tmp_path):
    """An empty directory to snapshot."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def ctx(root):
    """Project context for the root fixture."""
    return ProjectContext(root)


@pytest.fixture
def write_file(root):
    """Factory fixture to write files relative to root."""
    def _write(path: str, content: str = "test content"):
        file_path = root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def test_files(write_file):
    """Create common test files under root."""
    def make_files():
        return {
            "file1.txt": write_file("file1.txt", "content1"),
            "file2.txt": write_file("file2.txt", "content2"),
            "src/main.py": write_file("src/main.py", "print('hello')"),
            "data/data.csv": write_file("data/data.csv", "a,b,c\n1,2,3"),
        }
    return make_files


@pytest.fixture
def clock():
    """Deterministic clock that advances one second per call."""
    class StepClock:
        def __init__(self):
            self.now = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
            self.step = timedelta(seconds=1)

        def __call__(self):
            current = self.now
            self.now = self.now + self.step
            return current

    return StepClock()


@pytest.fixture
def make_store():
    """Factory fixture to build fingerprint stores from path -> digest pairs."""
    def _make(files=None, algorithm="sha256"):
        return FingerprintStore(algorithm=algorithm, files=dict(files or {}))
    return _make
