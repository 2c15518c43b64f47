"""Tests for ignore pattern system."""

import pytest

from treefreeze.errors import ConfigError
from treefreeze.ignore import IgnoreSpec, is_tool_path


class TestIgnoreSpec:
    """Test ignore pattern matching."""

    def test_tool_directory_always_ignored(self, tmp_path):
        ignore = IgnoreSpec(tmp_path)

        assert ignore.is_ignored(".treefreeze/versions/20261019T120000.000000Z")
        assert ignore.is_ignored(".treefreeze/config.yaml")
        assert not ignore.should_traverse(".treefreeze")
        assert not ignore.should_traverse(".treefreeze/versions")

    def test_nothing_else_ignored_by_default(self, tmp_path):
        ignore = IgnoreSpec(tmp_path)

        assert not ignore.is_ignored("src/main.py")
        assert not ignore.is_ignored(".git/config")
        assert not ignore.is_ignored("nested/.treefreeze/file")
        assert ignore.should_traverse("src")

    def test_custom_patterns(self, tmp_path):
        """Test custom patterns from .treefreezeignore file."""
        (tmp_path / ".treefreezeignore").write_text("""
# Comments should be ignored
*.log
temp/
!temp/keep.txt
data/*.csv
""")

        ignore = IgnoreSpec(tmp_path)

        assert ignore.is_ignored("debug.log")
        assert ignore.is_ignored("temp/file.txt")
        assert not ignore.is_ignored("temp/keep.txt")  # Negation pattern
        assert ignore.is_ignored("data/test.csv")
        assert not ignore.is_ignored("data/subdir/test.csv")  # Only direct children

    def test_extra_patterns(self, tmp_path):
        ignore = IgnoreSpec(tmp_path, extra=["build/"])

        assert ignore.is_ignored("build/out.o")
        assert not ignore.should_traverse("build")

    def test_ignore_file_not_utf8(self, tmp_path):
        (tmp_path / ".treefreezeignore").write_bytes(b"\xff\xfe*.log\n")

        with pytest.raises(ConfigError, match="Cannot read"):
            IgnoreSpec(tmp_path)


class TestToolPath:

    def test_containment(self):
        assert is_tool_path(".treefreeze")
        assert is_tool_path(".treefreeze/")
        assert is_tool_path(".treefreeze/versions/x")
        assert not is_tool_path(".treefreeze2/x")
        assert not is_tool_path("src/.treefreeze")
