"""Tests for diffing logic and edge cases."""

import hashlib

import pytest

from treefreeze.core import ChangeType, DiffResult, FingerprintStore
from treefreeze.diffing import compute_diff
from treefreeze.errors import DigestAlgorithmMismatchError

H1 = hashlib.sha256(b"one").digest()
H2 = hashlib.sha256(b"two").digest()
H3 = hashlib.sha256(b"three").digest()


class TestDiffScenarios:
    """Test the basic classification scenarios."""

    def test_added_file(self, make_store):
        """A path only in after is added."""
        before = make_store({"a.txt": H1})
        after = make_store({"a.txt": H1, "b.txt": H2})

        diff = compute_diff(before, after)

        assert diff.added == ["b.txt"]
        assert diff.deleted == []
        assert diff.modified == []

    def test_deleted_file(self, make_store):
        """A path only in before is deleted."""
        diff = compute_diff(make_store({"a.txt": H1}), make_store())

        assert diff.deleted == ["a.txt"]
        assert diff.added == []
        assert diff.modified == []

    def test_modified_file(self, make_store):
        """Same path, different digest is modified."""
        diff = compute_diff(make_store({"a.txt": H1}), make_store({"a.txt": H2}))

        assert diff.modified == ["a.txt"]
        assert diff.added == []
        assert diff.deleted == []

    def test_both_empty(self, make_store):
        """First run on an empty tree reports nothing."""
        diff = compute_diff(make_store(), make_store())

        assert not diff.has_changes
        assert diff.changes == []

    def test_unchanged_file_produces_no_record(self, make_store):
        """Identical digests are not reported."""
        diff = compute_diff(
            make_store({"a.txt": H1, "b.txt": H2}),
            make_store({"a.txt": H1, "b.txt": H3}),
        )

        assert diff.modified == ["b.txt"]
        assert [c.path for c in diff.changes] == ["b.txt"]

    def test_lists_are_sorted(self, make_store):
        """Each category is sorted lexicographically."""
        before = make_store({"z.txt": H1, "m.txt": H1, "b/x": H1, "a/y": H1})
        after = make_store({"z.txt": H2, "m.txt": H2, "q.txt": H1, "c.txt": H1})

        diff = compute_diff(before, after)

        assert diff.modified == ["m.txt", "z.txt"]
        assert diff.deleted == ["a/y", "b/x"]
        assert diff.added == ["c.txt", "q.txt"]


class TestDiffProperties:
    """Test algebraic properties of the classifier."""

    @pytest.fixture
    def stores(self, make_store):
        a = make_store({"same": H1, "changed": H1, "only_a": H2, "dir/nested": H3})
        b = make_store({"same": H1, "changed": H2, "only_b": H3, "dir/other": H1})
        return a, b

    def test_self_diff_is_empty(self, stores):
        for store in stores:
            assert compute_diff(store, store) == DiffResult()

    def test_symmetry(self, stores):
        """Added one way is deleted the other way."""
        a, b = stores
        forward = compute_diff(a, b)
        backward = compute_diff(b, a)

        assert forward.added == backward.deleted
        assert forward.deleted == backward.added
        assert forward.modified == backward.modified

    def test_completeness(self, stores):
        """Every path lands in exactly one category."""
        a, b = stores
        diff = compute_diff(a, b)
        unchanged = [
            p for p in set(a.files) & set(b.files) if a.files[p] == b.files[p]
        ]

        categories = [diff.modified, diff.deleted, diff.added, unchanged]
        every_path = [p for category in categories for p in category]

        assert sorted(every_path) == sorted(set(a.files) | set(b.files))
        assert len(every_path) == len(set(every_path))

    def test_inputs_not_mutated(self, stores):
        a, b = stores
        a_copy, b_copy = a.model_copy(deep=True), b.model_copy(deep=True)

        compute_diff(a, b)

        assert a == a_copy
        assert b == b_copy


class TestDiffResult:
    """Test DiffResult helpers."""

    def test_changes_tagged_by_type(self):
        diff = DiffResult(modified=["m"], deleted=["d"], added=["a"])

        assert [(c.path, c.change_type) for c in diff.changes] == [
            ("m", ChangeType.MODIFIED),
            ("d", ChangeType.DELETED),
            ("a", ChangeType.ADDED),
        ]

    def test_summary_counts(self):
        diff = DiffResult(modified=["m"], added=["a", "b"])

        assert diff.summary == {
            ChangeType.MODIFIED: 1,
            ChangeType.DELETED: 0,
            ChangeType.ADDED: 2,
        }
        assert diff.summary_text() == "2 added, 1 modified"

    def test_summary_text_no_changes(self):
        assert DiffResult().summary_text() == "No changes"


class TestAlgorithmMismatch:
    """Stores hashed differently cannot be compared."""

    def test_mismatch_raises(self, make_store):
        before = make_store({"a.txt": H1}, algorithm="sha256")
        after = make_store({"a.txt": hashlib.sha1(b"one").digest()}, algorithm="sha1")

        with pytest.raises(DigestAlgorithmMismatchError) as exc_info:
            compute_diff(before, after)

        assert exc_info.value.before == "sha256"
        assert exc_info.value.after == "sha1"

    def test_empty_stores_still_checked(self):
        with pytest.raises(DigestAlgorithmMismatchError):
            compute_diff(FingerprintStore(algorithm="sha1"), FingerprintStore())
