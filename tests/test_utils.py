"""Tests for snapshot naming and date helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from treefreeze.utils import (
    format_snapshot_name,
    humanize_date,
    parse_snapshot_name,
    printable_path,
    utc_now,
)

NOON = datetime(2026, 10, 19, 12, 0, 0, 123456, tzinfo=timezone.utc)


class TestSnapshotNames:

    def test_format(self):
        assert format_snapshot_name(NOON) == "20261019T120000.123456Z"
        assert format_snapshot_name(NOON, 3) == "20261019T120000.123456Z-3"

    def test_naive_datetime_assumed_utc(self):
        assert format_snapshot_name(NOON.replace(tzinfo=None)) == "20261019T120000.123456Z"

    def test_parse(self):
        assert parse_snapshot_name("20261019T120000.123456Z") == (NOON, 0)
        assert parse_snapshot_name("20261019T120000.123456Z-12") == (NOON, 12)

    @pytest.mark.parametrize("name", [
        "notes.txt",
        "20261019T120000Z",
        "20261019T120000.123456Z-0",
        "20261019T120000.123456Z-",
        "20261319T120000.000000Z",
        "x20261019T120000.123456Z",
        ".snapshot.tmp-abc",
    ])
    def test_parse_rejects(self, name):
        assert parse_snapshot_name(name) is None

    def test_names_sort_chronologically(self):
        moments = [NOON + timedelta(microseconds=n) for n in (0, 1, 999999, 10**7)]
        names = [format_snapshot_name(m) for m in moments]

        assert sorted(names) == names

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None


class TestHumanizeDate:

    @pytest.mark.parametrize("delta, expected", [
        (timedelta(seconds=5), "just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(hours=2), "2 hours ago"),
        (timedelta(days=5), "5 days ago"),
        (timedelta(days=14), "2 weeks ago"),
        (timedelta(days=400), "1 year ago"),
    ])
    def test_relative(self, delta, expected):
        assert humanize_date(NOON - delta, now=NOON) == expected


class TestPrintablePath:

    def test_plain_path_unchanged(self):
        assert printable_path("src/main.py") == "src/main.py"
        assert printable_path("café/naïve.txt") == "café/naïve.txt"

    def test_undecodable_bytes_escaped(self):
        assert printable_path("raw\udcff.bin") == "raw\\xff.bin"

    def test_other_lone_surrogates_escaped(self):
        assert printable_path("odd\ud800") == "odd\\ud800"

    def test_result_encodes_strictly(self):
        printable_path("raw\udcff\ud800.bin").encode("utf-8")
