"""Tests for the utility helpers: filenames, hashing, timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tiptapify.utils import (
    format_timestamp,
    from_epoch_seconds,
    md5_hash,
    sanitize_filename,
    unique_name,
)


class TestSanitizeFilename:
    @pytest.mark.parametrize("name,expected", [
        ("simple", "simple"),
        ("with spaces", "with_spaces"),
        ("My: Notes / 2024", "My_Notes_2024"),
        ("keep-dash_and.dot", "keep-dash_and.dot"),
        ("a___b", "a_b"),
        ("日本語", "_"),
        ("", ""),
        ("../../etc/passwd", ".._.._etc_passwd"),
    ])
    def test_examples(self, name, expected):
        assert sanitize_filename(name) == expected

    def test_default_length_cap(self):
        assert len(sanitize_filename("x" * 500)) == 200

    def test_custom_length_cap(self):
        assert sanitize_filename("abcdef", 3) == "abc"

    def test_invalid_length(self):
        with pytest.raises(ValueError, match="max_length"):
            sanitize_filename("x", 0)


class TestUniqueName:
    def test_first_use_unchanged(self):
        taken: set[str] = set()
        assert unique_name("a.md", taken) == "a.md"
        assert taken == {"a.md"}

    def test_suffixes_before_extension(self):
        taken = {"a.md"}
        assert unique_name("a.md", taken) == "a_2.md"
        assert unique_name("a.md", taken) == "a_3.md"

    def test_name_without_extension(self):
        taken = {"README"}
        assert unique_name("README", taken) == "README_2"

    def test_directory_prefix_kept(self):
        taken = {"Work/a.md"}
        assert unique_name("Work/a.md", taken) == "Work/a_2.md"


class TestMd5Hash:
    def test_bytes(self):
        assert md5_hash(b"hello") == "5d41402abc4b2a76b9719d911017c592"

    def test_str_encoded_as_utf8(self):
        assert md5_hash("hello") == md5_hash(b"hello")
        assert md5_hash("é") == md5_hash("é".encode("utf-8"))

    def test_empty(self):
        assert md5_hash(b"") == "d41d8cd98f00b204e9800998ecf8427e"


class TestFormatTimestamp:
    def test_aware_utc(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-01-02T03:04:05.678Z"

    def test_naive_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 2)) == "2024-01-02T00:00:00.000Z"

    def test_other_zone_converted(self):
        zone = timezone(timedelta(hours=2))
        moment = datetime(2024, 1, 2, 3, 0, tzinfo=zone)
        assert format_timestamp(moment) == "2024-01-02T01:00:00.000Z"

    def test_string_passthrough(self):
        assert format_timestamp("2020-05-05") == "2020-05-05"


class TestFromEpochSeconds:
    def test_int(self):
        assert from_epoch_seconds(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_numeric_string(self):
        assert from_epoch_seconds("86400.5") == datetime(
            1970, 1, 2, 0, 0, 0, 500000, tzinfo=timezone.utc,
        )

    @pytest.mark.parametrize("value", [None, True, "soon", [], 1e20, float("nan")])
    def test_unusable(self, value):
        assert from_epoch_seconds(value) is None
