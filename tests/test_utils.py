"""Tests for URL and content helpers."""

import pytest

from utils import canonical_thread_url, is_valid_url, iso_date, normalize_content, thread_json_url


class TestUrls:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://forum.example.com/t/x/1", True),
            ("http://forum.example.com/t/x/1", True),
            ("forum.example.com/t/x/1", False),
            ("not-a-url", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_valid_url(self, url, expected):
        assert is_valid_url(url) is expected

    def test_canonical_strips_query_fragment_and_slash(self):
        assert canonical_thread_url("https://f.example/t/x/1/?u=me#post_4") == "https://f.example/t/x/1"

    def test_json_url(self):
        assert thread_json_url("https://f.example/t/x/1/") == "https://f.example/t/x/1.json"
        assert thread_json_url("https://f.example/t/x/1?page=9", page=3) == "https://f.example/t/x/1.json?page=3"


class TestNormalizeContent:
    def test_strips_markup_and_decodes_entities(self):
        assert normalize_content("<p>P/E &lt; 20 &amp; <a href='#'>growing</a></p>") == "P/E < 20 & growing"

    def test_collapses_blank_runs(self):
        assert normalize_content("<p>one\n\n\n\ntwo</p>") == "one\n\ntwo"

    def test_empty(self):
        assert normalize_content("") == ""
        assert normalize_content(None) == ""


class TestIsoDate:
    def test_truncates_timestamp(self):
        assert iso_date("2024-01-15T10:30:00.000Z") == "2024-01-15"

    def test_offset_converted_to_utc(self):
        assert iso_date("2024-01-16T02:00:00+05:30") == "2024-01-15"

    def test_missing(self):
        assert iso_date(None) == "unknown"

    def test_non_string(self):
        assert iso_date(1705314600) == "unknown"

    def test_unparseable_falls_back_to_prefix(self):
        assert iso_date("2024-01-15 sometime") == "2024-01-15"
