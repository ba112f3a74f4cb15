"""Tests for keyword search within an assembled thread."""

import pytest

from core.errors import InvalidInput
from core.search import SNIPPET_CONTEXT, build_snippet, search_within
from models.forum import Post, Thread


def _thread(*bodies, deleted=()):
    posts = [
        Post(
            id=n,
            post_number=n,
            username=f"user{n}",
            created_at="2024-03-01T08:00:00.000Z",
            body_raw=body,
            deleted_at="2024-03-02T00:00:00.000Z" if n in deleted else None,
        )
        for n, body in enumerate(bodies, start=1)
    ]
    return Thread(title="Paints", url="https://f.example/t/p/1", total_posts_reported=len(posts), posts=posts)


class TestSearchWithin:
    def test_case_insensitive_by_default(self):
        thread = _thread("<p>Asian Paints results</p>", "<p>paints sector</p>", "<p>unrelated</p>")
        matches = search_within(thread, "paints")
        assert [m.post_number for m in matches] == [1, 2]

    def test_case_sensitive(self):
        thread = _thread("<p>Asian Paints results</p>", "<p>paints sector</p>")
        matches = search_within(thread, "Paints", case_sensitive=True)
        assert [m.post_number for m in matches] == [1]

    def test_tombstones_never_match(self):
        thread = _thread("<p>margin expansion</p>", "<p>margin pressure</p>", deleted={2})
        matches = search_within(thread, "margin")
        assert [m.post_number for m in matches] == [1]

    def test_no_matches_is_empty_list(self):
        thread = _thread("<p>nothing here</p>")
        assert search_within(thread, "capex") == []

    def test_one_match_per_post(self):
        thread = _thread("<p>debt, debt and more debt</p>")
        matches = search_within(thread, "debt")
        assert len(matches) == 1
        assert matches[0].snippet == "debt, debt and more debt"

    def test_searches_stripped_text(self):
        thread = _thread("<p>ROCE &amp; ROE</p>")
        matches = search_within(thread, "ROCE & ROE")
        assert matches[0].full_text == "ROCE & ROE"

    def test_markup_is_not_searchable(self):
        thread = _thread('<p class="quote">text</p>')
        assert search_within(thread, "quote") == []

    def test_match_carries_post_fields(self):
        thread = _thread("<p>capex cycle</p>")
        match = search_within(thread, "capex")[0]
        assert match.username == "user1"
        assert match.created_date == "2024-03-01"

    def test_snippet_offsets_survive_case_mapping(self):
        # "\u0130".lower() is two characters long
        body = "\u0130" * 150 + "Paints" + "x" * 10
        thread = _thread(f"<p>{body}</p>")
        match = search_within(thread, "paints")[0]
        assert match.snippet == "..." + "\u0130" * SNIPPET_CONTEXT + "Paints" + "x" * 10

    def test_empty_keyword_rejected(self):
        with pytest.raises(InvalidInput):
            search_within(_thread("<p>x</p>"), "")


class TestBuildSnippet:
    def test_short_content_has_no_ellipsis(self):
        assert build_snippet("find me", 0, 4) == "find me"

    def test_both_sides_truncated(self):
        content = "a" * 150 + "KEY" + "b" * 150
        snippet = build_snippet(content, 150, 3)
        assert snippet.startswith("...")
        assert snippet.endswith("...")
        assert snippet == "..." + "a" * SNIPPET_CONTEXT + "KEY" + "b" * SNIPPET_CONTEXT + "..."

    def test_match_near_start(self):
        content = "KEY" + "b" * 300
        snippet = build_snippet(content, 0, 3)
        assert not snippet.startswith("...")
        assert snippet.endswith("...")
        assert len(snippet) == 3 + SNIPPET_CONTEXT + 3

    def test_match_near_end(self):
        content = "a" * 300 + "KEY"
        snippet = build_snippet(content, 300, 3)
        assert snippet.startswith("...")
        assert not snippet.endswith("...")
