"""Tests for hnterm.search — story filtering and search history."""

import json

import pytest

from hnterm.errors import StorageError
from hnterm.models import Story
from hnterm.search import (
    SEARCH_HISTORY_FILE,
    SearchHistory,
    SearchMode,
    SearchQuery,
    SearchType,
    filter_stories,
)
from hnterm.storage import data_path


def _stories():
    return [
        Story(id=1, title="Show HN: A Rust web server"),
        Story(id=2, title="Python 3.13 released"),
        Story(id=3, title=None),
    ]


class TestEnums:
    def test_labels(self):
        assert SearchMode.TITLE_AND_COMMENTS.label == "Title+Comments"
        assert SearchType.REGEX.label == "Regex"


class TestSearchQuery:
    def test_literal_is_case_insensitive(self):
        query = SearchQuery("python")
        assert query.matches("Python 3.13 released")
        assert not query.matches("Rust")

    def test_regex(self):
        query = SearchQuery(r"^Show HN", search_type=SearchType.REGEX)
        assert query.regex_error is None
        assert query.matches("Show HN: thing")
        assert not query.matches("Ask HN: Show HN?")

    def test_invalid_regex_matches_nothing(self):
        query = SearchQuery("(", search_type=SearchType.REGEX)
        assert query.regex_error.startswith("Regex error:")
        assert not query.matches("(")

    def test_is_empty(self):
        assert SearchQuery().is_empty()
        assert not SearchQuery("x").is_empty()


class TestFilterStories:
    def test_empty_query_keeps_all(self):
        stories = _stories()
        result = filter_stories(stories, SearchQuery())
        assert result == stories
        assert result is not stories

    def test_title_mode(self):
        result = filter_stories(_stories(), SearchQuery("rust"))
        assert [s.id for s in result] == [1]

    def test_comments_mode_ignores_titles(self):
        comments = {2: ["I still prefer Rust"]}
        query = SearchQuery("rust", mode=SearchMode.COMMENTS)
        assert [s.id for s in filter_stories(_stories(), query, comments)] == [2]

    def test_title_and_comments_mode(self):
        comments = {2: ["I still prefer Rust"]}
        query = SearchQuery("rust", mode=SearchMode.TITLE_AND_COMMENTS)
        assert [s.id for s in filter_stories(_stories(), query, comments)] == [1, 2]

    def test_comments_mode_without_loaded_comments(self):
        query = SearchQuery("rust", mode=SearchMode.COMMENTS)
        assert filter_stories(_stories(), query) == []


class TestSearchHistory:
    def test_add_moves_to_front_without_duplicates(self):
        history = SearchHistory(max_size=3)
        for q in ["a", "b", "a", "c", "d"]:
            history.add(q)
        assert history.queries == ["d", "c", "a"]

    def test_empty_query_not_recorded(self):
        history = SearchHistory()
        history.add("")
        assert history.queries == []

    def test_get_recent(self):
        history = SearchHistory(queries=["x", "y"])
        assert history.get_recent(1) == "y"
        assert history.get_recent(2) is None
        assert history.get_recent(-1) is None

    def test_persists(self):
        history = SearchHistory.load_or_create(50)
        history.add("rust")
        history.save()
        assert SearchHistory.load_or_create(50).queries == ["rust"]

    def test_clear(self):
        history = SearchHistory(queries=["x"])
        history.clear()
        assert history.queries == []

    def test_malformed_file_raises(self):
        data_path(SEARCH_HISTORY_FILE).write_text(json.dumps({"queries": 5}))
        with pytest.raises(StorageError, match="Malformed data"):
            SearchHistory.load_or_create(50)

    def test_non_string_queries_skipped(self):
        data_path(SEARCH_HISTORY_FILE).write_text(json.dumps({"queries": ["rust", 7]}))
        assert SearchHistory.load_or_create(50).queries == ["rust"]
