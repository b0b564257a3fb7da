"""Tests for hnterm.display — Rich terminal output."""

from io import StringIO

from rich.console import Console

import hnterm.display as display_mod
from hnterm.bookmarks import Bookmarks
from hnterm.display import (
    display_article,
    display_bookmarks,
    display_comments,
    display_error,
    display_history,
    display_searches,
    display_stories,
    story_title,
)
from hnterm.history import History
from hnterm.models import Article, ArticleElement, Comment, CommentRow, Story
from hnterm.search import SearchHistory


def _capture_console():
    """Create a Console that writes to a StringIO buffer and return (console, buffer)."""
    buf = StringIO()
    return Console(file=buf, force_terminal=True, highlight=False, width=120), buf


class TestStoryTitle:
    def test_appends_domain(self, sample_story):
        assert story_title(sample_story).plain == "Test Story (example.com)"

    def test_text_post_has_no_domain(self):
        assert story_title(Story(id=1, title="Ask HN: why?")).plain == "Ask HN: why?"

    def test_missing_title(self):
        assert story_title(Story(id=1)).plain == "(untitled)"


class TestDisplayStories:
    def test_empty_returns_zero(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        assert display_stories("Top", []) == 0
        assert "No top stories." in buf.getvalue()

    def test_returns_story_count(self, monkeypatch, sample_stories):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        assert display_stories("Top", sample_stories(3)) == 3

    def test_output_contains_titles_and_scores(self, monkeypatch, sample_stories):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_stories("New", sample_stories(2))
        output = buf.getvalue()
        assert "NEW" in output
        assert "Story 1" in output
        assert "Story 2" in output
        assert "20" in output
        assert "example.com" in output

    def test_bookmarked_stories_starred(self, monkeypatch, sample_stories):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_stories("Top", sample_stories(2), bookmarked={2})
        lines = [line for line in buf.getvalue().splitlines() if "Story" in line]
        assert "★" not in lines[0]
        assert "★" in lines[1]


class TestDisplayComments:
    def test_threaded_output(self, monkeypatch, sample_story):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        rows = [
            CommentRow(Comment(id=1, by="alice", text="Top level<p>Second para"), depth=0),
            CommentRow(Comment(id=2, by="bob", text="A &amp; B"), depth=1, parent_id=1),
            CommentRow(Comment(id=3, deleted=True), depth=1, parent_id=1),
        ]
        display_comments(sample_story, rows)
        output = buf.getvalue()
        assert "Test Story" in output
        assert "100 points by testuser" in output
        assert "alice" in output
        assert "Top level" in output
        assert "Second para" in output
        assert "  A & B" in output
        assert "[deleted]" in output

    def test_no_comments(self, monkeypatch, sample_story):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_comments(sample_story, [])
        assert "No comments." in buf.getvalue()


class TestDisplayArticle:
    def test_title_and_blocks(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        article = Article(
            title="Why caches matter",
            elements=[
                ArticleElement("paragraph", "Opening paragraph."),
                ArticleElement("list_item", "first point"),
            ],
        )
        display_article(article)
        output = buf.getvalue()
        assert "Why caches matter" in output
        assert "Opening paragraph." in output
        assert "• first point" in output


class TestLocalLists:
    def test_empty_bookmarks(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_bookmarks(Bookmarks())
        assert "No bookmarks yet." in buf.getvalue()

    def test_bookmarks(self, monkeypatch, sample_story):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        bookmarks = Bookmarks()
        bookmarks.add(sample_story)
        display_bookmarks(bookmarks)
        output = buf.getvalue()
        assert "Test Story" in output
        assert "#12345" in output

    def test_empty_history(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_history(History())
        assert "No viewed stories." in buf.getvalue()

    def test_history(self, monkeypatch, sample_story):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        history = History()
        history.add(sample_story)
        display_history(history)
        assert "100 points" in buf.getvalue()


class TestDisplayError:
    def test_message_printed_verbatim(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_error("bad [thing] happened")
        assert "bad [thing] happened" in buf.getvalue()


class TestMarkupInData:
    def test_bracketed_title_kept(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        bookmarks = Bookmarks()
        bookmarks.add(Story(id=1, title="Attention is all you need [pdf]"))
        display_bookmarks(bookmarks)
        assert "Attention is all you need [pdf]" in buf.getvalue()

    def test_closing_tag_in_title_does_not_crash(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        history = History()
        history.add(Story(id=1, title="Closing [/b] tag"))
        display_history(history)
        assert "Closing [/b] tag" in buf.getvalue()

    def test_commenter_name_with_brackets(self, monkeypatch, sample_story):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        rows = [CommentRow(Comment(id=1, by="[/red]x", text="hi"), depth=0)]
        display_comments(sample_story, rows)
        assert "[/red]x" in buf.getvalue()


class TestDisplaySearches:
    def test_empty(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_searches(SearchHistory())
        assert "No recent searches." in buf.getvalue()

    def test_numbered_newest_first(self, monkeypatch):
        test_console, buf = _capture_console()
        monkeypatch.setattr(display_mod, "console", test_console)
        display_searches(SearchHistory(queries=["rust [async]", "python"]))
        output = buf.getvalue()
        assert "1. rust [async]" in output
        assert "2. python" in output
        assert output.index("rust") < output.index("python")
