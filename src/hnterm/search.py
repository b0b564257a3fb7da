"""Story search — literal or regex queries over titles and comments, plus recent searches."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from hnterm import storage
from hnterm.models import Story

SEARCH_HISTORY_FILE = "search_history.json"


class SearchMode(Enum):
    TITLE = "Title"
    COMMENTS = "Comments"
    TITLE_AND_COMMENTS = "Title+Comments"

    @property
    def label(self) -> str:
        return self.value


class SearchType(Enum):
    LITERAL = "Literal"
    REGEX = "Regex"

    @property
    def label(self) -> str:
        return self.value


class SearchQuery:
    """A query plus how to apply it. An invalid regex matches nothing."""

    def __init__(
        self,
        query: str = "",
        mode: SearchMode = SearchMode.TITLE,
        search_type: SearchType = SearchType.LITERAL,
    ) -> None:
        self.query = query
        self.mode = mode
        self.search_type = search_type
        self.regex_error: str | None = None
        self._regex: re.Pattern | None = None
        if search_type is SearchType.REGEX:
            try:
                self._regex = re.compile(query)
            except re.error as exc:
                self.regex_error = f"Regex error: {exc}"

    def is_empty(self) -> bool:
        return not self.query

    def matches(self, text: str) -> bool:
        if self.search_type is SearchType.LITERAL:
            return self.query.lower() in text.lower()
        if self._regex is None:
            return False
        return self._regex.search(text) is not None


def filter_stories(
    stories: list[Story],
    query: SearchQuery,
    comments: dict[int, list[str]] | None = None,
) -> list[Story]:
    """Keep the stories whose title and/or loaded comment texts match ``query``."""
    if query.is_empty():
        return list(stories)
    comments = comments or {}
    result = []
    for story in stories:
        title_hit = query.mode is not SearchMode.COMMENTS and query.matches(story.title or "")
        comment_hit = query.mode is not SearchMode.TITLE and any(
            query.matches(text) for text in comments.get(story.id, [])
        )
        if title_hit or comment_hit:
            result.append(story)
    return result


@dataclass
class SearchHistory:
    max_size: int = 50
    queries: list[str] = field(default_factory=list)
    file_path: Path | None = None

    @classmethod
    def load_or_create(cls, max_size: int) -> SearchHistory:
        path = storage.data_path(SEARCH_HISTORY_FILE)
        queries = [q for q in storage.read_records(path, "queries") if isinstance(q, str)]
        return cls(max_size=max_size, queries=queries[:max_size], file_path=path)

    def save(self) -> None:
        if self.file_path is None:
            return
        storage.write_json(self.file_path, {"queries": self.queries})

    def add(self, query: str) -> None:
        if not query:
            return
        self.queries = [q for q in self.queries if q != query]
        self.queries.insert(0, query)
        del self.queries[self.max_size:]

    def clear(self) -> None:
        self.queries.clear()

    def get_recent(self, index: int) -> str | None:
        if 0 <= index < len(self.queries):
            return self.queries[index]
        return None
