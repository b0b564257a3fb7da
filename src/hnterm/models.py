"""Hacker News item records and list types."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum


class StoryListType(Enum):
    BEST = "best"
    TOP = "top"
    NEW = "new"
    ASK = "ask"
    SHOW = "show"
    JOB = "job"

    @property
    def api_name(self) -> str:
        return f"{self.value}stories"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class FetchState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    FAILED = "failed"


def _known_fields(cls, data: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class Story:
    id: int
    title: str | None = None
    url: str | None = None
    by: str | None = None
    score: int | None = None
    time: int | None = None
    descendants: int | None = None
    kids: list[int] | None = None

    @classmethod
    def from_json(cls, data: dict) -> Story:
        """Build a Story from an HN item payload, ignoring unknown keys."""
        return cls(**_known_fields(cls, data))


@dataclass
class Comment:
    id: int
    by: str | None = None
    text: str | None = None
    time: int | None = None
    kids: list[int] | None = None
    deleted: bool = False

    @classmethod
    def from_json(cls, data: dict) -> Comment:
        return cls(**_known_fields(cls, data))


@dataclass
class CommentRow:
    """A comment placed in a flattened thread."""

    comment: Comment
    depth: int
    expanded: bool = True
    parent_id: int | None = None


@dataclass
class ArticleElement:
    kind: str  # heading, paragraph, code, quote, list_item, image
    text: str


@dataclass
class Article:
    title: str
    elements: list[ArticleElement] = field(default_factory=list)

    def plain_text(self) -> str:
        """Render the article as plain text, one block per element."""
        blocks = []
        for el in self.elements:
            if el.kind == "list_item":
                blocks.append(f"  • {el.text}")
            elif el.kind == "quote":
                blocks.append(f"> {el.text}")
            else:
                blocks.append(el.text)
        return "\n\n".join(blocks)
