"""Saved stories, newest first."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

from hnterm import storage
from hnterm.models import Story

BOOKMARKS_FILE = "bookmarks.json"


@dataclass
class BookmarkedStory:
    id: int
    title: str
    url: str | None
    bookmarked_at: str


@dataclass
class Bookmarks:
    stories: list[BookmarkedStory] = field(default_factory=list)
    file_path: Path | None = None

    @classmethod
    def load_or_create(cls) -> Bookmarks:
        """Load bookmarks from disk, or start an empty list bound to the bookmarks file."""
        path = storage.data_path(BOOKMARKS_FILE)
        stories = storage.read_records(path, "stories", BookmarkedStory)
        return cls(stories=stories, file_path=path)

    def save(self) -> None:
        if self.file_path is None:
            return
        storage.write_json(self.file_path, {"stories": [asdict(s) for s in self.stories]})

    def contains(self, story_id: int) -> bool:
        return any(s.id == story_id for s in self.stories)

    def add(self, story: Story) -> None:
        if self.contains(story.id):
            return
        self.stories.insert(
            0,
            BookmarkedStory(
                id=story.id,
                title=story.title or "",
                url=story.url,
                bookmarked_at=storage.now_iso(),
            ),
        )

    def remove(self, story_id: int) -> None:
        self.stories = [s for s in self.stories if s.id != story_id]

    def toggle(self, story: Story) -> bool:
        """Add or remove ``story``; returns True if it is now bookmarked."""
        if self.contains(story.id):
            self.remove(story.id)
            return False
        self.add(story)
        return True
