"""Recently viewed stories, most recent first and capped in size."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

from hnterm import storage
from hnterm.models import Story

HISTORY_FILE = "history.json"


@dataclass
class ViewedStory:
    id: int
    title: str
    url: str | None
    by: str | None
    score: int | None
    descendants: int | None
    viewed_at: str


@dataclass
class History:
    max_size: int = 100
    stories: list[ViewedStory] = field(default_factory=list)
    file_path: Path | None = None

    @classmethod
    def load_or_create(cls, max_size: int) -> History:
        path = storage.data_path(HISTORY_FILE)
        stories = storage.read_records(path, "stories", ViewedStory)
        return cls(max_size=max_size, stories=stories[:max_size], file_path=path)

    def save(self) -> None:
        if self.file_path is None:
            return
        storage.write_json(self.file_path, {"stories": [asdict(s) for s in self.stories]})

    def add(self, story: Story) -> None:
        """Record a view; a story seen before moves back to the top."""
        self.stories = [s for s in self.stories if s.id != story.id]
        self.stories.insert(
            0,
            ViewedStory(
                id=story.id,
                title=story.title or "",
                url=story.url,
                by=story.by,
                score=story.score,
                descendants=story.descendants,
                viewed_at=storage.now_iso(),
            ),
        )
        del self.stories[self.max_size:]

    def clear(self) -> None:
        self.stories.clear()
