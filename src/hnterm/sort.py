"""Story list ordering."""

from enum import Enum

from hnterm.models import Story


class SortOrder(Enum):
    DEFAULT = "default"
    SCORE = "score"
    COMMENTS = "comments"
    TIME = "time"

    def next(self) -> "SortOrder":
        order = list(SortOrder)
        return order[(order.index(self) + 1) % len(order)]


_KEYS = {
    SortOrder.SCORE: lambda s: s.score,
    SortOrder.COMMENTS: lambda s: s.descendants,
    SortOrder.TIME: lambda s: s.time,
}


def sort_stories(stories: list[Story], order: SortOrder) -> list[Story]:
    """Return stories sorted descending by ``order``; stories missing the value go last."""
    if order is SortOrder.DEFAULT:
        return list(stories)
    key = _KEYS[order]
    present = [s for s in stories if key(s) is not None]
    missing = [s for s in stories if key(s) is None]
    present.sort(key=key, reverse=True)
    return present + missing
