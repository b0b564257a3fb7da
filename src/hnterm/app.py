"""Textual TUI app — story list with comment and article reader pane."""

import logging
import threading
import webbrowser
from datetime import datetime

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Static
from textual.worker import get_current_worker

from hnterm import config as cfg
from hnterm.api import ApiService
from hnterm.bookmarks import Bookmarks
from hnterm.errors import HNError
from hnterm.history import History
from hnterm.htmltext import extract_text_from_html
from hnterm.models import Article, CommentRow, FetchState, Story, StoryListType
from hnterm.sort import SortOrder, sort_stories
from hnterm.theme import HN_ORANGE, THEMES, resolve_theme_name
from hnterm.utils import extract_domain, time_ago

logger = logging.getLogger(__name__)

CACHE_CLEANUP_INTERVAL = 60

LIST_KEYS = {str(i): t for i, t in enumerate(StoryListType, start=1)}


class AppHeader(Static):
    """Header bar with the current list and a live clock."""

    clock: reactive[str] = reactive("")
    list_label: reactive[str] = reactive("")

    def on_mount(self) -> None:
        self.clock = datetime.now().strftime("%H:%M:%S")
        self.set_interval(1, self._tick)

    def _tick(self) -> None:
        self.clock = datetime.now().strftime("%H:%M:%S")

    def render(self) -> str:
        width = self.size.width
        left = "▲ HNTERM"
        center = f"{self.list_label} stories" if self.list_label else "Hacker News"
        right = self.clock
        gap = width - len(left) - len(center) - len(right)
        if gap < 2:
            return f"{left}  {right}"
        left_gap = gap // 2
        return f"{left}{' ' * left_gap}{center}{' ' * (gap - left_gap)}{right}"


class StatusBar(Static):
    """Bottom status bar with story count, sort order and fetch state."""

    story_count: reactive[int] = reactive(0)
    order_label: reactive[str] = reactive(SortOrder.DEFAULT.value)
    fetch_label: reactive[str] = reactive(FetchState.IDLE.value)
    status_text: reactive[str] = reactive("")

    def render(self) -> str:
        parts = [
            f" {self.story_count} stories",
            f"Sort: {self.order_label}",
            f"State: {self.fetch_label}",
        ]
        if self.status_text:
            parts.append(self.status_text)
        return " | ".join(parts)


def render_comments(story: Story, rows: list[CommentRow]) -> Text:
    text = Text()
    text.append(story.title or "(untitled)", style="bold")
    text.append(
        f"\n{story.score or 0} points by {story.by or '?'} {time_ago(story.time)}\n\n",
        style="dim",
    )
    if not rows:
        text.append("No comments.", style="dim")
    for row in rows:
        indent = "  " * row.depth
        comment = row.comment
        if comment.deleted:
            text.append(f"{indent}[deleted]\n\n", style="dim")
            continue
        text.append(f"{indent}{comment.by or '?'}", style=f"bold {HN_ORANGE}")
        text.append(f" {time_ago(comment.time)}\n", style="dim")
        for paragraph in extract_text_from_html(comment.text).split("\n\n"):
            text.append(f"{indent}{paragraph}\n")
        text.append("\n")
    return text


def render_article(article: Article) -> Text:
    text = Text(article.title + "\n\n", style="bold")
    text.append(article.plain_text())
    return text


class HNApp(App):
    """Hacker News reader: stories on the left, comments or article on the right."""

    TITLE = "hnterm"

    CSS = """
    AppHeader {
        height: 1;
        background: $primary;
        color: $background;
        text-style: bold;
    }
    #main-content {
        height: 1fr;
    }
    #stories {
        width: 3fr;
    }
    #detail-scroll {
        width: 2fr;
        border-left: solid $primary;
        padding: 0 1;
    }
    StatusBar {
        height: 1;
        background: $surface;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("enter", "comments", "Comments"),
        Binding("a", "article", "Article"),
        Binding("o", "open_story", "Open"),
        Binding("b", "bookmark", "Bookmark"),
        Binding("s", "cycle_sort", "Sort"),
    ] + [Binding(key, f"switch_list('{t.value}')", t.label, show=False) for key, t in LIST_KEYS.items()]

    def __init__(
        self,
        user_config: dict | None = None,
        list_type: StoryListType = StoryListType.TOP,
        api: ApiService | None = None,
    ) -> None:
        super().__init__()
        self.user_config = user_config or cfg.load()
        self.list_type = list_type
        self.page_size = self.user_config["page_size"]
        self.api = api or ApiService(
            network_config=cfg.network_config(self.user_config),
            enable_performance_metrics=self.user_config["enable_performance_metrics"],
        )
        self.story_order = SortOrder.DEFAULT
        self.stories: list[Story] = []
        self.fetch_state = FetchState.IDLE
        self._cancel_event = threading.Event()
        self.bookmarks = self._load_store(Bookmarks.load_or_create, Bookmarks)
        self.history = self._load_store(
            lambda: History.load_or_create(self.user_config["history_max"]),
            lambda: History(max_size=self.user_config["history_max"]),
        )
        for theme in THEMES.values():
            self.register_theme(theme)
        self.theme = resolve_theme_name(self.user_config)

    @staticmethod
    def _load_store(load, fallback):
        try:
            return load()
        except HNError as exc:
            logger.error("%s; starting empty", exc)
            return fallback()

    def compose(self) -> ComposeResult:
        yield AppHeader(id="app-header")
        with Horizontal(id="main-content"):
            yield DataTable(id="stories", cursor_type="row")
            with VerticalScroll(id="detail-scroll"):
                yield Static("Select a story and press enter.", id="detail")
        yield StatusBar(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#stories", DataTable)
        table.add_columns("#", "Title", "Points", "Comments", "Age")
        self.query_one("#app-header", AppHeader).list_label = self.list_type.label
        self._load_stories()
        self.set_interval(CACHE_CLEANUP_INTERVAL, self._cleanup_caches)

    def on_unmount(self) -> None:
        self._cancel_event.set()
        self.api.close()

    def _cleanup_caches(self) -> None:
        removed = self.api.cleanup_caches()
        if removed:
            logger.debug("Purged %d expired cache entries", removed)

    def _set_state(self, state: FetchState, message: str = "") -> None:
        self.fetch_state = state
        status = self.query_one("#status-bar", StatusBar)
        status.fetch_label = state.value
        status.status_text = message

    # Story list

    @work(thread=True, exclusive=True, group="stories")
    def _load_stories(self) -> None:
        worker = get_current_worker()
        self.call_from_thread(self._set_state, FetchState.LOADING)
        try:
            ids = self.api.fetch_story_ids(self.list_type, self._cancel_event)[: self.page_size]
            results = self.api.fetch_stories_concurrent(ids, limit=8, cancel=self._cancel_event)
        except HNError as exc:
            logger.warning("Loading %s stories failed: %s", self.list_type.value, exc)
            if not worker.is_cancelled:
                self.call_from_thread(self._set_state, FetchState.FAILED, str(exc))
            return
        if worker.is_cancelled:
            return
        stories = [r for r in results if isinstance(r, Story)]
        self.call_from_thread(self._show_stories, stories)

    def _show_stories(self, stories: list[Story]) -> None:
        self.stories = stories
        self._rebuild_table()
        self._set_state(FetchState.IDLE, f"Updated {datetime.now().strftime('%H:%M:%S')}")

    def _rebuild_table(self) -> None:
        table = self.query_one("#stories", DataTable)
        table.clear()
        for i, story in enumerate(sort_stories(self.stories, self.story_order), start=1):
            title = Text(story.title or "(untitled)", style="bold")
            domain = extract_domain(story.url)
            if domain:
                title.append(f" ({domain})", style="dim")
            if self.bookmarks.contains(story.id):
                title.append(" ★", style=HN_ORANGE)
            table.add_row(
                str(i),
                title,
                str(story.score or 0),
                str(story.descendants or 0),
                time_ago(story.time),
                key=str(story.id),
            )
        status = self.query_one("#status-bar", StatusBar)
        status.story_count = len(self.stories)
        status.order_label = self.story_order.value

    def selected_story(self) -> Story | None:
        table = self.query_one("#stories", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        story_id = int(row_key.value)
        return next((s for s in self.stories if s.id == story_id), None)

    # Detail pane

    def _show_detail(self, renderable) -> None:
        self.query_one("#detail", Static).update(renderable)
        self.query_one("#detail-scroll", VerticalScroll).scroll_home(animate=False)

    def _record_view(self, story: Story) -> None:
        self.history.add(story)
        try:
            self.history.save()
        except HNError as exc:
            logger.error("Saving history failed: %s", exc)

    @work(thread=True, exclusive=True, group="detail")
    def _load_comments(self, story: Story) -> None:
        worker = get_current_worker()
        try:
            rows = self.api.fetch_comment_tree(story.kids or [], self._cancel_event)
        except HNError as exc:
            if not worker.is_cancelled:
                self.call_from_thread(self._show_detail, Text(str(exc), style="red"))
            return
        if not worker.is_cancelled:
            self.call_from_thread(self._show_detail, render_comments(story, rows))

    @work(thread=True, exclusive=True, group="detail")
    def _load_article(self, story: Story) -> None:
        worker = get_current_worker()
        try:
            article = self.api.fetch_article_content(story.url, self._cancel_event)
        except HNError as exc:
            if not worker.is_cancelled:
                self.call_from_thread(self._show_detail, Text(str(exc), style="red"))
            return
        if not worker.is_cancelled:
            self.call_from_thread(self._show_detail, render_article(article))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_comments()

    # Actions

    def action_refresh(self) -> None:
        self._load_stories()

    def action_comments(self) -> None:
        story = self.selected_story()
        if story is None:
            return
        self._record_view(story)
        self._show_detail(Text("Loading comments…", style="dim"))
        self._load_comments(story)

    def action_article(self) -> None:
        story = self.selected_story()
        if story is None:
            return
        if not story.url:
            self._show_detail(Text("This story has no linked article.", style="dim"))
            return
        self._record_view(story)
        self._show_detail(Text("Loading article…", style="dim"))
        self._load_article(story)

    def action_open_story(self) -> None:
        story = self.selected_story()
        if story is not None:
            webbrowser.open(story.url or f"https://news.ycombinator.com/item?id={story.id}")

    def action_bookmark(self) -> None:
        story = self.selected_story()
        if story is None:
            return
        added = self.bookmarks.toggle(story)
        try:
            self.bookmarks.save()
        except HNError as exc:
            logger.error("Saving bookmarks failed: %s", exc)
        self.notify("Bookmarked" if added else "Bookmark removed")
        self._rebuild_table()

    def action_cycle_sort(self) -> None:
        self.story_order = self.story_order.next()
        self._rebuild_table()

    def action_switch_list(self, name: str) -> None:
        list_type = StoryListType(name)
        if list_type is self.list_type:
            return
        self.list_type = list_type
        self.query_one("#app-header", AppHeader).list_label = list_type.label
        self._load_stories()


def run_live(user_config: dict, list_type: StoryListType = StoryListType.TOP) -> None:
    """Entry point called from cli.py when --live is used."""
    HNApp(user_config=user_config, list_type=list_type).run()
