"""CLI entry point — Click command, story lists, comments, articles, watch mode."""

import logging
import time
import webbrowser

import click
from rich.markup import escape

from hnterm import config as cfg
from hnterm.api import ApiService
from hnterm.bookmarks import Bookmarks
from hnterm.display import (
    console,
    display_article,
    display_bookmarks,
    display_comments,
    display_error,
    display_history,
    display_searches,
    display_stories,
)
from hnterm.errors import HNError
from hnterm.history import History
from hnterm.logs import setup_logging
from hnterm.models import Story, StoryListType
from hnterm.htmltext import extract_text_from_html
from hnterm.search import SearchHistory, SearchMode, SearchQuery, SearchType, filter_stories
from hnterm.sort import SortOrder, sort_stories

logger = logging.getLogger(__name__)

user_config = cfg.load()

LIST_NAMES = [t.value for t in StoryListType]

SEARCH_MODES = {
    "title": SearchMode.TITLE,
    "comments": SearchMode.COMMENTS,
    "all": SearchMode.TITLE_AND_COMMENTS,
}


def resolve_list(name: str) -> StoryListType | None:
    """Resolve 'top', 'Top', 'topstories' ... to a StoryListType."""
    name = name.lower().strip().removesuffix("stories")
    try:
        return StoryListType(name)
    except ValueError:
        return None


def make_api() -> ApiService:
    return ApiService(
        network_config=cfg.network_config(user_config),
        enable_performance_metrics=user_config["enable_performance_metrics"],
    )


def load_stories(
    api: ApiService,
    list_type: StoryListType,
    limit: int,
    order: SortOrder,
    query: SearchQuery,
) -> list[Story]:
    """Fetch the first ``limit`` stories of a list, then search and sort them."""
    ids = api.fetch_story_ids(list_type)[:limit]
    results = api.fetch_stories_concurrent(ids, limit=8)
    stories = [r for r in results if isinstance(r, Story)]
    comments = None
    if not query.is_empty() and query.mode is not SearchMode.TITLE:
        comments = {
            s.id: [
                extract_text_from_html(row.comment.text)
                for row in api.fetch_comment_tree(s.kids or [])
            ]
            for s in stories
        }
    return sort_stories(filter_stories(stories, query, comments), order)


@click.command()
@click.argument("story_list", required=False, default=None)
@click.option("--limit", "-l", default=None, type=int, help="Number of stories to show.")
@click.option(
    "--sort", "sort_by", default="default",
    type=click.Choice([o.value for o in SortOrder]), help="Sort order.",
)
@click.option("--search", "-s", default=None, help="Only show stories matching this query.")
@click.option("--regex", is_flag=True, help="Treat --search as a regular expression.")
@click.option(
    "--search-mode", default="title", type=click.Choice(list(SEARCH_MODES)),
    help="Search titles, comment threads, or all of both.",
)
@click.option("--last-search", is_flag=True, help="Repeat the most recent search.")
@click.option("--searches", "show_searches", is_flag=True, help="List recent searches.")
@click.option("--open", "open_num", default=None, type=int, help="Open Nth story in browser.")
@click.option("--comments", "comments_id", default=None, type=int, help="Show a story's comments.")
@click.option("--read", "read_id", default=None, type=int, help="Read a story's linked article.")
@click.option("--bookmark", "bookmark_id", default=None, type=int, help="Toggle a bookmark.")
@click.option("--bookmarks", "show_bookmarks", is_flag=True, help="List bookmarked stories.")
@click.option("--history", "show_history", is_flag=True, help="List recently viewed stories.")
@click.option("--clear-history", is_flag=True, help="Forget viewed stories and recent searches.")
@click.option("--watch", "-w", is_flag=True, help="Auto-refresh periodically.")
@click.option("--interval", "-i", default=300, type=int, help="Watch refresh interval in seconds.")
@click.option("--live", is_flag=True, help="Launch the full-screen TUI.")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
def main(
    story_list: str | None,
    limit: int | None,
    sort_by: str,
    search: str | None,
    regex: bool,
    search_mode: str,
    last_search: bool,
    show_searches: bool,
    open_num: int | None,
    comments_id: int | None,
    read_id: int | None,
    bookmark_id: int | None,
    show_bookmarks: bool,
    show_history: bool,
    clear_history: bool,
    watch: bool,
    interval: int,
    live: bool,
    verbose: bool,
) -> None:
    """Browse Hacker News in your terminal."""
    setup_logging(verbose, user_config["log_file"], to_file=live)

    list_name = story_list or user_config["story_list"]
    list_type = resolve_list(list_name)
    if list_type is None:
        console.print(f"[red]Unknown list: {escape(list_name)}[/red]")
        console.print(f"[dim]Available lists: {', '.join(LIST_NAMES)}[/dim]")
        raise SystemExit(1)

    if live:
        from hnterm.app import run_live

        run_live(user_config, list_type)
        return

    try:
        if show_bookmarks:
            display_bookmarks(Bookmarks.load_or_create())
            return
        if show_history:
            display_history(History.load_or_create(user_config["history_max"]))
            return
        if show_searches:
            display_searches(SearchHistory.load_or_create(user_config["search_history_max"]))
            return
        if clear_history:
            forget_history()
            return

        with make_api() as api:
            if comments_id is not None:
                show_comments(api, comments_id)
            elif read_id is not None:
                read_article(api, read_id)
            elif bookmark_id is not None:
                toggle_bookmark(api, bookmark_id)
            else:
                limit = limit or user_config["page_size"]
                order = SortOrder(sort_by)
                searches = SearchHistory.load_or_create(user_config["search_history_max"])
                if last_search and not search:
                    search = searches.get_recent(0)
                query = SearchQuery(
                    search or "",
                    mode=SEARCH_MODES[search_mode],
                    search_type=SearchType.REGEX if regex else SearchType.LITERAL,
                )
                if query.regex_error:
                    display_error(query.regex_error)
                    raise SystemExit(1)
                if not query.is_empty():
                    searches.add(query.query)
                    searches.save()

                def run_once() -> list[Story]:
                    console.clear()
                    console.print("[bold]hnterm[/bold] [dim]— Hacker News in your terminal[/dim]\n")
                    if not query.is_empty():
                        console.print(
                            f"[dim]Search: {escape(query.query)} "
                            f"({query.mode.label}, {query.search_type.label})[/dim]\n"
                        )
                    stories = load_stories(api, list_type, limit, order, query)
                    bookmarked = {b.id for b in Bookmarks.load_or_create().stories}
                    display_stories(list_type.label, stories, bookmarked)
                    return stories

                if open_num is not None:
                    open_story(run_once(), open_num)
                elif watch:
                    try:
                        while True:
                            run_once()
                            removed = api.cleanup_caches()
                            logger.debug("Purged %d expired cache entries", removed)
                            console.print(
                                f"\n[dim]Refreshing in {interval}s… (Ctrl+C to quit)[/dim]"
                            )
                            time.sleep(interval)
                    except KeyboardInterrupt:
                        console.print("\n[dim]Goodbye![/dim]")
                else:
                    run_once()
    except HNError as exc:
        logger.debug("Command failed", exc_info=True)
        display_error(str(exc))
        raise SystemExit(1)


def open_story(stories: list[Story], number: int) -> None:
    if not 1 <= number <= len(stories):
        console.print(f"[red]Invalid story number: {number} (1-{len(stories)})[/red]")
        return
    story = stories[number - 1]
    url = story.url or f"https://news.ycombinator.com/item?id={story.id}"
    console.print(f"\n[dim]Opening story #{number} in browser…[/dim]")
    webbrowser.open(url)


def forget_history() -> None:
    history = History.load_or_create(user_config["history_max"])
    history.clear()
    history.save()
    searches = SearchHistory.load_or_create(user_config["search_history_max"])
    searches.clear()
    searches.save()
    console.print("[dim]Cleared viewed stories and recent searches.[/dim]")


def record_view(story: Story) -> None:
    history = History.load_or_create(user_config["history_max"])
    history.add(story)
    history.save()


def show_comments(api: ApiService, story_id: int) -> None:
    story = api.fetch_story_content(story_id)
    rows = api.fetch_comment_tree(story.kids or [])
    record_view(story)
    display_comments(story, rows)


def read_article(api: ApiService, story_id: int) -> None:
    story = api.fetch_story_content(story_id)
    if not story.url:
        console.print(f"[red]Story #{story_id} has no URL.[/red]")
        return
    article = api.fetch_article_content(story.url)
    record_view(story)
    display_article(article)


def toggle_bookmark(api: ApiService, story_id: int) -> None:
    story = api.fetch_story_content(story_id)
    bookmarks = Bookmarks.load_or_create()
    added = bookmarks.toggle(story)
    bookmarks.save()
    verb = "Bookmarked" if added else "Removed bookmark for"
    console.print(f"{verb} [bold]{escape(story.title or str(story.id))}[/bold]")
