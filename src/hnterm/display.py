"""Rich terminal display — story tables, comment threads, article text."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hnterm.bookmarks import Bookmarks
from hnterm.history import History
from hnterm.htmltext import extract_text_from_html
from hnterm.models import Article, CommentRow, Story
from hnterm.search import SearchHistory
from hnterm.theme import HN_ORANGE
from hnterm.utils import extract_domain, time_ago

console = Console()


def story_title(story: Story) -> Text:
    """Story title with its domain appended in dim text."""
    title = Text(story.title or "(untitled)", style="bold")
    domain = extract_domain(story.url)
    if domain:
        title.append(f" ({domain})", style="dim")
    return title


def display_stories(
    label: str,
    stories: list[Story],
    bookmarked: set[int] | None = None,
) -> int:
    """Display a story list as a Rich panel. Returns count of stories shown."""
    if not stories:
        console.print(f"[dim]No {label.lower()} stories.[/dim]")
        return 0

    bookmarked = bookmarked or set()
    table = Table(show_header=True, header_style="dim", box=None, padding=(0, 1), expand=True)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Title", ratio=1)
    table.add_column("Points", width=7, justify="right", style=HN_ORANGE)
    table.add_column("Comments", width=9, justify="right", style="dim")
    table.add_column("Age", width=8, justify="right", style="dim")

    for i, story in enumerate(stories, start=1):
        title = story_title(story)
        if story.id in bookmarked:
            title.append(" ★", style=HN_ORANGE)
        table.add_row(
            str(i),
            title,
            str(story.score or 0),
            str(story.descendants or 0),
            time_ago(story.time),
        )

    console.print(
        Panel(
            table,
            title=f"[bold {HN_ORANGE}]{label.upper()}[/bold {HN_ORANGE}]",
            border_style=HN_ORANGE,
            padding=(0, 1),
        )
    )
    return len(stories)


def display_comments(story: Story, rows: list[CommentRow]) -> None:
    """Print a story header followed by its comment thread, indented by depth."""
    console.print(story_title(story))
    console.print(
        f"[dim]{story.score or 0} points by {escape(story.by or '?')} "
        f"{time_ago(story.time)} | {story.descendants or 0} comments[/dim]\n"
    )
    if not rows:
        console.print("[dim]No comments.[/dim]")
        return
    for row in rows:
        indent = "  " * row.depth
        comment = row.comment
        if comment.deleted:
            console.print(f"{indent}[dim][deleted][/dim]\n")
            continue
        console.print(
            f"{indent}[{HN_ORANGE}]{escape(comment.by or '?')}[/{HN_ORANGE}] "
            f"[dim]{time_ago(comment.time)}[/dim]"
        )
        for paragraph in extract_text_from_html(comment.text).split("\n\n"):
            console.print(Text(f"{indent}{paragraph}"))
        console.print()


def display_article(article: Article) -> None:
    console.print(Panel(Text(article.title, style="bold"), border_style=HN_ORANGE))
    console.print(Text(article.plain_text()))


def display_bookmarks(bookmarks: Bookmarks) -> None:
    if not bookmarks.stories:
        console.print("[dim]No bookmarks yet.[/dim]")
        return
    console.print("\n[bold]Bookmarks[/bold]\n")
    for b in bookmarks.stories:
        domain = extract_domain(b.url)
        suffix = f" [dim]({escape(domain)})[/dim]" if domain else ""
        console.print(f"  [{HN_ORANGE}]★[/{HN_ORANGE}] {escape(b.title)}{suffix} [dim]#{b.id}[/dim]")
    console.print()


def display_history(history: History) -> None:
    if not history.stories:
        console.print("[dim]No viewed stories.[/dim]")
        return
    console.print("\n[bold]Recently viewed[/bold]\n")
    for v in history.stories:
        console.print(
            f"  {escape(v.title)} [dim]#{v.id} · {v.score or 0} points · viewed {v.viewed_at}[/dim]"
        )
    console.print()


def display_searches(searches: SearchHistory) -> None:
    if not searches.queries:
        console.print("[dim]No recent searches.[/dim]")
        return
    console.print("\n[bold]Recent searches[/bold]\n")
    for i, query in enumerate(searches.queries, start=1):
        console.print(f"  [dim]{i}.[/dim] {escape(query)}")
    console.print()


def display_error(message: str) -> None:
    console.print(Text(message, style="red"))
