"""Unified Rich theme and reusable UI helper functions for the CLI."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

NOVEL_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "genre": "bold",
    "stat.label": "dim",
    "stat.value": "bold",
    "chapter.num": "blue",
    "character.name": "bold cyan",
})


def get_console() -> Console:
    """Return a Console instance with the novel theme applied."""
    return Console(theme=NOVEL_THEME)


def app_header(title: str = "novel-agent") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "New project").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def progress_panel(progress) -> Panel:
    """Return a Panel summarizing a WritingProgress snapshot."""
    body = (
        f"  [stat.label]Words:[/] [stat.value]{progress.total_words:,}[/]  "
        f"[muted]|[/]  [stat.label]Today:[/] [stat.value]{progress.words_today:,}[/]  "
        f"[muted]|[/]  [stat.label]Streak:[/] [stat.value]{progress.writing_streak}d[/]\n"
        f"  [stat.label]Chapters:[/] [stat.value]{progress.chapters_completed}/{progress.total_chapters}[/]  "
        f"[muted]|[/]  [stat.label]Estimated completion:[/] "
        f"[stat.value]{progress.estimated_completion:%Y-%m-%d}[/]"
    )
    return Panel(body, title="[bold]Progress[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def chapter_table(chapters: list) -> Table:
    """Build a Rich Table listing chapters in order."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("#", style="chapter.num", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Status", style="muted")
    table.add_column("Words", justify="right")

    for chapter in sorted(chapters, key=lambda c: c.order):
        table.add_row(str(chapter.order), chapter.title, chapter.status.value, f"{chapter.word_count:,}")
    return table


def analytics_table(analytics) -> Table:
    """Build a two-column Rich Table of SeriesAnalytics fields."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=False, padding=(0, 1))
    table.add_column("Metric", style="stat.label")
    table.add_column("Value", style="stat.value", justify="right")

    table.add_row("Total words", f"{analytics.total_words:,}")
    table.add_row("Average book length", f"{analytics.average_book_length:,.0f}")
    table.add_row("Characters", str(analytics.characters_introduced))
    table.add_row("Active plot threads", str(analytics.plot_threads_active))
    table.add_row("Resolved plot threads", str(analytics.plot_threads_resolved))
    table.add_row("World locations", str(analytics.world_locations))
    table.add_row("Continuity issues", str(analytics.continuity_issues))
    table.add_row("Completion", f"{analytics.completion_percentage:.0f}%")
    table.add_row("Words per day", f"{analytics.writing_velocity:,.0f}")
    table.add_row("Estimated completion", f"{analytics.estimated_series_completion:%Y-%m-%d}")
    return table
