"""CLI entry point — novel-agent.

Usage:
  novel-agent outline -t "Title" -g Fantasy     create a project and outline it
  novel-agent draft -t "Title" -c 3             outline and write chapters
  novel-agent series -t "Saga" -b 3             plan a series and report analytics
  novel-agent enhance chapter.txt -k style      enhance a text file
  novel-agent --help                            list all commands

Everything lives in memory for one invocation.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from cli.theme import (
    get_console,
    app_header,
    command_panel,
    success_panel,
    progress_panel,
    chapter_table,
    analytics_table,
)
from config.exceptions import NotConfiguredError
from config.logging_config import setup_logging
from config.settings import get_settings
from models.enums import EnhancementKind, PointOfView
from workflow.callbacks import RichProgressCallback
from workflow.runtime import build_runtime

console = get_console()
logger = logging.getLogger(__name__)


def _init_logging(verbose: bool):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level, log_dir=get_settings().log_dir, console_enabled=verbose)


def _runtime():
    """Build the runtime or exit with a configuration hint."""
    try:
        return build_runtime(get_settings())
    except NotConfiguredError as e:
        console.print(f"[error]{e}[/]")
        console.print("[muted]Set ANTHROPIC_API_KEY in the environment or a .env file.[/]")
        sys.exit(2)


def _writing_settings(style: str, tone: str, pov: str, model: str) -> dict:
    return {"writing_style": style, "tone": tone, "point_of_view": pov, "model": model or None}


def _print_usage(runtime) -> None:
    usage = runtime.generator.get_usage_summary()
    console.print(
        f"\n[muted]LLM calls: {usage['total_calls']} | "
        f"estimated cost: ${usage['total_cost_usd']:.4f}[/]"
    )


_style_options = [
    click.option("--style", "-s", default="", help="Writing style, e.g. 'lyrical'"),
    click.option("--tone", default="", help="Tone, e.g. 'dark'"),
    click.option("--pov", default=PointOfView.THIRD_LIMITED.value,
                 type=click.Choice([p.value for p in PointOfView]), help="Point of view"),
    click.option("--model", "-m", default="", help="Model override"),
]


def style_options(func):
    for option in reversed(_style_options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """novel-agent — LLM-assisted novel and series planning."""
    _init_logging(verbose)


# ---------------------------------------------------------------------------
# outline command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--title", "-t", default="", help="Project title")
@click.option("--genre", "-g", default="", help="Genre")
@click.option("--description", "-d", default="", help="Premise / description")
@click.option("--words", "-w", default=None, type=int, help="Target word count")
@click.option("--theme", "themes", multiple=True, help="Theme (repeatable)")
@style_options
def outline(title, genre, description, words, themes, style, tone, pov, model):
    """Create a project and generate its outline.

    Example:
      novel-agent outline -t "The Salt Road" -g Fantasy -d "A smuggler maps a dying sea"
    """
    runtime = _runtime()
    project = runtime.projects.create_project(
        title=title, description=description, genre=genre,
        target_word_count=words, themes=list(themes),
    )

    console.print(app_header())
    console.print(command_panel("New project", {
        "Title": project.title,
        "Genre": project.genre,
        "Target": f"{project.target_word_count:,} words",
    }))

    try:
        with console.status("[muted]Generating outline...[/]"):
            result = asyncio.run(runtime.projects.generate_project_outline(
                project.id, _writing_settings(style, tone, pov, model),
            ))
    except Exception as e:
        console.print(f"\n[error]Outline failed: {e}[/]")
        logger.exception("Outline failed")
        sys.exit(1)

    console.print()
    console.print(success_panel(f"Outline ({result['task_id'][:8]})", result["outline"]))
    _print_usage(runtime)


# ---------------------------------------------------------------------------
# draft command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--title", "-t", default="", help="Project title")
@click.option("--genre", "-g", default="", help="Genre")
@click.option("--description", "-d", default="", help="Premise / description")
@click.option("--chapters", "-c", default=1, type=click.IntRange(1, 50), help="Chapters to write")
@click.option("--words", "-w", default=None, type=int, help="Target word count")
@click.option("--skip-outline", is_flag=True, help="Write without generating an outline first")
@style_options
def draft(title, genre, description, chapters, words, skip_outline, style, tone, pov, model):
    """Create a project, outline it, then write chapters in order.

    Example:
      novel-agent draft -t "The Salt Road" -g Fantasy -c 3
    """
    runtime = _runtime()
    writing = _writing_settings(style, tone, pov, model)
    project = runtime.projects.create_project(
        title=title, description=description, genre=genre, target_word_count=words,
    )

    console.print(app_header())
    console.print(command_panel("Draft", {
        "Title": project.title,
        "Genre": project.genre,
        "Chapters": str(chapters),
    }))
    console.print()

    async def _run():
        if not skip_outline:
            await runtime.projects.generate_project_outline(project.id, writing)
        for order in range(1, chapters + 1):
            await runtime.projects.write_chapter(project.id, {"order": order}, writing)

    cb = RichProgressCallback(console=console, total=chapters + (0 if skip_outline else 1))
    runtime.ledger.add_callback(cb)
    cb.start()
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted[/]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[error]Draft failed: {e}[/]")
        logger.exception("Draft failed")
        sys.exit(1)
    finally:
        cb.stop()
        runtime.ledger.remove_callback(cb)

    finished = runtime.projects.get_project(project.id)
    console.print(chapter_table(finished.chapters))
    console.print(progress_panel(runtime.projects.get_writing_progress(project.id)))
    _print_usage(runtime)


# ---------------------------------------------------------------------------
# series command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--title", "-t", default="", help="Series title")
@click.option("--genre", "-g", default="", help="Genre")
@click.option("--description", "-d", default="", help="Series premise")
@click.option("--books", "-b", default=None, type=int, help="Planned number of books")
@click.option("--theme", "themes", multiple=True, help="Theme (repeatable)")
@click.option("--world", "world", multiple=True,
              type=click.Choice(["locations", "cultures", "technologies", "magic_systems",
                                 "political_systems", "religions", "languages", "timeline"]),
              help="World bible category to expand (repeatable)")
@style_options
def series(title, genre, description, books, themes, world, style, tone, pov, model):
    """Plan a series: outline it, create its books and print analytics.

    Example:
      novel-agent series -t "The Tidebound" -g Fantasy -b 3 --world locations
    """
    runtime = _runtime()
    writing = _writing_settings(style, tone, pov, model)
    try:
        book_series = runtime.series.create_book_series(
            title=title, description=description, genre=genre,
            total_planned_books=books, overall_themes=list(themes),
        )
    except Exception as e:
        console.print(f"[error]{e}[/]")
        sys.exit(1)

    console.print(app_header())
    console.print(command_panel("New series", {
        "Title": book_series.title,
        "Genre": book_series.genre,
        "Books": str(book_series.total_planned_books),
    }))

    async def _run():
        result = await runtime.series.generate_series_outline(book_series.id, writing)
        for _ in range(book_series.total_planned_books):
            await runtime.series.add_book_to_series(book_series.id)
        if world:
            await runtime.series.expand_world_bible(book_series.id, list(world), writing)
        await runtime.series.check_series_continuity(book_series.id)
        return result["outline"]

    try:
        with console.status("[muted]Planning series...[/]"):
            series_outline = asyncio.run(_run())
    except Exception as e:
        console.print(f"\n[error]Series planning failed: {e}[/]")
        logger.exception("Series planning failed")
        sys.exit(1)

    console.print()
    console.print(success_panel("Series overview", series_outline.series_overview))
    for number, book_outline in enumerate(series_outline.book_outlines, start=1):
        console.print(f"[chapter.num]Book {number}[/] {book_outline}")
    console.print()
    console.print(analytics_table(runtime.series.get_series_analytics(book_series.id)))
    _print_usage(runtime)


# ---------------------------------------------------------------------------
# enhance command
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--kind", "-k", default=EnhancementKind.STYLE.value,
              type=click.Choice([k.value for k in EnhancementKind]), help="Enhancement kind")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Write the result here instead of printing it")
@style_options
def enhance(path, kind, output, style, tone, pov, model):
    """Enhance a text file (grammar, style, flow or dialogue).

    Example:
      novel-agent enhance chapter1.txt -k dialogue -o chapter1.edited.txt
    """
    runtime = _runtime()
    content = path.read_text(encoding="utf-8")

    try:
        with console.status(f"[muted]Enhancing ({kind})...[/]"):
            enhanced = asyncio.run(runtime.projects.enhance_text(
                content, kind, _writing_settings(style, tone, pov, model),
            ))
    except Exception as e:
        console.print(f"\n[error]Enhancement failed: {e}[/]")
        logger.exception("Enhancement failed")
        sys.exit(1)

    if output:
        output.write_text(enhanced, encoding="utf-8")
        console.print(f"[success]{output} written[/]")
    else:
        console.print(enhanced)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
