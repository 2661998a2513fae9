"""
Typer CLI for flashdeck.

Commands:
    flashdeck init-db                 - Create the record store tables
    flashdeck create-set TITLE        - Create an empty set
    flashdeck list-sets               - List your sets
    flashdeck import SET_ID FILE      - Import delimited cards from a text file
    flashdeck cards SET_ID            - List the cards of a set
    flashdeck add-card SET_ID F B     - Add one card
    flashdeck edit-card CARD_ID       - Change a card's front or back
    flashdeck delete-card CARD_ID     - Delete a card
    flashdeck stats SET_ID            - Mastery, accuracy and retention
    flashdeck study SET_ID            - Study a set interactively

Usage:
    flashdeck --help
    flashdeck import 3f2a... notes.txt --delimiter tab
    flashdeck study 3f2a... --mode write --strategy weighted
    flashdeck study 3f2a... --mode test --format multiple
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flashdeck.config import get_settings
from flashdeck.core.errors import FlashdeckError, PersistenceUnavailable
from flashdeck.core.logging_config import configure_logging
from flashdeck.core.models import Card
from flashdeck.core.modes import available_modes
from flashdeck.study.retention_engine import RetentionStatus

from .context import build_context
from .study_commands import format_hints, study_command

app = typer.Typer(
    help="flashdeck: flashcard sets with adaptive study and retention tracking",
    no_args_is_help=True,
)
app.command("study")(study_command)

console = Console()

_STATUS_COLORS = {
    RetentionStatus.STRONG: "green",
    RetentionStatus.GOOD: "cyan",
    RetentionStatus.FADING: "yellow",
    RetentionStatus.WEAK: "red",
}


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Override FLASHDECK_LOG_LEVEL"),
):
    """Flashcard study from the terminal."""
    settings = get_settings()
    configure_logging(level=(log_level or settings.log_level).upper(), log_file=settings.log_file)


def _fail(e: Exception) -> NoReturn:
    rprint(f"[red]Error:[/red] {e}")
    if isinstance(e, PersistenceUnavailable):
        rprint("[yellow]Is the database initialised? Run:[/yellow] flashdeck init-db")
    raise typer.Exit(code=1)


def _format_progress_bar(percent: int, width: int = 20) -> str:
    filled = int(percent / 100 * width)
    return "#" * filled + "-" * (width - filled)


# ========================================
# DATABASE
# ========================================


@app.command("init-db")
def init_db_command() -> None:
    """Create the record store tables (safe to run repeatedly)."""
    from flashdeck.db.database import init_db

    try:
        init_db()
    except Exception as e:  # SQLAlchemy or driver errors on a bad URL
        _fail(e)
    rprint(f"[green]Database ready:[/green] {get_settings().database_url}")


# ========================================
# SETS AND CARDS
# ========================================


@app.command("create-set")
def create_set(
    title: str = typer.Argument(..., help="Set title"),
    description: str = typer.Option(None, "--description", "-D", help="Optional description"),
    public: bool = typer.Option(False, "--public", help="Make the set public"),
    user_id: str = typer.Option(None, "--user", "-u", help="Owner id"),
) -> None:
    """Create an empty set and print its id."""
    ctx = build_context()
    try:
        set_id = ctx.store.create_set(ctx.user(user_id), title, description, is_public=public)
    except FlashdeckError as e:
        _fail(e)
    rprint(f"[green]Created set[/green] {title!r}: [bold]{set_id}[/bold]")


@app.command("list-sets")
def list_sets(
    user_id: str = typer.Option(None, "--user", "-u", help="Owner id"),
) -> None:
    """List your sets."""
    ctx = build_context()
    try:
        sets = ctx.store.list_sets(ctx.user(user_id))
    except FlashdeckError as e:
        _fail(e)

    if not sets:
        rprint("[yellow]No sets yet.[/yellow] Create one with: flashdeck create-set TITLE")
        return

    table = Table(title="Your sets")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Cards", justify="right")
    table.add_column("Created")
    for s in sets:
        created = s.created_at.strftime("%Y-%m-%d") if s.created_at else "-"
        table.add_row(s.id, s.title, str(s.card_count), created)
    console.print(table)


@app.command("import")
def import_cards(
    set_id: str = typer.Argument(..., help="Target set"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Text file"),
    delimiter: str = typer.Option(
        None, "--delimiter", help="Front/back delimiter: | tab :: ; or any string"
    ),
) -> None:
    """Import cards from a text file with one 'front | back' pair per line."""
    from flashdeck.content.text_parser import TextCardParser

    ctx = build_context()
    try:
        parser = TextCardParser(delimiter or ctx.settings.import_delimiter)
    except ValueError as e:
        _fail(e)

    parsed = parser.parse_file(file)
    if not parsed.cards:
        rprint("[yellow]No cards found.[/yellow] Check the delimiter.")
        raise typer.Exit(code=1)

    try:
        ctx.store.add_cards(set_id, parsed.cards)
    except FlashdeckError as e:
        _fail(e)

    rprint(f"[green]Imported {parsed.count} card(s)[/green]")
    if parsed.skipped_lines:
        lines = ", ".join(str(n) for n in parsed.skipped_lines)
        rprint(f"[yellow]Skipped line(s) without a delimiter:[/yellow] {lines}")


@app.command("cards")
def list_cards(set_id: str = typer.Argument(..., help="Set to list")) -> None:
    """List the cards of a set."""
    ctx = build_context()
    try:
        cards = ctx.store.list_cards(set_id)
    except FlashdeckError as e:
        _fail(e)

    table = Table(title=f"{len(cards)} card(s)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Front")
    table.add_column("Back")
    for card in cards:
        table.add_row(str(card.position + 1), card.id, card.front, card.back)
    console.print(table)


@app.command("add-card")
def add_card(
    set_id: str = typer.Argument(..., help="Target set"),
    front: str = typer.Argument(..., help="Term / question"),
    back: str = typer.Argument(..., help="Definition / answer"),
) -> None:
    """Append one card to a set."""
    ctx = build_context()
    try:
        (card_id,) = ctx.store.add_cards(set_id, [Card(id="new", front=front, back=back)])
    except FlashdeckError as e:
        _fail(e)
    rprint(f"[green]Added card[/green] {card_id}")


@app.command("edit-card")
def edit_card(
    card_id: str = typer.Argument(..., help="Card to change"),
    front: str = typer.Option(None, "--front", help="New front"),
    back: str = typer.Option(None, "--back", help="New back"),
) -> None:
    """Change a card's front and/or back."""
    if front is None and back is None:
        rprint("[yellow]Nothing to change.[/yellow] Pass --front and/or --back.")
        raise typer.Exit(code=1)

    ctx = build_context()
    try:
        card = ctx.store.update_card(card_id, front=front, back=back)
    except FlashdeckError as e:
        _fail(e)
    rprint(f"[green]Updated[/green] {card.front} | {card.back}")


@app.command("delete-card")
def delete_card(card_id: str = typer.Argument(..., help="Card to delete")) -> None:
    """Delete a card. Its past answers no longer count towards mastery."""
    ctx = build_context()
    try:
        deleted = ctx.store.delete_card(card_id)
    except FlashdeckError as e:
        _fail(e)
    if not deleted:
        rprint(f"[yellow]No card {card_id}[/yellow]")
        raise typer.Exit(code=1)
    rprint(f"[green]Deleted card[/green] {card_id}")


# ========================================
# STATISTICS
# ========================================


@app.command("stats")
def stats(
    set_id: str = typer.Argument(..., help="Set to summarise"),
    user_id: str = typer.Option(None, "--user", "-u", help="Learner id"),
    show_cards: bool = typer.Option(False, "--cards", "-c", help="Show per-card mastery"),
) -> None:
    """Show mastery, accuracy and predicted retention for a set."""
    ctx = build_context()
    service = ctx.study_service
    try:
        summary = service.statistics(set_id, ctx.user(user_id))
    except FlashdeckError as e:
        _fail(e)

    table = Table(title="Progress", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total cards", str(summary.total_cards))
    table.add_row("Mastered", f"[green]{summary.mastered}[/green] ({summary.mastered_percent}%)")
    table.add_row("Learning", f"[yellow]{summary.learning}[/yellow] ({summary.learning_percent}%)")
    table.add_row("Not started", f"{summary.not_started} ({summary.not_started_percent}%)")
    table.add_row("Accuracy", f"{_format_progress_bar(summary.avg_accuracy)} {summary.avg_accuracy}%")
    table.add_row("Sessions", str(summary.study_sessions))
    last = summary.last_studied.strftime("%Y-%m-%d %H:%M") if summary.last_studied else "never"
    table.add_row("Last studied", last)
    console.print(table)

    retention = summary.retention
    color = _STATUS_COLORS[retention.status]
    console.print(
        Panel(
            f"[{color}]{retention.status.value}[/{color}]: {retention.remaining_days} of "
            f"{retention.total_retention_days} day(s) left "
            f"(studied {retention.days_since_study} day(s) ago)\n{retention.status.message}",
            title="Predicted retention",
            border_style=color,
        )
    )

    modes = ", ".join(p.label for p in available_modes(summary.total_cards)) or "none"
    rprint(f"[dim]Available modes: {modes}[/dim]")
    if summary.total_cards:
        rprint(f"[dim]Weighted study focus: {format_hints(summary.hints)}[/dim]")

    if show_cards:
        try:
            mastery = service.mastery(set_id, ctx.user(user_id))
            cards = ctx.store.list_cards(set_id)
        except FlashdeckError as e:
            _fail(e)
        card_table = Table(title="Cards")
        card_table.add_column("Front")
        card_table.add_column("Correct", justify="right", style="green")
        card_table.add_column("Wrong", justify="right", style="red")
        card_table.add_column("Weight", justify="right")
        card_table.add_column("Status")
        for card in cards:
            m = mastery[card.id]
            card_table.add_row(
                card.front,
                str(m.correct_count),
                str(m.incorrect_count),
                f"{m.weight:.2f}",
                m.status.value.replace("_", " "),
            )
        console.print(card_table)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
