"""
Interactive study session for the terminal.

Drives a QuizSession one card at a time:
- flashcards: flip with Enter, then say whether you knew it (y/n)
- learn / test multiple: pick an option by number
- write / test written: type the answer; in write mode ``o`` accepts a
  rejected answer

Typing ``q`` at any prompt abandons the session; nothing is recorded.
"""
from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from flashdeck.core.errors import FlashdeckError
from flashdeck.core.modes import Direction, StudyMode, TestFormat
from flashdeck.matchers import MatcherType
from flashdeck.study.mastery_calculator import MasteryHints
from flashdeck.study.queue_builder import BiasStrategy
from flashdeck.study.quiz_engine import SessionPhase, SessionView
from flashdeck.study.study_service import ActiveStudy, StudyOutcomeReport, StudyService

from .context import build_context

console = Console()

QUIT = "q"
OVERRIDE = "o"


def _ask(label: str) -> str | None:
    """Prompt for a line; None means the learner quit."""
    answer = Prompt.ask(label, default="", show_default=False)
    if answer.strip().lower() == QUIT:
        return None
    return answer


def _show_card(active: ActiveStudy, view: SessionView) -> None:
    title = f"Card {view.position}/{view.queue_length}"
    if view.is_retry:
        title += " [yellow](retry)[/yellow]"
    if active.is_focus_card(view.card.id):
        title += " [magenta](focus card)[/magenta]"
    console.print(Panel(view.prompt or "", title=title, border_style="blue"))


def _read_choice(service: StudyService, active: ActiveStudy) -> str | None:
    options = service.choices_for(active)
    for i, option in enumerate(options, 1):
        rprint(f"  [cyan]{i}[/cyan]. {option}")
    answer = _ask("[cyan]Answer[/cyan] (number, q to quit)")
    if answer is None:
        return None
    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return options[int(answer) - 1]
    return answer


def _read_self_report(view: SessionView) -> str | None:
    if _ask("[dim]Press Enter to flip (q to quit)[/dim]") is None:
        return None
    console.print(Panel(view.expected or "", title="Answer", border_style="magenta"))
    return _ask("[cyan]Did you know it?[/cyan] (y/n, q to quit)")


def _read_response(service: StudyService, active: ActiveStudy, view: SessionView) -> str | None:
    matcher = MatcherType(active.policy.matcher)
    if matcher is MatcherType.CHOICE:
        return _read_choice(service, active)
    if matcher is MatcherType.SELF_REPORT:
        return _read_self_report(view)
    while True:
        answer = _ask("[cyan]Your answer[/cyan] (q to quit)")
        # write mode ignores an empty submission; a test scores it as a miss
        if answer is None or answer.strip() or active.mode is not StudyMode.WRITE:
            return answer


def format_hints(hints: MasteryHints) -> str:
    """One-line summary of the cards an adaptive session will focus on."""
    if hints.all_mastered:
        return "All mastered!"
    parts = []
    if hints.needs_practice:
        parts.append(f"{hints.needs_practice} need practice")
    if hints.new:
        parts.append(f"{hints.new} new")
    return ", ".join(parts)


def _show_feedback(active: ActiveStudy, view: SessionView) -> None:
    if active.policy.mode is StudyMode.FLASHCARDS:
        return
    if view.last_correct:
        rprint("[green][OK] Correct[/green]")
    else:
        rprint(f"[red][X] Incorrect[/red] - answer: [bold]{view.expected}[/bold]")


def run_study_session(service: StudyService, active: ActiveStudy) -> StudyOutcomeReport:
    """Run the interactive loop until the session completes or is abandoned."""
    quiz = active.quiz
    while not quiz.is_finished:
        view = quiz.view()
        _show_card(active, view)

        response = _read_response(service, active, view)
        if response is None:
            quiz.abandon()
            break

        view = quiz.submit_answer(response)
        _show_feedback(active, view)

        if active.policy.allow_override and not view.last_correct:
            follow_up = Prompt.ask(
                "[dim]Enter to continue, o if you were right[/dim]",
                default="",
                show_default=False,
            )
            if follow_up.strip().lower() == OVERRIDE:
                quiz.override(view.card.id)
                rprint("[green]Counted as correct[/green]")

        quiz.advance()

    return service.finish(active)


def _show_summary(active: ActiveStudy, report: StudyOutcomeReport) -> None:
    stats = report.stats
    if report.phase is SessionPhase.ABANDONED:
        rprint("\n[yellow]Session abandoned - nothing was recorded.[/yellow]")
        return

    lines = [f"Score: [bold]{stats.correct}/{stats.answered}[/bold] ({stats.percentage}%)"]
    if active.policy.timed:
        minutes, seconds = divmod(int(stats.elapsed_seconds), 60)
        lines.append(f"Time: {minutes}m {seconds:02d}s")
    if stats.is_perfect:
        lines.append("[green]Perfect round![/green]")
    if active.strategy is BiasStrategy.WEIGHTED and report.improved:
        plural = "s" if report.improved > 1 else ""
        lines.append(f"[cyan]{report.improved} card{plural} improved this session[/cyan]")

    if active.policy.records_outcomes:
        if report.persisted:
            lines.append("[dim]Progress saved.[/dim]")
        else:
            lines.append("[yellow]Progress could not be saved.[/yellow]")

    console.print(Panel("\n".join(lines), title=f"{active.policy.label} complete", border_style="green"))


def study_command(
    set_id: str = typer.Argument(..., help="Set to study"),
    mode: StudyMode = typer.Option(StudyMode.LEARN, "--mode", "-m", help="Study mode"),
    strategy: BiasStrategy = typer.Option(
        None, "--strategy", "-s", help="Queue bias (default from settings)"
    ),
    direction: Direction = typer.Option(
        Direction.DEFINITION, "--direction", "-d", help="definition: show front; term: show back"
    ),
    test_format: TestFormat = typer.Option(
        TestFormat.WRITTEN, "--format", "-f", help="Answer format in test mode"
    ),
    user_id: str = typer.Option(None, "--user", "-u", help="Learner id"),
) -> None:
    """
    Study a set interactively.

    Type q at any prompt to quit without recording the session.
    """
    ctx = build_context()
    service = ctx.study_service
    try:
        active = service.start(
            set_id,
            ctx.user(user_id),
            mode=mode,
            strategy=strategy,
            direction=direction,
            test_format=test_format,
        )
    except FlashdeckError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    rprint(f"[bold]{active.policy.label}[/bold] - {len(active.quiz.queue)} cards queued ({active.strategy.value})")
    if active.strategy is BiasStrategy.WEIGHTED:
        rprint(f"[dim]Focus: {format_hints(active.hints)}[/dim]")
    report = run_study_session(service, active)
    _show_summary(active, report)
