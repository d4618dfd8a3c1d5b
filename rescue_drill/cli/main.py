"""
Rescue Drill CLI - CPR and Heimlich training in the terminal.

Usage:
    rescue-drill steps cpr              # List the steps of a scenario
    rescue-drill questions heimlich     # Browse the question bank
    rescue-drill drill cpr              # Interactive training session
    rescue-drill demo heimlich          # Watch a scripted learner
    rescue-drill demo cpr --expire      # ... who runs out of time
"""

from __future__ import annotations

import time
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.prompt import IntPrompt, Prompt

from config import Settings, get_settings
from rescue_drill.catalog import (
    DEFAULT_QUESTION_BANK,
    InvalidScenario,
    ScenarioType,
    action_choices,
    get_scenario,
    select_questions_for_step,
)
from rescue_drill.cli.demo import ScriptedLearner
from rescue_drill.delivery.console_ui import (
    describe_event,
    instruction_panel,
    outcome_panel,
    practice_panel,
    question_panel,
    questions_table,
    result_panel,
    status_line,
    steps_table,
)
from rescue_drill.delivery.result_sink import HttpResultSink, LoggingResultSink, ResultSink
from rescue_drill.logging_setup import configure_logging
from rescue_drill.training.quiz_engine import QuizState
from rescue_drill.training.scheduler import ManualScheduler
from rescue_drill.training.session import SessionController, SessionEvent, SessionEventType
from rescue_drill.training.state import Phase

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="rescue-drill",
    help="CPR and Heimlich maneuver training sessions",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _scenario(value: str) -> ScenarioType:
    try:
        return ScenarioType.parse(value)
    except InvalidScenario as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


def _result_sink(settings: Settings) -> ResultSink:
    if settings.has_results_api:
        return HttpResultSink(
            settings.results_api_url,
            token=settings.results_api_token,
            timeout_ms=settings.results_api_timeout_ms,
        )
    return LoggingResultSink()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output")
    ] = False,
) -> None:
    """
    Rescue Drill - timed CPR and Heimlich maneuver practice.

    \b
    Each step runs a knowledge test, an instruction screen and a
    hands-on practice phase, all against one session countdown.
    """
    configure_logging("DEBUG" if verbose else get_settings().log_level)


# =============================================================================
# Catalog Commands
# =============================================================================


@app.command()
def steps(
    scenario: Annotated[str, typer.Argument(help="cpr or heimlich")],
) -> None:
    """Show the steps of a scenario."""
    profile = get_scenario(_scenario(scenario))
    console.print(steps_table(profile))


@app.command()
def questions(
    scenario: Annotated[str, typer.Argument(help="cpr or heimlich")],
    step: Annotated[
        str | None, typer.Option("--step", "-s", help="Only this step's questions")
    ] = None,
) -> None:
    """Browse the knowledge questions of a scenario."""
    profile = get_scenario(_scenario(scenario))
    if step is not None and step not in {s.id for s in profile.steps}:
        console.print(f"[red]Unknown step for {profile.scenario_type.value}: {step}[/red]")
        raise typer.Exit(1)

    for definition in profile.steps:
        if step is not None and definition.id != step:
            continue
        pool = select_questions_for_step(definition.id, DEFAULT_QUESTION_BANK)
        if not pool:
            console.print(f"[dim]{definition.name}: no questions[/dim]")
            continue
        console.print(questions_table(pool, f"{definition.name} ({len(pool)})"))


# =============================================================================
# Session Commands
# =============================================================================


@app.command()
def drill(
    scenario: Annotated[str, typer.Argument(help="cpr or heimlich")],
) -> None:
    """
    Run an interactive training session.

    The session clock keeps running while you read and type; time is
    caught up after every answer.
    """
    scenario_type = _scenario(scenario)
    settings = get_settings()
    scheduler = ManualScheduler()
    controller = SessionController(
        scenario_type,
        scheduler,
        result_sink=_result_sink(settings),
        settings=settings,
    )
    origin = time.monotonic()

    def catch_up() -> None:
        scheduler.advance_to(time.monotonic() - origin)

    console.print(steps_table(controller.profile))
    last_action: str | None = None

    while True:
        catch_up()
        if controller.terminal:
            break
        quiz = controller.quiz
        phase = controller.state.phase

        if quiz.is_presenting:
            question = quiz.question
            console.print(status_line(controller))
            console.print(question_panel(question, quiz.flavor, quiz.seconds_left))
            choice = IntPrompt.ask(
                "Answer",
                choices=[str(i) for i in range(1, len(question.options) + 1)],
                show_choices=False,
            )
            catch_up()
            outcome = controller.submit_answer(choice - 1) or quiz.last_outcome
            if outcome is not None:
                console.print(outcome_panel(outcome, question))
            continue

        if quiz.state == QuizState.ANSWERED:
            # Feedback dwell; the next question appears when it elapses
            time.sleep(0.25)
            continue

        if phase == Phase.KNOWLEDGE:
            console.print(status_line(controller))
            Prompt.ask(f"[bold]{controller.current_step.name}[/bold] - press Enter to start", default="")
            catch_up()
            controller.begin_knowledge()
            continue

        if phase == Phase.INSTRUCTION:
            console.print(instruction_panel(controller))
            Prompt.ask("Press Enter to start practice", default="")
            catch_up()
            controller.start_practice()
            last_action = None
            continue

        choices = action_choices(controller.current_step, controller.profile)
        console.print(status_line(controller))
        console.print(practice_panel(controller))
        answer = Prompt.ask("Action", default=last_action or "1").strip().lower()
        catch_up()

        if answer == "x":
            console.print("[yellow]Session abandoned[/yellow]")
            raise typer.Exit(0)
        if answer == "r":
            controller.reset()
            console.print("[yellow]Session reset[/yellow]")
            continue
        if answer == "q":
            if controller.start_review_quiz() is None:
                console.print("[dim]No review question available[/dim]")
            continue

        action = _resolve_action(answer, choices)
        if action is None:
            console.print(f"[red]Unknown action: {answer}[/red]")
            continue
        last_action = answer
        controller.record_action(action)

    console.print(result_panel(controller.result))


def _resolve_action(answer: str, choices: list[str]) -> str | None:
    """Accept an action by its menu number or its id."""
    if answer.isdigit():
        index = int(answer) - 1
        return choices[index] if 0 <= index < len(choices) else None
    return answer if answer in choices else None


@app.command()
def demo(
    scenario: Annotated[str, typer.Argument(help="cpr or heimlich")],
    expire: Annotated[
        bool, typer.Option("--expire", help="Stall on the last step until time runs out")
    ] = False,
    miss: Annotated[
        bool, typer.Option("--miss", help="Answer each step's first question wrongly")
    ] = False,
) -> None:
    """Play a scripted learner through a session on a virtual clock."""
    scenario_type = _scenario(scenario)
    settings = get_settings()
    scheduler = ManualScheduler()

    def narrate(event: SessionEvent) -> None:
        if event.type == SessionEventType.TICK:
            return
        line = describe_event(event)
        if line is not None:
            console.print(line)

    controller = SessionController(
        scenario_type,
        scheduler,
        result_sink=_result_sink(settings),
        settings=settings,
        on_change=narrate,
    )
    learner = ScriptedLearner(controller, scheduler, miss_first_answer=miss, stall=expire)
    result = learner.run()
    logger.debug(f"Demo finished at virtual time {scheduler.now():.1f}s")
    console.print(result_panel(result))


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
