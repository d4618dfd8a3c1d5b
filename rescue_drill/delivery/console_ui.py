"""
Terminal rendering for training sessions.

Pure builders: every function returns a rich renderable and leaves printing
to the caller, so the same panels serve the interactive drill and the
scripted demo.
"""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from rescue_drill.catalog.models import QuizQuestion, ScenarioProfile
from rescue_drill.catalog.steps import action_choices
from rescue_drill.training.quiz_engine import AnswerOutcome, QuizFlavor
from rescue_drill.training.session import (
    SessionController,
    SessionEvent,
    SessionEventType,
    SessionResult,
)
from rescue_drill.training.state import Phase

# =============================================================================
# Theme
# =============================================================================

DRILL_THEME = {
    "primary": "#E53935",  # Emergency red
    "secondary": "#1E88E5",  # Instruction blue
    "success": "#43A047",
    "warning": "#FDD835",
    "error": "#E53935",
    "dim": "#78909C",
    "white": "#ECEFF1",
}

STYLES = {
    "drill_primary": Style(color=DRILL_THEME["primary"], bold=True),
    "drill_secondary": Style(color=DRILL_THEME["secondary"]),
    "drill_success": Style(color=DRILL_THEME["success"], bold=True),
    "drill_warning": Style(color=DRILL_THEME["warning"], bold=True),
    "drill_error": Style(color=DRILL_THEME["error"], bold=True),
    "drill_dim": Style(color=DRILL_THEME["dim"]),
}

PHASE_LABELS = {
    Phase.KNOWLEDGE: "Knowledge Test Phase",
    Phase.INSTRUCTION: "Instruction Phase",
    Phase.PRACTICE: "Practice Phase",
}


def format_clock(seconds: int) -> str:
    """Render seconds as M:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def clock_style(seconds: int) -> Style:
    """Green with time to spare, yellow under two minutes, red under one."""
    if seconds <= 60:
        return STYLES["drill_error"]
    if seconds <= 120:
        return STYLES["drill_warning"]
    return STYLES["drill_success"]


def steps_table(profile: ScenarioProfile) -> Table:
    """Overview of a scenario's steps."""
    table = Table(title=profile.title, box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step", style="bold")
    table.add_column("Actions")
    table.add_column("Limit", justify="right")
    table.add_column("Points", justify="right")

    for i, step in enumerate(profile.steps, 1):
        limit = f"{step.time_limit_seconds}s" if step.time_limit_seconds else "-"
        table.add_row(
            str(i),
            step.name,
            ", ".join(action_choices(step, profile)),
            limit,
            str(step.base_points),
        )
    table.caption = f"Session budget: {format_clock(profile.session_budget_seconds)}"
    return table


def questions_table(questions: tuple[QuizQuestion, ...], title: str) -> Table:
    """Question pool listing with the correct option highlighted."""
    table = Table(title=title, box=box.SIMPLE, show_lines=True)
    table.add_column("Question", ratio=3)
    table.add_column("Answer", ratio=2, style="green")
    for question in questions:
        table.add_row(question.prompt_text, question.correct_option)
    return table


def status_line(controller: SessionController) -> Text:
    """One-line header: phase, step counter, time remaining."""
    state = controller.state
    text = Text()
    phase = state.active_phase
    label = PHASE_LABELS[phase] if phase is not None else "Session Over"
    text.append(label, style=STYLES["drill_secondary"])
    text.append(f" - Step {state.current_step_index + 1} / {len(state.steps)}")
    if state.session_started_at is not None and not state.terminal:
        remaining = state.total_time_remaining_seconds
        text.append("   Time Remaining: ", style=STYLES["drill_dim"])
        text.append(format_clock(remaining), style=clock_style(remaining))
    return text


def question_panel(question: QuizQuestion, flavor: QuizFlavor, seconds_left: int) -> Panel:
    """A question with numbered options and its countdown."""
    content = Text()
    content.append(question.prompt_text + "\n\n", style=Style(color=DRILL_THEME["white"], bold=True))
    for i, option in enumerate(question.options, 1):
        content.append(f"  {i}. ", style=STYLES["drill_dim"])
        content.append(option + "\n")

    title = "Knowledge Check" if flavor == QuizFlavor.KNOWLEDGE else "Quick Review"
    return Panel(
        content,
        title=f"[bold]{title}[/bold]",
        subtitle=f"{seconds_left}s",
        border_style=Style(color=DRILL_THEME["secondary"]),
        box=box.HEAVY,
        padding=(1, 2),
    )


def outcome_panel(outcome: AnswerOutcome, question: QuizQuestion | None) -> Panel:
    """Correct / incorrect / timed-out feedback with the explanation."""
    if outcome.correct:
        color, status = DRILL_THEME["success"], "CORRECT"
    elif outcome.timed_out:
        color, status = DRILL_THEME["warning"], "TIME'S UP"
    else:
        color, status = DRILL_THEME["error"], "INCORRECT"

    content = Text()
    content.append(f"{status}\n\n", style=Style(color=color, bold=True))
    if question is not None:
        content.append("Answer: ", style=STYLES["drill_dim"])
        content.append(question.correct_option, style=Style(bold=True))
    if outcome.explanation:
        content.append("\n\n")
        content.append(outcome.explanation, style=STYLES["drill_dim"])

    return Panel(content, border_style=Style(color=color), box=box.HEAVY, padding=(1, 2))


def instruction_panel(controller: SessionController) -> Panel:
    step = controller.current_step
    knowledge = controller.state.knowledge_results.get(step.id)

    content = Text()
    content.append(f"{step.description}\n\n", style=Style(bold=True))
    content.append(step.instruction_text + "\n")
    if step.time_limit_seconds:
        content.append(f"\nSuggested time: {step.time_limit_seconds} seconds\n", style="dim")
    if step.video_path:
        content.append(f"Video: {step.video_path}\n", style="dim")
    if knowledge and knowledge.bonus_points:
        content.append(
            f"\nKnowledge test passed - Score: {knowledge.bonus_points} points",
            style=STYLES["drill_success"],
        )

    return Panel(
        content,
        title=f"[bold]{step.name}[/bold]",
        border_style=Style(color=DRILL_THEME["secondary"]),
        padding=(1, 2),
    )


def practice_panel(controller: SessionController) -> Panel:
    """Remaining requirements, counters and compression rate."""
    state = controller.state
    step = controller.current_step
    choices = action_choices(step, controller.profile)

    content = Text()
    for i, action in enumerate(choices, 1):
        counted = controller.profile.counted_actions.get(action)
        done = (counted.satisfies if counted else action) in state.completed_actions
        mark = "x" if done else " "
        content.append(f"  [{mark}] {i}. {action}")
        if counted:
            content.append(f"  {state.action_counters.get(action, 0)}/{counted.threshold}")
        content.append("\n")
    if state.compression_rate:
        content.append(f"\nRate: {state.compression_rate:.0f}/min", style=STYLES["drill_warning"])

    return Panel(
        content,
        title=f"[bold]Practice: {step.name}[/bold]",
        subtitle="q = review quiz, r = reset, x = exit",
        border_style=Style(color=DRILL_THEME["primary"]),
        padding=(1, 2),
    )


def result_panel(result: SessionResult) -> Panel:
    """Final breakdown: per-step table plus practical/knowledge totals."""
    table = Table(box=box.SIMPLE)
    table.add_column("Step")
    table.add_column("Time", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Quiz", justify="right")
    for r in result.step_results:
        table.add_row(r.step_id, f"{r.time_spent_seconds}s", str(r.score), f"+{r.quiz_bonus}")
    if result.incomplete_step is not None:
        inc = result.incomplete_step
        table.add_row(f"{inc.step_id} (incomplete)", f"{inc.time_spent_seconds}s", "0", "+0", style="dim")

    summary = Text()
    summary.append(f"\nPractical score: {result.practice_score}\n")
    summary.append(f"Knowledge bonus: {result.knowledge_bonus}\n")
    summary.append(f"Total: {result.total}  ({result.label})", style=STYLES["drill_success"])

    title = "Time Expired" if result.time_expired else "Training Complete"
    border = DRILL_THEME["error"] if result.time_expired else DRILL_THEME["success"]
    return Panel(
        Group(table, summary),
        title=f"[bold]{title}[/bold]",
        border_style=Style(color=border),
        padding=(1, 2),
    )


def describe_event(event: SessionEvent) -> Text | None:
    """One-line narration of a session event; None for events not worth printing."""
    data = event.data
    if event.type == SessionEventType.QUIZ_PRESENTED:
        return Text(f"  ? {data['question'].prompt_text}", style=STYLES["drill_secondary"])
    if event.type == SessionEventType.QUIZ_ANSWERED:
        outcome: AnswerOutcome = data["outcome"]
        if outcome.correct:
            return Text("    correct", style=STYLES["drill_success"])
        label = "    timed out" if outcome.timed_out else "    incorrect"
        return Text(label, style=STYLES["drill_error"])
    if event.type == SessionEventType.PHASE_CHANGED:
        return Text(f"{PHASE_LABELS[data['phase']]} - step {data['step_index'] + 1}", style="bold")
    if event.type == SessionEventType.STEP_COMPLETED:
        r = data["result"]
        return Text(
            f"  Step {r.step_id} done in {r.time_spent_seconds}s: {r.score} pts (+{r.quiz_bonus})",
            style=STYLES["drill_success"],
        )
    if event.type == SessionEventType.SESSION_FINISHED:
        return Text("Session finished", style=STYLES["drill_primary"])
    return None
