"""CLI runner for the dialog simulation engine."""

from typing import Any, Callable, Dict, Optional

from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from dialog_simulation_engine.cli.configuration import load_theme
from dialog_simulation_engine.core.constants import USAGE_MSG, WELCOME_MSG
from dialog_simulation_engine.core.run_manager import DialogRun


def summary_table(summary: Dict[str, Any]) -> Table:
    """Render a summary dict as a metrics table."""
    table = Table(title=f"Results: {summary.get('tree_id', '')}", show_lines=False)
    table.add_column("Metric", style="bold")
    table.add_column("Total", justify="right")
    for metric, total in summary.get("metric_totals", {}).items():
        table.add_row(metric, str(total))
    table.add_section()
    table.add_row("Overall", f"{summary.get('overall_score', 0.0):.2f}")
    table.add_row("Rating", str(summary.get("rating", "")))
    table.add_row(
        "Correct choices",
        f"{summary.get('correct_choices', 0)}/{summary.get('steps', 0)}",
    )
    return table


def _render_step(
    run: DialogRun,
    console: Console,
    theme: dict[str, str],
    user_input: str,
) -> None:
    """Run one step and render all resulting events."""
    for event in run.step(user_input):
        etype = event.get("type")
        content = event.get("content")

        if etype == "npc":
            console.print()
            mood = event.get("emotional_state")
            label = f"{event.get('speaker')}" + (f" ({mood})" if mood else "")
            console.print(label, style=theme["speaker"])
            console.print(content, style=theme["npc"])

        elif etype == "narrator":
            console.print()
            console.print(content, style=theme["narrator"])

        elif etype == "options":
            console.print()
            for opt in content:
                console.print(f"  {opt['number']}. {opt['text']}", style=theme["option"])

        elif etype == "feedback":
            style = theme["feedback-good" if event.get("is_correct") else "feedback-bad"]
            console.print()
            console.print(content, style=style)

        elif etype == "summary":
            console.print()
            console.print(summary_table(content))

        elif etype in {"info", "warning", "error"}:
            console.print()
            console.print(content, style=theme[etype])


def run_cli(
    dialog: str,
    source: str,
    version: str = "latest",
    custom_theme_path: Optional[str] = None,
    input_fn: Optional[Callable[[], str]] = None,
    console: Optional[Console] = None,
) -> DialogRun:
    """Run the CLI interaction loop and return the finished run."""
    console = console or Console()
    theme = load_theme(custom_theme_path)
    read = input_fn or console.input

    try:
        with console.status("Loading dialog...", spinner="dots"):
            run = DialogRun.create(dialog=dialog, source=source, version=version)
    except Exception as e:
        console.print(f"Failed to load dialog with error: {e}", style=theme["error"])
        logger.exception(f"Failed to load dialog with error: {e}")
        raise

    console.print(Markdown(WELCOME_MSG))
    console.rule(run.tree.title, style=theme["intro"])
    if run.tree.description:
        console.print(run.tree.description.strip(), style=theme["info"])
    console.print(USAGE_MSG.strip(), style=theme["info"])

    # the dialog opens by showing the root node (empty input)
    _render_step(run=run, console=console, theme=theme, user_input="")

    while not run.exited:
        if run.session.is_complete:
            run.exit(reason="dialog complete")
            break
        console.print()
        console.print("Your response:", style=theme["user-prompt"], end=" ")
        try:
            user_input = read().strip()
        except (EOFError, KeyboardInterrupt):
            run.exit(reason="input closed")
            break

        _render_step(run=run, console=console, theme=theme, user_input=user_input)

    console.rule(f"Dialog Ended (reason: {run.exit_reason})", style=theme["outtro"])
    return run
