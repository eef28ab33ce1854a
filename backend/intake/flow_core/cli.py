from __future__ import annotations

import argparse
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from intake.core.logging import setup_logging
from intake.settings import get_settings

from .compiler import compile_flow
from .engine import IntakeFlowEngine
from .errors import FlowError, UnknownNodeError
from .loader import default_flow_path, load_flow_definition
from .state import SessionState, ViewState
from .validation import normalize_answer, validate_answer, wants_agent

console = Console()

HELP_TEXT = "Commands: :back  :restart  :agent  :quit"


def _show_question(engine: IntakeFlowEngine, state: SessionState) -> None:
    node = engine.current_node(state)
    progress = engine.progress(state)
    body = f"[bold]{escape(node.question)}[/bold]"
    if node.helper_text:
        body += f"\n[dim]{escape(node.helper_text)}[/dim]"
    if node.options:
        body += "\n[cyan]Options:[/cyan] " + ", ".join(escape(o) for o in node.options)
    previous = engine.previous_answer(state)
    if previous:
        body += f"\n[dim]Previous answer: {escape(previous)}[/dim]"
    console.print(
        Panel(
            body,
            title=f"{escape(node.section)}  {progress.position}/{progress.total}",
            border_style="cyan",
        )
    )


def _show_review(engine: IntakeFlowEngine, state: SessionState) -> None:
    table = Table(title="Review your information")
    table.add_column("#", justify="right")
    table.add_column("Id", style="dim")
    table.add_column("Question")
    table.add_column("Answer", style="green")
    for idx, record in enumerate(engine.review_items(state), start=1):
        table.add_row(str(idx), record.node_id, escape(record.question), escape(record.answer))
    console.print(table)


def _wizard_turn(engine: IntakeFlowEngine, state: SessionState, keywords: list[str]) -> SessionState | None:
    _show_question(engine, state)
    text = Prompt.ask("[bold cyan]Your answer[/bold cyan]", default="", show_default=False)
    command = text.strip().lower()
    if command == ":quit":
        return None
    if command == ":back":
        return engine.go_back(state)
    if command == ":restart":
        return engine.restart()
    if command == ":agent" or wants_agent(text, keywords):
        return engine.force_agent_exit(state)

    node = engine.current_node(state)
    ok, error = validate_answer(node, text)
    if not ok:
        console.print(f"[yellow]{escape(error or 'Invalid answer')}[/yellow]")
        return engine.record_unclear_answer(state)
    return engine.submit_answer(state, normalize_answer(node, text))


def _review_turn(engine: IntakeFlowEngine, state: SessionState) -> SessionState | None:
    _show_review(engine, state)
    text = Prompt.ask("[bold]Type 'submit', 'edit <id>', 'back' or 'quit'[/bold]").strip()
    if text == "quit":
        return None
    if text == "submit":
        return engine.submit_review(state)
    if text == "back":
        return engine.go_back(state)
    if text.startswith("edit "):
        return engine.edit_answer(state, text[len("edit ") :].strip())
    console.print("[yellow]Unrecognised command[/yellow]")
    return state


def run_session(engine: IntakeFlowEngine, keywords: list[str]) -> SessionState:
    state = engine.initial_state()
    console.print(f"[dim]{HELP_TEXT}[/dim]")
    while True:
        if state.view is ViewState.WIZARD:
            next_state = _wizard_turn(engine, state, keywords)
        elif state.view is ViewState.REVIEW:
            next_state = _review_turn(engine, state)
        elif state.view is ViewState.AGENT_EXIT:
            console.print(
                Panel(
                    "Based on your responses, a licensed representative will reach out to you.",
                    title="Let's connect you with an expert",
                    border_style="magenta",
                )
            )
            Prompt.ask("What is the best way and time to reach you?", default="", show_default=False)
            next_state = engine.finish_agent_exit(state)
        else:
            console.print("[green]You're all set! We have received your information.[/green]")
            return state

        if next_state is None:
            console.print("[yellow]Goodbye![/yellow]")
            return state
        state = next_state


def run_cli() -> None:
    parser = argparse.ArgumentParser(description="Run an intake flow JSON interactively")
    parser.add_argument(
        "json_path",
        nargs="?",
        type=Path,
        default=None,
        help="Path to flow JSON file (default: FLOW_PATH or the bundled life intake flow)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    args = parser.parse_args()

    load_dotenv()
    setup_logging(args.log_level)
    settings = get_settings()

    path = args.json_path or settings.flow_path or default_flow_path()
    try:
        graph = compile_flow(load_flow_definition(path))
    except FlowError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise SystemExit(1) from exc

    engine = IntakeFlowEngine(graph, max_unclear_answers=settings.max_unclear_answers)
    try:
        run_session(engine, settings.agent_keywords)
    except UnknownNodeError as exc:
        console.print(f"[red]{escape(str(exc))}; restart required[/red]")
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        console.print("\n[yellow]Goodbye![/yellow]")


if __name__ == "__main__":
    run_cli()
