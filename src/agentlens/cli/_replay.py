"""
CLI command: ``agentlens replay <transcript>``.

Replays a captured terminal transcript (raw PTY bytes, escape sequences
included) through a fresh interpreter in fixed-size chunks and reports
every status / message transition.  Useful for tuning patterns against
real agent output without running the agent.
"""

from __future__ import annotations

import codecs
import json
import sys
from dataclasses import asdict, dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentlens.core.config import AgentLensConfig, load_config, load_config_or_default
from agentlens.core.constants import ExitCode
from agentlens.core.exceptions import ConfigError
from agentlens.core.interpreter import OutputInterpreter, StatusReport


@dataclass
class Transition:
    offset: int  # byte offset of the end of the chunk that caused it
    status: str | None
    message: str | None


def replay_transcript(
    data: bytes,
    chunk_size: int,
    config: AgentLensConfig,
    idle_check: bool = False,
) -> tuple[OutputInterpreter, list[Transition]]:
    """Feed *data* to a new interpreter in *chunk_size* byte reads."""
    interpreter = OutputInterpreter(session_id="replay", config=config.interpreter)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    transitions: list[Transition] = []
    shown_status: str | None = None
    shown_message: str | None = None

    def _record(offset: int, report: StatusReport) -> None:
        nonlocal shown_status, shown_message
        status = report.status.value if report.status else None
        new_status = status is not None and status != shown_status
        new_message = report.message is not None and report.message != shown_message
        if not (new_status or new_message):
            return
        if new_status:
            shown_status = status
        if new_message:
            shown_message = report.message
        transitions.append(
            Transition(
                offset=offset,
                status=status if new_status else None,
                message=report.message if new_message else None,
            )
        )

    for start in range(0, len(data), chunk_size):
        chunk = data[start : start + chunk_size]
        text = decoder.decode(chunk)
        if text:
            _record(start + len(chunk), interpreter.ingest(text))
    tail = decoder.decode(b"", final=True)
    if tail:
        _record(len(data), interpreter.ingest(tail))

    if idle_check and (idle := interpreter.check_idle()) is not None:
        _record(len(data), idle)

    return interpreter, transitions


@click.command("replay")
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--chunk-size",
    default=64,
    show_default=True,
    type=click.IntRange(min=1),
    help="Bytes per simulated PTY read.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (defaults to the platform config, or built-in defaults).",
)
@click.option(
    "--idle-check",
    is_flag=True,
    default=False,
    help="Simulate a quiet period after the last chunk (watchdog check).",
)
@click.option("--show-buffer", is_flag=True, default=False, help="Print the final raw buffer.")
@click.option("--json", "output_json", is_flag=True, default=False, help="Output as JSON lines.")
def replay_cmd(
    transcript: Path,
    chunk_size: int,
    config_path: Path | None,
    idle_check: bool,
    show_buffer: bool,
    output_json: bool,
) -> None:
    """
    Replay a captured terminal transcript through the output interpreter.

    Example::

        agentlens replay session.log
        agentlens replay session.log --chunk-size 7 --idle-check --json
    """
    console = Console()
    err_console = Console(stderr=True)

    try:
        config = load_config(config_path) if config_path else load_config_or_default()
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        data = transcript.read_bytes()
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] cannot read {transcript}: {exc}")
        sys.exit(ExitCode.INPUT_ERROR)

    interpreter, transitions = replay_transcript(data, chunk_size, config, idle_check)
    last_status = interpreter.last_status.value if interpreter.last_status else None

    if output_json:
        for t in transitions:
            click.echo(json.dumps(asdict(t), ensure_ascii=False))
        click.echo(
            json.dumps(
                {
                    "detected": interpreter.has_detected(),
                    "status": last_status,
                    "message": interpreter.last_message,
                },
                ensure_ascii=False,
            )
        )
        return

    table = Table(title=f"Replay of {transcript.name}", show_lines=False)
    table.add_column("Offset", justify="right", style="dim")
    table.add_column("Status")
    table.add_column("Message", overflow="fold")
    for t in transitions:
        table.add_row(str(t.offset), _styled(t.status), escape(t.message or ""))
    console.print(table)

    console.print(
        f"Agent detected: [bold]{'yes' if interpreter.has_detected() else 'no'}[/bold]  "
        f"Last status: {_styled(last_status) or '-'}  "
        f"Message: {escape(interpreter.last_message or '-')}",
        highlight=False,
    )
    if show_buffer:
        click.echo(interpreter.get_buffer())


def _styled(status: str | None) -> str:
    if status == "working":
        return "[yellow]working[/yellow]"
    if status == "idle":
        return "[green]idle[/green]"
    return ""
