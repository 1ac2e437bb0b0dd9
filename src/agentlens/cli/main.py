"""
agentlens CLI entry point.

Commands:
  agentlens replay <transcript>  — replay a captured terminal transcript
  agentlens config init          — write a default config file
  agentlens config show          — print the effective configuration
  agentlens version              — show version
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from agentlens import __version__
from agentlens.cli._replay import replay_cmd

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="agentlens %(version)s")
@click.option(
    "--log-level", default=None, hidden=True, help="Override the configured log level."
)
@click.option("--log-json", is_flag=True, default=False, hidden=True, help="Emit JSON log lines.")
def cli(log_level: str | None, log_json: bool) -> None:
    """agentlens — at-a-glance activity status for AI coding agents in terminals."""
    from agentlens.core.config import LoggingConfig, load_config_or_default
    from agentlens.core.exceptions import ConfigError
    from agentlens.core.logging import configure_logging

    try:
        settings = load_config_or_default().logging
    except ConfigError:
        # Commands that need the config report the error themselves
        settings = LoggingConfig()
    configure_logging(settings, level=log_level, json_output=True if log_json else None)


cli.add_command(replay_cmd)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group("config")
def config_group() -> None:
    """Inspect or create the agentlens configuration file."""


@config_group.command("init")
@click.option(
    "--path",
    "path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the config (default: platform config dir).",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file.")
def config_init(path: Path | None, force: bool) -> None:
    """Write a config file populated with the default tuning values."""
    from agentlens.core.config import AgentLensConfig, _config_file_path, save_config
    from agentlens.core.constants import ExitCode
    from agentlens.core.exceptions import ConfigError

    target = path or _config_file_path()
    if target.exists() and not force:
        err_console.print(f"[red]Error:[/red] {target} already exists (use --force).")
        raise SystemExit(ExitCode.CONFIG_ERROR)

    try:
        written = save_config(AgentLensConfig().model_dump(), target)
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc
    console.print(f"[green]Wrote[/green] {written}", highlight=False)


@config_group.command("show")
@click.option(
    "--path",
    "path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file to read (default: platform config, or built-in defaults).",
)
def config_show(path: Path | None) -> None:
    """Print the effective configuration as JSON."""
    from agentlens.core.config import load_config, load_config_or_default
    from agentlens.core.constants import ExitCode
    from agentlens.core.exceptions import ConfigError

    try:
        cfg = load_config(path) if path else load_config_or_default()
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc
    click.echo(cfg.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
def version() -> None:
    """Show the agentlens version."""
    console.print(f"agentlens {__version__}", highlight=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
