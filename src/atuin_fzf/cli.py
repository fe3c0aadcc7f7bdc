"""CLI entry point using typer."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console

from atuin_fzf import __version__
from atuin_fzf.config import AppConfig, dump_config, load_config
from atuin_fzf.errors import AtuinFzfError
from atuin_fzf.services.pipeline import Pipeline
from atuin_fzf.services.preview import PreviewRenderer

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="atuin-fzf",
    help="Search atuin shell history interactively with fzf.",
    add_completion=False,
)
console = Console(stderr=True, highlight=False, soft_wrap=True)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: AppConfig) -> None:
    """Log to a file when one is configured, otherwise to stderr."""
    if config.logging.file:
        log_path = Path(config.logging.file).expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(str(log_path))
    else:
        handler = logging.StreamHandler()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )


def preview_console() -> Console:
    """Console for the fzf preview pane, which is not a TTY but renders ANSI."""
    columns = os.environ.get("FZF_PREVIEW_COLUMNS", "")
    return Console(
        force_terminal=True,
        color_system="256",
        highlight=False,
        soft_wrap=True,
        width=int(columns) if columns.isdigit() else None,
    )


def report_error(error: BaseException) -> None:
    console.print(str(error), style="red", markup=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"atuin-fzf v{__version__}")
        raise typer.Exit()


def run_preview(config: AppConfig, data: str) -> int:
    """Render the preview report for one fzf row; returns the exit status."""
    report = asyncio.run(PreviewRenderer(config).render(data))
    preview_console().print(report.text, end="")
    for failure in report.failures:
        report_error(failure)
    return 1 if report.failures else 0


def run_search(config: AppConfig, query: str) -> int:
    """Run the interactive picker; returns the exit status."""
    outcome = asyncio.run(Pipeline(config, query).run())
    if outcome.aborted:
        logger.debug("Selection aborted (fzf status %d)", outcome.exit_code)
        return outcome.exit_code
    return 0


@app.command()
def main(
    query: str = typer.Argument("", help="Initial fzf query"),
    preview: str = typer.Option(
        None,
        "--preview",
        help="Render the preview for one fzf row (used by fzf itself)",
    ),
    print_config: bool = typer.Option(False, "--print-config", help="Show the effective configuration"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """Pick a command from atuin history with fzf."""
    try:
        config = load_config()
        if print_config:
            typer.echo(dump_config(config), nl=False)
            return
        setup_logging(config)

        if preview is not None:
            if not preview:
                return
            status = run_preview(config, preview)
        else:
            status = run_search(config, query)
    except AtuinFzfError as e:
        report_error(e)
        raise typer.Exit(e.exit_code)
    except KeyboardInterrupt:
        raise typer.Exit(130)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        report_error(e)
        raise typer.Exit(1)

    if status:
        raise typer.Exit(status)


if __name__ == "__main__":
    app()
