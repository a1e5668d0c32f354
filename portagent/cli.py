"""CLI for portagent - iterative PS2-to-PSP porting agent."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from portagent import __version__
from portagent.config import (
    API_ENDPOINT,
    DEFAULT_MODEL,
    DEFAULT_REPORT_PATH,
    MAX_ITERATIONS,
    AgentConfig,
)

USAGE = "Usage: portagent <PS2_GAME_FOLDER> <API_KEY>"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.command()
@click.version_option(version=__version__, prog_name="portagent")
@click.argument("ps2_folder", required=False)
@click.argument("api_key", required=False)
@click.option(
    "--max-iterations", "-n",
    default=MAX_ITERATIONS,
    show_default=True,
    type=click.IntRange(min=1),
    help="Iteration ceiling for the agent loop",
)
@click.option("--model", "-m", default=DEFAULT_MODEL, show_default=True, help="Model identifier")
@click.option("--endpoint", default=API_ENDPOINT, show_default=True, help="Chat-completion URL")
@click.option(
    "--base-dir", "-d",
    default=".",
    type=click.Path(file_okay=False, dir_okay=True, resolve_path=True),
    help="Directory receiving work/, logs/ and output_psp/ (defaults to current directory)",
)
@click.option(
    "--report-path",
    default=str(DEFAULT_REPORT_PATH),
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Where the final report is written",
)
@click.option("--verbose", "-v", is_flag=True, help="Log each iteration and action")
def main(
    ps2_folder: str | None,
    api_key: str | None,
    max_iterations: int,
    model: str,
    endpoint: str,
    base_dir: str,
    report_path: str,
    verbose: bool,
) -> None:
    """Port a PS2 game folder to PSP with a model-driven agent loop.

    Each iteration asks the model for a JSON plan and executes its actions:
    writing scripts under work/, running shell commands (logged under logs/)
    and recording notes.

    \b
    Example:
        portagent ./games/mygame $PERPLEXITY_API_KEY
        portagent ./games/mygame $PERPLEXITY_API_KEY --max-iterations 5 -v
    """
    if not ps2_folder or not api_key:
        click.echo(USAGE, err=True)
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    from portagent.agent import run

    config = AgentConfig(
        max_iterations=max_iterations,
        model=model,
        endpoint=endpoint,
        base_dir=Path(base_dir),
        report_path=Path(report_path).expanduser(),
    )

    exit_code = run(ps2_folder, api_key, config)
    if exit_code != 0:
        click.echo(f"Fatal error. Report written to: {config.fatal_report_path}", err=True)
        sys.exit(exit_code)

    click.echo("Done.")


if __name__ == "__main__":
    main()
