"""Command-line interface package for cactus."""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from cactus import __version__
from cactus.utils.log_setup import setup_logging

from .checkouts_cmd import register_command as register_checkouts_command
from .codeflowers_cmd import register_command as register_codeflowers_command
from .feature_cmd import register_command as register_feature_command
from .filter_cmd import register_command as register_filter_command
from .lexakai_cmd import register_command as register_lexakai_command
from .merge_cmd import register_command as register_merge_command
from .metadata_cmd import register_command as register_metadata_command

logger = logging.getLogger(__name__)

app = typer.Typer(
	help=f"cactus - build tooling for trees of git submodules holding Maven projects\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)

# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"cactus version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/cactus_{datetime}.log.",
		),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["is_output_log"] = is_output_log

	log_file_path_to_use: Path | None = None
	if is_output_log:
		log_dir = Path("logs")
		log_dir.mkdir(parents=True, exist_ok=True)
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path_to_use = log_dir / f"cactus_{current_time}.log"

	setup_logging(is_verbose=is_verbose, log_file_path=log_file_path_to_use)


# --- Register commands ---

register_checkouts_command(app)
register_merge_command(app)
register_feature_command(app)
register_codeflowers_command(app)
register_lexakai_command(app)
register_filter_command(app)
register_metadata_command(app)


# --- Main Entry Point ---
def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
