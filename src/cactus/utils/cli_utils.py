"""Console helpers shared by the cactus commands."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING, NoReturn

import typer

from cactus.utils.log_setup import console, print_summary

if TYPE_CHECKING:
	from collections.abc import Iterator

logger = logging.getLogger(__name__)

# Conventional exit status of a process stopped by SIGINT
INTERRUPTED_EXIT_CODE = 130


@contextlib.contextmanager
def loading_spinner(message: str) -> Iterator[None]:
	"""Show a status spinner for the duration of the block, except under pytest or CI."""
	if os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI"):
		yield
	else:
		with console.status(message):
			yield


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Print an error summary.

	Args:
	    message: What went wrong, in the user's terms
	    exception: Cause, logged with its traceback and appended to the
	        message unless its text is the message itself

	"""
	if exception is not None:
		logger.debug("Command failed", exc_info=exception)
		cause = str(exception)
		if cause and cause != message:
			message = f"{message}\n\nCause: {cause}"
	print_summary("Error Summary", message, "red")


def show_warning(message: str) -> None:
	"""Print a warning summary, for failures that did not stop the command."""
	print_summary("Warning Summary", message, "yellow")


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> NoReturn:
	"""Print an error summary and end the command with the given exit code."""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


def handle_keyboard_interrupt() -> NoReturn:
	"""End the command after Ctrl-C without a traceback."""
	console.print("\n[yellow]Interrupted, checkouts may be partially updated.[/yellow]")
	raise typer.Exit(INTERRUPTED_EXIT_CODE)
