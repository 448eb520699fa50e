"""
Logging and console output for cactus.

All records go through one rich console. A run over many checkouts logs
each checkout by its logging name, so paths and timestamps are only shown
in verbose mode. When a log file is requested it receives every record.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console()

FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def _file_handler(path: Path) -> logging.Handler:
	path.parent.mkdir(parents=True, exist_ok=True)
	handler = logging.FileHandler(path, mode="a", encoding="utf-8")
	handler.setLevel(logging.DEBUG)
	handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
	return handler


def setup_logging(is_verbose: bool = False, log_file_path: Path | str | None = None) -> None:
	"""
	Route cactus logging to the console and, optionally, a file.

	Calling this again replaces the handlers installed by an earlier call.

	Args:
	    is_verbose: Show DEBUG records with their time and source location
	    log_file_path: File that receives all records at DEBUG level

	"""
	console_level = logging.DEBUG if is_verbose else logging.INFO
	root = logging.getLogger()
	root.setLevel(logging.DEBUG if log_file_path else console_level)
	for handler in list(root.handlers):
		root.removeHandler(handler)

	root.addHandler(
		RichHandler(
			level=console_level,
			console=console,
			rich_tracebacks=True,
			show_time=is_verbose,
			show_path=is_verbose,
		)
	)

	if log_file_path is None:
		return
	try:
		root.addHandler(_file_handler(Path(log_file_path)))
	except OSError as e:
		# Console logging still works, so carry on without the file
		root.warning("Cannot write log file %s: %s", log_file_path, e)
	else:
		root.debug("Writing log to %s", log_file_path)


def print_summary(title: str, message: str, color: str) -> None:
	"""Print a message between two horizontal rules, the first one titled."""
	console.print()
	console.print(Rule(Text(title, style=f"bold {color}"), style=color))
	console.print(f"\n{message}\n", markup=False)
	console.print(Rule(style=color))
	console.print()
