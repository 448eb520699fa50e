"""Git utilities for cactus."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pygit2 import Repository, discover_repository

logger = logging.getLogger(__name__)


class GitError(Exception):
	"""Custom exception for Git-related errors."""


def run_git_command(command: list[str], cwd: Path | None = None) -> str:
	"""
	Run a Git command and return its output.

	Args:
	    command: Git command to run
	    cwd: Working directory (optional)

	Returns:
	    Command output as string

	Raises:
	    GitError: If the command fails

	"""
	logger.debug("Running %s in %s", " ".join(command), cwd or Path.cwd())
	try:
		# A list of arguments without shell=True; nothing is interpreted by a shell
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			capture_output=True,
			text=True,
			check=True,
		)
	except subprocess.CalledProcessError as e:
		error_msg = f"Git command failed: {' '.join(command)}\nError: {e.stderr}"
		raise GitError(error_msg) from e
	except OSError as e:
		error_msg = f"Could not run {' '.join(command)}: {e}"
		raise GitError(error_msg) from e
	else:
		return result.stdout


def find_working_tree(path: Path) -> Path | None:
	"""
	Find the root of the working tree enclosing a path.

	Args:
	    path: File or directory to start searching from

	Returns:
	    The working tree root, or None if the path is not inside one

	"""
	start = path if path.is_dir() else path.parent
	git_dir = discover_repository(str(start))
	if git_dir is None:
		return None
	workdir = Repository(git_dir).workdir
	if workdir is None:
		# Bare repository
		return None
	return Path(workdir).resolve()
