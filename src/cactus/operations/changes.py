"""
Detect and commit the changes an external action leaves behind.

A generator that writes into checkouts (documentation, diagrams) dirties
some of them. Only checkouts that were clean before the action ran are
reported, so that unrelated work in progress is never committed.

"""

from __future__ import annotations

import getpass
import logging
import os
import platform
import socket
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from cactus.git.utils import GitError

if TYPE_CHECKING:
	from collections.abc import Callable, Iterable

	from cactus.git.checkout import GitCheckout
	from cactus.maven.pom import Pom
	from cactus.maven.tree import ProjectTree

logger = logging.getLogger(__name__)


def collect_modified_checkouts(tree: ProjectTree) -> set[GitCheckout]:
	"""
	Return every checkout in the tree with local modifications.

	The root, the checkouts without Maven projects and the Maven checkouts
	are queried separately and combined, after dropping all cached state.

	"""
	tree.invalidate_cache()
	modified: set[GitCheckout] = set()
	if tree.is_dirty(tree.root):
		modified.add(tree.root)
	modified.update(checkout for checkout in tree.non_maven_checkouts() if checkout.is_dirty())
	modified.update(checkout for checkout in tree.all_checkouts() if checkout.is_dirty())
	return modified


def detect_incidental_changes(tree: ProjectTree | None, action: Callable[[], object]) -> set[GitCheckout]:
	"""
	Run an action and report the checkouts it made dirty.

	Args:
	    tree: The tree to watch; without one the action is just run
	    action: Runs exactly once; any exception it raises propagates

	Returns:
	    Checkouts dirty after the action that were clean before it

	"""
	if tree is None:
		action()
		return set()
	before = collect_modified_checkouts(tree)
	action()
	after = collect_modified_checkouts(tree)
	return after - before


def _user_name() -> str:
	try:
		return getpass.getuser()
	except (KeyError, OSError):
		# No login name and no passwd entry, as in some containers
		return "unknown"


def commit_message(project: Pom, checkouts: Iterable[GitCheckout], now: datetime | None = None) -> str:
	"""
	Build the message for commits of generated changes.

	Args:
	    project: The project whose build produced the changes
	    checkouts: The modified checkouts, itemized in the message
	    now: Timestamp to record (defaults to the current time)

	Returns:
	    The commit message

	"""
	when = (now or datetime.now(UTC)).isoformat()
	host = os.environ.get("HOST") or socket.gethostname()
	lines = [
		f"Generated commit {project.coordinates}",
		"",
		f"User:\t{_user_name()}",
		f"Home:\t{Path.home()}",
		f"Python:\t{platform.python_version()}",
		f"Host:\t{host}",
		f"When:\t{when}",
		"",
		"Modified checkouts:",
		"",
	]
	lines.extend(f"  * {checkout.name} ({checkout.root})" for checkout in sorted(checkouts, key=lambda c: c.root))
	return "\n".join(lines) + "\n"


def _add_and_commit(checkout: GitCheckout, message: str) -> bool:
	try:
		checkout.add_all()
	except GitError as e:
		logger.error("Add all failed in %s: %s", checkout.logging_name, e)  # noqa: TRY400
		return False
	try:
		checkout.commit(message)
	except GitError as e:
		logger.error("Commit failed in %s: %s", checkout.logging_name, e)  # noqa: TRY400
		return False
	return True


def commit_incidental_changes(
	project_checkout: GitCheckout, modified: Iterable[GitCheckout], message: str
) -> list[GitCheckout]:
	"""
	Commit generated changes, children before their parents.

	After the modified checkouts are committed, the submodule root is
	committed too if it is dirty, recording the new child commits.

	Args:
	    project_checkout: Checkout of the invoking project
	    modified: Checkouts to commit
	    message: Commit message

	Returns:
	    The checkouts committed successfully, in commit order

	"""
	committed = []
	ordered = sorted(modified, key=lambda checkout: (-checkout.depth, str(checkout.root)))
	for checkout in ordered:
		logger.info("Commit generated changes in %s", checkout.logging_name)
		if _add_and_commit(checkout, message):
			committed.append(checkout)

	root = project_checkout.submodule_root()
	if root is not None:
		root.invalidate_cache()
		if root.is_dirty():
			logger.info("Commit updated submodule pointers in %s", root.logging_name)
			if _add_and_commit(root, message):
				committed.append(root)
	return committed
