"""
A git working copy and the operations cactus performs on it.

Reads (dirty state, branches, current branch) go through pygit2 and are
cached on the checkout. The cache is only dropped by
``GitCheckout.invalidate_cache``; every mutating method below calls it
after running, and anything else that changes a checkout behind its back
(an external tool, a merge in another process) must call it before the
next read.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pygit2 import GitError as Pygit2GitError
from pygit2 import Repository

from cactus.git.utils import GitError, find_working_tree, run_git_command

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"


@dataclass(frozen=True)
class Branch:
	"""A local branch, or a remote-tracking branch when ``remote`` is set."""

	name: str
	remote: str | None = None

	@property
	def is_remote(self) -> bool:
		"""Whether this is a remote-tracking reference only."""
		return self.remote is not None

	@property
	def tracking_name(self) -> str:
		"""The name used to track this branch when materializing it locally."""
		if self.remote is None:
			return self.name
		return f"{self.remote}/{self.name}"

	def __str__(self) -> str:
		"""Return the tracking name."""
		return self.tracking_name


@dataclass(frozen=True)
class Branches:
	"""Snapshot of the branches of one checkout."""

	current: Branch | None = None
	local: tuple[Branch, ...] = field(default_factory=tuple)
	remote: tuple[Branch, ...] = field(default_factory=tuple)

	def current_branch(self) -> Branch | None:
		"""Return the checked out branch, or None when HEAD is detached or unborn."""
		return self.current

	def find(self, name: str, local: bool) -> Branch | None:
		"""
		Find a branch by name.

		Args:
		    name: Branch name without any remote prefix
		    local: Search local branches if True, remote-tracking branches otherwise

		Returns:
		    The branch, or None if absent

		"""
		candidates = self.local if local else self.remote
		for branch in candidates:
			if branch.name == name:
				return branch
		return None


class GitCheckout:
	"""One git working copy, identified by its root directory."""

	def __init__(self, root: Path, name: str | None = None) -> None:
		"""
		Initialize the checkout.

		Args:
		    root: Root directory of the working tree
		    name: Logical name (defaults to the directory name)

		"""
		self.root = Path(root).resolve()
		self.name = name or self.root.name
		self._dirty: bool | None = None
		self._branches: Branches | None = None

	@classmethod
	def repository(cls, path: Path) -> GitCheckout | None:
		"""
		Find the checkout enclosing a file or directory.

		Args:
		    path: Any path inside the working tree

		Returns:
		    The checkout, or None if the path is not inside a git working tree

		"""
		root = find_working_tree(Path(path).resolve())
		return None if root is None else cls(root)

	@property
	def depth(self) -> int:
		"""Nesting depth of the checkout root in the filesystem."""
		return len(self.root.parts)

	@property
	def logging_name(self) -> str:
		"""Short name used in log messages."""
		return self.name

	def invalidate_cache(self) -> None:
		"""Forget the cached dirty state and branch list."""
		self._dirty = None
		self._branches = None

	def _repo(self) -> Repository:
		try:
			return Repository(str(self.root))
		except Pygit2GitError as e:
			msg = f"Could not open repository at {self.root}: {e}"
			raise GitError(msg) from e

	def is_dirty(self) -> bool:
		"""
		Whether the working tree has uncommitted changes.

		Ignored files do not count; untracked files and modified submodule
		pointers do.

		Returns:
		    True if anything would show up in ``git status``

		"""
		if self._dirty is None:
			self._dirty = bool(self._repo().status())
		return self._dirty

	def branches(self) -> Branches:
		"""
		List the branches of this checkout.

		Returns:
		    A cached snapshot of local and remote-tracking branches

		"""
		if self._branches is None:
			self._branches = self._read_branches()
		return self._branches

	def _read_branches(self) -> Branches:
		repo = self._repo()
		local = tuple(Branch(name) for name in sorted(repo.branches.local))
		remote = []
		for tracking in sorted(repo.branches.remote):
			remote_name, _, name = tracking.partition("/")
			if not name or name == "HEAD":
				continue
			remote.append(Branch(name, remote_name))
		current = None
		if not repo.head_is_unborn and not repo.head_is_detached:
			current = Branch(repo.head.shorthand)
		return Branches(current=current, local=local, remote=tuple(remote))

	def current_branch(self) -> Branch | None:
		"""Return the checked out branch, or None when detached."""
		return self.branches().current_branch()

	def submodules(self) -> list[GitCheckout]:
		"""
		List the submodule checkouts directly nested in this one.

		Submodules which are declared but not checked out are omitted.

		Returns:
		    Nested checkouts, ordered by path

		"""
		if not (self.root / ".gitmodules").is_file():
			return []
		try:
			output = run_git_command(
				["git", "config", "--file", ".gitmodules", "--get-regexp", r"^submodule\..*\.path$"],
				self.root,
			)
		except GitError:
			logger.debug("No submodule paths declared in %s", self.root)
			return []
		result = []
		for line in output.splitlines():
			_, _, relative = line.partition(" ")
			sub_root = self.root / relative.strip()
			if (sub_root / ".git").exists():
				result.append(GitCheckout(sub_root))
		return sorted(result, key=lambda checkout: checkout.root)

	def superproject(self) -> GitCheckout | None:
		"""Return the checkout this one is a submodule of, if any."""
		output = run_git_command(["git", "rev-parse", "--show-superproject-working-tree"], self.root).strip()
		return GitCheckout(Path(output)) if output else None

	def submodule_root(self) -> GitCheckout | None:
		"""
		Find the outermost checkout containing this one as a submodule.

		A top-level checkout which declares submodules is its own
		submodule root.

		Returns:
		    The submodule root, or None for a standalone checkout

		"""
		current: GitCheckout = self
		parent = current.superproject()
		while parent is not None:
			current = parent
			parent = current.superproject()
		if current is not self:
			return current
		if (self.root / ".gitmodules").is_file():
			return self
		return None

	def _run(self, *args: str) -> str:
		try:
			return run_git_command(["git", *args], self.root)
		finally:
			self.invalidate_cache()

	def switch_to_branch(self, name: str) -> None:
		"""Check out an existing local branch."""
		self._run("checkout", name)

	def create_and_switch_to_branch(self, name: str, tracking_name: str | None = None) -> None:
		"""
		Create a local branch and check it out.

		Args:
		    name: New branch name
		    tracking_name: Remote-tracking branch to start from and track

		"""
		if tracking_name:
			self._run("checkout", "-b", name, "--track", tracking_name)
		else:
			self._run("checkout", "-b", name)

	def merge(self, branch_name: str) -> None:
		"""Merge a branch into the current branch."""
		self._run("merge", "--no-edit", branch_name)

	def tag(self, name: str, force: bool = False) -> None:
		"""Tag HEAD, replacing an existing tag of the same name if forced."""
		if force:
			self._run("tag", "-f", name)
		else:
			self._run("tag", name)

	def delete_branch(self, name: str, fallback_name: str, force: bool = False) -> None:
		"""
		Delete a local branch.

		Args:
		    name: Branch to delete
		    fallback_name: Branch to switch to first if ``name`` is checked out
		    force: Delete even if the branch is not fully merged

		"""
		current = self.current_branch()
		if current is not None and current.name == name:
			self.switch_to_branch(fallback_name)
		self._run("branch", "-D" if force else "-d", name)

	def push(self) -> None:
		"""Push the current branch to its upstream."""
		self._run("push")

	def push_creating_branch(self, remote: str = DEFAULT_REMOTE) -> None:
		"""Push the current branch, creating it on the remote and tracking it."""
		current = self.current_branch()
		if current is None:
			msg = f"Cannot push from a detached HEAD in {self.root}"
			raise GitError(msg)
		self._run("push", "--set-upstream", remote, current.name)

	def add_all(self) -> None:
		"""Stage every change in the working tree."""
		self._run("add", "-A")

	def commit(self, message: str) -> None:
		"""Commit staged changes."""
		self._run("commit", "-m", message)

	def __eq__(self, other: object) -> bool:
		"""Checkouts are equal when their roots are."""
		if not isinstance(other, GitCheckout):
			return NotImplemented
		return self.root == other.root

	def __hash__(self) -> int:
		"""Hash on the root directory."""
		return hash(self.root)

	def __repr__(self) -> str:
		"""Return a debugging representation."""
		return f"GitCheckout({str(self.root)!r})"

	def __str__(self) -> str:
		"""Return the name and location."""
		return f"{self.name} ({self.root})"
