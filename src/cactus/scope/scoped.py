"""
Shared setup for commands that operate on a scope of checkouts.

A scoped command is invoked against one Maven project. It validates its
scope parameters, locates the project's checkout and the tree of
checkouts around it, and resolves the scope to the checkouts it will
operate on.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from cactus.errors import ConfigurationError, DirtyCheckoutsError
from cactus.git.checkout import GitCheckout
from cactus.maven.pom import Pom
from cactus.maven.tree import ProjectTree
from cactus.scope.family import ProjectFamily
from cactus.scope.scope import Scope, resolve
from cactus.shared import SESSION, SharedData, SharedDataKey

if TYPE_CHECKING:
	from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ScopeParameters:
	"""
	Parameters common to every scoped command.

	Attributes:
	    scope: Scope name, see ``Scope.find``
	    include_root: Also operate on the submodule root, so that a command which
	        commits in child checkouts can record the new child commits in it
	    family: Family to use instead of the one derived from the project's group id
	    pretend: Log what would be done without changing anything

	"""

	scope: str = Scope.FAMILY.value
	include_root: bool = True
	family: str | None = None
	pretend: bool = False


class ScopedCheckouts:
	"""Resolves the checkouts a scoped command operates on."""

	def __init__(
		self,
		project_dir: Path,
		parameters: ScopeParameters,
		*,
		forbids_local_modifications: bool = False,
		shared: SharedData = SESSION,
	) -> None:
		"""
		Validate parameters and locate the invoking project.

		Args:
		    project_dir: Directory of the project the command is invoked against
		    parameters: Scope parameters
		    forbids_local_modifications: Fail if any resolved checkout is dirty
		    shared: Store in which project trees are shared

		Raises:
		    ConfigurationError: If the scope is unknown, or the directory is not a
		        Maven project inside a git checkout

		"""
		self.parameters = parameters
		self.scope = Scope.find(parameters.scope)
		self.forbids_local_modifications = forbids_local_modifications
		self._shared = shared

		project_dir = Path(project_dir).resolve()
		checkout = GitCheckout.repository(project_dir)
		if checkout is None:
			msg = f"{project_dir} does not seem to be part of a git checkout."
			raise ConfigurationError(msg)
		self.checkout = checkout
		self.project = Pom.from_file(project_dir)

		if not self.scope.applies_family and self.family_override:
			logger.warning(
				"Useless assignment of family to '%s' when using scope %s which will not read it. "
				"It is useful only with %s and %s",
				self.family_override,
				self.scope,
				Scope.FAMILY,
				Scope.FAMILY_OR_CHILD_FAMILY,
			)

	@property
	def family_override(self) -> str | None:
		"""The explicitly requested family, if any."""
		family = (self.parameters.family or "").strip()
		return family or None

	@property
	def project_family(self) -> ProjectFamily:
		"""The family override, or the family of the invoking project."""
		if self.family_override:
			return ProjectFamily.named(self.family_override)
		return ProjectFamily.from_group_id(self.project.group_id)

	@property
	def pretend(self) -> bool:
		"""Whether mutations should only be logged."""
		return self.parameters.pretend

	@property
	def include_root(self) -> bool:
		"""Whether the submodule root is always operated on."""
		return self.parameters.include_root

	def project_tree(self) -> ProjectTree:
		"""Return the tree around the project, shared with other commands in this process."""
		root = self.checkout.submodule_root() or self.checkout
		key = SharedDataKey(ProjectTree, f"project-tree:{root.root}")
		return self._shared.compute_if_absent(key, lambda: ProjectTree(root))

	def with_project_tree(self, callback: Callable[[ProjectTree, list[GitCheckout]], T]) -> T:
		"""
		Resolve the scope and pass the tree and checkouts to a callback.

		Args:
		    callback: Receives the project tree and the resolved checkouts

		Returns:
		    Whatever the callback returns

		"""
		tree = self.project_tree()
		return callback(tree, self.resolve(tree))

	def resolve(self, tree: ProjectTree) -> list[GitCheckout]:
		"""
		Resolve the scope against a tree.

		Returns:
		    The checkouts to operate on; empty (with a warning) if nothing matched

		Raises:
		    DirtyCheckoutsError: If local modifications are forbidden and some
		        resolved checkout has them

		"""
		checkouts = resolve(
			self.scope,
			self.checkout,
			tree,
			self.project_family,
			self.project.group_id,
			self.include_root,
		)
		if logger.isEnabledFor(logging.DEBUG):
			logger.debug("Operate on the following repositories for %s:", self.scope)
			for checkout in checkouts:
				logger.debug("  * %s", checkout)

		if not checkouts:
			logger.warning("No checkouts matched scope %s for family %s", self.scope, self.project_family)
			return checkouts

		if self.forbids_local_modifications:
			modified = [checkout for checkout in checkouts if checkout.is_dirty()]
			if modified:
				raise DirtyCheckoutsError(modified)
		return checkouts
