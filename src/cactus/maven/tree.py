"""The tree of git checkouts beneath a submodule root, and the projects in each."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from cactus.errors import ConfigurationError
from cactus.git.checkout import Branches, GitCheckout
from cactus.maven.pom import POM_FILE, Pom
from cactus.scope.family import ProjectFamily

if TYPE_CHECKING:
	from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

# Directories never searched for projects
SKIPPED_DIRECTORIES = frozenset({".git", "target", "node_modules", ".idea", ".mvn"})


class ProjectTree:
	"""
	All checkouts reachable from a submodule root.

	The tree owns one ``GitCheckout`` instance per working copy, so that
	``invalidate_cache`` reaches every cached dirty state and branch list.
	Checkouts obtained elsewhere should be passed through ``canonical``
	before their state is read.

	"""

	def __init__(self, root: GitCheckout) -> None:
		"""
		Initialize the tree.

		Args:
		    root: The submodule root (or a standalone checkout)

		"""
		self._root = root
		self._checkouts: list[GitCheckout] | None = None
		self._projects: dict[GitCheckout, list[Pom]] | None = None

	@classmethod
	def from_path(cls, path: Path) -> ProjectTree | None:
		"""
		Build the tree containing a path.

		Args:
		    path: Any path inside one of the tree's checkouts

		Returns:
		    The tree, or None if the path is not in a git checkout

		"""
		checkout = GitCheckout.repository(path)
		if checkout is None:
			return None
		return cls(checkout.submodule_root() or checkout)

	@property
	def root(self) -> GitCheckout:
		"""The submodule root checkout."""
		return self._root

	def checkouts(self) -> list[GitCheckout]:
		"""Every checkout in the tree, root first, then submodules depth-first."""
		if self._checkouts is None:
			found: list[GitCheckout] = []
			pending = [self._root]
			while pending:
				checkout = pending.pop(0)
				found.append(checkout)
				pending[0:0] = checkout.submodules()
			self._checkouts = found
			logger.debug("Found %d checkouts under %s", len(found), self._root.root)
		return self._checkouts

	def canonical(self, checkout: GitCheckout) -> GitCheckout:
		"""
		Return the tree's own instance for a checkout.

		Raises:
		    ConfigurationError: If the checkout is not part of this tree

		"""
		for candidate in self.checkouts():
			if candidate == checkout:
				return candidate
		msg = f"{checkout} is not part of the tree rooted at {self._root}"
		raise ConfigurationError(msg)

	def _projects_by_checkout(self) -> dict[GitCheckout, list[Pom]]:
		if self._projects is None:
			checkouts = self.checkouts()
			nested_roots = {checkout.root for checkout in checkouts}
			self._projects = {
				checkout: self._scan_projects(checkout, nested_roots - {checkout.root}) for checkout in checkouts
			}
		return self._projects

	@staticmethod
	def _scan_projects(checkout: GitCheckout, excluded: set[Path]) -> list[Pom]:
		projects = []
		for directory, dirnames, filenames in os.walk(checkout.root):
			current = Path(directory)
			dirnames[:] = sorted(
				name for name in dirnames if name not in SKIPPED_DIRECTORIES and current / name not in excluded
			)
			if POM_FILE in filenames:
				try:
					projects.append(Pom.from_file(current / POM_FILE))
				except ConfigurationError:
					logger.warning("Skipping unreadable project in %s", current, exc_info=True)
		return projects

	def projects(self) -> list[Pom]:
		"""Every project in every checkout."""
		return [pom for poms in self._projects_by_checkout().values() for pom in poms]

	def projects_within(self, checkout: GitCheckout) -> list[Pom]:
		"""The projects whose ``pom.xml`` lives in a checkout (not in its submodules)."""
		return list(self._projects_by_checkout().get(checkout, []))

	def checkout_for(self, pom: Pom) -> GitCheckout | None:
		"""Return the checkout containing a project."""
		for checkout, poms in self._projects_by_checkout().items():
			if pom in poms:
				return checkout
		return None

	def all_checkouts(self) -> list[GitCheckout]:
		"""Checkouts containing at least one Maven project."""
		return [checkout for checkout, poms in self._projects_by_checkout().items() if poms]

	def non_maven_checkouts(self) -> list[GitCheckout]:
		"""Checkouts containing no Maven project, such as asset repositories."""
		return [checkout for checkout, poms in self._projects_by_checkout().items() if not poms]

	def _checkouts_where(self, predicate: Callable[[Pom], bool]) -> list[GitCheckout]:
		return [
			checkout
			for checkout, poms in self._projects_by_checkout().items()
			if any(predicate(pom) for pom in poms)
		]

	def checkouts_in_family(self, family: ProjectFamily) -> list[GitCheckout]:
		"""Checkouts containing a project of the given family."""
		return self._checkouts_where(lambda pom: ProjectFamily.from_group_id(pom.group_id) == family)

	def checkouts_in_families(self, families: Iterable[ProjectFamily]) -> list[GitCheckout]:
		"""Checkouts containing a project of any of the given families, without duplicates."""
		result: dict[GitCheckout, None] = {}
		for family in families:
			result.update(dict.fromkeys(self.checkouts_in_family(family)))
		return list(result)

	def checkouts_for_group_id(self, group_id: str) -> list[GitCheckout]:
		"""Checkouts containing a project with exactly this group id."""
		return self._checkouts_where(lambda pom: pom.group_id == group_id)

	def is_dirty(self, checkout: GitCheckout) -> bool:
		"""Whether a checkout has local modifications."""
		return self.canonical(checkout).is_dirty()

	def branches(self, checkout: GitCheckout) -> Branches:
		"""The branches of a checkout."""
		return self.canonical(checkout).branches()

	def invalidate_cache(self) -> None:
		"""Drop cached dirty state and branches of every checkout in the tree."""
		for checkout in self.checkouts():
			checkout.invalidate_cache()
