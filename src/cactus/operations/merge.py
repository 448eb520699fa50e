"""
Merge a branch into another across a set of checkouts.

Every checkout is handled on its own: a checkout that lacks either branch
was untouched by whatever produced the source branch and is skipped, and
a git failure in one checkout is logged and recorded without stopping the
others. Checkouts are processed one at a time, since branch switches
mutate the working tree.

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cactus.errors import ConfigurationError
from cactus.git.checkout import DEFAULT_REMOTE, Branch, Branches, GitCheckout
from cactus.git.utils import GitError
from cactus.scope.family import ProjectFamily
from cactus.scope.scope import Scope

if TYPE_CHECKING:
	from collections.abc import Callable

	from cactus.maven.tree import ProjectTree

logger = logging.getLogger(__name__)

DEFAULT_MERGE_INTO = "develop"

# Characters git refuses in ref names (see git-check-ref-format)
_ILLEGAL_BRANCH_CHARACTERS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def validate_branch_name(name: str | None, nullable: bool) -> None:
	"""
	Check that a branch name is acceptable to git.

	Args:
	    name: The branch name
	    nullable: Whether an absent name is allowed

	Raises:
	    ConfigurationError: If the name is missing when required, or malformed

	"""
	if name is None:
		if nullable:
			return
		msg = "Branch name is required"
		raise ConfigurationError(msg)

	problem = None
	if not name:
		problem = "is empty"
	elif _ILLEGAL_BRANCH_CHARACTERS.search(name):
		problem = "contains whitespace, a control character or one of ~^:?*[\\"
	elif name.startswith(("-", "/")) or name.endswith(("/", ".", ".lock")):
		problem = "has an illegal first or last character"
	elif ".." in name or "//" in name or "@{" in name or name == "@":
		problem = "contains an illegal sequence"
	elif any(part.startswith(".") for part in name.split("/")):
		problem = "has a path component starting with '.'"
	if problem:
		msg = f"Invalid branch name '{name}': {problem}"
		raise ConfigurationError(msg)


def tag_name(branch: Branch | str) -> str:
	"""
	Name the tag for a merged branch.

	Any ``/``-delimited prefix is dropped, so ``feature/login`` is tagged
	``login``.

	"""
	name = branch if isinstance(branch, str) else branch.name
	index = name.rfind("/")
	if 0 < index < len(name) - 1:
		return name[index + 1 :]
	return name


@dataclass
class MergeOptions:
	"""
	Parameters of a merge.

	Attributes:
	    merge_from: Branch to merge from; the current branch of each checkout if unset
	    merge_into: Branch to merge into
	    also_merge_into: Secondary branch the source is merged into first
	    delete_merged_branch: Delete the source branch after merging
	    tag: Tag the merge with the last path segment of the source branch name
	    push: Push after merging
	    pretend: Only log what would be done
	    include_root: Also consider the submodule root
	    families: Comma-delimited families to merge (only with the family scope)
	    remote: Remote used when a pushed branch does not exist remotely

	"""

	merge_from: str | None = None
	merge_into: str = DEFAULT_MERGE_INTO
	also_merge_into: str | None = None
	delete_merged_branch: bool = False
	tag: bool = True
	push: bool = False
	pretend: bool = False
	include_root: bool = True
	families: str | None = None
	remote: str = DEFAULT_REMOTE

	def validate(self, scope: Scope) -> None:
		"""
		Check the options before anything is touched.

		Raises:
		    ConfigurationError: On a malformed branch name, or families combined
		        with a scope other than family

		"""
		validate_branch_name(self.merge_from, nullable=True)
		validate_branch_name(self.merge_into, nullable=False)
		validate_branch_name(self.also_merge_into, nullable=True)
		if scope is not Scope.FAMILY and self.families and self.families.strip():
			msg = f"Cannot use families except with scope {Scope.FAMILY} (scope is {scope})"
			raise ConfigurationError(msg)


@dataclass(frozen=True)
class MergePlan:
	"""The branches resolved for one checkout."""

	checkout: GitCheckout
	from_branch: Branch
	to_branch: Branch
	also_branch: Branch | None
	branches: Branches


@dataclass
class MergeReport:
	"""What a merge did, or in pretend mode would have done, per checkout."""

	pretend: bool = False
	merged: list[GitCheckout] = field(default_factory=list)
	also_merged: list[GitCheckout] = field(default_factory=list)
	tags: dict[GitCheckout, str] = field(default_factory=dict)
	deleted: dict[GitCheckout, str] = field(default_factory=dict)
	pushed: list[GitCheckout] = field(default_factory=list)
	failures: dict[GitCheckout, str] = field(default_factory=dict)

	@property
	def succeeded(self) -> bool:
		"""Whether no checkout failed."""
		return not self.failures


class MergeBranches:
	"""Runs the merge workflow across checkouts."""

	def __init__(self, tree: ProjectTree, options: MergeOptions) -> None:
		"""
		Initialize the workflow.

		Args:
		    tree: Tree containing the checkouts
		    options: Merge parameters

		"""
		self.tree = tree
		self.options = options

	def apply_families(
		self, checkouts: list[GitCheckout], scope: Scope, project_family: ProjectFamily
	) -> list[GitCheckout]:
		"""
		Replace the resolved checkouts with those of the requested families.

		Only applies with the family scope and when families other than the
		project's own were requested.

		"""
		if not self.options.families or scope is not Scope.FAMILY:
			return checkouts
		families = ProjectFamily.from_comma_delimited(self.options.families, lambda: project_family)
		if families == {project_family}:
			return checkouts
		return self.tree.checkouts_in_families(sorted(families))

	def plan(self, checkouts: list[GitCheckout]) -> list[MergePlan]:
		"""
		Resolve the branches of each checkout and drop those with nothing to merge.

		Returns:
		    One plan per checkout that has both branches, and where they differ

		"""
		options = self.options
		candidates = list(checkouts)
		if options.include_root and self.tree.root not in candidates:
			candidates.append(self.tree.root)

		plans = []
		for checkout in candidates:
			branches = self.tree.branches(checkout)
			if options.merge_from is not None:
				from_branch = branches.find(options.merge_from, local=True)
			else:
				from_branch = branches.current_branch()
			to_branch = branches.find(options.merge_into, local=True) or branches.find(options.merge_into, local=False)
			also_branch = None
			if options.also_merge_into is not None:
				also_branch = branches.find(options.also_merge_into, local=True) or branches.find(
					options.also_merge_into, local=False
				)

			# A missing branch means the checkout was not touched by whatever produced the changes
			if from_branch is None or to_branch is None:
				logger.debug("Nothing to merge in %s", checkout.logging_name)
				continue
			if from_branch.name == to_branch.name:
				logger.debug("Not merging %s into itself in %s", from_branch, checkout.logging_name)
				continue
			plans.append(MergePlan(checkout, from_branch, to_branch, also_branch, branches))
		return plans

	def run(self, checkouts: list[GitCheckout]) -> MergeReport:
		"""
		Merge in every checkout that has something to merge.

		Args:
		    checkouts: The checkouts resolved for the command's scope

		Returns:
		    A report of what was done, including per-checkout failures

		"""
		report = MergeReport(pretend=self.options.pretend)
		try:
			plans = self.plan(checkouts)
			if not plans:
				logger.warning("No checkouts found to merge")
				return report
			logger.info("Have %d checkouts to merge.", len(plans))
			for plan in plans:
				self._merge_one(plan, report)
		finally:
			self.tree.invalidate_cache()
		return report

	def _unless_pretending(self, action: Callable[..., object], *args: object) -> None:
		if not self.options.pretend:
			action(*args)

	def _switch(self, checkout: GitCheckout, branch: Branch) -> None:
		if branch.is_remote:
			logger.info("Branch %s does not exist locally. Creating it.", branch.tracking_name)
			checkout.create_and_switch_to_branch(branch.name, branch.tracking_name)
		else:
			checkout.switch_to_branch(branch.name)

	def _push(self, checkout: GitCheckout, branch: Branch, branches: Branches) -> None:
		if branches.find(branch.name, local=False) is not None:
			checkout.push()
		else:
			checkout.push_creating_branch(self.options.remote)

	def _merge_into(self, checkout: GitCheckout, target: Branch, source: Branch) -> None:
		self._switch(checkout, target)
		checkout.merge(source.name)

	def _merge_one(self, plan: MergePlan, report: MergeReport) -> None:
		options = self.options
		checkout = plan.checkout
		source = plan.from_branch
		name = checkout.logging_name
		try:
			# The secondary branch goes first so the checkout ends up on the primary target
			if plan.also_branch is not None:
				logger.info("First merge %s into %s in %s", source, plan.also_branch, name)
				self._unless_pretending(self._merge_into, checkout, plan.also_branch, source)
				report.also_merged.append(checkout)
				if options.push:
					logger.info("Push %s in %s", plan.also_branch.name, name)
					self._unless_pretending(self._push, checkout, plan.also_branch, plan.branches)

			logger.info("Merge %s into %s in %s", source, plan.to_branch, name)
			self._unless_pretending(self._merge_into, checkout, plan.to_branch, source)
			report.merged.append(checkout)

			if options.tag:
				new_tag = tag_name(source)
				logger.info("Tag %s with %s", name, new_tag)
				# Forced: an existing tag of the same name is replaced
				self._unless_pretending(checkout.tag, new_tag, True)
				report.tags[checkout] = new_tag

			if options.delete_merged_branch:
				logger.info("Delete branch %s in %s", source, name)
				self._unless_pretending(checkout.delete_branch, source.name, plan.to_branch.name, False)
				report.deleted[checkout] = source.name

			if options.push:
				logger.info("Push %s in %s", plan.to_branch.name, name)
				self._unless_pretending(self._push, checkout, plan.to_branch, plan.branches)
				report.pushed.append(checkout)
		except GitError as e:
			logger.error("Merge abandoned in %s: %s", name, e)  # noqa: TRY400
			report.failures[checkout] = str(e)
