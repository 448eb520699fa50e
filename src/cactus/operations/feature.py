"""
Start a feature branch in every checkout of a scope.

The feature branch is created from the development branch, so a family of
checkouts can be worked on together and later merged back with the merge
command. A checkout already having the feature branch is switched to it.
A checkout without the development branch is skipped, and a git failure in
one checkout is recorded without stopping the others.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cactus.git.utils import GitError
from cactus.operations.merge import DEFAULT_MERGE_INTO, validate_branch_name

if TYPE_CHECKING:
	from cactus.git.checkout import Branch, GitCheckout
	from cactus.maven.tree import ProjectTree

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_PREFIX = "feature/"


def feature_branch_name(feature: str, prefix: str = DEFAULT_FEATURE_PREFIX) -> str:
	"""Prefix a feature name, unless it already carries the prefix."""
	feature = feature.strip()
	if not prefix or feature.startswith(prefix):
		return feature
	return prefix + feature


@dataclass
class FeatureOptions:
	"""
	Parameters of starting a feature.

	Attributes:
	    feature: Feature name, such as ``login`` or ``feature/login``
	    start_from: Branch the feature branch is created from
	    prefix: Prefix added to the feature name
	    pretend: Only log what would be done

	"""

	feature: str
	start_from: str = DEFAULT_MERGE_INTO
	prefix: str = DEFAULT_FEATURE_PREFIX
	pretend: bool = False

	@property
	def branch_name(self) -> str:
		"""The full name of the feature branch."""
		return feature_branch_name(self.feature, self.prefix)

	def validate(self) -> None:
		"""
		Check both branch names before anything is touched.

		Raises:
		    ConfigurationError: If either name is missing or malformed

		"""
		validate_branch_name(self.branch_name, nullable=False)
		validate_branch_name(self.start_from, nullable=False)


@dataclass
class FeatureReport:
	"""Which checkouts got the feature branch, or in pretend mode would have."""

	branch: str
	pretend: bool = False
	started: list[GitCheckout] = field(default_factory=list)
	switched: list[GitCheckout] = field(default_factory=list)
	skipped: list[GitCheckout] = field(default_factory=list)
	failures: dict[GitCheckout, str] = field(default_factory=dict)


class StartFeature:
	"""Creates and switches to a feature branch across checkouts."""

	def __init__(self, tree: ProjectTree, options: FeatureOptions) -> None:
		self.tree = tree
		self.options = options

	def run(self, checkouts: list[GitCheckout]) -> FeatureReport:
		"""
		Start the feature in each checkout, one at a time.

		Args:
		    checkouts: The checkouts resolved for the command's scope

		Returns:
		    What was done per checkout, including failures

		"""
		report = FeatureReport(self.options.branch_name, pretend=self.options.pretend)
		try:
			for checkout in checkouts:
				self._start_one(checkout, report)
		finally:
			self.tree.invalidate_cache()
		if not report.started and not report.switched:
			logger.warning("Feature %s was not started in any checkout", report.branch)
		return report

	def _checkout_branch(self, checkout: GitCheckout, branch: Branch) -> None:
		if branch.is_remote:
			checkout.create_and_switch_to_branch(branch.name, branch.tracking_name)
		else:
			checkout.switch_to_branch(branch.name)

	def _start_one(self, checkout: GitCheckout, report: FeatureReport) -> None:
		options = self.options
		name = checkout.logging_name
		feature = report.branch
		try:
			branches = self.tree.branches(checkout)
			# An existing feature branch, local or pushed by someone else, is joined rather than recreated
			existing = branches.find(feature, local=True) or branches.find(feature, local=False)
			if existing is not None:
				current = branches.current_branch()
				if current is not None and current.name == feature:
					logger.info("Already on %s in %s", feature, name)
				else:
					logger.info("Switch to existing %s in %s", existing, name)
					if not options.pretend:
						self._checkout_branch(checkout, existing)
				report.switched.append(checkout)
				return

			base = branches.find(options.start_from, local=True) or branches.find(options.start_from, local=False)
			if base is None:
				logger.warning("No branch %s to start %s from in %s", options.start_from, feature, name)
				report.skipped.append(checkout)
				return

			logger.info("Start %s from %s in %s", feature, base, name)
			if not options.pretend:
				self._checkout_branch(checkout, base)
				checkout.create_and_switch_to_branch(feature)
			report.started.append(checkout)
		except GitError as e:
			logger.error("Could not start %s in %s: %s", feature, name, e)  # noqa: TRY400
			report.failures[checkout] = str(e)
