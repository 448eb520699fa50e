"""Scopes: which checkouts an operation applies to."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, assert_never

from cactus.errors import ConfigurationError
from cactus.scope.family import ProjectFamily

if TYPE_CHECKING:
	from collections.abc import Iterable

	from cactus.git.checkout import GitCheckout
	from cactus.maven.tree import ProjectTree

logger = logging.getLogger(__name__)


class Scope(Enum):
	"""The rule selecting the checkouts an operation targets."""

	SAME_REPOSITORY = "just_this"
	FAMILY = "family"
	FAMILY_OR_CHILD_FAMILY = "family_or_child_family"
	ALL = "all"
	SAME_GROUP_ID = "same_group_id"

	@classmethod
	def find(cls, text: str | None) -> Scope:
		"""
		Parse a scope name.

		Both the value (``just_this``) and the member name
		(``SAME_REPOSITORY``) are accepted, case-insensitively, with
		hyphens or underscores.

		Raises:
		    ConfigurationError: If the name matches no scope

		"""
		normalized = (text or "").strip().lower().replace("-", "_")
		for scope in cls:
			if normalized in (scope.value, scope.name.lower()):
				return scope
		names = ", ".join(scope.value for scope in cls)
		msg = f"Unknown scope '{text}'. Valid scopes are: {names}"
		raise ConfigurationError(msg)

	@property
	def applies_family(self) -> bool:
		"""Whether resolution reads the project family."""
		return self in (Scope.FAMILY, Scope.FAMILY_OR_CHILD_FAMILY)

	def __str__(self) -> str:
		"""Return the scope's parameter value."""
		return self.value


def _ordered(checkouts: Iterable[GitCheckout]) -> list[GitCheckout]:
	return sorted(set(checkouts), key=lambda checkout: checkout.root)


def _family_or_child_family(tree: ProjectTree, family: ProjectFamily) -> list[GitCheckout]:
	result = set(tree.checkouts_in_family(family))
	for checkout in tree.all_checkouts():
		for pom in tree.projects_within(checkout):
			if ProjectFamily.parent_of(pom.group_id) == family:
				result.add(checkout)
				break
	return _ordered(result)


def resolve(
	scope: Scope,
	checkout: GitCheckout,
	tree: ProjectTree,
	family: ProjectFamily,
	group_id: str,
	include_root: bool,
) -> list[GitCheckout]:
	"""
	Compute the checkouts an operation applies to.

	Args:
	    scope: The requested scope
	    checkout: Checkout of the project the operation was invoked on
	    tree: Tree of all checkouts under the submodule root
	    family: Family of the invoking project (or an override)
	    group_id: Group id of the invoking project
	    include_root: Append the submodule root if it is not already present;
	        ignored for ``SAME_REPOSITORY``

	Returns:
	    Checkouts ordered by path, with an appended root last

	"""
	match scope:
		case Scope.SAME_REPOSITORY:
			return [tree.canonical(checkout)]
		case Scope.ALL:
			result = _ordered(tree.all_checkouts())
		case Scope.FAMILY:
			result = _ordered(tree.checkouts_in_family(family))
		case Scope.FAMILY_OR_CHILD_FAMILY:
			result = _family_or_child_family(tree, family)
		case Scope.SAME_GROUP_ID:
			result = _ordered(tree.checkouts_for_group_id(group_id))
		case _:
			assert_never(scope)

	if include_root and tree.root not in result:
		result.append(tree.root)
	return result
