"""Pending version changes, with a record of whether anything changed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)


class ChangeFlag:
	"""A flag that is set by changes and cleared by reading it."""

	def __init__(self) -> None:
		"""Initialize an unset flag."""
		self._value = False

	def mark(self) -> None:
		"""Set the flag."""
		self._value = True

	def or_(self, value: bool) -> bool:
		"""Set the flag if ``value`` is true; returns ``value``."""
		self._value = self._value or value
		return value

	def take_and_reset(self) -> bool:
		"""Return whether the flag was set, clearing it."""
		result = self._value
		self._value = False
		return result


@dataclass(frozen=True)
class VersionChange:
	"""A version moving from ``old`` to ``new``."""

	old: str
	new: str

	def __str__(self) -> str:
		"""Return ``old -> new``."""
		return f"{self.old} -> {self.new}"


def _require(name: str, value: object) -> None:
	if value is None:
		msg = f"{name} must not be None"
		raise ValueError(msg)


class VersionChangeUpdatesCollector:
	"""
	Collects the version changes planned for projects and their parents.

	Each mutating method reports whether it actually altered the stored
	changes; ``has_changes`` tells whether any did since the last call to
	it, so a caller can iterate until the plan stops changing.

	"""

	def __init__(
		self,
		pom_version_changes: dict[Pom, VersionChange] | None = None,
		parent_version_changes: dict[Pom, VersionChange] | None = None,
	) -> None:
		"""
		Initialize the collector.

		Args:
		    pom_version_changes: Changes to project versions, updated in place
		    parent_version_changes: Changes to parent versions, updated in place

		"""
		self.pom_version_changes = {} if pom_version_changes is None else pom_version_changes
		self.parent_version_changes = {} if parent_version_changes is None else parent_version_changes
		self._flag = ChangeFlag()

	def has_changes(self) -> bool:
		"""Whether anything changed since the last call; resets the record."""
		return self._flag.take_and_reset()

	def set(self) -> None:
		"""Record a change made outside the collector."""
		self._flag.mark()

	def or_(self, value: bool) -> None:
		"""Record a change if ``value`` is true."""
		self._flag.or_(value)

	def _change(self, changes: dict[Pom, VersionChange], pom: Pom, change: VersionChange, kind: str) -> bool:
		_require("pom", pom)
		_require("change", change)
		old = changes.get(pom)
		changes[pom] = change
		changed = self._flag.or_(old != change)
		if changed:
			logger.debug("%s %s -> %s for %s", kind, old, change, pom)
		return changed

	def _remove(self, changes: dict[Pom, VersionChange], pom: Pom, kind: str) -> bool:
		_require("pom", pom)
		removed = self._flag.or_(changes.pop(pom, None) is not None)
		if removed:
			logger.debug("Remove %s change for %s", kind, pom)
		return removed

	def change_pom_version(self, pom: Pom, change: VersionChange) -> bool:
		"""Plan a change of a project's version; returns whether the plan changed."""
		return self._change(self.pom_version_changes, pom, change, "Change version")

	def change_parent_version(self, pom: Pom, change: VersionChange) -> bool:
		"""Plan a change of a project's parent version; returns whether the plan changed."""
		return self._change(self.parent_version_changes, pom, change, "Change parent version")

	def remove_pom_version_change(self, pom: Pom) -> bool:
		"""Drop a planned version change; returns whether there was one."""
		return self._remove(self.pom_version_changes, pom, "version")

	def remove_parent_version_change(self, pom: Pom) -> bool:
		"""Drop a planned parent version change; returns whether there was one."""
		return self._remove(self.parent_version_changes, pom, "parent version")
