"""
Project families.

A project family is the logical group a Maven project belongs to, derived
from its group id: the last dot-delimited segment, cut at the first
hyphen. ``com.telenav.kivakit`` and ``com.telenav.kivakit-extensions``
are both in the family ``kivakit``.

"""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Callable, Iterable, Mapping

	from cactus.git.checkout import GitCheckout
	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)

ASSETS_HOME_SUFFIX = "_ASSETS_HOME"


def _last_segment(namespace_id: str) -> str:
	index = namespace_id.rfind(".")
	if 0 <= index < len(namespace_id) - 1:
		return namespace_id[index + 1 :]
	return namespace_id


def _before_hyphen(text: str) -> str:
	index = text.find("-")
	return text[:index] if index > 0 else text


def family(namespace_id: str) -> str:
	"""
	Derive the family name from a group id.

	Args:
	    namespace_id: A dotted Maven group id

	Returns:
	    The segment after the last dot, truncated at the first hyphen

	"""
	return _before_hyphen(_last_segment(namespace_id.strip()))


def parent_family(namespace_id: str) -> str | None:
	"""
	Derive the family one namespace segment above a group id's family.

	``com.foo.bar`` has the parent family ``foo``.

	Args:
	    namespace_id: A dotted Maven group id

	Returns:
	    The parent family, or None if the group id has a single segment

	"""
	namespace_id = namespace_id.strip()
	index = namespace_id.rfind(".")
	if index <= 0:
		return None
	return family(namespace_id[:index])


def environment_variable_name(namespace_id: str) -> str:
	"""
	Name of the environment variable locating a family's assets checkout.

	``com.telenav.kivakit`` gives ``KIVAKIT_ASSETS_HOME``.

	"""
	return _before_hyphen(_last_segment(namespace_id.strip()).upper()) + ASSETS_HOME_SUFFIX


@dataclass(frozen=True, order=True)
class ProjectFamily:
	"""A normalized family name."""

	name: str

	@classmethod
	def from_group_id(cls, group_id: str) -> ProjectFamily:
		"""Return the family of a group id."""
		return cls(family(group_id))

	@classmethod
	def named(cls, name: str) -> ProjectFamily:
		"""Return the family with the given name, normalized like a group id."""
		return cls(family(name))

	@classmethod
	def parent_of(cls, group_id: str) -> ProjectFamily | None:
		"""Return the parent family of a group id, if it has one."""
		parent = parent_family(group_id)
		return None if parent is None else cls(parent)

	@classmethod
	def from_comma_delimited(
		cls, text: str | None, default: Callable[[], ProjectFamily | None] | None = None
	) -> set[ProjectFamily]:
		"""
		Parse a comma-delimited list of family names.

		Args:
		    text: Names separated by commas; blank entries are ignored
		    default: Supplies a family to use when the list is empty

		Returns:
		    The set of families, possibly empty

		"""
		result = {cls.named(part.strip()) for part in (text or "").split(",") if part.strip()}
		if not result and default is not None:
			fallback = default()
			if fallback is not None:
				result.add(fallback)
		return result

	@property
	def environment_variable(self) -> str:
		"""The ``<FAMILY>_ASSETS_HOME`` variable name for this family."""
		return environment_variable_name(self.name)

	def assets_path(self, submodule_root: GitCheckout | Path | None, environ: Mapping[str, str] | None = None) -> Path | None:
		"""
		Locate the assets checkout for this family.

		The family's environment variable wins; otherwise a directory named
		``<family>-assets`` directly beneath the submodule root is used.

		Args:
		    submodule_root: The submodule root checkout or its directory
		    environ: Environment to consult (defaults to ``os.environ``)

		Returns:
		    The assets folder, or None if none can be found

		"""
		env = os.environ if environ is None else environ
		value = env.get(self.environment_variable)
		if value:
			return Path(value).expanduser()
		if submodule_root is None:
			return None
		root = submodule_root if isinstance(submodule_root, Path) else submodule_root.root
		candidate = root / f"{self.name}-assets"
		return candidate if candidate.is_dir() else None

	def probable_family_version(self, poms: Iterable[Pom]) -> str | None:
		"""
		Guess the version of a family whose projects disagree.

		The most common version among the family's projects wins; ties go to
		the lexically greatest version.

		"""
		counts = Counter(pom.version for pom in poms if ProjectFamily.from_group_id(pom.group_id) == self and pom.version)
		if not counts:
			return None
		return max(counts.items(), key=lambda item: (item[1], item[0]))[0]

	def __str__(self) -> str:
		"""Return the family name."""
		return self.name
