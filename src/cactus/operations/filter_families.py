"""Set marker properties on every project outside some families."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cactus.scope.family import ProjectFamily

if TYPE_CHECKING:
	from collections.abc import Iterable

	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)


def requested_families(family: str | None, families: str | None) -> set[ProjectFamily]:
	"""
	Combine the ``family`` and ``families`` parameters.

	``families`` wins; ``family`` is used when it is absent or blank.

	"""
	if families is not None:
		fallback = ProjectFamily.named(family.strip()) if family and family.strip() else None
		return ProjectFamily.from_comma_delimited(families, lambda: fallback)
	if family and family.strip():
		return {ProjectFamily.named(family.strip())}
	return set()


def property_names(properties: str | None) -> list[str]:
	"""Split a comma-delimited list of property names."""
	return [name.strip() for name in (properties or "").split(",") if name.strip()]


def filter_families(
	projects: Iterable[Pom],
	family: str | None,
	families: str | None,
	properties: str | None,
	verbose: bool = False,
) -> dict[Pom, dict[str, str]]:
	"""
	Compute the properties to inject into projects outside the requested families.

	Args:
	    projects: All projects of the build
	    family: A single family
	    families: Comma-delimited families
	    properties: Comma-delimited names of properties to set to ``true``
	    verbose: Log each injected property

	Returns:
	    The injected properties per project; empty when no families or no
	    properties were given

	"""
	names = property_names(properties)
	wanted = requested_families(family, families)
	if not names or not wanted:
		return {}
	result = {}
	for pom in projects:
		if ProjectFamily.from_group_id(pom.group_id) in wanted:
			continue
		if verbose:
			for name in names:
				logger.info("Inject %s=true into %s", name, pom.artifact_id)
		result[pom] = dict.fromkeys(names, "true")
	return result
