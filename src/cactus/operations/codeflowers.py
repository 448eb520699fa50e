"""Generate codeflowers data for every project family in scope."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from cactus.analysis.codeflowers import CodeflowersJsonGenerator
from cactus.analysis.scanner import DEFAULT_SOURCE_FOLDER, MavenProjectsScanner, WordCount
from cactus.errors import ConfigurationError
from cactus.scope.family import ProjectFamily

if TYPE_CHECKING:
	from collections.abc import Iterable

	from cactus.git.checkout import GitCheckout
	from cactus.maven.pom import Pom
	from cactus.maven.tree import ProjectTree

logger = logging.getLogger(__name__)


@dataclass
class CodeflowersOptions:
	"""
	Parameters of codeflowers generation.

	Attributes:
	    indent: Indent the generated JSON
	    tolerate_version_inconsistencies: Families whose projects may disagree
	        about their version; the most common version is used for them
	    families: Comma-delimited families replacing the resolved scope
	    pretend: Log instead of writing
	    skip: Resolve the scope but generate nothing
	    workers: Scanner workers (defaults to the CPU count)
	    source_folder: Source folder relative to each project folder

	"""

	indent: bool = False
	tolerate_version_inconsistencies: set[ProjectFamily] = field(default_factory=set)
	families: str | None = None
	pretend: bool = False
	skip: bool = False
	workers: int | None = None
	source_folder: str = DEFAULT_SOURCE_FOLDER


def tolerated_families(value: str | Iterable[object] | None) -> set[ProjectFamily]:
	"""Parse tolerated families from a comma-delimited string or a list of names."""
	if value is None or isinstance(value, str):
		return ProjectFamily.from_comma_delimited(value)
	return ProjectFamily.from_comma_delimited(",".join(str(name) for name in value))


def codeflowers_folder(assets: Path, version: str) -> Path:
	"""The data folder for a family version inside its assets checkout."""
	return assets / "docs" / version / "codeflowers" / "site" / "data"


def projects_by_family(tree: ProjectTree, checkouts: Iterable[GitCheckout]) -> dict[ProjectFamily, list[Pom]]:
	"""Group the non-aggregator projects of some checkouts by family."""
	result: dict[ProjectFamily, list[Pom]] = defaultdict(list)
	for checkout in checkouts:
		for pom in tree.projects_within(checkout):
			if not pom.is_pom_project:
				result[ProjectFamily.from_group_id(pom.group_id)].append(pom)
	return dict(sorted(result.items()))


def family_version(family: ProjectFamily, poms: list[Pom], tolerated: set[ProjectFamily]) -> str | None:
	"""
	Return the single version of a family's projects.

	Raises:
	    ConfigurationError: If the projects disagree and the family is not tolerated

	"""
	versions = {pom.version for pom in poms}
	if len(versions) > 1:
		if family not in tolerated:
			msg = f"Not all projects in family '{family}' have the same version: {sorted(versions)}"
			raise ConfigurationError(msg)
		return family.probable_family_version(poms)
	return next(iter(versions), None)


def apply_families(tree: ProjectTree, checkouts: list[GitCheckout], families: str | None) -> list[GitCheckout]:
	"""
	Replace the resolved checkouts with those of explicitly named families.

	Raises:
	    ConfigurationError: If the named families have no checkouts

	"""
	if not families or not families.strip():
		return checkouts
	requested = sorted(ProjectFamily.from_comma_delimited(families))
	result = tree.checkouts_in_families(requested)
	if not result:
		msg = f"No checkouts in families {', '.join(map(str, requested))}"
		raise ConfigurationError(msg)
	logger.info("Using %s for %s", ", ".join(checkout.name for checkout in result), families)
	return result


def generate_codeflowers(
	tree: ProjectTree,
	checkouts: list[GitCheckout],
	submodule_root: GitCheckout | None,
	options: CodeflowersOptions,
) -> dict[ProjectFamily, Path]:
	"""
	Scan each family in scope and write its codeflowers data.

	Args:
	    tree: The project tree
	    checkouts: Checkouts resolved for the command's scope
	    submodule_root: Root used to locate ``<family>-assets`` folders
	    options: Generation parameters

	Returns:
	    The data folder used for each family

	"""
	if options.skip:
		logger.info("Skipping codeflowers")
		return {}
	folders = {}
	for family, poms in projects_by_family(tree, apply_families(tree, checkouts, options.families)).items():
		version = family_version(family, poms, options.tolerate_version_inconsistencies)
		if not version:
			logger.warning("Got no versions at all in %s", family)
			continue
		assets = family.assets_path(submodule_root)
		if assets is None:
			logger.warning("Could not find an assets root for family %s", family)
			continue
		folder = codeflowers_folder(assets, version)
		logger.info("Will generate codeflowers for '%s' into %s", family, folder)
		generator = CodeflowersJsonGenerator(family.name, folder, options.indent, options.pretend)
		MavenProjectsScanner(WordCount(), poms, options.workers, options.source_folder).scan(generator)
		folders[family] = folder
	return folders
