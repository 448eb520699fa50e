"""
Generate documentation and diagrams for a project family with lexakai.

The documentation is written into the family's assets checkout when one
can be found. With ``commit_changes`` the checkouts lexakai dirtied are
committed afterwards.

"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cactus.errors import ExternalToolError
from cactus.git.checkout import GitCheckout
from cactus.maven.tree import ProjectTree
from cactus.operations.changes import commit_incidental_changes, commit_message, detect_incidental_changes
from cactus.scope.family import ProjectFamily

if TYPE_CHECKING:
	from collections.abc import Mapping

	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)

LEXAKAI_GROUP_PATH = ("com", "telenav", "lexakai", "lexakai")
DEFAULT_LEXAKAI_VERSION = "1.0.7"
DEFAULT_REPOSITORY = "~/.m2/repository"


@dataclass
class LexakaiOptions:
	"""
	Parameters of a lexakai run.

	Attributes:
	    overwrite_resources: Let lexakai overwrite existing resources
	    update_readme: Let lexakai update README files
	    verbose: Log the lexakai arguments
	    skip: Compute everything but do not run lexakai
	    output_folder: Explicit destination; computed when unset
	    commit_changes: Commit the checkouts lexakai modified
	    version: Lexakai version to look up in the local repository
	    jar: Explicit lexakai jar, bypassing the repository lookup
	    repository: Local Maven repository
	    java: Java executable

	"""

	overwrite_resources: bool = True
	update_readme: bool = True
	verbose: bool = True
	skip: bool = False
	output_folder: Path | None = None
	commit_changes: bool = False
	version: str = DEFAULT_LEXAKAI_VERSION
	jar: Path | None = None
	repository: str = DEFAULT_REPOSITORY
	java: str = "java"


def output_folder(project: Pom, options: LexakaiOptions, environ: Mapping[str, str] | None = None) -> Path:
	"""
	Compute where documentation for a project is written.

	In order: the explicit option, the family's ``<FAMILY>_ASSETS_HOME``
	variable, a ``<family>-assets`` folder beneath the submodule root, and
	finally ``target/lexakai`` inside the project.

	"""
	if options.output_folder is not None:
		return Path(options.output_folder)
	env = os.environ if environ is None else environ
	family = ProjectFamily.from_group_id(project.group_id)
	value = env.get(family.environment_variable)
	if value:
		return Path(value)
	checkout = GitCheckout.repository(project.project_folder)
	root = checkout.submodule_root() if checkout is not None else None
	assets = family.assets_path(root, environ={}) if root is not None else None
	if assets is not None:
		return assets
	return project.project_folder / "target" / "lexakai"


def lexakai_jar(options: LexakaiOptions) -> Path:
	"""
	Locate the lexakai jar.

	Raises:
	    ExternalToolError: If the jar is not present

	"""
	if options.jar is not None:
		jar = Path(options.jar).expanduser()
	else:
		repository = Path(options.repository).expanduser()
		jar = repository.joinpath(*LEXAKAI_GROUP_PATH, options.version, f"lexakai-{options.version}.jar")
	if not jar.is_file():
		msg = f"Could not find lexakai {options.version} at {jar}"
		raise ExternalToolError(msg)
	logger.debug("Have local lexakai jar %s", jar)
	return jar


class LexakaiRunner:
	"""Runs the lexakai jar in a child JVM."""

	def __init__(self, jar: Path, args: list[str], java: str = "java") -> None:
		"""
		Initialize the runner.

		Args:
		    jar: The lexakai jar
		    args: Arguments passed to lexakai
		    java: Java executable

		"""
		self.jar = jar
		self.args = args
		self.java = java

	@property
	def command(self) -> list[str]:
		"""The full command line."""
		return [self.java, "-jar", str(self.jar), *self.args]

	def __call__(self) -> None:
		"""
		Run lexakai, blocking until it exits.

		Raises:
		    ExternalToolError: If java cannot be started or lexakai fails

		"""
		logger.info("Invoke lexakai from %s", self.jar)
		try:
			result = subprocess.run(self.command, check=False)  # noqa: S603
		except OSError as e:
			msg = f"Could not run {self.java}: {e}"
			raise ExternalToolError(msg) from e
		if result.returncode != 0:
			msg = f"Lexakai exited with status {result.returncode}"
			raise ExternalToolError(msg)
		logger.info("Lexakai done.")


def lexakai_arguments(project: Pom, options: LexakaiOptions, destination: Path) -> list[str]:
	"""Build the lexakai command line arguments for a project."""
	return [
		f"-update-readme={str(options.update_readme).lower()}",
		f"-overwrite-resources={str(options.overwrite_resources).lower()}",
		f"-output-folder={destination}",
		str(project.project_folder),
	]


def generate_documentation(project: Pom, options: LexakaiOptions) -> set[GitCheckout]:
	"""
	Run lexakai on a project.

	Args:
	    project: The family's root project
	    options: Run parameters

	Returns:
	    The checkouts committed because lexakai modified them (empty unless
	    ``commit_changes`` is set)

	Raises:
	    ExternalToolError: If lexakai cannot be found or fails

	"""
	destination = output_folder(project, options)
	args = lexakai_arguments(project, options, destination)
	if options.verbose:
		logger.info("Lexakai args:")
		logger.info("lexakai %s", " ".join(args))
	if options.skip:
		logger.info("Skipping lexakai")
		return set()

	runner = LexakaiRunner(lexakai_jar(options), args, options.java)
	if not options.commit_changes:
		runner()
		return set()

	tree = ProjectTree.from_path(project.project_folder)
	if tree is None:
		logger.warning("%s is not in a git checkout, so nothing can be committed", project.coordinates)
		runner()
		return set()
	modified = detect_incidental_changes(tree, runner)
	if not modified:
		logger.info("Lexakai did not modify any checkouts")
		return set()
	project_checkout = tree.checkout_for(project)
	if project_checkout is None:
		logger.warning("%s is not in the tree rooted at %s", project.coordinates, tree.root)
		return set()
	return set(commit_incidental_changes(project_checkout, modified, commit_message(project, modified)))
