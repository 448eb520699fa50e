"""Implementation of the filter-families command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import FamiliesOpt, FamilyOpt, ProjectArg

logger = logging.getLogger(__name__)

PropertiesOpt = Annotated[
	str | None,
	typer.Option(
		"--properties",
		"-p",
		help="Comma-delimited properties to set to true in projects outside the families",
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the filter-families command with the CLI app."""

	@app.command(name="filter-families")
	def filter_families_command(
		project: ProjectArg = Path(),
		family: FamilyOpt = None,
		families: FamiliesOpt = None,
		properties: PropertiesOpt = None,
		is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log each injected property")] = False,
	) -> None:
		"""Show the properties injected into every project outside the given families."""
		_filter_families_command_impl(project, family, families, properties, is_verbose)


def _filter_families_command_impl(
	project: Path,
	family: str | None,
	families: str | None,
	properties: str | None,
	is_verbose: bool,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.maven.tree import ProjectTree
	from cactus.operations.filter_families import filter_families
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt
	from cactus.utils.log_setup import console

	try:
		tree = ProjectTree.from_path(project)
		if tree is None:
			exit_with_error(f"{project.resolve()} does not seem to be part of a git checkout.")
		injected = filter_families(tree.projects(), family, families, properties, verbose=is_verbose)
		if not injected:
			console.print("Nothing to filter.")
			return
		for pom, values in sorted(injected.items(), key=lambda item: str(item[0])):
			console.print(f"{pom.artifact_id}: " + ", ".join(f"{key}={value}" for key, value in values.items()))
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, GitError) as e:
		exit_with_error(str(e), exception=e)
