"""Implementation of the metadata command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import ProjectArg

logger = logging.getLogger(__name__)

OutputOpt = Annotated[
	Path | None,
	typer.Option(
		"--output",
		"-o",
		help="Folder to write build.properties and project.properties into",
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the metadata command with the CLI app."""

	@app.command(name="metadata")
	def metadata_command(
		project: ProjectArg = Path(),
		output: OutputOpt = None,
	) -> None:
		"""
		Show the current build number and name, or write them for a project.

		With --output, build.properties and project.properties are written
		into that folder.

		"""
		_metadata_command_impl(project, output)


def _metadata_command_impl(project: Path, output: Path | None) -> None:
	from cactus.errors import CactusError
	from cactus.maven.pom import Pom
	from cactus.metadata.build_metadata import BuildMetadata, write_metadata
	from cactus.utils.cli_utils import exit_with_error
	from cactus.utils.log_setup import console

	try:
		if output is None:
			for key, value in BuildMetadata.current().build_properties.items():
				console.print(f"{key} = {value}")
			return
		for path in write_metadata(Pom.from_file(project), output):
			console.print(f"[green]Wrote {path}[/]")
	except (CactusError, OSError) as e:
		exit_with_error(str(e), exception=e)
