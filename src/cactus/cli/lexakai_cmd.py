"""Implementation of the lexakai command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import ConfigOpt, ProjectArg, load_config

logger = logging.getLogger(__name__)

OutputOpt = Annotated[
	Path | None,
	typer.Option(
		"--output-folder",
		"-o",
		help="Destination for generated documentation (computed from the family when unset)",
	),
]

CommitFlag = Annotated[
	bool,
	typer.Option(
		"--commit-changes",
		help="Commit the checkouts lexakai modified",
	),
]

SkipFlag = Annotated[
	bool,
	typer.Option(
		"--skip",
		help="Compute the arguments but do not run lexakai",
	),
]

JarOpt = Annotated[
	Path | None,
	typer.Option(
		"--jar",
		help="Lexakai jar to run instead of the one in the local repository",
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the lexakai command with the CLI app."""

	@app.command(name="lexakai")
	def lexakai_command(
		project: ProjectArg = Path(),
		output_folder: OutputOpt = None,
		commit_changes: CommitFlag = False,
		skip: SkipFlag = False,
		jar: JarOpt = None,
		config_path: ConfigOpt = None,
	) -> None:
		"""Generate documentation and diagrams for a project family with lexakai."""
		_lexakai_command_impl(project, output_folder, commit_changes, skip, jar, config_path)


def _lexakai_command_impl(
	project: Path,
	output_folder: Path | None,
	commit_changes: bool,
	skip: bool,
	jar: Path | None,
	config_path: Path | None,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.maven.pom import Pom
	from cactus.operations.lexakai import LexakaiOptions, generate_documentation
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt
	from cactus.utils.config_loader import ConfigError
	from cactus.utils.log_setup import console

	try:
		config = load_config(config_path)
		options = LexakaiOptions(
			overwrite_resources=config.get("lexakai.overwrite_resources", True),
			update_readme=config.get("lexakai.update_readme", True),
			verbose=config.get("lexakai.verbose", True),
			skip=skip,
			output_folder=output_folder,
			commit_changes=commit_changes,
			version=str(config.get("lexakai.version", "1.0.7")),
			jar=jar,
			repository=config.get("lexakai.repository", "~/.m2/repository"),
			java=config.get("lexakai.java", "java"),
		)
		committed = generate_documentation(Pom.from_file(project), options)
		for checkout in sorted(committed, key=lambda c: c.root):
			console.print(f"[green]Committed generated changes in {checkout.name}[/]")
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, ConfigError, GitError) as e:
		exit_with_error(str(e), exception=e)
