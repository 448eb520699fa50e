"""Implementation of the codeflowers command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import (
	ConfigOpt,
	FamiliesOpt,
	FamilyOpt,
	IncludeRootOpt,
	PretendFlag,
	ProjectArg,
	ScopeOpt,
	load_config,
	scope_parameters,
)

logger = logging.getLogger(__name__)

IndentOpt = Annotated[
	bool | None,
	typer.Option(
		"--indent/--no-indent",
		help="Indent generated JSON for human readability",
		show_default=False,
	),
]

TolerateOpt = Annotated[
	str | None,
	typer.Option(
		"--tolerate-version-inconsistencies",
		help="Comma-delimited families whose projects may disagree about their version",
	),
]

SkipFlag = Annotated[
	bool | None,
	typer.Option(
		"--skip/--no-skip",
		help="Resolve the scope but generate nothing",
		show_default=False,
	),
]

WorkersOpt = Annotated[
	int | None,
	typer.Option(
		"--workers",
		"-w",
		min=1,
		help="Number of scanning threads (defaults to the CPU count)",
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the codeflowers command with the CLI app."""

	@app.command(name="codeflowers")
	def codeflowers_command(
		project: ProjectArg = Path(),
		indent: IndentOpt = None,
		tolerate: TolerateOpt = None,
		workers: WorkersOpt = None,
		skip: SkipFlag = None,
		families: FamiliesOpt = None,
		scope: ScopeOpt = None,
		family: FamilyOpt = None,
		include_root: IncludeRootOpt = None,
		pretend: PretendFlag = False,
		config_path: ConfigOpt = None,
	) -> None:
		"""Generate codeflowers data into the assets checkout of each family in scope."""
		_codeflowers_command_impl(
			project=project,
			indent=indent,
			tolerate=tolerate,
			workers=workers,
			skip=skip,
			families=families,
			scope=scope,
			family=family,
			include_root=include_root,
			pretend=pretend,
			config_path=config_path,
		)


def _codeflowers_command_impl(
	project: Path,
	indent: bool | None,
	tolerate: str | None,
	workers: int | None,
	skip: bool | None,
	families: str | None,
	scope: str | None,
	family: str | None,
	include_root: bool | None,
	pretend: bool,
	config_path: Path | None,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.operations.codeflowers import CodeflowersOptions, generate_codeflowers, tolerated_families
	from cactus.scope.scoped import ScopedCheckouts
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner
	from cactus.utils.config_loader import ConfigError
	from cactus.utils.log_setup import console

	try:
		config = load_config(config_path)
		options = CodeflowersOptions(
			indent=config.get("codeflowers.indent", False) if indent is None else indent,
			tolerate_version_inconsistencies=tolerated_families(
				config.get("codeflowers.tolerate_version_inconsistencies") if tolerate is None else tolerate
			),
			families=families,
			pretend=pretend,
			skip=config.get("codeflowers.skip", False) if skip is None else skip,
			workers=workers or config.get("scan.workers", 0) or None,
			source_folder=config.get("scan.source_folder", "src/main/java"),
		)
		scoped = ScopedCheckouts(project, scope_parameters(config, scope, include_root, family, pretend))

		def run(tree, checkouts):  # noqa: ANN001, ANN202
			with loading_spinner("Scanning sources..."):
				return generate_codeflowers(tree, checkouts, tree.root, options)

		folders = scoped.with_project_tree(run)
		for fam, folder in folders.items():
			console.print(f"[green]Codeflowers for {fam}:[/] {folder}")
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, ConfigError, GitError) as e:
		exit_with_error(str(e), exception=e)
