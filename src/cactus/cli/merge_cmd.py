"""Implementation of the merge command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import (
	ConfigOpt,
	FamiliesOpt,
	FamilyOpt,
	ForbidModifiedFlag,
	IncludeRootOpt,
	PretendFlag,
	ProjectArg,
	ScopeOpt,
	load_config,
	scope_parameters,
)

logger = logging.getLogger(__name__)

FromOpt = Annotated[
	str | None,
	typer.Option(
		"--from",
		help="Branch to merge (defaults to the current branch of each checkout)",
	),
]

IntoOpt = Annotated[
	str | None,
	typer.Option(
		"--into",
		help="Branch to merge into (overrides config)",
	),
]

AlsoIntoOpt = Annotated[
	str | None,
	typer.Option(
		"--also-into",
		help="Secondary branch to merge into before the primary one",
	),
]

TagOpt = Annotated[
	bool | None,
	typer.Option(
		"--tag/--no-tag",
		help="Tag the merge with the last path segment of the merged branch",
		show_default=False,
	),
]

DeleteOpt = Annotated[
	bool | None,
	typer.Option(
		"--delete/--no-delete",
		help="Delete the merged branch afterwards",
		show_default=False,
	),
]

PushOpt = Annotated[
	bool | None,
	typer.Option(
		"--push/--no-push",
		help="Push after merging",
		show_default=False,
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the merge command with the CLI app."""

	@app.command(name="merge")
	def merge_command(
		project: ProjectArg = Path(),
		merge_from: FromOpt = None,
		merge_into: IntoOpt = None,
		also_merge_into: AlsoIntoOpt = None,
		tag: TagOpt = None,
		delete: DeleteOpt = None,
		push: PushOpt = None,
		families: FamiliesOpt = None,
		scope: ScopeOpt = None,
		family: FamilyOpt = None,
		include_root: IncludeRootOpt = None,
		forbid_modified: ForbidModifiedFlag = False,
		pretend: PretendFlag = False,
		config_path: ConfigOpt = None,
	) -> None:
		"""
		Merge a branch into another in every checkout in scope.

		Checkouts lacking either branch are skipped. A failure in one
		checkout is reported without stopping the others.

		"""
		_merge_command_impl(
			project=project,
			merge_from=merge_from,
			merge_into=merge_into,
			also_merge_into=also_merge_into,
			tag=tag,
			delete=delete,
			push=push,
			families=families,
			scope=scope,
			family=family,
			include_root=include_root,
			forbid_modified=forbid_modified,
			pretend=pretend,
			config_path=config_path,
		)


def _merge_command_impl(
	project: Path,
	merge_from: str | None,
	merge_into: str | None,
	also_merge_into: str | None,
	tag: bool | None,
	delete: bool | None,
	push: bool | None,
	families: str | None,
	scope: str | None,
	family: str | None,
	include_root: bool | None,
	forbid_modified: bool,
	pretend: bool,
	config_path: Path | None,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.operations.merge import MergeBranches, MergeOptions
	from cactus.scope.scoped import ScopedCheckouts
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, show_warning
	from cactus.utils.config_loader import ConfigError
	from cactus.utils.log_setup import console

	try:
		config = load_config(config_path)
		parameters = scope_parameters(config, scope, include_root, family, pretend)
		options = MergeOptions(
			merge_from=merge_from,
			merge_into=merge_into or config.get("merge.into", "develop"),
			also_merge_into=also_merge_into,
			delete_merged_branch=config.get("merge.delete_merged_branch", False) if delete is None else delete,
			tag=config.get("merge.tag", True) if tag is None else tag,
			push=config.get("merge.push", False) if push is None else push,
			pretend=pretend,
			include_root=parameters.include_root,
			families=families,
			remote=config.get("git.remote", "origin"),
		)
		scoped = ScopedCheckouts(project, parameters, forbids_local_modifications=forbid_modified)
		# Options are checked before any checkout is touched
		options.validate(scoped.scope)

		def run(tree, checkouts):  # noqa: ANN001, ANN202
			merger = MergeBranches(tree, options)
			return merger.run(merger.apply_families(checkouts, scoped.scope, scoped.project_family))

		report = scoped.with_project_tree(run)

		prefix = "Would merge" if report.pretend else "Merged"
		console.print(f"[green]{prefix} in {len(report.merged)} checkouts.[/]")
		for checkout, new_tag in report.tags.items():
			console.print(f"  {checkout.name}: tag [bold]{new_tag}[/]")
		if report.failures:
			details = "\n".join(f"{checkout.name}: {message}" for checkout, message in report.failures.items())
			show_warning(f"Merge failed in {len(report.failures)} checkouts:\n{details}")
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, ConfigError, GitError) as e:
		exit_with_error(str(e), exception=e)
