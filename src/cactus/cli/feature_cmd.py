"""Implementation of the feature-start command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .options import (
	ConfigOpt,
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

FeatureArg = Annotated[
	str,
	typer.Argument(
		help="Feature name; the branch prefix is added unless already present",
	),
]

StartFromOpt = Annotated[
	str | None,
	typer.Option(
		"--from",
		help="Branch to start the feature from (overrides config)",
	),
]

PrefixOpt = Annotated[
	str | None,
	typer.Option(
		"--prefix",
		help="Prefix of feature branch names (overrides config)",
	),
]


def register_command(app: typer.Typer) -> None:
	"""Register the feature-start command with the CLI app."""

	@app.command(name="feature-start")
	def feature_start_command(
		feature: FeatureArg,
		project: ProjectArg = Path(),
		start_from: StartFromOpt = None,
		prefix: PrefixOpt = None,
		scope: ScopeOpt = None,
		family: FamilyOpt = None,
		include_root: IncludeRootOpt = None,
		forbid_modified: ForbidModifiedFlag = False,
		pretend: PretendFlag = False,
		config_path: ConfigOpt = None,
	) -> None:
		"""
		Start a feature branch in every checkout in scope.

		Checkouts without the branch to start from are skipped. A failure in
		one checkout is reported without stopping the others.

		"""
		_feature_start_command_impl(
			feature=feature,
			project=project,
			start_from=start_from,
			prefix=prefix,
			scope=scope,
			family=family,
			include_root=include_root,
			forbid_modified=forbid_modified,
			pretend=pretend,
			config_path=config_path,
		)


def _feature_start_command_impl(
	feature: str,
	project: Path,
	start_from: str | None,
	prefix: str | None,
	scope: str | None,
	family: str | None,
	include_root: bool | None,
	forbid_modified: bool,
	pretend: bool,
	config_path: Path | None,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.operations.feature import FeatureOptions, StartFeature
	from cactus.scope.scoped import ScopedCheckouts
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, show_warning
	from cactus.utils.config_loader import ConfigError
	from cactus.utils.log_setup import console

	try:
		config = load_config(config_path)
		options = FeatureOptions(
			feature=feature,
			start_from=start_from or config.get("feature.start_from", "develop"),
			prefix=config.get("feature.prefix", "feature/") if prefix is None else prefix,
			pretend=pretend,
		)
		options.validate()
		scoped = ScopedCheckouts(
			project,
			scope_parameters(config, scope, include_root, family, pretend),
			forbids_local_modifications=forbid_modified,
		)
		report = scoped.with_project_tree(lambda tree, checkouts: StartFeature(tree, options).run(checkouts))

		verb = "Would start" if report.pretend else "Started"
		console.print(f"[green]{verb} {report.branch} in {len(report.started)} checkouts.[/]")
		for checkout in report.started:
			console.print(f"  {checkout.name}: started")
		for checkout in report.switched:
			console.print(f"  {checkout.name}: existing branch")
		for checkout in report.skipped:
			console.print(f"  {checkout.name}: no branch {options.start_from}")
		if report.failures:
			details = "\n".join(f"{checkout.name}: {message}" for checkout, message in report.failures.items())
			show_warning(f"Could not start {report.branch} in {len(report.failures)} checkouts:\n{details}")
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, ConfigError, GitError) as e:
		exit_with_error(str(e), exception=e)
