"""Implementation of the checkouts command, listing the checkouts a scope resolves to."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.table import Table

from .options import (
	ConfigOpt,
	FamilyOpt,
	ForbidModifiedFlag,
	IncludeRootOpt,
	ProjectArg,
	ScopeOpt,
	load_config,
	scope_parameters,
)

logger = logging.getLogger(__name__)


def register_command(app: typer.Typer) -> None:
	"""Register the checkouts command with the CLI app."""

	@app.command(name="checkouts")
	def checkouts_command(
		project: ProjectArg = Path(),
		scope: ScopeOpt = None,
		family: FamilyOpt = None,
		include_root: IncludeRootOpt = None,
		forbid_modified: ForbidModifiedFlag = False,
		config_path: ConfigOpt = None,
	) -> None:
		"""Show the checkouts a scope resolves to, with their branch and state."""
		_checkouts_command_impl(project, scope, family, include_root, forbid_modified, config_path)


def _checkouts_command_impl(
	project: Path,
	scope: str | None,
	family: str | None,
	include_root: bool | None,
	forbid_modified: bool,
	config_path: Path | None,
) -> None:
	from cactus.errors import CactusError
	from cactus.git.utils import GitError
	from cactus.scope.scoped import ScopedCheckouts
	from cactus.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner
	from cactus.utils.config_loader import ConfigError
	from cactus.utils.log_setup import console

	try:
		config = load_config(config_path)
		scoped = ScopedCheckouts(
			project,
			scope_parameters(config, scope, include_root, family, pretend=False),
			forbids_local_modifications=forbid_modified,
		)
		with loading_spinner("Resolving checkouts..."):
			checkouts = scoped.with_project_tree(lambda _tree, resolved: resolved)

		table = Table(title=f"Scope {scoped.scope} for {scoped.project_family}")
		table.add_column("Checkout")
		table.add_column("Branch")
		table.add_column("State")
		table.add_column("Path")
		for checkout in checkouts:
			branch = checkout.current_branch()
			state = "[yellow]modified[/]" if checkout.is_dirty() else "[green]clean[/]"
			table.add_row(checkout.name, branch.name if branch else "(detached)", state, str(checkout.root))
		console.print(table)
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (CactusError, ConfigError, GitError) as e:
		exit_with_error(str(e), exception=e)
