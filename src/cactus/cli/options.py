"""Command line option types shared by the cactus commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from cactus.scope.scoped import ScopeParameters
from cactus.utils.config_loader import ConfigLoader

ProjectArg = Annotated[
	Path,
	typer.Argument(
		exists=True,
		file_okay=False,
		help="Directory of the Maven project to run against",
		show_default=True,
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file",
	),
]

ScopeOpt = Annotated[
	str | None,
	typer.Option(
		"--scope",
		"-s",
		help="Checkouts to operate on: just_this, family, family_or_child_family, all or same_group_id",
	),
]

FamilyOpt = Annotated[
	str | None,
	typer.Option(
		"--family",
		help="Family to use instead of the project's own (with the family scopes)",
	),
]

IncludeRootOpt = Annotated[
	bool | None,
	typer.Option(
		"--include-root/--no-include-root",
		help="Also operate on the submodule root",
		show_default=False,
	),
]

PretendFlag = Annotated[
	bool,
	typer.Option(
		"--pretend",
		"-n",
		help="Log what would be done without changing anything",
	),
]

ForbidModifiedFlag = Annotated[
	bool,
	typer.Option(
		"--forbid-modified",
		help="Fail before changing anything if a checkout in scope has local modifications",
	),
]

FamiliesOpt = Annotated[
	str | None,
	typer.Option(
		"--families",
		help="Comma-delimited families to operate on",
	),
]


def load_config(config_path: Path | None) -> ConfigLoader:
	"""Load configuration, from ``config_path`` if given."""
	return ConfigLoader.get_instance(config_file=str(config_path) if config_path else None, reload=config_path is not None)


def scope_parameters(
	config: ConfigLoader,
	scope: str | None,
	include_root: bool | None,
	family: str | None,
	pretend: bool,
) -> ScopeParameters:
	"""Combine scope options with configured defaults; command line values win."""
	return ScopeParameters(
		scope=scope or config.get("scope.default", "family"),
		include_root=config.get("scope.include_root", True) if include_root is None else include_root,
		family=family,
		pretend=pretend,
	)
