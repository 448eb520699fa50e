"""Tests for the cactus command line."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cactus import __version__
from cactus.cli import app, main
from cactus.metadata.build_metadata import parse_properties
from tests.base import FileSystemTestBase, GitTestBase
from tests.conftest import skip_git_tests

runner = CliRunner()


@pytest.mark.cli
@pytest.mark.unit
class TestCliEntry:
	"""Test cases for the CLI entry points."""

	def test_main_function(self) -> None:
		"""Test main runs the app and returns its result."""
		with patch("cactus.cli.app") as mock_app:
			mock_app.return_value = 0
			assert main() == 0
			mock_app.assert_called_once()

	def test_version(self) -> None:
		"""Test the version option prints the version and exits."""
		result = runner.invoke(app, ["--version"])
		assert result.exit_code == 0
		assert f"cactus version: {__version__}" in result.stdout

	def test_commands_registered(self) -> None:
		"""Test every command is listed in the help."""
		result = runner.invoke(app, ["--help"])
		assert result.exit_code == 0
		for command in ("checkouts", "merge", "feature-start", "codeflowers", "lexakai", "filter-families", "metadata"):
			assert command in result.stdout


@pytest.mark.cli
@pytest.mark.fs
class TestMetadataCommand(FileSystemTestBase):
	"""Test cases for the metadata command."""

	def test_show_current(self) -> None:
		"""Test the current build properties are shown."""
		result = runner.invoke(app, ["metadata", str(self.temp_dir)])
		assert result.exit_code == 0
		assert "build-number = " in result.stdout
		assert "build-name = " in result.stdout

	def test_write(self) -> None:
		"""Test the metadata files are written for a project."""
		self.create_pom("project", "com.telenav.kivakit", "kivakit-core", "2.0.0")
		output = self.temp_dir / "metadata"
		result = runner.invoke(app, ["metadata", str(self.temp_dir / "project"), "--output", str(output)])
		assert result.exit_code == 0
		written = parse_properties((output / "project.properties").read_text(encoding="utf-8"))
		assert written["project-version"] == "2.0.0"
		assert written["project-name"] == "kivakit-core"
		assert (output / "build.properties").is_file()

	def test_write_without_project(self) -> None:
		"""Test a folder without a pom.xml is an error."""
		result = runner.invoke(app, ["metadata", str(self.temp_dir), "--output", str(self.temp_dir / "out")])
		assert result.exit_code == 1
		assert "Error Summary" in result.stdout


@pytest.mark.cli
@pytest.mark.git
@skip_git_tests
class TestScopedCommands(GitTestBase):
	"""Test cases for commands run against a submodule tree."""

	@pytest.fixture(autouse=True)
	def workspace(self, setup_temp_dir: None) -> None:  # noqa: ARG002
		"""Build a tree with a kivakit and a mesakit checkout."""
		self.root = self.build_tree(
			{
				"kivakit": ("com.telenav.kivakit", "kivakit-core"),
				"mesakit": ("com.telenav.mesakit", "mesakit-core"),
			}
		)

	def test_checkouts(self) -> None:
		"""Test the resolved checkouts are listed."""
		result = runner.invoke(app, ["checkouts", str(self.root / "kivakit"), "--no-include-root"])
		assert result.exit_code == 0
		assert "kivakit" in result.stdout
		assert "mesakit" not in result.stdout

	def test_bad_scope(self) -> None:
		"""Test an unknown scope fails the command."""
		result = runner.invoke(app, ["checkouts", str(self.root / "kivakit"), "-s", "bogus"])
		assert result.exit_code == 1
		assert "Error Summary" in result.stdout

	def test_pretend_merge(self) -> None:
		"""Test a pretend merge reports the plan and changes nothing."""
		kivakit = self.root / "kivakit"
		self.git(kivakit, "checkout", "-q", "-b", "feature/x")
		self.commit_file(kivakit, "feature.txt", "x")

		result = runner.invoke(app, ["merge", str(kivakit), "--from", "feature/x", "--into", "main", "--pretend"])

		assert result.exit_code == 0
		assert "Would merge in 1 checkouts." in result.stdout
		assert "tag x" in result.stdout
		assert self.git(kivakit, "rev-parse", "--abbrev-ref", "HEAD").strip() == "feature/x"
		assert self.git(kivakit, "tag") == ""

	def test_merge(self) -> None:
		"""Test a merge switches to the target, merges and tags."""
		kivakit = self.root / "kivakit"
		self.git(kivakit, "checkout", "-q", "-b", "feature/y")
		self.commit_file(kivakit, "feature.txt", "y")

		result = runner.invoke(app, ["merge", str(kivakit), "--from", "feature/y", "--into", "main", "--no-include-root"])

		assert result.exit_code == 0
		assert "Merged in 1 checkouts." in result.stdout
		assert (kivakit / "feature.txt").is_file()
		assert self.git(kivakit, "rev-parse", "--abbrev-ref", "HEAD").strip() == "main"
		assert self.git(kivakit, "tag").split() == ["y"]

	def test_families_need_family_scope(self) -> None:
		"""Test families with another scope are rejected."""
		result = runner.invoke(app, ["merge", str(self.root / "kivakit"), "-s", "all", "--families", "mesakit"])
		assert result.exit_code == 1
		assert "Cannot use families" in result.stdout

	def test_filter_families(self) -> None:
		"""Test projects outside the family get the properties."""
		result = runner.invoke(
			app, ["filter-families", str(self.root / "kivakit"), "--family", "kivakit", "-p", "skip.tests"]
		)
		assert result.exit_code == 0
		assert "mesakit-core: skip.tests=true" in result.stdout
		assert "workspace: skip.tests=true" in result.stdout
		assert "kivakit-core:" not in result.stdout

	def add_assets(self) -> Path:
		"""Add a kivakit-assets submodule to the tree."""
		assets = self.init_repo(self.temp_dir / "sources" / "kivakit-assets")
		self.git(self.root, "submodule", "add", "-q", str(assets), "kivakit-assets")
		return self.root / "kivakit-assets"

	def test_codeflowers(self) -> None:
		"""Test codeflowers data is written into the family's assets checkout."""
		self.add_assets()
		result = runner.invoke(app, ["codeflowers", str(self.root / "kivakit"), "--workers", "2"])
		assert result.exit_code == 0
		data = self.root / "kivakit-assets" / "docs" / "1.0.0" / "codeflowers" / "site" / "data"
		assert (data / "kivakit-core.wc").read_text(encoding="utf-8") == "3 Example.java\n"
		assert not (data / "mesakit-core.json").exists()

	def test_codeflowers_inconsistent_versions(self) -> None:
		"""Test a family whose projects disagree about their version fails unless tolerated."""
		self.add_assets()
		self.create_pom("workspace/kivakit/extra", "com.telenav.kivakit", "kivakit-extra", "2.0.0")
		result = runner.invoke(app, ["codeflowers", str(self.root / "kivakit")])
		assert result.exit_code == 1
		assert "Not all projects in family" in result.stdout

	@pytest.mark.parametrize("source", ["environment", "yaml-scalar", "yaml-list"])
	def test_codeflowers_tolerated_family(self, source: str, monkeypatch: pytest.MonkeyPatch) -> None:
		"""Test a tolerated family is read whole from the environment or a config file."""
		assets = self.add_assets()
		self.create_pom("workspace/kivakit/extra", "com.telenav.kivakit", "kivakit-extra", "2.0.0")
		args = ["codeflowers", str(self.root / "kivakit"), "--workers", "1"]
		if source == "environment":
			monkeypatch.setenv("CACTUS_CODEFLOWERS_TOLERATE_VERSION_INCONSISTENCIES", "kivakit")
		else:
			value = "kivakit" if source == "yaml-scalar" else "[kivakit]"
			config = self.create_test_file("cactus.yml", f"codeflowers:\n  tolerate_version_inconsistencies: {value}\n")
			args += ["--config", str(config)]

		result = runner.invoke(app, args)

		assert result.exit_code == 0, result.stdout
		assert len(list((assets / "docs").glob("*/codeflowers/site/data/kivakit-core.wc"))) == 1

	def test_codeflowers_skip(self) -> None:
		"""Test a skipped run writes nothing."""
		assets = self.add_assets()
		result = runner.invoke(app, ["codeflowers", str(self.root / "kivakit"), "--skip"])
		assert result.exit_code == 0
		assert not (assets / "docs").exists()

	@pytest.mark.parametrize("command", ["checkouts", "merge"])
	def test_forbid_modified(self, command: str) -> None:
		"""Test a modified checkout in scope fails the command before anything changes."""
		kivakit = self.root / "kivakit"
		self.git(kivakit, "checkout", "-q", "-b", "feature/z")
		(kivakit / "wip.txt").write_text("wip\n", encoding="utf-8")

		result = runner.invoke(app, [command, str(kivakit), "--forbid-modified", "--no-include-root"])

		assert result.exit_code == 1
		assert "locally modified" in result.stdout
		assert self.git(kivakit, "rev-parse", "--abbrev-ref", "HEAD").strip() == "feature/z"

	def test_feature_start(self) -> None:
		"""Test a feature branch is started in the checkouts of the family."""
		result = runner.invoke(
			app, ["feature-start", "login", str(self.root / "kivakit"), "--from", "main", "--no-include-root"]
		)
		assert result.exit_code == 0, result.stdout
		assert "Started feature/login in 1 checkouts." in result.stdout
		assert self.git(self.root / "kivakit", "rev-parse", "--abbrev-ref", "HEAD").strip() == "feature/login"
		assert self.git(self.root / "mesakit", "branch", "--list", "feature/login") == ""

	def test_feature_start_pretend(self) -> None:
		"""Test a pretend feature start reports the plan and creates nothing."""
		result = runner.invoke(
			app, ["feature-start", "feature/login", str(self.root / "kivakit"), "--from", "main", "--pretend"]
		)
		assert result.exit_code == 0
		assert "Would start feature/login in 2 checkouts." in result.stdout
		assert self.git(self.root / "kivakit", "branch", "--list", "feature/login") == ""

	def test_feature_start_bad_name(self) -> None:
		"""Test a malformed feature name fails the command."""
		result = runner.invoke(app, ["feature-start", "bad..name", str(self.root / "kivakit")])
		assert result.exit_code == 1
		assert "Invalid branch name" in result.stdout

	def test_filter_nothing(self) -> None:
		"""Test nothing happens without properties."""
		result = runner.invoke(app, ["filter-families", str(self.root), "--family", "kivakit"])
		assert result.exit_code == 0
		assert "Nothing to filter." in result.stdout


@pytest.mark.cli
@pytest.mark.fs
class TestLexakaiCommand(FileSystemTestBase):
	"""Test cases for the lexakai command."""

	def test_skip(self) -> None:
		"""Test a skipped run succeeds without a jar."""
		project = self.create_pom("project", "com.telenav.kivakit", "kivakit-core").parent
		result = runner.invoke(app, ["lexakai", str(project), "--skip", "-o", str(self.temp_dir / "docs")])
		assert result.exit_code == 0

	def test_missing_jar(self) -> None:
		"""Test a missing jar fails the command."""
		project = self.create_pom("project", "com.telenav.kivakit", "kivakit-core").parent
		result = runner.invoke(app, ["lexakai", str(project), "--jar", str(self.temp_dir / "missing.jar")])
		assert result.exit_code == 1
		assert "Could not find lexakai" in result.stdout


def test_project_must_exist(tmp_path: Path) -> None:
	"""Test a missing project directory is a usage error."""
	result = runner.invoke(app, ["metadata", str(tmp_path / "missing")])
	assert result.exit_code == 2
