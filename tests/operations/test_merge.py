"""Tests for the multi-checkout merge workflow."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, call

import pytest

from cactus.errors import ConfigurationError
from cactus.git.checkout import Branch, Branches, GitCheckout
from cactus.git.utils import GitError
from cactus.maven.tree import ProjectTree
from cactus.operations.merge import MergeBranches, MergeOptions, tag_name, validate_branch_name
from cactus.scope.family import ProjectFamily
from cactus.scope.scope import Scope
from tests.base import GitTestBase
from tests.conftest import skip_git_tests


def _checkout(name: str) -> Mock:
	checkout = Mock(spec=GitCheckout)
	checkout.name = name
	checkout.logging_name = name
	return checkout


def _branches(current: str | None, local: list[str], remote: list[str] | None = None) -> Branches:
	return Branches(
		current=Branch(current) if current else None,
		local=tuple(Branch(name) for name in local),
		remote=tuple(Branch(name, "origin") for name in remote or []),
	)


def _tree(branches: dict[Mock, Branches]) -> MagicMock:
	tree = MagicMock(spec=ProjectTree)
	tree.root = _checkout("root")
	tree.branches.side_effect = lambda checkout: branches[checkout]
	return tree


@pytest.mark.unit
class TestValidateBranchName:
	"""Test cases for branch name validation."""

	@pytest.mark.parametrize("name", ["develop", "feature/login", "release/1.2.3", "hotfix-1"])
	def test_valid(self, name: str) -> None:
		"""Test ordinary branch names are accepted."""
		validate_branch_name(name, nullable=False)

	@pytest.mark.parametrize(
		"name",
		["", "has space", "a..b", "-leading", "trailing/", "x.lock", "a~b", "a:b", "what?", "a//b", "a@{b", ".hidden", "a/.b"],
	)
	def test_invalid(self, name: str) -> None:
		"""Test names git would refuse are configuration errors."""
		with pytest.raises(ConfigurationError, match="Invalid branch name"):
			validate_branch_name(name, nullable=True)

	def test_none(self) -> None:
		"""Test a missing name is only accepted when nullable."""
		validate_branch_name(None, nullable=True)
		with pytest.raises(ConfigurationError):
			validate_branch_name(None, nullable=False)


@pytest.mark.unit
def test_tag_name() -> None:
	"""Test the tag drops everything up to the last slash."""
	assert tag_name("feature/login") == "login"
	assert tag_name(Branch("feature/team/login")) == "login"
	assert tag_name("login") == "login"
	assert tag_name("feature/") == "feature/"
	assert tag_name("/login") == "/login"


@pytest.mark.unit
class TestMergeOptions:
	"""Test cases for MergeOptions validation."""

	def test_families_need_family_scope(self) -> None:
		"""Test families combined with another scope fail before anything runs."""
		with pytest.raises(ConfigurationError, match="Cannot use families"):
			MergeOptions(families="kivakit").validate(Scope.ALL)
		MergeOptions(families="kivakit").validate(Scope.FAMILY)
		MergeOptions(families="  ").validate(Scope.ALL)

	def test_bad_branch(self) -> None:
		"""Test branch names are validated."""
		with pytest.raises(ConfigurationError):
			MergeOptions(merge_into="bad name").validate(Scope.FAMILY)


@pytest.mark.unit
class TestMergeBranches:
	"""Test cases for MergeBranches with fake checkouts."""

	def test_full_workflow(self) -> None:
		"""Test merge, tag, delete and push happen in order."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches("feature/login", ["develop", "feature/login"], ["develop"])})
		options = MergeOptions(delete_merged_branch=True, push=True, include_root=False)
		report = MergeBranches(tree, options).run([checkout])

		assert checkout.method_calls == [
			call.switch_to_branch("develop"),
			call.merge("feature/login"),
			call.tag("login", True),
			call.delete_branch("feature/login", "develop", False),
			call.push(),
		]
		assert report.merged == [checkout]
		assert report.tags == {checkout: "login"}
		assert report.deleted == {checkout: "feature/login"}
		assert report.pushed == [checkout]
		assert report.succeeded
		tree.invalidate_cache.assert_called_once()

	def test_push_creates_missing_remote_branch(self) -> None:
		"""Test pushing a target branch with no remote counterpart creates it."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches("feature/x", ["develop", "feature/x"])})
		MergeBranches(tree, MergeOptions(push=True, include_root=False, remote="upstream")).run([checkout])
		checkout.push_creating_branch.assert_called_once_with("upstream")
		checkout.push.assert_not_called()

	def test_remote_only_target_is_materialized(self) -> None:
		"""Test a target branch existing only remotely is created locally with tracking."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches("feature/x", ["feature/x"], ["develop"])})
		MergeBranches(tree, MergeOptions(include_root=False, tag=False)).run([checkout])
		checkout.create_and_switch_to_branch.assert_called_once_with("develop", "origin/develop")
		checkout.merge.assert_called_once_with("feature/x")

	def test_secondary_branch_first(self) -> None:
		"""Test the secondary branch is merged before the primary one."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches("feature/x", ["develop", "feature/x", "release"])})
		options = MergeOptions(also_merge_into="release", tag=False, include_root=False)
		report = MergeBranches(tree, options).run([checkout])
		assert checkout.method_calls == [
			call.switch_to_branch("release"),
			call.merge("feature/x"),
			call.switch_to_branch("develop"),
			call.merge("feature/x"),
		]
		assert report.also_merged == [checkout]

	def test_untouched_checkouts_skipped(self) -> None:
		"""Test checkouts missing either branch, or merging into themselves, are skipped."""
		no_source = _checkout("no-source")
		no_target = _checkout("no-target")
		same = _checkout("same")
		tree = _tree(
			{
				no_source: _branches("main", ["develop", "main"]),
				no_target: _branches("feature/x", ["feature/x"]),
				same: _branches("develop", ["develop"]),
			}
		)
		options = MergeOptions(merge_from="feature/x", include_root=False)
		report = MergeBranches(tree, options).run([no_source, no_target, same])
		assert report.merged == []
		for checkout in (no_source, no_target, same):
			assert checkout.method_calls == []

	def test_detached_head_skipped(self) -> None:
		"""Test a checkout with no current branch has nothing to merge."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches(None, ["develop"])})
		assert MergeBranches(tree, MergeOptions(include_root=False)).plan([checkout]) == []

	def test_failure_does_not_stop_siblings(self) -> None:
		"""Test a git failure abandons only the failing checkout."""
		broken = _checkout("broken")
		broken.merge.side_effect = GitError("conflict")
		healthy = _checkout("healthy")
		tree = _tree(
			{
				broken: _branches("feature/x", ["develop", "feature/x"]),
				healthy: _branches("feature/x", ["develop", "feature/x"]),
			}
		)
		report = MergeBranches(tree, MergeOptions(include_root=False)).run([broken, healthy])
		assert report.failures == {broken: "conflict"}
		assert report.merged == [healthy]
		broken.tag.assert_not_called()
		healthy.tag.assert_called_once_with("x", True)
		assert not report.succeeded

	def test_pretend_mutates_nothing(self) -> None:
		"""Test pretend mode computes the same decisions without git calls."""
		checkout = _checkout("a")
		tree = _tree({checkout: _branches("feature/login", ["develop", "feature/login"])})
		options = MergeOptions(pretend=True, push=True, delete_merged_branch=True, include_root=False)
		report = MergeBranches(tree, options).run([checkout])
		assert checkout.method_calls == []
		assert report.pretend
		assert report.merged == [checkout]
		assert report.tags == {checkout: "login"}

	def test_root_included(self) -> None:
		"""Test the root is considered when requested."""
		child = _checkout("child")
		tree = _tree({})
		branches = {child: _branches("main", ["main"]), tree.root: _branches("feature/x", ["develop", "feature/x"])}
		tree.branches.side_effect = lambda checkout: branches[checkout]
		report = MergeBranches(tree, MergeOptions(include_root=True, tag=False)).run([child])
		assert report.merged == [tree.root]

	def test_invalidates_cache_on_error(self) -> None:
		"""Test the tree's caches are dropped even if planning fails."""
		tree = _tree({})
		tree.branches.side_effect = GitError("unreadable")
		with pytest.raises(GitError):
			MergeBranches(tree, MergeOptions(include_root=False)).run([_checkout("a")])
		tree.invalidate_cache.assert_called_once()

	def test_apply_families(self) -> None:
		"""Test other families replace the resolved checkouts only with the family scope."""
		tree = _tree({})
		replacement = [_checkout("mesakit")]
		tree.checkouts_in_families.return_value = replacement
		resolved = [_checkout("kivakit")]
		own = ProjectFamily("kivakit")

		merger = MergeBranches(tree, MergeOptions(families="mesakit"))
		assert merger.apply_families(resolved, Scope.FAMILY, own) == replacement
		tree.checkouts_in_families.assert_called_once_with([ProjectFamily("mesakit")])
		assert merger.apply_families(resolved, Scope.ALL, own) == resolved
		assert MergeBranches(tree, MergeOptions(families="kivakit")).apply_families(resolved, Scope.FAMILY, own) == resolved
		assert MergeBranches(tree, MergeOptions()).apply_families(resolved, Scope.FAMILY, own) == resolved


@pytest.mark.git
@skip_git_tests
class TestMergeInRepository(GitTestBase):
	"""Test cases for merging in real repositories."""

	def _feature_repo(self) -> GitCheckout:
		repo = self.init_repo(self.temp_dir / "repo")
		self.git(repo, "branch", "develop")
		self.git(repo, "checkout", "-q", "-b", "feature/login")
		self.commit_file(repo, "login.txt", "login\n", "Add login")
		return GitCheckout(repo)

	def test_merge_and_tag(self) -> None:
		"""Test the feature branch is merged into develop and tagged with its last segment."""
		checkout = self._feature_repo()
		repo = checkout.root
		# An older tag of the same name is replaced
		self.git(repo, "tag", "login", "main")
		tree = ProjectTree(checkout)

		report = MergeBranches(tree, MergeOptions()).run([tree.root])

		assert report.failures == {}
		assert self.git(repo, "rev-parse", "--abbrev-ref", "HEAD").strip() == "develop"
		assert (repo / "login.txt").is_file()
		assert self.git(repo, "rev-parse", "login^{commit}") == self.git(repo, "rev-parse", "develop")
		assert tree.root.current_branch() == Branch("develop")

	def test_remote_only_target(self) -> None:
		"""Test a develop branch existing only on the remote is created locally, tracking it."""
		source = self.init_repo(self.temp_dir / "source")
		self.git(source, "branch", "develop")
		clone = self.temp_dir / "clone"
		self.git(self.temp_dir, "clone", "-q", str(source), str(clone))
		self.git(clone, "checkout", "-q", "-b", "feature/login")
		self.commit_file(clone, "login.txt", "login\n")
		tree = ProjectTree(GitCheckout(clone))

		report = MergeBranches(tree, MergeOptions()).run([tree.root])

		assert report.merged == [tree.root]
		assert self.git(clone, "rev-parse", "--abbrev-ref", "develop@{upstream}").strip() == "origin/develop"
		assert self.git(clone, "rev-parse", "--abbrev-ref", "HEAD").strip() == "develop"

	def test_pretend_leaves_repository_unchanged(self) -> None:
		"""Test pretend mode changes no branch, tag or commit."""
		checkout = self._feature_repo()
		repo = checkout.root
		develop = self.git(repo, "rev-parse", "develop")
		tree = ProjectTree(checkout)

		report = MergeBranches(tree, MergeOptions(pretend=True, delete_merged_branch=True)).run([tree.root])

		assert report.tags == {tree.root: "login"}
		assert self.git(repo, "rev-parse", "--abbrev-ref", "HEAD").strip() == "feature/login"
		assert self.git(repo, "rev-parse", "develop") == develop
		assert self.git(repo, "tag", "--list").strip() == ""
		assert "feature/login" in self.git(repo, "branch", "--list")

	def test_delete_merged_branch(self) -> None:
		"""Test the merged branch is deleted after merging."""
		checkout = self._feature_repo()
		tree = ProjectTree(checkout)
		MergeBranches(tree, MergeOptions(delete_merged_branch=True, tag=False)).run([tree.root])
		assert "feature/login" not in self.git(checkout.root, "branch", "--list")
