"""Operations run across the checkouts of a project tree."""

from cactus.operations.changes import (
	collect_modified_checkouts,
	commit_incidental_changes,
	commit_message,
	detect_incidental_changes,
)
from cactus.operations.feature import FeatureOptions, FeatureReport, StartFeature
from cactus.operations.merge import MergeBranches, MergeOptions, MergeReport, validate_branch_name

__all__ = [
	"FeatureOptions",
	"FeatureReport",
	"MergeBranches",
	"MergeOptions",
	"MergeReport",
	"StartFeature",
	"collect_modified_checkouts",
	"commit_incidental_changes",
	"commit_message",
	"detect_incidental_changes",
	"validate_branch_name",
]
