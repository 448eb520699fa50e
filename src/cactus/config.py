"""Default configuration settings for the cactus tool."""

DEFAULT_CONFIG = {
	# Scope resolution defaults shared by every scoped command
	"scope": {
		# One of: just_this, family, family_or_child_family, all, same_group_id
		"default": "family",
		# Also operate on the submodule root so it can record new child commits
		"include_root": True,
	},
	# Merge command configuration
	"merge": {
		# Branch to merge into
		"into": "develop",
		# Tag the merge with the last path segment of the merged branch
		"tag": True,
		# Push after merging
		"push": False,
		# Delete the merged branch after a successful merge
		"delete_merged_branch": False,
	},
	# Feature branch configuration
	"feature": {
		# Branch new feature branches start from
		"start_from": "develop",
		# Prefix of feature branch names
		"prefix": "feature/",
	},
	# Source scanning configuration
	"scan": {
		# Worker count for the source scanner (0 = number of CPUs)
		"workers": 0,
		# Source folder of a project, relative to the project folder
		"source_folder": "src/main/java",
	},
	# Codeflowers generation configuration
	"codeflowers": {
		# Indent generated JSON for human readability
		"indent": False,
		# Families whose projects may disagree about their version
		"tolerate_version_inconsistencies": [],
		# Resolve the scope but generate nothing
		"skip": False,
	},
	# Lexakai documentation generator configuration
	"lexakai": {
		"version": "1.0.7",
		"overwrite_resources": True,
		"update_readme": True,
		# Log the arguments passed to lexakai
		"verbose": True,
		# Local Maven repository the lexakai jar is looked up in
		"repository": "~/.m2/repository",
		# Java executable used to run the jar
		"java": "java",
	},
	# Git configuration
	"git": {
		# Remote used when pushing a branch that does not exist remotely yet
		"remote": "origin",
	},
}
