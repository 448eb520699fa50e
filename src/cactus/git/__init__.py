"""Git checkouts and the git commands cactus runs against them."""

from cactus.git.checkout import Branch, Branches, GitCheckout
from cactus.git.utils import GitError, run_git_command

__all__ = [
	"Branch",
	"Branches",
	"GitCheckout",
	"GitError",
	"run_git_command",
]
