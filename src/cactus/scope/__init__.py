"""Project families and scopes."""

from cactus.scope.family import ProjectFamily, environment_variable_name, family, parent_family
from cactus.scope.scope import Scope, resolve

__all__ = [
	"ProjectFamily",
	"Scope",
	"environment_variable_name",
	"family",
	"parent_family",
	"resolve",
]
