"""Maven projects and the checkout tree containing them."""

from cactus.maven.pom import Coordinates, Pom
from cactus.maven.tree import ProjectTree

__all__ = ["Coordinates", "Pom", "ProjectTree"]
