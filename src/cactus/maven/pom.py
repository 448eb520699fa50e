"""Maven project descriptors, read from ``pom.xml`` files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from cactus.errors import ConfigurationError

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

POM_FILE = "pom.xml"


def _find(el: ET.Element, tag: str) -> ET.Element | None:
	"""Find a direct child element, with or without the Maven namespace."""
	result = el.find(f"m:{tag}", NS)
	if result is not None:
		return result
	return el.find(tag)


def _text(el: ET.Element | None, tag: str) -> str | None:
	"""Return the stripped text of a child element, or None if missing or empty."""
	if el is None:
		return None
	child = _find(el, tag)
	if child is not None and child.text and child.text.strip():
		return child.text.strip()
	return None


@dataclass(frozen=True, order=True)
class Coordinates:
	"""Maven group id, artifact id and version."""

	group_id: str
	artifact_id: str
	version: str

	def __str__(self) -> str:
		"""Return ``group:artifact:version``."""
		return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class Pom:
	"""
	A Maven project.

	Attributes:
	    group_id: The project's group id, inherited from the parent if not declared
	    artifact_id: The project's artifact id
	    version: The project's version, inherited from the parent if not declared
	    packaging: Packaging type; ``pom`` marks an aggregator with no sources
	    path: Location of the ``pom.xml``
	    parent: Coordinates of the parent project, if any

	"""

	group_id: str
	artifact_id: str
	version: str
	packaging: str
	path: Path
	parent: Coordinates | None = None

	@classmethod
	def from_file(cls, path: Path) -> Pom:
		"""
		Parse a ``pom.xml``.

		Args:
		    path: The pom file, or a directory containing one

		Returns:
		    The parsed project

		Raises:
		    ConfigurationError: If the file is missing, malformed or lacks coordinates

		"""
		path = Path(path)
		if path.is_dir():
			path = path / POM_FILE
		try:
			root = ET.parse(path).getroot()  # noqa: S314
		except (OSError, ET.ParseError) as e:
			msg = f"Could not read {path}: {e}"
			raise ConfigurationError(msg) from e

		parent_el = _find(root, "parent")
		parent = None
		if parent_el is not None:
			parent = Coordinates(
				_text(parent_el, "groupId") or "",
				_text(parent_el, "artifactId") or "",
				_text(parent_el, "version") or "",
			)

		artifact_id = _text(root, "artifactId")
		group_id = _text(root, "groupId") or (parent.group_id if parent else None)
		version = _text(root, "version") or (parent.version if parent else None)
		if not artifact_id or not group_id:
			msg = f"{path} does not declare a group id and artifact id"
			raise ConfigurationError(msg)

		return cls(
			group_id=group_id,
			artifact_id=artifact_id,
			version=version or "",
			packaging=_text(root, "packaging") or "jar",
			path=path.resolve(),
			parent=parent,
		)

	@property
	def project_folder(self) -> Path:
		"""The directory containing the ``pom.xml``."""
		return self.path.parent

	@property
	def is_pom_project(self) -> bool:
		"""Whether this is an aggregator/parent project with no sources of its own."""
		return self.packaging == "pom"

	@property
	def coordinates(self) -> Coordinates:
		"""The project's coordinates."""
		return Coordinates(self.group_id, self.artifact_id, self.version)

	def __str__(self) -> str:
		"""Return the coordinates."""
		return str(self.coordinates)
