"""
Build numbers, build names and the metadata files that record them.

Builds are numbered by days since 2020-12-05 (day 18601 of the Unix
epoch, build zero, "blue monkey"). Each number maps to a memorable
adjective-noun name. The metadata written for a project consists of two
``key = value`` files:

``build.properties``::

    build-number = 104
    build-date = 2021.03.19
    build-name = silver hippo

``project.properties``::

    project-name = kivakit-application
    project-version = 1.3.5
    project-group-id = com.telenav.kivakit
    project-artifact-id = kivakit-application

"""

from __future__ import annotations

import logging
import re
from datetime import UTC, date, datetime
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)

EPOCH_DAY = 18_601
EPOCH = date(2020, 12, 5)

BUILD_PROPERTIES = "build.properties"
PROJECT_PROPERTIES = "project.properties"

NOUNS = (
	"monkey",
	"gorilla",
	"turtle",
	"piglet",
	"hippo",
	"penguin",
	"koala",
	"otter",
	"panda",
	"zebra",
	"lemur",
	"badger",
	"dolphin",
	"falcon",
	"beaver",
	"tiger",
	"walrus",
	"giraffe",
	"kangaroo",
	"hedgehog",
)

ADJECTIVES = (
	"blue",
	"orange",
	"happy",
	"sparkling",
	"tired",
	"silver",
	"funky",
	"mellow",
	"golden",
	"quiet",
	"lucky",
	"brave",
	"shiny",
	"gentle",
	"purple",
	"clever",
)

_PROPERTY = re.compile(r"(?P<key>[\w-]+?)\s*=\s*(?P<value>.*)")


def today_utc() -> date:
	"""The current date in UTC."""
	return datetime.now(UTC).date()


def current_build_number(today: date | None = None) -> int:
	"""Days between the build epoch and ``today`` (defaults to the current UTC date)."""
	return (today or today_utc()).toordinal() - EPOCH.toordinal()


def build_name(number: int) -> str:
	"""
	Name a build number.

	The noun cycles fastest; the adjective advances once per full cycle of
	nouns, so consecutive builds get different names.

	"""
	noun = NOUNS[number % len(NOUNS)]
	adjective = ADJECTIVES[(number // len(NOUNS)) % len(ADJECTIVES)]
	return f"{adjective} {noun}"


def parse_properties(text: str | None) -> dict[str, str]:
	"""Parse ``key = value`` lines; anything else is ignored."""
	result = {}
	for line in (text or "").splitlines():
		match = _PROPERTY.match(line.strip())
		if match:
			result[match.group("key")] = match.group("value").strip()
	return result


def format_properties(properties: dict[str, str]) -> str:
	"""Render properties as aligned ``key = value`` lines."""
	width = max((len(key) for key in properties), default=0)
	return "".join(f"{key.ljust(width)} = {value}\n" for key, value in properties.items())


def current_build_properties(today: date | None = None) -> dict[str, str]:
	"""The build properties of a build made on ``today``."""
	today = today or today_utc()
	number = current_build_number(today)
	return {
		"build-number": str(number),
		"build-date": today.strftime("%Y.%m.%d"),
		"build-name": build_name(number),
	}


class BuildMetadata:
	"""Build and project properties read from a metadata folder."""

	def __init__(self, folder: Path | None, today: date | None = None) -> None:
		"""
		Initialize the metadata.

		Args:
		    folder: Folder holding the properties files; None for the current build
		    today: Date of the current build (defaults to the current UTC date)

		"""
		self.folder = None if folder is None else Path(folder)
		self._today = today

	@classmethod
	def current(cls, today: date | None = None) -> BuildMetadata:
		"""Metadata of a build happening now, derived from the date."""
		return cls(None, today)

	def _read(self, name: str) -> dict[str, str]:
		if self.folder is None:
			return {}
		path = self.folder / name
		try:
			return parse_properties(path.read_text(encoding="utf-8"))
		except FileNotFoundError:
			logger.debug("No %s in %s", name, self.folder)
			return {}

	@cached_property
	def build_properties(self) -> dict[str, str]:
		"""The ``build-number``, ``build-date`` and ``build-name`` properties."""
		if self.folder is None:
			return current_build_properties(self._today)
		return self._read(BUILD_PROPERTIES)

	@cached_property
	def project_properties(self) -> dict[str, str]:
		"""The ``project-*`` properties."""
		return self._read(PROJECT_PROPERTIES)


def project_properties(project: Pom) -> dict[str, str]:
	"""The project properties recorded for a project."""
	return {
		"project-name": project.artifact_id,
		"project-version": project.version,
		"project-group-id": project.group_id,
		"project-artifact-id": project.artifact_id,
	}


def write_metadata(project: Pom, folder: Path, today: date | None = None) -> list[Path]:
	"""
	Write ``build.properties`` and ``project.properties`` for a project.

	Returns:
	    The files written

	"""
	folder = Path(folder)
	folder.mkdir(parents=True, exist_ok=True)
	build_file = folder / BUILD_PROPERTIES
	project_file = folder / PROJECT_PROPERTIES
	build_file.write_text(format_properties(current_build_properties(today)), encoding="utf-8")
	project_file.write_text(format_properties(project_properties(project)), encoding="utf-8")
	logger.info("Wrote build metadata for %s into %s", project, folder)
	return [build_file, project_file]
