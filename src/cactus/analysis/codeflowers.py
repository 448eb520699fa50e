"""
Write codeflowers data files from source scan results.

For each scanned project two files are written: ``<artifact>.json``, the
nested name/children tree the codeflowers visualization reads, and
``<artifact>.wc``, one ``<score> <path>`` line per source file.

"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)


def codeflowers_tree(name: str, scores: dict[Path, int]) -> dict[str, Any]:
	"""
	Nest per-file scores into a codeflowers tree.

	Args:
	    name: Name of the root node
	    scores: Scores keyed by relative path

	Returns:
	    A ``{"name", "children"}`` tree whose leaves carry a ``size``

	"""
	root: dict[str, Any] = {"name": name, "children": []}
	folders: dict[tuple[str, ...], dict[str, Any]] = {(): root}
	for path, score in sorted(scores.items()):
		parts = Path(path).parts
		for depth in range(1, len(parts)):
			key = parts[:depth]
			if key not in folders:
				node = {"name": parts[depth - 1], "children": []}
				folders[key[:-1]]["children"].append(node)
				folders[key] = node
		folders[parts[:-1]]["children"].append({"name": parts[-1], "size": score})
	return root


def word_count_lines(scores: dict[Path, int]) -> str:
	"""Render scores as ``<score> <path>`` lines ordered by path."""
	return "".join(f"{score} {Path(path).as_posix()}\n" for path, score in sorted(scores.items()))


class CodeflowersJsonGenerator:
	"""Scan consumer writing codeflowers files for one family."""

	def __init__(self, family: str, folder: Path, indent: bool = False, pretend: bool = False) -> None:
		"""
		Initialize the generator.

		Args:
		    family: The family being scanned
		    folder: Folder the data files are written into
		    indent: Indent the JSON for human readability
		    pretend: Log instead of writing

		"""
		self.family = family
		self.folder = Path(folder)
		self.indent = indent
		self.pretend = pretend
		self.written: list[Path] = []
		self._lock = threading.Lock()

	def __call__(self, pom: Pom, scores: dict[Path, int]) -> None:
		"""Write the files for one scanned project."""
		json_file = self.folder / f"{pom.artifact_id}.json"
		wc_file = self.folder / f"{pom.artifact_id}.wc"
		if self.pretend:
			logger.info("Would write %s and %s (%d sources)", json_file, wc_file, len(scores))
			return
		tree = codeflowers_tree(pom.artifact_id, scores)
		text = json.dumps(tree, indent=2 if self.indent else None, separators=None if self.indent else (",", ":"))
		with self._lock:
			self.folder.mkdir(parents=True, exist_ok=True)
			json_file.write_text(text + "\n", encoding="utf-8")
			wc_file.write_text(word_count_lines(scores), encoding="utf-8")
			self.written.extend((json_file, wc_file))
		logger.debug("Wrote codeflowers for %s into %s", pom, self.folder)
