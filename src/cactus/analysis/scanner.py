"""
Score every source file of many Maven projects in parallel.

Projects are pushed onto one shared stack which a set of workers drains,
one project at a time. The calling thread is one of the workers, and
``scan`` returns only once every worker has found the stack empty.

"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Callable, Iterable

	from cactus.maven.pom import Pom

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_FOLDER = "src/main/java"


class WordCount:
	"""Scores a file by its number of whitespace-delimited words."""

	def __call__(self, path: Path) -> int:
		"""Count the words in a file."""
		with path.open(encoding="utf-8", errors="replace") as f:
			return sum(len(line.split()) for line in f)


class SourcesScanner:
	"""Walks a folder and scores each file in it."""

	def __init__(self, scorer: Callable[[Path], int]) -> None:
		"""
		Initialize the scanner.

		Args:
		    scorer: Computes the score of one file

		"""
		self.scorer = scorer

	def scan(self, folder: Path, callback: Callable[[Path, int], object]) -> None:
		"""
		Score every regular file beneath a folder.

		Args:
		    folder: The folder to walk
		    callback: Receives the path and score of each file

		"""
		for directory, dirnames, filenames in os.walk(folder):
			dirnames.sort()
			current = Path(directory)
			for name in sorted(filenames):
				path = current / name
				if path.is_file():
					callback(path, self.scorer(path))


def scan_project(scanner: SourcesScanner, pom: Pom, source_folder: str = DEFAULT_SOURCE_FOLDER) -> dict[Path, int] | None:
	"""
	Score the sources of one project.

	Returns:
	    Scores keyed by path relative to the source folder and ordered by
	    path, or None if the project has no source folder

	"""
	folder = pom.project_folder / source_folder
	if not folder.is_dir():
		return None
	scores: dict[Path, int] = {}

	def record(path: Path, score: int) -> None:
		scores[path.relative_to(folder)] = score

	scanner.scan(folder, record)
	return dict(sorted(scores.items()))


class MavenProjectsScanner:
	"""Scans the sources of many projects concurrently."""

	def __init__(
		self,
		scorer: Callable[[Path], int],
		poms: Iterable[Pom],
		workers: int | None = None,
		source_folder: str = DEFAULT_SOURCE_FOLDER,
	) -> None:
		"""
		Initialize the scanner.

		Args:
		    scorer: Computes the score of one source file
		    poms: Projects to scan; aggregator projects are left out
		    workers: Number of workers including the caller (defaults to the CPU count)
		    source_folder: Source folder relative to each project folder

		"""
		self.scanner = SourcesScanner(scorer)
		self.workers = max(1, workers or os.cpu_count() or 1)
		self.source_folder = source_folder
		# deque.append and deque.pop are atomic, so workers share it without a lock
		self._pending: deque[Pom] = deque(pom for pom in poms if not pom.is_pom_project)

	@property
	def pending(self) -> int:
		"""Number of projects not yet taken by a worker."""
		return len(self._pending)

	def scan(self, consumer: Callable[[Pom, dict[Path, int]], object]) -> None:
		"""
		Scan every project, blocking until all have been attempted.

		Args:
		    consumer: Receives each scanned project and its scores; may be
		        called from several threads at once

		"""
		logger.debug("Scanning %d projects with %d workers", self.pending, self.workers)
		if self.workers == 1:
			self._scan_loop(consumer)
			return
		with ThreadPoolExecutor(max_workers=self.workers - 1, thread_name_prefix="scan") as executor:
			futures = [executor.submit(self._scan_loop, consumer) for _ in range(self.workers - 1)]
			self._scan_loop(consumer)
			wait(futures)

	def scan_all(self) -> dict[Pom, dict[Path, int]]:
		"""Scan every project and collect the results."""
		results: dict[Pom, dict[Path, int]] = {}
		lock = threading.Lock()

		def collect(pom: Pom, scores: dict[Path, int]) -> None:
			with lock:
				results[pom] = scores

		self.scan(collect)
		return results

	def _scan_loop(self, consumer: Callable[[Pom, dict[Path, int]], object]) -> None:
		while True:
			try:
				pom = self._pending.pop()
			except IndexError:
				return
			self._scan_one(pom, consumer)

	def _scan_one(self, pom: Pom, consumer: Callable[[Pom, dict[Path, int]], object]) -> None:
		try:
			scores = scan_project(self.scanner, pom, self.source_folder)
			if scores is None:
				logger.debug("No sources in %s", pom)
				return
			consumer(pom, scores)
		except Exception:
			logger.exception("Exception scanning %s", pom)
