"""Exceptions shared by cactus commands and operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Iterable

	from cactus.git.checkout import GitCheckout


class CactusError(Exception):
	"""Base class for errors that terminate a cactus command."""


class ConfigurationError(CactusError):
	"""Raised when command parameters are invalid or contradictory."""


class ExternalToolError(CactusError):
	"""Raised when a required external tool is missing or fails."""


class DirtyCheckoutsError(CactusError):
	"""Raised when an operation that forbids local modifications finds some."""

	def __init__(self, checkouts: Iterable[GitCheckout]) -> None:
		"""
		Initialize the error with the offending checkouts.

		Args:
		        checkouts: Checkouts which are locally modified

		"""
		self.checkouts = list(checkouts)
		listing = "".join(f"\n  * {checkout}" for checkout in self.checkouts)
		super().__init__(f"Some checkouts are locally modified:{listing}")
