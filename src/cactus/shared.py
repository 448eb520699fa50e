"""Typed keys for data shared between commands run in one process."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
	from collections.abc import Callable

T = TypeVar("T")


class SharedDataKey(Generic[T]):
	"""A named key that only ever maps to values of one type."""

	def __init__(self, value_type: type[T], name: str | None = None) -> None:
		"""
		Initialize the key.

		Args:
		    value_type: Type of the values stored under this key
		    name: Key name (defaults to the qualified type name)

		"""
		if value_type is None:
			msg = "value_type must not be None"
			raise ValueError(msg)
		self.type = value_type
		self.name = name or f"{value_type.__module__}.{value_type.__qualname__}"

	def cast(self, obj: object) -> T | None:
		"""Return ``obj`` if it is an instance of the key's type, else None."""
		if isinstance(obj, self.type):
			return obj
		return None

	def __eq__(self, other: object) -> bool:
		"""Keys are equal when both name and type are."""
		if not isinstance(other, SharedDataKey):
			return NotImplemented
		return self.type is other.type and self.name == other.name

	def __hash__(self) -> int:
		"""Hash on name and type."""
		return hash(self.name) + 3 * hash(self.type)

	def __repr__(self) -> str:
		"""Return ``name(TypeName)``."""
		return f"{self.name}({self.type.__name__})"


class SharedData:
	"""Thread-safe store of values under ``SharedDataKey`` keys."""

	def __init__(self) -> None:
		"""Initialize an empty store."""
		self._data: dict[SharedDataKey, object] = {}
		self._lock = threading.Lock()

	def compute_if_absent(self, key: SharedDataKey[T], supplier: Callable[[], T]) -> T:
		"""Return the stored value, creating it with ``supplier`` first if needed."""
		with self._lock:
			existing = key.cast(self._data.get(key))
			if existing is not None:
				return existing
			value = supplier()
			if key.cast(value) is None:
				msg = f"{value!r} is not a {key.type.__name__}"
				raise TypeError(msg)
			self._data[key] = value
			return value

	def clear(self) -> None:
		"""Remove everything."""
		with self._lock:
			self._data.clear()


SESSION = SharedData()
