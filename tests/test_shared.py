"""Tests for the typed shared data store."""

from __future__ import annotations

import threading

import pytest

from cactus.shared import SharedData, SharedDataKey


@pytest.mark.unit
class TestSharedDataKey:
	"""Test cases for SharedDataKey."""

	def test_equality(self) -> None:
		"""Test keys are equal by name and type."""
		assert SharedDataKey(str, "a") == SharedDataKey(str, "a")
		assert SharedDataKey(str, "a") != SharedDataKey(int, "a")
		assert SharedDataKey(str, "a") != SharedDataKey(str, "b")
		assert hash(SharedDataKey(str, "a")) == hash(SharedDataKey(str, "a"))

	def test_default_name(self) -> None:
		"""Test the default name is the qualified type name."""
		assert SharedDataKey(int).name == "builtins.int"
		assert repr(SharedDataKey(int, "count")) == "count(int)"

	def test_cast(self) -> None:
		"""Test values of the wrong type cast to None."""
		key = SharedDataKey(int, "n")
		assert key.cast(3) == 3
		assert key.cast("3") is None

	def test_type_required(self) -> None:
		"""Test a key needs a type."""
		with pytest.raises(ValueError, match="value_type"):
			SharedDataKey(None)


@pytest.mark.unit
class TestSharedData:
	"""Test cases for SharedData."""

	def test_compute_if_absent_keeps_first_value(self) -> None:
		"""Test a stored value is returned without calling the supplier again."""
		data = SharedData()
		key = SharedDataKey(str, "name")
		assert data.compute_if_absent(key, lambda: "first") == "first"
		assert data.compute_if_absent(key, lambda: "second") == "first"

	def test_compute_if_absent_wrong_type(self) -> None:
		"""Test a supplied value must match its key's type and is not stored otherwise."""
		data = SharedData()
		key = SharedDataKey(int, "n")
		with pytest.raises(TypeError):
			data.compute_if_absent(key, lambda: "three")
		assert data.compute_if_absent(key, lambda: 3) == 3

	def test_compute_if_absent_runs_supplier_once(self) -> None:
		"""Test concurrent callers share one computed value."""
		data = SharedData()
		key = SharedDataKey(list, "items")
		calls = []

		def supplier() -> list:
			calls.append(1)
			return []

		results = []
		threads = [threading.Thread(target=lambda: results.append(data.compute_if_absent(key, supplier))) for _ in range(8)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()
		assert len(calls) == 1
		assert all(result is results[0] for result in results)

	def test_clear(self) -> None:
		"""Test clearing the store."""
		data = SharedData()
		key = SharedDataKey(int, "n")
		data.compute_if_absent(key, lambda: 1)
		data.clear()
		assert data.compute_if_absent(key, lambda: 2) == 2
