"""
Configuration for cactus commands.

Settings start from ``cactus.config.DEFAULT_CONFIG``. A YAML file then
overrides the keys it names, and ``CACTUS_<SECTION>_<KEY>`` environment
variables override both. Without an explicit file, the first of these is
used:

1. ``.cactus.yml`` in the working directory
2. ``$XDG_CONFIG_HOME/cactus/config.yml``
3. ``~/.cactus/config.yml``

"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from xdg.BaseDirectory import xdg_config_home

from cactus.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENV_PREFIX = "CACTUS_"

ConfigValue = str | int | float | bool | dict[str, Any] | list[Any] | None

TRUE_STRINGS = frozenset({"true", "yes", "1"})
FALSE_STRINGS = frozenset({"false", "no", "0"})


class ConfigError(Exception):
	"""A configuration file that cannot be read or has the wrong shape."""


def config_file_candidates() -> list[Path]:
	"""Return the places searched for a configuration file, in priority order."""
	return [
		Path(".cactus.yml"),
		Path(xdg_config_home) / "cactus" / "config.yml",
		Path.home() / ".cactus" / "config.yml",
	]


def coerce(value: str) -> ConfigValue:
	"""Convert an environment string to a bool, int or float where it reads as one."""
	lowered = value.lower()
	if lowered in TRUE_STRINGS:
		return True
	if lowered in FALSE_STRINGS:
		return False
	for convert in (int, float):
		try:
			return convert(value)
		except ValueError:
			pass
	return value


def deep_update(target: dict[str, Any], updates: dict[str, Any]) -> None:
	"""Update target in place, descending into sections both sides have."""
	for key, value in updates.items():
		existing = target.get(key)
		if isinstance(existing, dict) and isinstance(value, dict):
			deep_update(existing, value)
		else:
			target[key] = value


class ConfigLoader:
	"""Layered cactus settings, shared through ``get_instance``."""

	_instance: ConfigLoader | None = None

	@classmethod
	def get_instance(cls, config_file: str | None = None, reload: bool = False) -> ConfigLoader:
		"""Return the shared loader, creating it on first use or when reload is set."""
		if cls._instance is None or reload:
			cls._instance = cls(config_file)
		return cls._instance

	def __init__(self, config_file: str | None = None) -> None:
		self.config: dict[str, Any] = {}
		self.config_file = self._find_config_file(config_file)
		self.load_config()

	@staticmethod
	def _find_config_file(config_file: str | None) -> Path | None:
		if config_file:
			path = Path(config_file).expanduser().resolve()
			if not path.exists():
				logger.warning("Config file %s not found, using defaults", path)
			return path
		return next((path for path in config_file_candidates() if path.exists()), None)

	def _read_file(self) -> dict[str, Any]:
		if self.config_file is None or not self.config_file.exists():
			return {}
		try:
			with self.config_file.open(encoding="utf-8") as stream:
				content = yaml.safe_load(stream)
		except (OSError, yaml.YAMLError) as e:
			msg = f"Error loading configuration from {self.config_file}: {e}"
			raise ConfigError(msg) from e
		if content is None:
			return {}
		if not isinstance(content, dict):
			msg = f"Configuration in {self.config_file} must be a mapping"
			raise ConfigError(msg)
		logger.info("Loaded configuration from %s", self.config_file)
		return content

	def load_config(self) -> dict[str, Any]:
		"""
		Rebuild the settings from defaults, file and environment.

		Returns:
		    The settings, also kept in ``self.config``

		Raises:
		    ConfigError: If the file exists but is not a readable YAML mapping

		"""
		self.config = copy.deepcopy(DEFAULT_CONFIG)
		deep_update(self.config, self._read_file())
		self._apply_environment()
		return self.config

	def _apply_environment(self) -> None:
		for name, raw in os.environ.items():
			if not name.startswith(ENV_PREFIX):
				continue
			section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
			# Family variables such as CACTUS_ASSETS_HOME share the prefix but name no section
			if not key or not isinstance(self.config.get(section), dict):
				continue
			self.config[section][key] = coerce(raw)
			logger.debug("%s overrides %s.%s", name, section, key)

	def get(self, key: str, default: T = None) -> T:
		"""
		Look up a setting by dotted path, such as ``merge.into``.

		Returns the default when any part of the path is missing.

		"""
		node: Any = self.config
		for part in key.split("."):
			if not isinstance(node, dict) or part not in node:
				return default
			node = node[part]
		return cast("T", node)

	def set(self, key: str, value: ConfigValue) -> None:
		"""Store a setting by dotted path, creating sections as needed."""
		*sections, leaf = key.split(".")
		node = self.config
		for section in sections:
			if not isinstance(node.get(section), dict):
				node[section] = {}
			node = node[section]
		node[leaf] = value
