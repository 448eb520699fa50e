"""Version change bookkeeping."""

from cactus.versions.collector import ChangeFlag, VersionChange, VersionChangeUpdatesCollector

__all__ = ["ChangeFlag", "VersionChange", "VersionChangeUpdatesCollector"]
