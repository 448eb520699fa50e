"""Cactus - build tooling for multi-repository Maven source trees."""

__version__ = "0.1.0"
