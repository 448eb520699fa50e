"""Build metadata."""

from cactus.metadata.build_metadata import (
	EPOCH_DAY,
	BuildMetadata,
	build_name,
	current_build_number,
	parse_properties,
	write_metadata,
)

__all__ = ["EPOCH_DAY", "BuildMetadata", "build_name", "current_build_number", "parse_properties", "write_metadata"]
