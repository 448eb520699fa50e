"""Source analysis: concurrent scanning of project sources and codeflowers output."""

from cactus.analysis.codeflowers import CodeflowersJsonGenerator
from cactus.analysis.scanner import MavenProjectsScanner, SourcesScanner, WordCount

__all__ = ["CodeflowersJsonGenerator", "MavenProjectsScanner", "SourcesScanner", "WordCount"]
