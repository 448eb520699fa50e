"""Utility module for the cactus package."""

from .cli_utils import exit_with_error, loading_spinner, show_error, show_warning
from .log_setup import console, setup_logging

__all__ = [
	"console",
	"exit_with_error",
	"loading_spinner",
	"setup_logging",
	"show_error",
	"show_warning",
]
