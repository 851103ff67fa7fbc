"""
Utility functions and helpers.

Logging setup and path handling shared by the CLI and engine.
"""

from colabnet.utils.logging_config import setup_logging, resolve_level
from colabnet.utils.validation import validate_path, to_repo_relative

__all__ = [
    "setup_logging",
    "resolve_level",
    "validate_path",
    "to_repo_relative",
]
