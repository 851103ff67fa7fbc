"""
Logging setup for colabnet.

Diagnostics always go to stderr, and optionally to a file, so that
reports and DOT output on stdout can be piped safely.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
BRIEF_FORMAT = "colabnet: %(levelname)s: %(message)s"


def resolve_level(level: Union[str, int]) -> int:
    """
    Turn a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level.
    """
    if isinstance(level, int):
        return level

    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    brief: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name or number.
        log_file: Optional file that receives the detailed format.
        format_string: Format for stderr; overrides ``brief``.
        brief: Use a single-line ``colabnet: LEVEL: message`` format on stderr.
    """
    if format_string is None:
        format_string = BRIEF_FORMAT if brief else DETAILED_FORMAT

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(format_string))
    handlers = [console]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=resolve_level(level), handlers=handlers, force=True)
