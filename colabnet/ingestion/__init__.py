"""
History ingestion module.

Reads commit logs from git and parses them into change events.
"""

from colabnet.ingestion.rename import normalize_filename
from colabnet.ingestion.log_parser import ChangeEvent, ParsedHistory, LogParser, parse_log
from colabnet.ingestion.ingestor import HistoryIngestor
from colabnet.ingestion.git_handler import GitHandler

__all__ = [
    "normalize_filename",
    "ChangeEvent",
    "ParsedHistory",
    "LogParser",
    "parse_log",
    "HistoryIngestor",
    "GitHandler",
]
