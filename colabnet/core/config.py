"""
Configuration management for colabnet.

Provides centralized configuration for the scan and query stages with
sensible defaults, JSON file persistence and environment overrides.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


@dataclass
class IngestionConfig:
    """Configuration for reading commit history."""

    # Executable used to produce the commit log
    git_executable: str = "git"

    # Widths passed to `git log --stat` so long paths are never abbreviated
    stat_width: int = 1000
    stat_name_width: int = 800

    # Extra arguments appended to every `git log` invocation
    extra_log_args: List[str] = field(default_factory=list)

    # Timeout for the log subprocess (seconds, None = wait forever)
    git_timeout: Optional[int] = None


@dataclass
class StorageConfig:
    """Configuration for the on-disk snapshot."""

    # Snapshot file name, created at the repository root
    snapshot_name: str = ".colabnet"

    encoding: str = "utf-8"


@dataclass
class ReportConfig:
    """Configuration for query reports."""

    # Width of the "=====" rule under report headers
    rule_width: int = 23

    # Decimal places for cousin percentages
    percent_precision: int = 2

    # Output format used when none is given (text, json)
    default_format: str = "text"


@dataclass
class ColabNetConfig:
    """Master configuration combining all stage configurations."""

    ingestion: IngestionConfig = field(default_factory=IngestionConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    # Enable verbose logging
    verbose: bool = False

    log_level: str = "INFO"


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: ColabNetConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = ColabNetConfig()
        return cls._instance

    @classmethod
    def get(cls) -> ColabNetConfig:
        """Get the current configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> ColabNetConfig:
        """Restore the default configuration."""
        instance = cls()
        instance._config = ColabNetConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> ColabNetConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded ColabNetConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> ColabNetConfig:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with COLABNET_. Values from a
        .env file are loaded first without overriding the real environment.

        Returns:
            ColabNetConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        instance = cls()
        config = instance._config

        if os.getenv("COLABNET_GIT"):
            config.ingestion.git_executable = os.getenv("COLABNET_GIT")

        if os.getenv("COLABNET_GIT_TIMEOUT"):
            config.ingestion.git_timeout = int(os.getenv("COLABNET_GIT_TIMEOUT"))

        if os.getenv("COLABNET_SNAPSHOT"):
            config.storage.snapshot_name = os.getenv("COLABNET_SNAPSHOT")

        if os.getenv("COLABNET_FORMAT"):
            config.report.default_format = os.getenv("COLABNET_FORMAT")

        if os.getenv("COLABNET_LOG_LEVEL"):
            config.log_level = os.getenv("COLABNET_LOG_LEVEL").upper()

        if os.getenv("COLABNET_VERBOSE"):
            config.verbose = os.getenv("COLABNET_VERBOSE").lower() in ("true", "1", "yes")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> ColabNetConfig:
        """Convert a dictionary to ColabNetConfig."""
        config = ColabNetConfig()

        if "ingestion" in data:
            config.ingestion = IngestionConfig(**data["ingestion"])

        if "storage" in data:
            config.storage = StorageConfig(**data["storage"])

        if "report" in data:
            config.report = ReportConfig(**data["report"])

        if "verbose" in data:
            config.verbose = data["verbose"]

        if "log_level" in data:
            config.log_level = data["log_level"]

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config = cls.get()
        data = cls._config_to_dict(config)

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: ColabNetConfig) -> dict:
        """Convert ColabNetConfig to a dictionary."""
        return {
            "ingestion": {
                "git_executable": config.ingestion.git_executable,
                "stat_width": config.ingestion.stat_width,
                "stat_name_width": config.ingestion.stat_name_width,
                "extra_log_args": list(config.ingestion.extra_log_args),
                "git_timeout": config.ingestion.git_timeout,
            },
            "storage": {
                "snapshot_name": config.storage.snapshot_name,
                "encoding": config.storage.encoding,
            },
            "report": {
                "rule_width": config.report.rule_width,
                "percent_precision": config.report.percent_precision,
                "default_format": config.report.default_format,
            },
            "verbose": config.verbose,
            "log_level": config.log_level,
        }
