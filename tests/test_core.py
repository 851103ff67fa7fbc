"""
Unit tests for core module components.
"""

import json
import logging
import os
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from colabnet.core.config import (
    ColabNetConfig,
    Config,
    IngestionConfig,
    ReportConfig,
    StorageConfig,
)
from colabnet.core.exceptions import (
    AggregationError,
    ColabNetError,
    IngestionError,
    QueryError,
    RepositoryNotFoundError,
    StorageError,
)
from colabnet.core.pipeline import Pipeline, PipelineStage, PipelineState, StageStatus
from colabnet.utils.logging_config import resolve_level, setup_logging


class TestConfig(unittest.TestCase):
    """Tests for configuration management."""

    def setUp(self):
        Config.reset()

    def tearDown(self):
        Config.reset()

    def test_default_config(self):
        """Test that default configuration is created correctly."""
        config = ColabNetConfig()

        self.assertIsInstance(config.ingestion, IngestionConfig)
        self.assertIsInstance(config.storage, StorageConfig)
        self.assertIsInstance(config.report, ReportConfig)
        self.assertFalse(config.verbose)
        self.assertEqual(config.log_level, "INFO")

    def test_ingestion_config_defaults(self):
        """Test ingestion configuration defaults."""
        config = IngestionConfig()

        self.assertEqual(config.git_executable, "git")
        self.assertEqual(config.stat_width, 1000)
        self.assertEqual(config.stat_name_width, 800)
        self.assertEqual(config.extra_log_args, [])
        self.assertIsNone(config.git_timeout)

    def test_storage_and_report_defaults(self):
        """Test snapshot name and report layout defaults."""
        self.assertEqual(StorageConfig().snapshot_name, ".colabnet")
        self.assertEqual(ReportConfig().rule_width, 23)
        self.assertEqual(ReportConfig().percent_precision, 2)

    def test_singleton(self):
        """Test that Config.get returns the shared configuration."""
        self.assertIs(Config.get(), Config.get())

    def test_config_save_and_load(self):
        """Test configuration serialization and deserialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "nested" / "config.json"

            Config.get().storage.snapshot_name = ".collab"
            Config.save_to_file(str(config_path))

            self.assertTrue(config_path.exists())

            with open(config_path) as f:
                data = json.load(f)

            self.assertIn("ingestion", data)
            self.assertIn("report", data)
            self.assertEqual(data["storage"]["snapshot_name"], ".collab")

            Config.reset()
            loaded = Config.load_from_file(str(config_path))

            self.assertEqual(loaded.storage.snapshot_name, ".collab")
            self.assertIs(Config.get(), loaded)

    def test_load_missing_file(self):
        """Test loading a configuration file that does not exist."""
        with self.assertRaises(FileNotFoundError):
            Config.load_from_file("/nonexistent/colabnet.json")

    def test_load_from_env(self):
        """Test environment variable overrides."""
        env = {
            "COLABNET_GIT": "/usr/local/bin/git",
            "COLABNET_GIT_TIMEOUT": "30",
            "COLABNET_SNAPSHOT": ".collab",
            "COLABNET_FORMAT": "json",
            "COLABNET_LOG_LEVEL": "debug",
            "COLABNET_VERBOSE": "yes",
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            with mock.patch.dict(os.environ, env):
                config = Config.load_from_env(str(Path(tmpdir) / ".env"))

        self.assertEqual(config.ingestion.git_executable, "/usr/local/bin/git")
        self.assertEqual(config.ingestion.git_timeout, 30)
        self.assertEqual(config.storage.snapshot_name, ".collab")
        self.assertEqual(config.report.default_format, "json")
        self.assertEqual(config.log_level, "DEBUG")
        self.assertTrue(config.verbose)

    def test_load_from_dotenv_file(self):
        """Test that .env values apply without overriding the environment."""
        with tempfile.TemporaryDirectory() as tmpdir:
            dotenv = Path(tmpdir) / ".env"
            dotenv.write_text("COLABNET_SNAPSHOT=.from-dotenv\nCOLABNET_FORMAT=json\n")

            with mock.patch.dict(os.environ, {"COLABNET_FORMAT": "text"}):
                os.environ.pop("COLABNET_SNAPSHOT", None)
                config = Config.load_from_env(str(dotenv))

        self.assertEqual(config.storage.snapshot_name, ".from-dotenv")
        self.assertEqual(config.report.default_format, "text")


class TestPipelineState(unittest.TestCase):
    """Tests for pipeline state management."""

    def test_state_creation(self):
        """Test pipeline state creation."""
        state = PipelineState(pipeline_id="test-123", repo_root=Path("/path/to/repo"))

        self.assertEqual(state.pipeline_id, "test-123")
        self.assertEqual(state.repo_root, Path("/path/to/repo"))
        self.assertEqual(state.log_args, [])
        self.assertIsInstance(state.created_at, datetime)

    def test_stage_status_tracking(self):
        """Test stage status tracking."""
        state = PipelineState(pipeline_id="test-123", repo_root=Path("/repo"))

        self.assertEqual(state.get_stage_status("ingestion"), StageStatus.PENDING)

        state.record_stage_start("ingestion")
        self.assertEqual(state.get_stage_status("ingestion"), StageStatus.RUNNING)

        state.record_stage_completion("ingestion", {"log": ""}, {"log_bytes": 0})
        self.assertEqual(state.get_stage_status("ingestion"), StageStatus.COMPLETED)
        self.assertTrue(state.is_stage_completed("ingestion"))

    def test_stage_failure_tracking(self):
        """Test stage failure tracking."""
        state = PipelineState(pipeline_id="test-123", repo_root=Path("/repo"))

        state.record_stage_start("parsing")
        state.record_stage_failure("parsing", "Bad log")

        self.assertEqual(state.get_stage_status("parsing"), StageStatus.FAILED)
        self.assertEqual(state.stage_results["parsing"].error, "Bad log")

    def test_state_serialization(self):
        """Test state serialization to dictionary."""
        state = PipelineState(
            pipeline_id="test-123",
            repo_root=Path("/path/to/repo"),
            log_args=["--since=1.week"],
        )

        state.record_stage_start("ingestion")
        state.record_stage_completion("ingestion", {})

        data = state.to_dict()

        self.assertEqual(data["pipeline_id"], "test-123")
        self.assertEqual(data["repo_root"], "/path/to/repo")
        self.assertEqual(data["log_args"], ["--since=1.week"])
        self.assertEqual(data["stage_results"]["ingestion"]["status"], "completed")


class _RecordingStage(PipelineStage):
    """Stage that records the state it saw."""

    def __init__(self, config, stage_name, deps=None, fail=False):
        self._stage_name = stage_name
        self._deps = deps or []
        self.fail = fail
        super().__init__(config)

    @property
    def name(self):
        return self._stage_name

    @property
    def dependencies(self):
        return self._deps

    def execute(self, state):
        if self.fail:
            raise StorageError("disk full")
        seen = sorted(state.data)
        return seen, {"seen": len(seen)}


class TestPipeline(unittest.TestCase):
    """Tests for pipeline orchestration."""

    def setUp(self):
        self.config = ColabNetConfig()
        self.pipeline = Pipeline(self.config)

    def test_stages_run_in_order(self):
        """Test that each stage sees the output of earlier stages."""
        self.pipeline.register_stage(_RecordingStage(self.config, "first"))
        self.pipeline.register_stage(_RecordingStage(self.config, "second", ["first"]))
        self.pipeline.set_execution_order(["first", "second"])

        state = self.pipeline.run(Path("/repo"), ["HEAD"])

        self.assertEqual(state.data["first"], [])
        self.assertEqual(state.data["second"], ["first"])
        self.assertEqual(state.log_args, ["HEAD"])
        self.assertEqual(state.stage_results["second"].metrics, {"seen": 1})

    def test_unknown_stage_in_order(self):
        """Test that ordering an unregistered stage is rejected."""
        with self.assertRaises(ValueError):
            self.pipeline.set_execution_order(["missing"])

    def test_failure_is_recorded_and_raised(self):
        """Test that a failing stage aborts the run."""
        failing = _RecordingStage(self.config, "storage", fail=True)
        self.pipeline.register_stage(failing)
        self.pipeline.set_execution_order(["storage"])

        with self.assertRaises(StorageError):
            self.pipeline.run(Path("/repo"))

    def test_unmet_dependency(self):
        """Test that a stage with an unmet dependency is not executed."""
        self.pipeline.register_stage(_RecordingStage(self.config, "second", ["first"]))
        self.pipeline.set_execution_order(["second"])

        with self.assertRaises(ValueError):
            self.pipeline.run(Path("/repo"))

    def test_dependency_must_run_first(self):
        """Test that an order placing a stage before its dependency is rejected."""
        self.pipeline.register_stage(_RecordingStage(self.config, "first"))
        self.pipeline.register_stage(_RecordingStage(self.config, "second", ["first"]))

        with self.assertRaises(ValueError):
            self.pipeline.set_execution_order(["second", "first"])

    def test_stage_timings(self):
        """Test that every executed stage reports its elapsed time."""
        self.pipeline.register_stage(_RecordingStage(self.config, "first"))
        self.pipeline.register_stage(_RecordingStage(self.config, "second", ["first"]))
        self.pipeline.set_execution_order(["first", "second"])

        state = self.pipeline.run(Path("/repo"))

        self.assertEqual([name for name, _ in state.timings()], ["first", "second"])
        self.assertTrue(all(elapsed >= 0 for _, elapsed in state.timings()))

    def test_list_stages(self):
        """Test stage registry lookups."""
        stage = _RecordingStage(self.config, "first")
        self.pipeline.register_stage(stage)

        self.assertEqual(self.pipeline.list_stages(), ["first"])
        self.assertIs(self.pipeline.get_stage("first"), stage)
        self.assertIsNone(self.pipeline.get_stage("second"))


class TestExceptions(unittest.TestCase):
    """Tests for custom exceptions."""

    def test_base_error(self):
        """Test base colabnet error."""
        error = ColabNetError("Test error", stage="test", details={"key": "value"})

        self.assertEqual(str(error), "[test] Test error")
        self.assertEqual(error.stage, "test")
        self.assertEqual(error.details, {"key": "value"})

    def test_error_without_stage(self):
        """Test that the stage prefix is omitted when absent."""
        self.assertEqual(str(ColabNetError("plain")), "plain")

    def test_stage_errors(self):
        """Test stage names of the stage-specific errors."""
        self.assertEqual(IngestionError("x").stage, "Ingestion")
        self.assertEqual(AggregationError("x").stage, "Aggregation")
        self.assertEqual(StorageError("x").stage, "Storage")
        self.assertEqual(QueryError("x").stage, "Query")

    def test_repository_not_found_error(self):
        """Test repository not found error."""
        error = RepositoryNotFoundError("/invalid/path", "not a git repository")

        self.assertIsInstance(error, IngestionError)
        self.assertIn("not a git repository", str(error))
        self.assertEqual(error.details["path"], "/invalid/path")


class TestLogging(unittest.TestCase):
    """Tests for logging setup."""

    def tearDown(self):
        setup_logging("WARNING")

    def test_resolve_level(self):
        """Test level names are case-insensitive."""
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level(" Error "), logging.ERROR)
        self.assertEqual(resolve_level(logging.INFO), logging.INFO)

    def test_unknown_level(self):
        """Test that an unknown level name is rejected."""
        with self.assertRaises(ValueError):
            resolve_level("chatty")

    def test_log_file(self):
        """Test that records reach the log file in the detailed format."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "colabnet.log"

            setup_logging("INFO", log_file=log_file, brief=True)
            logging.getLogger("colabnet.test").info("scan started")
            for handler in logging.getLogger().handlers:
                handler.flush()

            text = log_file.read_text(encoding="utf-8")
            setup_logging("WARNING")

        self.assertIn("| INFO     | colabnet.test | scan started", text)


if __name__ == "__main__":
    unittest.main()
