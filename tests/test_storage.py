"""
Unit tests for storage module components.
"""

import random
import shutil
import tempfile
import unittest
from pathlib import Path

from colabnet.core.config import ColabNetConfig, StorageConfig
from colabnet.core.exceptions import StorageError
from colabnet.core.pipeline import PipelineState
from colabnet.graph.aggregator import aggregate
from colabnet.ingestion.log_parser import parse_log
from colabnet.storage.database import ColabNetDatabase
from colabnet.storage.manager import SnapshotStore
from colabnet.storage.snapshot import SnapshotCodec

from sample_data import ALICE, BOB, SAMPLE_LOG, SAMPLE_SNAPSHOT


def _edges(db: ColabNetDatabase):
    """Non-zero edges of a database, by name."""
    owners = {
        (db.files[f], db.authors[a], changes)
        for f, changemap in db.files_to_authors.items()
        for a, changes in changemap.items()
        if changes
    }
    cochanges = {
        (db.files[f1], db.files[f2], count)
        for f1, others in db.files_to_files.items()
        for f2, count in others.items()
        if count
    }
    return owners, cochanges


class TestSnapshotCodec(unittest.TestCase):
    """Tests for snapshot serialization."""

    def setUp(self):
        self.config = ColabNetConfig()
        self.codec = SnapshotCodec(StorageConfig())
        self.graphs = aggregate(parse_log(SAMPLE_LOG, self.config), self.config)

    def test_dumps_format(self):
        self.assertEqual(self.codec.dumps(self.graphs), SAMPLE_SNAPSHOT)

    def test_zero_weight_ownership_is_not_written(self):
        log = "\n".join(["commit 1", "Author: A", " logo.png | Bin 0 -> 10 bytes", ""])
        graphs = aggregate(parse_log(log, self.config), self.config)

        text = self.codec.dumps(graphs)

        self.assertEqual(text, "A\n\nlogo.png\n\n\n0 0 1\n")

    def test_round_trip(self):
        db = self.codec.loads(self.codec.dumps(self.graphs))

        self.assertEqual(db.authors, [ALICE, BOB])
        self.assertEqual(db.files, ["README.md", "src/core.py", "src/helpers.py"])
        self.assertEqual(db.files_to_authors, self.graphs.file_authors)
        self.assertEqual(db.skipped_records, 0)

    def test_round_trip_independent_of_line_order(self):
        sections = SAMPLE_SNAPSHOT.rstrip("\n").split("\n\n")
        rng = random.Random(7)
        for idx in (2, 3):
            lines = sections[idx].split("\n")
            rng.shuffle(lines)
            sections[idx] = "\n".join(lines)

        shuffled = self.codec.loads("\n\n".join(sections) + "\n")
        ordered = self.codec.loads(SAMPLE_SNAPSHOT)

        self.assertEqual(_edges(shuffled), _edges(ordered))

    def test_file_file_edges_are_mirrored(self):
        db = self.codec.loads(SAMPLE_SNAPSHOT)

        self.assertEqual(db.files_to_files[0], {0: 1, 1: 1})
        self.assertEqual(db.files_to_files[1], {0: 1, 1: 3, 2: 1})
        self.assertEqual(db.files_to_files[2], {1: 1, 2: 1})

    def test_skip_file_file_section(self):
        db = self.codec.loads(SAMPLE_SNAPSHOT, load_file_to_file=False)

        self.assertEqual(db.files_to_files, {})
        self.assertFalse(db.cochange_loaded)
        self.assertEqual(db.files_to_authors[1], {0: 12, 1: 30})

    def test_malformed_records_are_skipped_and_counted(self):
        text = "\n".join([
            "A",
            "B",
            "",
            "f1",
            "f2",
            "",
            "0 0 3",
            "0 1",
            "x 1 2",
            "1 1 -4",
            "5 0 1",
            "1 1 2 trailing",
            "",
            "0 1 7",
            "0 1 7 9",
            "0 1 seven",
            "0 9 1",
            "1 1 2",
        ])

        db = self.codec.loads(text)

        self.assertEqual(db.files_to_authors, {0: {0: 3}, 1: {1: 2}})
        self.assertEqual(db.files_to_files, {0: {1: 7}, 1: {0: 7, 1: 2}})
        self.assertEqual(db.skipped_records, 7)

    def test_duplicate_record_last_wins(self):
        db = self.codec.loads("A\n\nf\n\n0 0 1\n0 0 9\n")
        self.assertEqual(db.files_to_authors, {0: {0: 9}})

    def test_lines_are_trimmed_and_crlf_tolerated(self):
        db = self.codec.loads("A  \r\n\r\n f \r\n\r\n0 0 2\r\n")

        self.assertEqual(db.authors, ["A"])
        self.assertEqual(db.files, ["f"])
        self.assertEqual(db.files_to_authors, {0: {0: 2}})

    def test_names_with_line_separators_survive_round_trip(self):
        log = "commit 1\nAuthor: A\u2028B\n x.py | 2 +\ncommit 2\nAuthor: C\n y.py | 5 +\n"
        graphs = aggregate(parse_log(log, self.config), self.config)

        db = self.codec.loads(self.codec.dumps(graphs))

        self.assertEqual(db.authors, ["A\u2028B", "C"])
        self.assertEqual(db.files_to_authors, {0: {0: 2}, 1: {1: 5}})

    def test_empty_snapshot(self):
        db = self.codec.loads("")

        self.assertEqual(db.authors, [])
        self.assertEqual(db.files, [])


class TestSnapshotFiles(unittest.TestCase):
    """Tests for reading and writing snapshot files."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.config = ColabNetConfig()
        self.store = SnapshotStore(self.config)
        self.graphs = aggregate(parse_log(SAMPLE_LOG, self.config), self.config)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_save_and_load(self):
        path = self.store.save(self.graphs, Path(self.tmpdir))

        self.assertEqual(path, Path(self.tmpdir) / ".colabnet")
        self.assertEqual(path.read_text(encoding="utf-8"), SAMPLE_SNAPSHOT)

        db = self.store.load(Path(self.tmpdir))
        self.assertEqual(db.find_file("src/core.py"), 1)

    def test_save_overwrites(self):
        path = Path(self.tmpdir) / ".colabnet"
        path.write_text("stale\n" * 100, encoding="utf-8")

        self.store.save(self.graphs, Path(self.tmpdir))

        self.assertEqual(path.read_text(encoding="utf-8"), SAMPLE_SNAPSHOT)

    def test_file_round_trip_with_unicode_separators(self):
        log = "commit 1\nAuthor: A\x85B\n x.py | 2 +\ncommit 2\nAuthor: C\n y.py | 5 +\n"
        graphs = aggregate(parse_log(log, self.config), self.config)

        self.store.save(graphs, Path(self.tmpdir))
        db = self.store.load(Path(self.tmpdir))

        self.assertEqual(db.authors, ["A\x85B", "C"])
        self.assertEqual(db.files_to_authors, {0: {0: 2}, 1: {1: 5}})

    def test_missing_snapshot_raises(self):
        self.assertFalse(self.store.exists(Path(self.tmpdir)))

        with self.assertRaises(StorageError) as ctx:
            self.store.load(Path(self.tmpdir))

        self.assertIn("Snapshot not found", str(ctx.exception))

    def test_custom_snapshot_name(self):
        config = ColabNetConfig(storage=StorageConfig(snapshot_name="collab.db"))
        store = SnapshotStore(config)

        path = store.save(self.graphs, Path(self.tmpdir))

        self.assertEqual(path.name, "collab.db")
        self.assertTrue(store.exists(Path(self.tmpdir)))

    def test_unicode_names(self):
        log = "commit 1\nAuthor: Zoë Ünal\n docs/über.md | 3 +++\n"
        graphs = aggregate(parse_log(log, self.config), self.config)
        self.store.save(graphs, Path(self.tmpdir))

        db = self.store.load(Path(self.tmpdir))

        self.assertEqual(db.authors_of_file("docs/über.md"), [("Zoë Ünal", 3)])

    def test_stage_execute(self):
        state = PipelineState(pipeline_id="t", repo_root=Path(self.tmpdir))
        state.data["aggregation"] = self.graphs

        output, metrics = self.store.execute(state)

        self.assertEqual(output["path"], Path(self.tmpdir) / ".colabnet")
        self.assertEqual(metrics["snapshot_bytes"], len(SAMPLE_SNAPSHOT.encode("utf-8")))

    def test_storage_stats(self):
        self.store.save(self.graphs, Path(self.tmpdir))

        stats = self.store.get_storage_stats(Path(self.tmpdir))

        self.assertTrue(stats["exists"])
        self.assertGreater(stats["total_size_bytes"], 0)


class TestColabNetDatabase(unittest.TestCase):
    """Tests for database lookups."""

    def setUp(self):
        self.db = SnapshotCodec().loads(SAMPLE_SNAPSHOT)

    def test_find(self):
        self.assertEqual(self.db.find_file("README.md"), 0)
        self.assertEqual(self.db.find_author(BOB), 1)
        self.assertIsNone(self.db.find_file("src/missing.py"))
        self.assertIsNone(self.db.find_author("Mallory"))

    def test_get_by_id(self):
        self.assertEqual(self.db.get_file(2), "src/helpers.py")
        self.assertEqual(self.db.get_author(0), ALICE)
        self.assertIsNone(self.db.get_file(3))
        self.assertIsNone(self.db.get_author(-1))

    def test_authors_of_file(self):
        self.assertEqual(self.db.authors_of_file("src/core.py"), [(ALICE, 12), (BOB, 30)])
        self.assertIsNone(self.db.authors_of_file("nope"))

    def test_files_correlated_includes_self_edge(self):
        self.assertEqual(
            self.db.files_correlated("src/core.py"),
            [("README.md", 1), ("src/core.py", 3), ("src/helpers.py", 1)],
        )

    def test_files_of_author(self):
        self.assertEqual(
            self.db.files_of_author(ALICE),
            [("README.md", 5), ("src/core.py", 12), ("src/helpers.py", 4)],
        )
        self.assertEqual(self.db.files_of_author(BOB), [("src/core.py", 30)])
        self.assertIsNone(self.db.files_of_author("Mallory"))

    def test_statistics(self):
        stats = self.db.get_statistics()

        self.assertEqual(stats["authors"], 2)
        self.assertEqual(stats["files"], 3)
        self.assertEqual(stats["file_file_edges"], 7)


if __name__ == "__main__":
    unittest.main()
