import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from core.collectors.changeset_collector import ChangeSetCollector
from core.collectors.commit_collector import CommitCollector
from core.collectors.history_collector import HistoryCollector
from core.collectors.readme_collector import ReadmeCollector
from core.contracts.models import UnavailableReason
from utils.errors import DiffTooLarge, FileReadFailure

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@patch("core.collectors.commit_collector.get_commit_stat", return_value=" a.js | 2 +-")
@patch("core.collectors.commit_collector.get_commit_fields", return_value=["Ada", "2024-01-01", "feat: a"])
class TestCommitCollector(unittest.TestCase):

    @patch("core.collectors.commit_collector.get_commit_diff", return_value="+a")
    def test_collect_metadata_and_diff(self, mock_diff, mock_fields, mock_stat):
        result = CommitCollector(Path("/repo"), "abc").collect()

        metadata = result["metadata"]
        self.assertEqual(metadata.commit, "abc")
        self.assertEqual(metadata.author, "Ada")
        self.assertEqual(metadata.message, "feat: a")
        self.assertEqual(metadata.stat_summary, " a.js | 2 +-")
        self.assertEqual(result["diff"], "+a")
        mock_diff.assert_called_once_with(Path("/repo"), "abc", 10 * 1024 * 1024)

    @patch("core.collectors.commit_collector.get_commit_diff", side_effect=DiffTooLarge(11, 10))
    def test_diff_too_large_aborts_by_default(self, mock_diff, mock_fields, mock_stat):
        with self.assertRaises(DiffTooLarge):
            CommitCollector(Path("/repo"), "abc", max_diff_bytes=10).collect()

    @patch("core.collectors.commit_collector.get_commit_diff", side_effect=DiffTooLarge(11, 10))
    def test_diff_too_large_metadata_only(self, mock_diff, mock_fields, mock_stat):
        result = CommitCollector(Path("/repo"), "abc", max_diff_bytes=10, on_diff_too_large="metadata_only").collect()

        self.assertIsNone(result["diff"])
        self.assertEqual(result["metadata"].author, "Ada")


class TestChangeSetCollector(unittest.TestCase):

    @patch("core.collectors.changeset_collector.read_file_at_commit")
    @patch("core.collectors.changeset_collector.list_changed_files")
    def test_one_entry_per_changed_file(self, mock_list, mock_read):
        mock_list.return_value = ["src/a.js", "logo.png", "gone.txt", "huge.sql", "empty.txt"]

        def read(repo, commit, path, max_bytes):
            if path == "src/a.js":
                return b"import { f } from './b'\n"
            if path == "logo.png":
                return PNG_BYTES
            if path == "gone.txt":
                raise FileReadFailure(path, "missing")
            if path == "huge.sql":
                raise FileReadFailure(path, "too_large")
            return b""

        mock_read.side_effect = read

        change_set = ChangeSetCollector(Path("/repo"), "abc").collect()["change_set"]

        self.assertEqual([e.path for e in change_set], mock_list.return_value)
        by_path = {e.path: e for e in change_set}
        self.assertEqual(by_path["src/a.js"].content, "import { f } from './b'\n")
        self.assertEqual(by_path["logo.png"].unavailable_reason, UnavailableReason.BINARY)
        self.assertIsNone(by_path["logo.png"].content)
        self.assertEqual(by_path["gone.txt"].unavailable_reason, UnavailableReason.MISSING)
        self.assertEqual(by_path["huge.sql"].unavailable_reason, UnavailableReason.TOO_LARGE)
        # An empty file is real content, not a sentinel
        self.assertTrue(by_path["empty.txt"].is_available)
        self.assertEqual(by_path["empty.txt"].content, "")

    @patch("core.collectors.changeset_collector.read_file_at_commit", return_value=b"caf\xe9")
    @patch("core.collectors.changeset_collector.list_changed_files", return_value=["latin1.txt"])
    def test_non_utf8_is_binary(self, mock_list, mock_read):
        change_set = ChangeSetCollector(Path("/repo"), "abc").collect()["change_set"]

        self.assertEqual(change_set[0].unavailable_reason, UnavailableReason.BINARY)
        self.assertEqual(change_set[0].placeholder, "[File not available: binary]")

    @patch("core.collectors.changeset_collector.read_file_at_commit")
    @patch("core.collectors.changeset_collector.list_changed_files", return_value=["a.txt"])
    def test_passes_size_limit(self, mock_list, mock_read):
        mock_read.return_value = b"a"
        ChangeSetCollector(Path("/repo"), "abc", max_file_bytes=42).collect()

        mock_read.assert_called_once_with(Path("/repo"), "abc", "a.txt", 42)


class TestReadmeCollector(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_first_candidate_wins(self):
        (self.repo / "README.md").write_text("markdown readme", encoding="utf-8")
        (self.repo / "README").write_text("plain readme", encoding="utf-8")

        self.assertEqual(ReadmeCollector(self.repo).collect(), {"readme": "markdown readme"})

    def test_falls_through_to_later_candidates(self):
        (self.repo / "README.txt").write_text("text readme", encoding="utf-8")

        self.assertEqual(ReadmeCollector(self.repo).collect(), {"readme": "text readme"})

    def test_unreadable_candidate_is_skipped(self):
        (self.repo / "README.md").mkdir()
        (self.repo / "README").write_text("plain readme", encoding="utf-8")

        self.assertEqual(ReadmeCollector(self.repo).collect(), {"readme": "plain readme"})

    def test_excerpt_is_capped(self):
        (self.repo / "README.md").write_text("x" * 6000, encoding="utf-8")

        readme = ReadmeCollector(self.repo).collect()["readme"]

        self.assertEqual(len(readme), 5000)

    def test_no_readme_found(self):
        self.assertEqual(ReadmeCollector(self.repo).collect(), {"readme": None})


class TestHistoryCollector(unittest.TestCase):

    @patch("core.collectors.history_collector.get_recent_log", return_value="b2 fix: two\na1 feat: one")
    def test_log_before_commit(self, mock_log):
        result = HistoryCollector(Path("/repo"), "abc", n=2).collect()

        self.assertEqual(result, {"recent_commits": "b2 fix: two\na1 feat: one"})
        mock_log.assert_called_once_with(Path("/repo"), 2, before="abc~1")

    @patch("core.collectors.history_collector.get_recent_log", side_effect=[None, "c3 latest"])
    def test_root_commit_falls_back_to_latest_history(self, mock_log):
        # The fallback may show commits unrelated to the reviewed one.
        result = HistoryCollector(Path("/repo"), "abc", n=5).collect()

        self.assertEqual(result, {"recent_commits": "c3 latest"})
        self.assertEqual(mock_log.call_count, 2)
        self.assertEqual(mock_log.call_args_list[1].args, (Path("/repo"), 5))

    @patch("core.collectors.history_collector.get_recent_log", return_value="")
    def test_empty_history_is_absent(self, mock_log):
        self.assertEqual(HistoryCollector(Path("/repo"), "abc").collect(), {"recent_commits": None})

    def test_init_invalid_n(self):
        with self.assertRaises(ValueError):
            HistoryCollector(Path("/repo"), "abc", n=0)
        with self.assertRaises(ValueError):
            HistoryCollector(Path("/repo"), "abc", n=-1)


if __name__ == "__main__":
    unittest.main()
