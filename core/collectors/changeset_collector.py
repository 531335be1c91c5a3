from pathlib import Path
from typing import Any, List, Mapping

from core.contracts.collector import Collector
from core.contracts.models import FileEntry, UnavailableReason
from utils.errors import FileReadFailure
from utils.git import list_changed_files, read_file_at_commit
from utils.logger import logger


def decode_text(data: bytes) -> str:
    """
    Decodes file bytes as UTF-8 text.

    Raises:
        UnicodeDecodeError: For content that looks binary.
    """
    if b"\x00" in data:
        raise UnicodeDecodeError("utf-8", data, data.index(b"\x00"), data.index(b"\x00") + 1, "NUL byte in content")
    return data.decode("utf-8")


class ChangeSetCollector(Collector):
    """
    Lists the files touched by a commit together with their post-commit content.

    A file that cannot be included verbatim still gets an entry, with sentinel
    content, so one bad file never aborts the review.
    """

    def __init__(self, repo_path: Path, commit: str, max_file_bytes: int = 1024 * 1024):
        self.repo_path = repo_path
        self.commit = commit
        self.max_file_bytes = max_file_bytes

    def _read_entry(self, path: str) -> FileEntry:
        try:
            data = read_file_at_commit(self.repo_path, self.commit, path, self.max_file_bytes)
        except FileReadFailure as e:
            logger.debug(str(e))
            return FileEntry.unavailable(path, UnavailableReason(e.reason))

        try:
            return FileEntry(path=path, content=decode_text(data))
        except UnicodeDecodeError:
            logger.debug(f"Treating '{path}' as binary.")
            return FileEntry.unavailable(path, UnavailableReason.BINARY)

    def collect(self) -> Mapping[str, Any]:
        """
        Returns:
            ``{"change_set": [FileEntry, ...]}`` in the order git reports the paths.
        """
        paths = list_changed_files(self.repo_path, self.commit)
        change_set: List[FileEntry] = [self._read_entry(path) for path in paths]
        unavailable = sum(1 for entry in change_set if not entry.is_available)
        logger.info(f"Change set: {len(change_set)} files ({unavailable} without readable content).")
        return {"change_set": change_set}
