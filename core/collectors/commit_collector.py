from pathlib import Path
from typing import Any, Mapping

from core.contracts.collector import Collector
from core.contracts.models import CommitMetadata
from utils.errors import DiffTooLarge
from utils.git import get_commit_diff, get_commit_fields, get_commit_stat
from utils.logger import logger


class CommitCollector(Collector):
    """
    Reads the metadata and full diff of a single, already resolved commit.
    """

    def __init__(
        self,
        repo_path: Path,
        commit: str,
        max_diff_bytes: int = 10 * 1024 * 1024,
        on_diff_too_large: str = "abort",
    ):
        self.repo_path = repo_path
        self.commit = commit
        self.max_diff_bytes = max_diff_bytes
        self.on_diff_too_large = on_diff_too_large

    def collect(self) -> Mapping[str, Any]:
        """
        Returns:
            ``{"metadata": CommitMetadata, "diff": str | None}``. The diff is None
            only in ``metadata_only`` mode when it was too large.

        Raises:
            CommitNotFound: If git cannot read the commit.
            DiffTooLarge: If the diff is too large and the mode is ``abort``.
        """
        author, date, message = get_commit_fields(self.repo_path, self.commit)
        metadata = CommitMetadata(
            commit=self.commit,
            author=author,
            date=date,
            message=message,
            stat_summary=get_commit_stat(self.repo_path, self.commit),
        )

        try:
            diff = get_commit_diff(self.repo_path, self.commit, self.max_diff_bytes)
        except DiffTooLarge as e:
            if self.on_diff_too_large != "metadata_only":
                raise
            logger.warning(f"{e} Continuing with commit metadata only.")
            diff = None

        return {"metadata": metadata, "diff": diff}
