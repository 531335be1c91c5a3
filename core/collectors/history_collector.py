from pathlib import Path
from typing import Any, Mapping

from core.contracts.collector import Collector
from utils.git import get_recent_log
from utils.logger import logger


class HistoryCollector(Collector):
    """
    A collector that retrieves the commits preceding the reviewed commit.
    """

    def __init__(self, repo_path: Path, commit: str, n: int = 5):
        """
        Initializes the HistoryCollector.

        Args:
            repo_path: The repository root.
            commit: The reviewed commit.
            n: The number of commits to retrieve.
        """
        if n <= 0:
            raise ValueError("Number of commits (n) must be a positive integer.")
        self.repo_path = repo_path
        self.commit = commit
        self._n = n

    def collect(self) -> Mapping[str, Any]:
        """
        Runs ``git log --oneline`` starting at the commit's parent.

        When the commit has no parent the most recent commits of the repository
        are used instead, which may not be related to the reviewed commit.

        Returns:
            A mapping containing the one-line log, or None when there is none.
        """
        log = get_recent_log(self.repo_path, self._n, before=f"{self.commit}~1")
        if log is None:
            logger.warning("Commit has no usable parent history; falling back to the latest commits.")
            log = get_recent_log(self.repo_path, self._n)
        return {"recent_commits": log or None}
