from pathlib import Path
from typing import Any, Iterable, List, Mapping

from core.collectors.changeset_collector import decode_text
from core.contracts.collector import Collector
from core.contracts.models import FileEntry
from utils.errors import FileReadFailure
from utils.logger import logger


class RelatedFileCollector(Collector):
    """
    Loads files imported by the change set from the current working tree.

    Candidates are tried in the order given. Paths already in the change set
    are skipped, and only successful reads count toward ``max_files``.
    """

    def __init__(
        self,
        repo_path: Path,
        candidates: Iterable[str],
        exclude: Iterable[str] = (),
        max_files: int = 5,
        max_chars: int = 100_000,
    ):
        self.repo_path = Path(repo_path)
        self.candidates = list(candidates)
        self.exclude = set(exclude)
        self.max_files = max_files
        self.max_chars = max_chars

    def _read(self, relative: str) -> str:
        root = self.repo_path.resolve()
        path = (root / relative).resolve()
        if root not in path.parents:
            raise FileReadFailure(relative, "missing", "outside repository")
        if not path.is_file():
            raise FileReadFailure(relative, "missing")
        # No UTF-8 character is wider than 4 bytes
        if path.stat().st_size >= 4 * self.max_chars:
            raise FileReadFailure(relative, "too_large")
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise FileReadFailure(relative, "unreadable", str(e))
        try:
            content = decode_text(data)
        except UnicodeDecodeError:
            raise FileReadFailure(relative, "binary")
        if len(content) >= self.max_chars:
            raise FileReadFailure(relative, "too_large", f"{len(content)} characters")
        return content

    def load(self) -> List[FileEntry]:
        related: List[FileEntry] = []
        for candidate in self.candidates:
            if len(related) >= self.max_files:
                break
            if candidate in self.exclude:
                continue
            try:
                content = self._read(candidate)
            except (FileReadFailure, OSError) as e:
                logger.trace(f"Skipping related candidate '{candidate}': {e}")
                continue
            related.append(FileEntry(path=candidate, content=content))
            self.exclude.add(candidate)
        return related

    def collect(self) -> Mapping[str, Any]:
        """
        Returns:
            ``{"related_files": [FileEntry, ...]}``, at most ``max_files`` long.
        """
        related = self.load()
        logger.info(f"Loaded {len(related)} related files from {len(self.candidates)} candidates.")
        return {"related_files": related}
