from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from core.contracts.collector import Collector
from utils.logger import logger


class ReadmeCollector(Collector):
    """
    A collector that retrieves an excerpt of the project's README file.
    """

    def __init__(
        self,
        repo_path: Path,
        candidates: Sequence[str] = ("README.md", "README.txt", "README"),
        max_chars: int = 5000,
    ):
        self.repo_path = Path(repo_path)
        self.candidates = list(candidates)
        self.max_chars = max_chars

    def collect(self) -> Mapping[str, Any]:
        """
        Reads the first readable candidate from the repository root.

        Returns:
            A mapping with the first ``max_chars`` characters of the README,
            or None if no candidate could be read.
        """
        readme: Optional[str] = None
        for filename in self.candidates:
            try:
                with open(self.repo_path / filename, "r", encoding="utf-8") as f:
                    readme = f.read(self.max_chars)
                logger.debug(f"Using {filename} as project README.")
                break
            except (OSError, UnicodeDecodeError):
                # Missing or unreadable, try the next one
                continue

        return {"readme": readme}
