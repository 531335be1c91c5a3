import datetime
import re
import traceback
from pathlib import Path
from typing import Optional

from core.contracts.models import ContextPayload
from core.formatter.jinja_formatter import Jinja2Formatter
from utils.errors import AIReviewException, ReportError
from utils.logger import logger

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ReportWriter:
    """
    Persists reviews and error records under one directory.

    File names combine repository, short commit hash and a timestamp, and files
    are created exclusively, so concurrent reviews never share a path.
    """

    def __init__(self, directory: str, formatter: Jinja2Formatter, template: str = "report.md.j2"):
        self.directory = Path(directory).expanduser()
        self.formatter = formatter
        self.template = template

    def _base_name(self, repository: str, commit: str, now: Optional[datetime.datetime] = None) -> str:
        now = now or datetime.datetime.now()
        repo = _UNSAFE_CHARS.sub("_", repository) or "repo"
        short = _UNSAFE_CHARS.sub("_", commit[:8]) or "unknown"
        return f"{repo}_{short}_{now.strftime('%Y-%m-%dT%H-%M-%S')}"

    def _write_exclusive(self, base_name: str, suffix: str, content: str) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReportError(f"Could not create report directory {self.directory}: {e}") from e

        attempt = 0
        while True:
            name = base_name if attempt == 0 else f"{base_name}-{attempt}"
            path = self.directory / f"{name}{suffix}"
            try:
                with open(path, "x", encoding="utf-8") as f:
                    f.write(content)
                return path
            except FileExistsError:
                attempt += 1
            except OSError as e:
                raise ReportError(f"Could not write {path}: {e}") from e

    def write_review(self, payload: ContextPayload, review: str, provider: str, model: str) -> Path:
        content = self.formatter.render(
            self.template, payload=payload, review=review, provider=provider, model=model
        )
        path = self._write_exclusive(
            self._base_name(payload.repository, payload.metadata.commit), ".md", content
        )
        logger.info(f"Review saved to: {path}")
        return path

    def write_error(self, repository: str, commit: str, error: BaseException) -> Optional[Path]:
        """
        Writes an error record for a failed review.

        Returns None instead of raising when even the record cannot be written,
        so the original error stays the one reported.
        """
        stage = error.stage if isinstance(error, AIReviewException) else "unknown"
        details = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        content = f"Error during review (stage: {stage}):\n\n{error}\n\n{details}"
        try:
            path = self._write_exclusive(self._base_name(repository, commit), "_ERROR.txt", content)
        except ReportError as e:
            logger.error(f"Could not write error record: {e}")
            return None
        logger.info(f"Error record saved to: {path}")
        return path
