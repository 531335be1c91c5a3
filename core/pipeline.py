import asyncio
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from config.models import Config
from core.assembler import assemble_context
from core.collectors import (
    ChangeSetCollector,
    CommitCollector,
    HistoryCollector,
    ReadmeCollector,
    RelatedFileCollector,
)
from core.contracts.models import ContextPayload
from core.formatter.jinja_formatter import Jinja2Formatter
from core.imports import ImportResolver
from core.llm.router import get_provider
from core.report import ReportWriter
from utils.errors import AIReviewException, CollectorError, ReviewTimeout
from utils.git import is_git_repository, resolve_commit
from utils.logger import logger


class ReviewResult(BaseModel):
    payload: ContextPayload
    prompt: str
    review: Optional[str] = None
    report_path: Optional[Path] = None


class CommitReviewPipeline:
    """
    The main pipeline for reviewing one commit.
    It orchestrates context collection, assembly, the review call and the report.
    """

    def __init__(self, config: Config):
        self.config = config
        self.formatter = Jinja2Formatter(template_dir=config.formatter.template_dir)
        self.writer = ReportWriter(
            directory=config.report.directory,
            formatter=self.formatter,
            template=config.formatter.report_template,
        )

    def _collect_commit_side(self, repo_path: Path, commit: str) -> Dict[str, Any]:
        """Commit reader, change set, imports and related files, in that order."""
        limits = self.config.context
        data: Dict[str, Any] = {}
        data.update(CommitCollector(
            repo_path, commit,
            max_diff_bytes=limits.diff_max_bytes,
            on_diff_too_large=limits.on_diff_too_large,
        ).collect())
        data.update(ChangeSetCollector(repo_path, commit, max_file_bytes=limits.file_max_bytes).collect())

        resolver = ImportResolver(matchers=limits.import_matchers, extensions=limits.import_extensions)
        candidates = resolver.candidates(data["change_set"])
        data.update(RelatedFileCollector(
            repo_path,
            candidates,
            exclude=[entry.path for entry in data["change_set"]],
            max_files=limits.max_related_files,
            max_chars=limits.related_file_max_chars,
        ).collect())
        return data

    def _collect_project_side(self, repo_path: Path, commit: str) -> Dict[str, Any]:
        """README and recent history. Neither is required, so failures only log."""
        limits = self.config.context
        data: Dict[str, Any] = {"readme": None, "recent_commits": None}
        data.update(ReadmeCollector(
            repo_path, candidates=limits.readme_candidates, max_chars=limits.readme_max_chars
        ).collect())
        try:
            data.update(HistoryCollector(repo_path, commit, n=limits.recent_commits).collect())
        except CollectorError as e:
            logger.warning(f"Could not collect recent commits: {e}")
        return data

    async def build_context(self, repo_path: Union[str, Path], ref: str) -> ContextPayload:
        """
        Runs the context stages for one commit and returns the assembled payload.

        Raises:
            CommitNotFound: If ``ref`` does not name a commit in ``repo_path``.
            DiffTooLarge: If the diff is too large and the mode is ``abort``.
        """
        repo_path = Path(repo_path).resolve()
        if not is_git_repository(repo_path):
            raise CollectorError(f"Not a git repository: {repo_path}", stage="commit")

        commit = resolve_commit(repo_path, ref)
        logger.info(f"Collecting context for {repo_path.name}@{commit[:8]}...")

        commit_data, project_data = await asyncio.gather(
            asyncio.to_thread(self._collect_commit_side, repo_path, commit),
            asyncio.to_thread(self._collect_project_side, repo_path, commit),
        )

        payload = assemble_context(
            repository=repo_path.name,
            metadata=commit_data["metadata"],
            diff=commit_data["diff"],
            change_set=commit_data["change_set"],
            related_files=commit_data["related_files"],
            readme=project_data["readme"],
            recent_commits=project_data["recent_commits"],
            limits=self.config.context,
        )
        logger.info(
            f"Assembled context: {len(payload.change_set_files)} changed files "
            f"({payload.omitted_change_set_files} omitted), {len(payload.related_files)} related files."
        )
        return payload

    async def _call_provider(self, prompt: str) -> str:
        provider = get_provider(self.config.model)
        timeout = self.config.model.timeout_sec
        logger.info(f"Calling LLM provider '{self.config.model.provider}' ({self.config.model.name})...")
        try:
            return await asyncio.wait_for(provider.generate(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ReviewTimeout(f"Review did not finish within {timeout} seconds.") from e

    async def review(self, repo_path: Union[str, Path], ref: str, dry_run: bool = False) -> ReviewResult:
        """
        Reviews one commit end to end.

        With ``dry_run`` the prompt is rendered but no model is called and
        nothing is written.

        Raises:
            AIReviewException: Any failure, with ``stage`` naming the failed step.
                Unless dry-running, an error record is written first.
        """
        logger.info("Starting commit review pipeline...")
        repository = Path(repo_path).resolve().name
        commit = ref
        try:
            payload = await self.build_context(repo_path, ref)
            commit = payload.metadata.commit
            prompt = self.formatter.render(self.config.formatter.prompt_template, payload=payload)
            logger.debug(f"Rendered review prompt ({len(prompt)} characters).")
            if dry_run:
                return ReviewResult(payload=payload, prompt=prompt)

            review = await self._call_provider(prompt)
            report_path = self.writer.write_review(
                payload, review, provider=self.config.model.provider, model=self.config.model.name
            )
        except AIReviewException as e:
            logger.error(f"Review failed at stage '{e.stage}': {e}")
            if not dry_run:
                self.writer.write_error(repository, commit, e)
            raise

        logger.success("Commit review pipeline completed successfully!")
        return ReviewResult(payload=payload, prompt=prompt, review=review, report_path=report_path)
