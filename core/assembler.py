"""
Merges the collected pieces of a commit review into one ContextPayload.

This is pure data composition: no git, filesystem or network access, and the
same inputs always produce the same payload.
"""
from typing import Optional, Sequence

from config.models import ContextConfig
from core.contracts.models import CommitMetadata, ContextPayload, FileEntry
from utils.errors import PayloadAssemblyError


def assemble_context(
    repository: str,
    metadata: CommitMetadata,
    diff: Optional[str],
    change_set: Sequence[FileEntry],
    related_files: Sequence[FileEntry],
    readme: Optional[str],
    recent_commits: Optional[str],
    limits: Optional[ContextConfig] = None,
) -> ContextPayload:
    """
    Builds the payload, keeping the first ``max_changed_files`` change-set
    entries and the first ``max_related_files`` related files.

    Raises:
        PayloadAssemblyError: If a related file duplicates a change-set path or
            the README excerpt is over its limit. Both mean an earlier stage is broken.
    """
    limits = limits or ContextConfig()

    changed_paths = {entry.path for entry in change_set}
    duplicated = [entry.path for entry in related_files if entry.path in changed_paths]
    if duplicated:
        raise PayloadAssemblyError(f"Related files duplicate change-set paths: {duplicated}")
    if readme is not None and len(readme) > limits.readme_max_chars:
        raise PayloadAssemblyError(
            f"README excerpt has {len(readme)} characters, limit is {limits.readme_max_chars}."
        )

    kept = list(change_set[:limits.max_changed_files])
    return ContextPayload(
        repository=repository,
        metadata=metadata,
        diff=diff,
        change_set_files=kept,
        related_files=list(related_files[:limits.max_related_files]),
        readme_excerpt=readme or None,
        recent_commit_log=recent_commits or None,
        omitted_change_set_files=len(change_set) - len(kept),
    )
