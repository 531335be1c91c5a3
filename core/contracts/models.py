from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnavailableReason(str, Enum):
    MISSING = "missing"
    BINARY = "binary"
    TOO_LARGE = "too_large"
    UNREADABLE = "unreadable"


class CommitMetadata(BaseModel):
    commit: str
    author: str = ""
    date: str = ""
    message: str = ""
    stat_summary: str = ""


class FileEntry(BaseModel):
    """
    A repository-relative path and its content.

    ``content`` is None exactly when ``unavailable_reason`` is set; that pair is
    the sentinel for content that must not be included verbatim.
    """
    path: str
    content: Optional[str] = None
    unavailable_reason: Optional[UnavailableReason] = None

    @classmethod
    def unavailable(cls, path: str, reason: UnavailableReason) -> "FileEntry":
        return cls(path=path, content=None, unavailable_reason=reason)

    @property
    def is_available(self) -> bool:
        return self.unavailable_reason is None and self.content is not None

    @property
    def placeholder(self) -> str:
        reason = self.unavailable_reason.value if self.unavailable_reason else "unknown"
        return f"[File not available: {reason}]"


class ImportReference(BaseModel):
    raw_specifier: str
    resolved_candidate_paths: List[str] = Field(default_factory=list)


class ContextPayload(BaseModel):
    """Everything the reviewer gets to see about one commit."""
    model_config = ConfigDict(frozen=True)

    repository: str
    metadata: CommitMetadata
    diff: Optional[str] = None
    change_set_files: List[FileEntry] = Field(default_factory=list)
    related_files: List[FileEntry] = Field(default_factory=list)
    readme_excerpt: Optional[str] = None
    recent_commit_log: Optional[str] = None
    omitted_change_set_files: int = 0
