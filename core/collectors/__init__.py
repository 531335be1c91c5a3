from core.collectors.changeset_collector import ChangeSetCollector
from core.collectors.commit_collector import CommitCollector
from core.collectors.history_collector import HistoryCollector
from core.collectors.readme_collector import ReadmeCollector
from core.collectors.related_collector import RelatedFileCollector

__all__ = [
    "ChangeSetCollector",
    "CommitCollector",
    "HistoryCollector",
    "ReadmeCollector",
    "RelatedFileCollector",
]
