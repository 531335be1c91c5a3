import posixpath
from typing import Iterable, List, Optional, Sequence

from core.contracts.models import FileEntry, ImportReference
from core.registry import matcher_registry
from utils.errors import ConfigError
from utils.logger import logger

DEFAULT_EXTENSIONS = ("", ".js", ".ts", ".jsx", ".tsx", ".rb")
DEFAULT_MATCHERS = ("require", "import_from", "dynamic_import")


def is_relative_specifier(specifier: str) -> bool:
    """True for specifiers that name a path relative to the importing file."""
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


class ImportResolver:
    """
    Turns relative import statements into candidate repository paths.

    Resolution is pure path construction: nothing here touches the filesystem.
    """

    def __init__(self, matchers: Optional[Sequence[str]] = None, extensions: Optional[Sequence[str]] = None):
        names = list(matchers) if matchers is not None else list(DEFAULT_MATCHERS)
        unknown = [name for name in names if name not in matcher_registry]
        if unknown:
            raise ConfigError(
                f"Unknown import matcher(s) {unknown} in context.import_matchers. "
                f"Available: {sorted(matcher_registry.keys())}"
            )
        self._matchers = [matcher_registry.create(name) for name in names]
        self._extensions = list(extensions) if extensions is not None else list(DEFAULT_EXTENSIONS)

    def resolve_specifier(self, specifier: str, importer_path: str) -> List[str]:
        """Returns the candidate paths for one specifier, in extension order."""
        if not is_relative_specifier(specifier):
            return []
        base = posixpath.normpath(posixpath.join(posixpath.dirname(importer_path), specifier))
        if base == ".." or base.startswith("../") or posixpath.isabs(base):
            # Points outside the repository
            return []
        return [base + ext for ext in self._extensions]

    def references(self, entry: FileEntry) -> List[ImportReference]:
        """Scans one file and returns an ImportReference per relative specifier found."""
        if not entry.is_available or not entry.content:
            return []

        refs: List[ImportReference] = []
        for matcher in self._matchers:
            for specifier in matcher.find(entry.content):
                candidates = self.resolve_specifier(specifier, entry.path)
                if candidates:
                    refs.append(ImportReference(raw_specifier=specifier, resolved_candidate_paths=candidates))
        return refs

    def candidates(self, change_set: Iterable[FileEntry]) -> List[str]:
        """All candidate paths for a change set, deduplicated in discovery order."""
        seen = {}
        for entry in change_set:
            for ref in self.references(entry):
                for path in ref.resolved_candidate_paths:
                    seen.setdefault(path, None)
        logger.debug(f"Resolved {len(seen)} unique import candidates.")
        return list(seen)
