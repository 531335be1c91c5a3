"""
Textual import matchers.

Each matcher pulls quoted module specifiers out of source text with a single
regular expression. Matching is line-bound and best effort: malformed or
unterminated syntax simply produces no match.
"""
import re
from typing import Iterator, Pattern

from core.registry import matcher_registry


class RegexMatcher:
    """Yields the first capture group of every match of ``pattern``."""

    pattern: Pattern[str]

    def find(self, content: str) -> Iterator[str]:
        for match in self.pattern.finditer(content):
            yield match.group(1)


@matcher_registry.register("require")
class RequireMatcher(RegexMatcher):
    """CommonJS ``require('./x')``."""
    pattern = re.compile(r"""require\(['"](.+?)['"]\)""")


@matcher_registry.register("import_from")
class ImportFromMatcher(RegexMatcher):
    """Static ``import { a } from './x'``."""
    pattern = re.compile(r"""import.*from\s+['"](.+?)['"]""")


@matcher_registry.register("dynamic_import")
class DynamicImportMatcher(RegexMatcher):
    """Dynamic ``import('./x')``."""
    pattern = re.compile(r"""import\(['"](.+?)['"]\)""")
