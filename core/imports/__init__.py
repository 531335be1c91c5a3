# Import matchers so they register themselves
from core.imports import matchers  # noqa: F401
from core.imports.resolver import ImportResolver, is_relative_specifier

__all__ = ["ImportResolver", "is_relative_specifier"]
