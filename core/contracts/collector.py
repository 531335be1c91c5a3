from typing import Any, Mapping, Protocol


class Collector(Protocol):
    """A protocol for classes that collect one part of the review context."""

    def collect(self) -> Mapping[str, Any]:
        """Collects information and returns it as a mapping keyed by payload field."""
        ...
