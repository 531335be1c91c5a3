from typing import Any, Protocol


class Formatter(Protocol):
    def render(self, template_name: str, **variables: Any) -> str:
        ...
