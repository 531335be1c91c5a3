import datetime
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.contracts.formatter import Formatter
from utils.errors import FormatterError

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class Jinja2Formatter(Formatter):
    """Renders the review prompt and the Markdown report from Jinja2 templates."""

    def __init__(self, template_dir: Optional[str] = None):
        if template_dir is None:
            template_dir = str(DEFAULT_TEMPLATE_DIR)

        self.template_dir = template_dir
        try:
            # The user's directory wins, the bundled templates fill the gaps.
            self.env = Environment(
                loader=FileSystemLoader([self.template_dir, str(DEFAULT_TEMPLATE_DIR)]),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
                undefined=StrictUndefined,
            )
        except Exception as e:
            raise FormatterError(f"Failed to initialize Jinja2 environment: {e}") from e

    def render(self, template_name: str, **variables: Any) -> str:
        try:
            template = self.env.get_template(template_name)
            return template.render(now=datetime.datetime.now, **variables)
        except Exception as e:
            raise FormatterError(f"Failed to render template {template_name}: {e}") from e
