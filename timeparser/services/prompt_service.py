"""
Prompt rendering using Jinja2 templates.

Architecture Decision: Template Pattern
Prompts live as text files next to the code, so they can be tuned without
touching the parsing logic.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from timeparser.domain.models import ProjectGroup
from timeparser.utils import get_resource_path

METADATA_TEMPLATE = "metadata_prompt.txt"
MATCHING_TEMPLATE = "matching_prompt.txt"


class PromptRenderer:
    """
    Renders the two pipeline prompts.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize the renderer.

        Args:
            template_dir: Directory containing the prompt templates
        """
        if template_dir is None:
            template_dir = get_resource_path("resources/prompts")

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined
        )
        self.env.filters['to_pretty_json'] = self._to_pretty_json

    @staticmethod
    def _to_pretty_json(value: Any) -> str:
        """Indented JSON; task names like "April'25" stay unescaped"""
        if isinstance(value, list):
            value = [v.model_dump(by_alias=True) if hasattr(v, "model_dump") else v for v in value]
        return json.dumps(value, indent=2, ensure_ascii=False)

    def metadata_prompt(self, raw_text: str) -> str:
        return self.env.get_template(METADATA_TEMPLATE).render(raw_text=raw_text)

    def matching_prompt(self, raw_text: str, owner: str, month: str,
                        projects: List[ProjectGroup]) -> str:
        return self.env.get_template(MATCHING_TEMPLATE).render(
            raw_text=raw_text,
            owner=owner,
            month=month,
            projects=projects
        )
