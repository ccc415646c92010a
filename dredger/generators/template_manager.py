"""Template manager for loading and rendering Jinja2 prompt templates.

Provides a centralized interface for rendering the system prompts used
by the documentation pipeline from templates in the templates/
directory.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from dredger.generators.languages import LanguageSpec

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"


class TemplateManager:
    """Loads and renders Jinja2 prompt templates for documentation generation."""

    def __init__(self, templates_dir: Optional[str] = None) -> None:
        """Initialize the template manager.

        Args:
            templates_dir: Path to the templates directory. Uses the
                default templates/ directory if not specified.
        """
        self._templates_path = (
            Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATES_DIR
        )

        if not self._templates_path.exists():
            logger.warning("Templates directory not found: %s", self._templates_path)

        self._env = Environment(
            loader=FileSystemLoader(str(self._templates_path)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        logger.debug("Template manager initialized with: %s", self._templates_path)

    def render_file_doc_prompt(
        self,
        path: str,
        language: LanguageSpec,
        project_context: str = "",
    ) -> str:
        """Render the system prompt for documenting one source file.

        Args:
            path: Repository path of the file.
            language: Language of the file.
            project_context: Project summary; omitted from the prompt when empty.

        Returns:
            Rendered system prompt.
        """
        return self._render(
            "file_doc.j2",
            path=path,
            language=language,
            project_context=project_context.strip(),
        )

    def render_summary_prompt(self, project_name: str = "") -> str:
        """Render the system prompt for summarizing a README excerpt.

        Args:
            project_name: Optional repository name to mention.

        Returns:
            Rendered system prompt.
        """
        return self._render("summarize.j2", project_name=project_name)

    def _render(self, template_name: str, **kwargs: Any) -> str:
        """Render a template with the given context variables.

        Raises:
            TemplateNotFound: If the template file does not exist.
        """
        template = self._env.get_template(template_name)
        rendered = template.render(**kwargs).strip()
        logger.debug("Rendered template %s (%d chars)", template_name, len(rendered))
        return rendered

    def list_templates(self) -> list[str]:
        """List all available template files."""
        return self._env.list_templates()
