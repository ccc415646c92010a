"""Project context extraction from a repository tree.

Finds the project's README in an already-built tree, keeps its opening
lines, and optionally condenses them with one model call.
"""

import logging
from typing import Optional

from dredger.generators.ollama_client import OllamaClient
from dredger.generators.template_manager import TemplateManager
from dredger.repo.structure import RepoNode, iter_files
from dredger.utils.errors import ModelQueryError

logger = logging.getLogger(__name__)

README_SUFFIXES = ("README", "README.md")

_SUMMARY_EXAMPLES = (
    (
        "# fastcsv\n\nA tiny, dependency-free CSV parser for embedded targets.\n\n"
        "## Features\n- Streaming reads\n- No allocations after init",
        "fastcsv is a small CSV parsing library for embedded systems. It reads "
        "CSV data as a stream without allocating memory after initialization.",
    ),
    (
        "# Weatherbot\n\nA chat bot that answers weather questions using the "
        "OpenMeteo API.\n\nRun `weatherbot serve` to start the HTTP server.",
        "Weatherbot is a chat bot that answers weather questions with data from "
        "the OpenMeteo API. It runs as an HTTP server.",
    ),
)


def extract_project_context(tree: RepoNode, max_lines: int = 10) -> str:
    """Return the first lines of the first README found in the tree.

    Searches depth-first in tree order and stops at the first file
    whose path ends in README or README.md. Makes no remote calls.

    Args:
        tree: Root of a built repository tree.
        max_lines: Number of leading lines to keep.

    Returns:
        The excerpt joined by newlines, or "" if there is no README.
    """
    for node in iter_files(tree):
        if node.path.endswith(README_SUFFIXES):
            excerpt = "\n".join(node.content.splitlines()[:max_lines])
            logger.info("Using %s as project context", node.path)
            return excerpt
    logger.info("No README found; continuing without project context")
    return ""


class ContextSummarizer:
    """Condenses a README excerpt into a short project summary."""

    def __init__(
        self,
        llm_client: OllamaClient,
        template_manager: Optional[TemplateManager] = None,
    ) -> None:
        self.llm = llm_client
        self.templates = template_manager or TemplateManager()

    def summarize(self, raw_context: str, project_name: str = "") -> str:
        """Summarize a README excerpt with one model call.

        A failed query degrades to an empty context; the raw excerpt
        is not used as a fallback.

        Args:
            raw_context: README excerpt; "" skips the call.
            project_name: Optional repository name for the prompt.

        Returns:
            The summary, or "" if the input was empty or the query failed.
        """
        if not raw_context.strip():
            return ""

        system = self.templates.render_summary_prompt(project_name=project_name)
        try:
            summary = self.llm.query_model(system, raw_context, _SUMMARY_EXAMPLES)
        except ModelQueryError as e:
            logger.warning("Project summary failed, continuing without context: %s", e)
            return ""

        summary = summary.strip()
        logger.info("Summarized project context (%d chars)", len(summary))
        return summary
