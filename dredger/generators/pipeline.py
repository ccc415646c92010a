"""Two-phase documentation pipeline over a repository tree.

Phase one derives a project summary from the README; phase two
documents every source file with that summary as shared context.
"""

import logging
import threading
from typing import Optional

from dredger.generators.context import ContextSummarizer, extract_project_context
from dredger.generators.doc_gen import DocGenerator, DredgerDoc
from dredger.generators.ollama_client import OllamaClient
from dredger.generators.template_manager import TemplateManager
from dredger.repo.structure import RepoNode, iter_files
from dredger.utils.config import GenerationConfig
from dredger.utils.errors import OperationCancelled

logger = logging.getLogger(__name__)


class DocPipeline:
    """Runs context extraction, summarization and per-file generation."""

    def __init__(
        self,
        llm_client: OllamaClient,
        config: Optional[GenerationConfig] = None,
        template_manager: Optional[TemplateManager] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.config = config or GenerationConfig()
        templates = template_manager or TemplateManager()
        self.summarizer = ContextSummarizer(llm_client, templates)
        self.generator = DocGenerator(llm_client, templates)
        self.cancel_event = cancel_event

    def build_context(self, tree: RepoNode, project_name: str = "") -> str:
        """Extract the README excerpt and summarize it if configured."""
        context = extract_project_context(tree, max_lines=self.config.context_lines)
        if context and self.config.summarize_context:
            context = self.summarizer.summarize(context, project_name=project_name)
        return context

    def run(self, tree: RepoNode, project_name: str = "") -> list[DredgerDoc]:
        """Document every file in the tree.

        Args:
            tree: Root of a built repository tree.
            project_name: Optional repository name used in prompts.

        Returns:
            Docs for the files whose replies contained comment lines,
            in tree order.

        Raises:
            OperationCancelled: If the cancel event is set between files.
        """
        context = self.build_context(tree, project_name=project_name)

        docs: list[DredgerDoc] = []
        visited = 0
        for node in iter_files(tree):
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise OperationCancelled("Documentation run cancelled")
            visited += 1
            doc = self.generator.generate_doc(node.path, node.content, context)
            if doc is not None:
                docs.append(doc)

        logger.info("Documented %d of %d files", len(docs), visited)
        return docs
