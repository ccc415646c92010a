"""Per-file documentation generation.

Builds a system prompt for each source file from the language
persona, the file path and the project context, asks the model to
document the file, and keeps only the comment lines of the reply.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from dredger.generators.languages import detect_language, extract_comment_block
from dredger.generators.ollama_client import OllamaClient
from dredger.generators.template_manager import TemplateManager
from dredger.utils.errors import ModelQueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DredgerDoc:
    """Generated documentation for one file.

    Attributes:
        file_path: Repository path of the documented file.
        comment_block: Documentation lines extracted from the model reply.
    """

    file_path: str
    comment_block: str

    def to_dict(self) -> dict[str, str]:
        return {"file_path": self.file_path, "comment_block": self.comment_block}


class DocGenerator:
    """Generates documentation comments for individual source files."""

    def __init__(
        self,
        llm_client: OllamaClient,
        template_manager: Optional[TemplateManager] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            llm_client: Client for model queries.
            template_manager: Template manager for prompts. Creates
                a default instance if not provided.
        """
        self.llm = llm_client
        self.templates = template_manager or TemplateManager()

    def generate_doc(
        self,
        path: str,
        content: str,
        project_context: str = "",
    ) -> Optional[DredgerDoc]:
        """Generate documentation for one file.

        Files without a recognized source extension are skipped
        without a model call. A failed query is logged and yields None
        so one file never stops the rest of the run.

        Args:
            path: Repository path of the file.
            content: Decoded file text, sent as the user prompt.
            project_context: Project summary; may be empty.

        Returns:
            A DredgerDoc if the reply contained comment lines, else None.
        """
        language = detect_language(path)
        if language is None:
            logger.debug("Skipping %s (unrecognized extension)", path)
            return None

        system = self.templates.render_file_doc_prompt(
            path, language, project_context=project_context
        )
        try:
            reply = self.llm.query_model(system, content, language.examples)
        except ModelQueryError as e:
            logger.warning("Documentation query for %s failed: %s", path, e)
            return None

        block = extract_comment_block(reply, language.comment_marker)
        if not block:
            logger.info("No documentation lines in reply for %s", path)
            return None

        logger.info("Generated documentation for %s", path)
        return DredgerDoc(file_path=path, comment_block=block)
