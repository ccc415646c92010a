"""Markdown output for generated documentation.

Writes one Markdown file per documented source file and an index page
that links them, optionally followed by the repository tree with its
token counts.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from dredger.generators.doc_gen import DredgerDoc
from dredger.repo.structure import RepoNode, render_tree

logger = logging.getLogger(__name__)


def render_doc(doc: DredgerDoc) -> str:
    """Render one doc as a Markdown page."""
    return f"# `{doc.file_path}`\n\n```\n{doc.comment_block}\n```\n"


def doc_filename(doc: DredgerDoc) -> str:
    """Flatten a repository path into a safe Markdown file name."""
    safe_name = doc.file_path.replace("/", "_").replace("\\", "_")
    return f"{safe_name}.md"


class MarkdownWriter:
    """Writes generated docs as Markdown files."""

    def __init__(self, output_dir: str = "docs/dredger") -> None:
        """Initialize the Markdown writer.

        Args:
            output_dir: Directory where Markdown files will be written.
        """
        self.output_dir = Path(output_dir)

    def write_doc(self, doc: DredgerDoc) -> Path:
        """Write the page for a single doc.

        Returns:
            Path to the written Markdown file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        md_path = self.output_dir / doc_filename(doc)
        md_path.write_text(render_doc(doc), encoding="utf-8")
        logger.info("Wrote documentation: %s", md_path)
        return md_path

    def write_index(
        self,
        docs: Sequence[DredgerDoc],
        tree: Optional[RepoNode] = None,
        title: str = "Generated Documentation",
    ) -> Path:
        """Write an index page linking every doc.

        Args:
            docs: Docs to link, listed by file path.
            tree: Optional tree to append with its token counts.
            title: Title for the index page.

        Returns:
            Path to the written index file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        index_path = self.output_dir / "index.md"

        lines = [f"# {title}\n"]

        if docs:
            lines.append("## Files\n")
            for doc in sorted(docs, key=lambda d: d.file_path):
                lines.append(f"- [{doc.file_path}]({doc_filename(doc)})")
            lines.append("")

        if tree is not None:
            lines.append(f"## Repository tree ({tree.token_count} tokens)\n")
            lines.append("```")
            lines.append(render_tree(tree))
            lines.append("```")

        lines.append("")
        index_path.write_text("\n".join(lines), encoding="utf-8")

        logger.info("Wrote index: %s (%d docs)", index_path, len(docs))
        return index_path

    def write_all(
        self, docs: Sequence[DredgerDoc], tree: Optional[RepoNode] = None
    ) -> list[Path]:
        """Write every doc page plus the index."""
        paths = [self.write_doc(doc) for doc in docs]
        paths.append(self.write_index(docs, tree=tree))
        return paths
