"""Data models for a repository read from the hosting API.

Defines the listing entry returned by the contents endpoint and the
two immutable tree node types, plus helpers to walk and render a tree.
These models are the shared vocabulary between the tree builder and
the documentation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Union


class EntryKind(str, Enum):
    """Kinds of entries reported by the contents endpoint."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"


@dataclass(frozen=True)
class RepoEntry:
    """A single item of a directory listing.

    Attributes:
        name: Entry name (last path segment).
        path: Slash-separated path relative to the repository root.
        kind: Entry type as reported by the API.
        content: Inline base64 content; only present on single-file responses.
    """

    name: str
    path: str
    kind: str
    content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepoEntry:
        """Deserialize from a contents API object.

        Args:
            data: Dictionary with at least name, path and type keys.

        Returns:
            A new RepoEntry instance.
        """
        return cls(
            name=data["name"],
            path=data["path"],
            kind=data["type"],
            content=data.get("content"),
        )


@dataclass(frozen=True)
class FileNode:
    """A file in the repository tree.

    Attributes:
        name: File name.
        path: Slash-separated path relative to the repository root.
        content: Full decoded text content.
        token_count: Number of model tokens in the content.
    """

    name: str
    path: str
    content: str = field(repr=False)
    token_count: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary, without file content.

        Returns:
            Dictionary representation of this file.
        """
        return {
            "type": "file",
            "name": self.name,
            "path": self.path,
            "token_count": self.token_count,
        }


@dataclass(frozen=True)
class DirectoryNode:
    """A directory in the repository tree.

    The token count is derived from the children when the node is
    created, so it always equals the sum of the direct children's
    counts.

    Attributes:
        name: Directory name ("" for the repository root).
        path: Slash-separated path relative to the repository root.
        children: Child nodes in API listing order.
        token_count: Sum of the children's token counts.
    """

    name: str
    path: str
    children: tuple[RepoNode, ...] = ()
    token_count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(
            self, "token_count", sum(child.token_count for child in self.children)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a nested dictionary, without file content.

        Returns:
            Dictionary representation of this directory and its subtree.
        """
        return {
            "type": "dir",
            "name": self.name,
            "path": self.path,
            "token_count": self.token_count,
            "children": [child.to_dict() for child in self.children],
        }


RepoNode = Union[FileNode, DirectoryNode]


def iter_nodes(root: RepoNode) -> Iterator[RepoNode]:
    """Yield every node depth-first, parents before children, in tree order."""
    yield root
    if isinstance(root, DirectoryNode):
        for child in root.children:
            yield from iter_nodes(child)


def iter_files(root: RepoNode) -> Iterator[FileNode]:
    """Yield every file node depth-first in tree order."""
    for node in iter_nodes(root):
        if isinstance(node, FileNode):
            yield node


def render_tree(root: RepoNode) -> str:
    """Render a tree as indented text with per-node token counts.

    Args:
        root: Root node to render.

    Returns:
        One line per node, two spaces of indent per level.
    """
    lines: list[str] = []
    _render(root, 0, lines)
    return "\n".join(lines)


def _render(node: RepoNode, depth: int, lines: list[str]) -> None:
    indent = "  " * depth
    if isinstance(node, DirectoryNode):
        label = f"{node.name}/" if node.name else "./"
        lines.append(f"{indent}{label} ({node.path or '.'}) - tokens={node.token_count}")
        for child in node.children:
            _render(child, depth + 1, lines)
    else:
        lines.append(f"{indent}{node.name} ({node.path}) - tokens={node.token_count}")
