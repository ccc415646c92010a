"""Source languages the documentation pipeline knows how to handle.

Each language declares the file extensions it owns, its single-line
comment marker (used to pick documentation lines out of a model
response) and the marker the model is asked to write.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional


@dataclass(frozen=True)
class LanguageSpec:
    """Documentation conventions for one language.

    Attributes:
        name: Display name used in prompts.
        extensions: Lower-case file suffixes including the dot.
        comment_marker: Single-line comment prefix.
        doc_marker: Prefix the model is asked to use for doc lines.
        examples: Few-shot (source, documentation) pairs.
    """

    name: str
    extensions: tuple[str, ...]
    comment_marker: str
    doc_marker: str
    examples: tuple[tuple[str, str], ...] = field(default=(), repr=False)


_RUST_EXAMPLES = (
    (
        "fn calculate_area(radius: f64) -> f64 { std::f64::consts::PI * radius * radius }",
        "//! Computes the area of a circle.\n//! \n//! # Arguments\n"
        "//! * `radius` - The radius of the circle.\n//! \n//! # Returns\n"
        "//! The computed area.",
    ),
    (
        "struct Config { timeout: u32, verbose: bool }",
        "//! Holds configuration settings for the application.\n//! \n"
        "//! Includes parameters for timeout and verbosity.",
    ),
)

_PYTHON_EXAMPLES = (
    (
        "def calculate_area(radius):\n    return math.pi * radius ** 2",
        "# Computes the area of a circle.\n#\n"
        "# Takes the circle's radius and returns its area as a float.",
    ),
)

LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec("Rust", (".rs",), "//", "//!", _RUST_EXAMPLES),
    LanguageSpec("Python", (".py",), "#", "#", _PYTHON_EXAMPLES),
    LanguageSpec("JavaScript", (".js", ".jsx", ".mjs", ".cjs"), "//", "//"),
    LanguageSpec("TypeScript", (".ts", ".tsx"), "//", "//"),
    LanguageSpec("Go", (".go",), "//", "//"),
    LanguageSpec("Java", (".java",), "//", "//"),
    LanguageSpec("Kotlin", (".kt", ".kts"), "//", "//"),
    LanguageSpec("C", (".c", ".h"), "//", "//"),
    LanguageSpec("C++", (".cc", ".cpp", ".cxx", ".hpp", ".hh"), "//", "//"),
    LanguageSpec("C#", (".cs",), "//", "///"),
    LanguageSpec("Swift", (".swift",), "//", "///"),
    LanguageSpec("Ruby", (".rb",), "#", "#"),
    LanguageSpec("Shell", (".sh", ".bash"), "#", "#"),
)

_BY_EXTENSION: dict[str, LanguageSpec] = {
    ext: lang for lang in LANGUAGES for ext in lang.extensions
}


def detect_language(path: str) -> Optional[LanguageSpec]:
    """Return the language for a repository path, or None if unrecognized."""
    suffix = PurePosixPath(path).suffix.lower()
    return _BY_EXTENSION.get(suffix)


def extract_comment_block(text: str, marker: str) -> str:
    """Keep only the lines of text that are single-line comments.

    Args:
        text: Free-text model response.
        marker: Comment prefix, e.g. "//" or "#".

    Returns:
        The matching lines, stripped and joined by newlines; "" if none.
    """
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line.startswith(marker))
