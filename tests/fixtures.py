"""Helpers for registering mocked GitHub contents API responses."""

import base64
from typing import Optional

import responses

API = "https://api.test"
OLLAMA_URL = "http://ollama.test/api/generate"
OWNER_REPO = "octo/demo"


def contents_url(path: str = "") -> str:
    return f"{API}/repos/{OWNER_REPO}/contents/{path}"


def add_listing(entries: list[dict], path: str = "", status: int = 200) -> None:
    """Register a directory listing response."""
    responses.add(responses.GET, contents_url(path), json=entries, status=status)


def add_file(path: str, text: Optional[str] = None, status: int = 200) -> None:
    """Register a single-file response with line-wrapped base64 content."""
    if text is None:
        responses.add(responses.GET, contents_url(path), json={"message": "Not Found"}, status=status)
        return
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
    name = path.rsplit("/", 1)[-1]
    responses.add(
        responses.GET,
        contents_url(path),
        json={"name": name, "path": path, "type": "file", "content": wrapped},
        status=status,
    )


def entry(path: str, kind: str = "file") -> dict:
    """A listing item as the contents API returns it."""
    return {"name": path.rsplit("/", 1)[-1], "path": path, "type": kind}
