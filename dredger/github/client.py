"""Read-side client for the GitHub contents API.

Fetches directory listings and single-file contents, decodes the
base64 payloads GitHub returns, and validates the configured token.
Every non-2xx response or transport failure surfaces as a RemoteError
carrying the status and body.
"""

import base64
import binascii
import logging
import threading
from typing import Any, Optional

import requests

from dredger.repo.structure import RepoEntry
from dredger.utils.config import GitHubConfig
from dredger.utils.errors import ConfigError, OperationCancelled, RemoteError

logger = logging.getLogger(__name__)


def split_owner_repo(owner_repo: str) -> tuple[str, str]:
    """Split an "owner/repo" string into its two parts.

    Raises:
        ConfigError: If the value is not of the form owner/repo.
    """
    parts = owner_repo.strip().strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigError(f"Expected OWNER/REPO, got {owner_repo!r}")
    return parts[0], parts[1]


def decode_content(encoded: str) -> str:
    """Decode a base64 payload from the contents API into text.

    GitHub line-wraps the payload, so embedded newlines are removed
    before decoding. Invalid UTF-8 sequences are replaced.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    compact = encoded.replace("\n", "").replace("\r", "")
    raw = base64.b64decode(compact, validate=True)
    return raw.decode("utf-8", errors="replace")


class GitHubClient:
    """Authenticated client for the GitHub REST contents endpoints.

    Holds one requests.Session for the run. An optional cancellation
    event is checked before every request.
    """

    def __init__(
        self,
        config: Optional[GitHubConfig] = None,
        session: Optional[requests.Session] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: GitHub settings. Uses defaults if not provided.
            session: Optional pre-built session (tests, connection reuse).
            cancel_event: Optional event that aborts pending requests.

        Raises:
            ConfigError: If no token is configured.
        """
        self.config = config or GitHubConfig()
        if not self.config.token:
            raise ConfigError(
                "GITHUB_PAT is not set. Run 'dredger setup' or export it "
                "before making API calls."
            )
        self.cancel_event = cancel_event
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.config.token}",
                "User-Agent": self.config.user_agent,
                "Accept": "application/vnd.github+json",
            }
        )

    def contents_url(self, owner_repo: str, path: str = "") -> str:
        """Build the contents endpoint URL for a path ("" is the root)."""
        owner, repo = split_owner_repo(owner_repo)
        return f"{self.config.api_url}/repos/{owner}/{repo}/contents/{path.strip('/')}"

    def list_entries(self, owner_repo: str, path: str = "") -> list[RepoEntry]:
        """List the entries of a directory.

        Args:
            owner_repo: Repository as "owner/repo".
            path: Directory path relative to the root; "" for the root.

        Returns:
            Entries in the order the API returned them. A path that
            names a single file yields a one-element list.

        Raises:
            RemoteError: On transport failure or non-2xx status.
        """
        url = self.contents_url(owner_repo, path)
        payload = self.request_json("GET", url)
        if isinstance(payload, dict):
            payload = [payload]
        entries = [RepoEntry.from_dict(item) for item in payload]
        logger.debug("Listed %d entries at '%s'", len(entries), path or "/")
        return entries

    def fetch_file_content(self, owner_repo: str, path: str) -> str:
        """Fetch and decode a single file's text.

        Args:
            owner_repo: Repository as "owner/repo".
            path: File path relative to the root.

        Returns:
            The decoded UTF-8 text (invalid bytes replaced).

        Raises:
            RemoteError: On request failure, a missing content field,
                or a payload that is not valid base64.
        """
        url = self.contents_url(owner_repo, path)
        payload = self.request_json("GET", url)
        encoded = payload.get("content") if isinstance(payload, dict) else None
        if encoded is None:
            raise RemoteError(f"No content field for {path}", url=url)
        try:
            return decode_content(encoded)
        except (binascii.Error, ValueError) as e:
            raise RemoteError(f"Could not decode content of {path}: {e}", url=url) from e

    def validate_token(self) -> str:
        """Check the token against the /user endpoint.

        Returns:
            The login of the authenticated user.

        Raises:
            RemoteError: If the token is rejected or the API is unreachable.
        """
        payload = self.request_json("GET", f"{self.config.api_url}/user")
        login = payload.get("login", "") if isinstance(payload, dict) else ""
        logger.info("GitHub token verified for user %s", login or "<unknown>")
        return login

    def request_json(
        self, method: str, url: str, body: Optional[dict[str, Any]] = None
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            OperationCancelled: If the cancel event is set.
            RemoteError: On transport failure, non-2xx status, or a
                body that is not JSON.
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled(f"Cancelled before {method} {url}")

        try:
            response = self.session.request(
                method, url, json=body, timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            raise RemoteError(
                f"{method} request failed: {type(e).__name__}: {e}", url=url
            ) from e

        if not response.ok:
            raise RemoteError(
                f"{method} request failed",
                status=response.status_code,
                url=url,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                "Response body is not JSON",
                status=response.status_code,
                url=url,
                body=response.text,
            ) from e
