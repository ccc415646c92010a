"""Write-side GitHub operations for publishing generated docs.

Each operation is a single REST call made through the read client's
session. publish_docs sequences them: branch off the base, commit one
Markdown file per doc, and open a pull request.
"""

import base64
import logging
from typing import Optional, Sequence

from dredger.generators.doc_gen import DredgerDoc
from dredger.github.client import GitHubClient, split_owner_repo
from dredger.output.markdown import render_doc
from dredger.utils.errors import RemoteError

logger = logging.getLogger(__name__)


class PullRequestPublisher:
    """Creates branches, commits files and opens pull requests."""

    def __init__(self, client: GitHubClient, docs_dir: str = "docs/dredger") -> None:
        """Initialize the publisher.

        Args:
            client: Authenticated client whose session is reused.
            docs_dir: Repository directory the doc files are written under.
        """
        self.client = client
        self.docs_dir = docs_dir.strip("/")

    def _repo_url(self, owner_repo: str) -> str:
        owner, repo = split_owner_repo(owner_repo)
        return f"{self.client.config.api_url}/repos/{owner}/{repo}"

    def get_branch_sha(self, owner_repo: str, branch: str) -> str:
        """Return the head commit SHA of a branch.

        Raises:
            RemoteError: If the ref cannot be read or has no SHA.
        """
        url = f"{self._repo_url(owner_repo)}/git/ref/heads/{branch}"
        payload = self.client.request_json("GET", url)
        sha = (payload.get("object") or {}).get("sha")
        if not sha:
            raise RemoteError(f"No SHA for branch {branch}", url=url)
        return sha

    def create_branch(self, owner_repo: str, base_sha: str, branch_name: str) -> None:
        """Create refs/heads/<branch_name> pointing at base_sha."""
        url = f"{self._repo_url(owner_repo)}/git/refs"
        self.client.request_json(
            "POST", url, {"ref": f"refs/heads/{branch_name}", "sha": base_sha}
        )
        logger.info("Created branch %s at %s", branch_name, base_sha[:8])

    def put_file(
        self,
        owner_repo: str,
        path: str,
        content: str,
        branch: str,
        message: Optional[str] = None,
    ) -> None:
        """Create a file on a branch with one commit."""
        url = f"{self._repo_url(owner_repo)}/contents/{path.strip('/')}"
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        self.client.request_json(
            "PUT",
            url,
            {"message": message or f"Add {path}", "content": encoded, "branch": branch},
        )
        logger.info("Committed %s to %s", path, branch)

    def open_pull_request(
        self,
        owner_repo: str,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> str:
        """Open a pull request and return its HTML URL.

        Raises:
            RemoteError: If the request fails or the response has no URL.
        """
        url = f"{self._repo_url(owner_repo)}/pulls"
        payload = self.client.request_json(
            "POST", url, {"title": title, "head": head, "base": base, "body": body}
        )
        pr_url = payload.get("html_url")
        if not pr_url:
            raise RemoteError("Pull request response has no html_url", url=url)
        logger.info("Opened pull request %s", pr_url)
        return pr_url

    def doc_path(self, doc: DredgerDoc) -> str:
        """Repository path the doc for a file is committed to."""
        return f"{self.docs_dir}/{doc.file_path}.md"

    def publish_docs(
        self,
        owner_repo: str,
        docs: Sequence[DredgerDoc],
        base: str,
        branch: str,
        title: str = "docs: add generated documentation",
    ) -> str:
        """Commit every doc to a new branch and open a pull request.

        Args:
            owner_repo: Repository as "owner/repo".
            docs: Generated docs to commit.
            base: Branch to branch from and target with the PR.
            branch: Name of the new branch.
            title: Pull request title.

        Returns:
            The pull request URL.

        Raises:
            ValueError: If there are no docs to publish.
            RemoteError: If any step fails; earlier steps are not rolled back.
        """
        if not docs:
            raise ValueError("No documentation to publish")

        base_sha = self.get_branch_sha(owner_repo, base)
        self.create_branch(owner_repo, base_sha, branch)
        for doc in docs:
            self.put_file(
                owner_repo,
                self.doc_path(doc),
                render_doc(doc),
                branch,
                message=f"docs: document {doc.file_path}",
            )

        body_lines = ["Generated documentation for:", ""]
        body_lines.extend(f"- `{doc.file_path}`" for doc in docs)
        return self.open_pull_request(
            owner_repo, base, branch, title, "\n".join(body_lines)
        )
