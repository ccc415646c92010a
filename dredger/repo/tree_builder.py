"""Builds a token-annotated tree of a remote repository.

Walks the contents API depth-first in listing order, fetching every
file and counting its tokens. A file whose content cannot be fetched
gets a placeholder so the rest of the repository is still read, but a
listing failure or a tokenizer failure aborts the whole build: the
caller either gets a complete tree or an exception.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from dredger.github.client import GitHubClient
from dredger.repo.structure import DirectoryNode, EntryKind, FileNode, RepoEntry, RepoNode
from dredger.repo.tokens import TokenCounter
from dredger.utils.errors import OperationCancelled, RemoteError, TokenizationError

logger = logging.getLogger(__name__)

FETCH_FAILED_PLACEHOLDER = "Failed to fetch content"


class TreeBuilder:
    """Reads a repository into an immutable DirectoryNode tree.

    With workers > 1, sibling files of one directory are fetched and
    counted concurrently; children are still assembled in listing
    order. Directories are always walked one at a time.
    """

    def __init__(
        self,
        client: GitHubClient,
        counter: TokenCounter,
        workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Initialize the builder.

        Args:
            client: Client used for listings and file contents.
            counter: Token counter loaded once for the whole run.
            workers: Number of concurrent file fetches per directory.
            cancel_event: Optional event that stops the traversal.
        """
        self.client = client
        self.counter = counter
        self.workers = max(1, workers)
        self.cancel_event = cancel_event
        # Set on the first fatal error so queued file tasks never start.
        self._abort = threading.Event()
        self._fatal: Optional[Exception] = None
        self._fatal_lock = threading.Lock()

    def build(self, owner_repo: str, root_path: str = "") -> DirectoryNode:
        """Read the repository starting at root_path.

        Args:
            owner_repo: Repository as "owner/repo".
            root_path: Directory to start from; "" for the repository root.

        Returns:
            The root DirectoryNode of the complete tree.

        Raises:
            RemoteError: If any directory listing fails.
            TokenizerLoadError: If the tokenizer cannot be used.
            TokenizationError: If any file cannot be tokenized.
            OperationCancelled: If the cancel event is set.
        """
        self._abort.clear()
        self._fatal = None
        logger.info("Reading %s from '%s'", owner_repo, root_path or "/")

        try:
            if self.workers == 1:
                root = self._build_dir(owner_repo, root_path, None)
            else:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    root = self._build_dir(owner_repo, root_path, executor)
        except OperationCancelled:
            # A sibling task may have been stopped by an earlier tokenizer failure.
            if self._fatal is not None:
                raise self._fatal from None
            raise

        logger.info(
            "Read %s: %d tokens in total", owner_repo, root.token_count
        )
        return root

    def _build_dir(
        self,
        owner_repo: str,
        path: str,
        executor: Optional[ThreadPoolExecutor],
    ) -> DirectoryNode:
        self._check_cancelled()
        entries = self.client.list_entries(owner_repo, path)

        pending: dict[int, Future] = {}
        if executor is not None:
            for index, entry in enumerate(entries):
                if entry.kind == EntryKind.FILE.value:
                    pending[index] = executor.submit(self._file_node, owner_repo, entry)

        children: list[RepoNode] = []
        try:
            for index, entry in enumerate(entries):
                if entry.kind == EntryKind.FILE.value:
                    if index in pending:
                        children.append(pending[index].result())
                    else:
                        children.append(self._file_node(owner_repo, entry))
                elif entry.kind == EntryKind.DIR.value:
                    children.append(self._build_dir(owner_repo, entry.path, executor))
                else:
                    logger.debug("Skipping %s entry %s", entry.kind, entry.path)
        except BaseException:
            self._abort.set()
            for future in pending.values():
                future.cancel()
            raise

        name = path.rstrip("/").rsplit("/", 1)[-1] if path else ""
        return DirectoryNode(name=name, path=path, children=tuple(children))

    def _file_node(self, owner_repo: str, entry: RepoEntry) -> FileNode:
        if self._abort.is_set():
            raise OperationCancelled(f"Traversal aborted before {entry.path}")
        self._check_cancelled()

        try:
            content = self.client.fetch_file_content(owner_repo, entry.path)
        except RemoteError as e:
            logger.warning("Could not fetch %s, using placeholder: %s", entry.path, e)
            content = FETCH_FAILED_PLACEHOLDER

        # Tokenizer errors are fatal for the whole build.
        try:
            token_count = self.counter.count(content)
        except TokenizationError as e:
            error = TokenizationError(f"Could not tokenize {entry.path}: {e}")
            self._record_fatal(error)
            raise error from e
        except Exception as e:
            self._record_fatal(e)
            raise
        logger.debug("%s: %d tokens", entry.path, token_count)
        return FileNode(
            name=entry.name,
            path=entry.path,
            content=content,
            token_count=token_count,
        )

    def _record_fatal(self, error: Exception) -> None:
        with self._fatal_lock:
            if self._fatal is None:
                self._fatal = error
        self._abort.set()

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled("Repository traversal cancelled")


def build_tree(
    client: GitHubClient,
    owner_repo: str,
    tokenizer_path: Union[str, Path],
    root_path: str = "",
    workers: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> DirectoryNode:
    """Load the tokenizer once and read the repository into a tree.

    Raises:
        TokenizerLoadError: If the tokenizer file is missing or malformed;
            no request is made in that case.
    """
    counter = TokenCounter.from_file(tokenizer_path)
    builder = TreeBuilder(client, counter, workers=workers, cancel_event=cancel_event)
    return builder.build(owner_repo, root_path)
