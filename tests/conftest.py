"""Shared fixtures for the dredger test suite.

All tests run without network access: GitHub and the model server are
mocked with the responses library, and token counts come from a tiny
word-level tokenizer written to a temp directory.
"""

from pathlib import Path

import pytest
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace

from dredger.github.client import GitHubClient
from dredger.repo.tokens import TokenCounter
from dredger.utils.config import GitHubConfig, OllamaConfig
from tests.fixtures import API, OLLAMA_URL

_VOCAB = {"[UNK]": 0, "#": 1, "hello": 2, "world": 3, "//": 4, "fn": 5}


@pytest.fixture(autouse=True)
def _no_ambient_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real GITHUB_PAT out of the tests."""
    monkeypatch.delenv("GITHUB_PAT", raising=False)


@pytest.fixture
def tokenizer_path(tmp_path: Path) -> Path:
    """Write a whitespace word-level tokenizer model and return its path.

    Every whitespace/punctuation-separated word is one token and unknown
    words map to [UNK], so counts are easy to predict.
    """
    tokenizer = Tokenizer(WordLevel(vocab=_VOCAB, unk_token="[UNK]"))
    tokenizer.pre_tokenizer = Whitespace()
    path = tmp_path / "tokenizer.json"
    tokenizer.save(str(path))
    return path


@pytest.fixture
def counter(tokenizer_path: Path) -> TokenCounter:
    return TokenCounter.from_file(tokenizer_path)


@pytest.fixture
def github_config() -> GitHubConfig:
    return GitHubConfig(api_url=API, token="test-token", timeout=5.0)


@pytest.fixture
def ollama_config() -> OllamaConfig:
    return OllamaConfig(url=OLLAMA_URL, model="test-model", timeout=5.0)


@pytest.fixture
def client(github_config: GitHubConfig) -> GitHubClient:
    return GitHubClient(github_config)
