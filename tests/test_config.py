"""Tests for configuration loading and token storage."""

from pathlib import Path

import pytest
import yaml
from dotenv import dotenv_values

from dredger.utils.config import (
    AppConfig,
    GenerationConfig,
    GitHubConfig,
    LoggingConfig,
    OllamaConfig,
    OutputConfig,
    TokenizerConfig,
    load_config,
    save_token,
)


class TestGitHubConfig:
    """Tests for GitHubConfig defaults."""

    def test_defaults(self) -> None:
        config = GitHubConfig()
        assert config.api_url == "https://api.github.com"
        assert config.token == ""
        assert config.user_agent == "dredger"
        assert config.workers == 1

    def test_token_not_in_repr(self) -> None:
        assert "secret" not in repr(GitHubConfig(token="secret"))


class TestAppConfigDefaults:
    """Tests for AppConfig with all defaults."""

    def test_default_construction(self) -> None:
        config = AppConfig()
        assert isinstance(config.github, GitHubConfig)
        assert isinstance(config.ollama, OllamaConfig)
        assert isinstance(config.tokenizer, TokenizerConfig)
        assert isinstance(config.generation, GenerationConfig)
        assert isinstance(config.output, OutputConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_generation_defaults(self) -> None:
        config = AppConfig()
        assert config.generation.context_lines == 10
        assert config.generation.summarize_context is True


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, tmp_path: Path) -> None:
        config = load_config(env_file=str(tmp_path / "none.env"))
        assert isinstance(config, AppConfig)
        assert config.ollama.model == "llama3.1"
        assert config.github.token == ""

    def test_load_from_explicit_path(self, tmp_path: Path) -> None:
        config_data = {
            "github": {"api_url": "https://ghe.example.com/api/v3/", "workers": 4},
            "ollama": {"model": "codellama", "timeout": 30},
            "generation": {"summarize_context": False},
            "logging": {"level": "DEBUG"},
        }
        config_file = tmp_path / "test_config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        config = load_config(str(config_file), env_file=str(tmp_path / "none.env"))
        assert config.github.api_url == "https://ghe.example.com/api/v3"
        assert config.github.workers == 4
        assert config.ollama.model == "codellama"
        assert config.ollama.timeout == 30
        assert config.generation.summarize_context is False
        assert config.logging.level == "DEBUG"

    def test_load_nonexistent_returns_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "nonexistent.yaml"))
        assert config.github.api_url == "https://api.github.com"

    def test_load_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        config = load_config(str(config_file))
        assert isinstance(config, AppConfig)

    def test_token_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITHUB_PAT", "ghp_env")
        config = load_config(str(tmp_path / "nonexistent.yaml"))
        assert config.github.token == "ghp_env"

    def test_token_from_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GITHUB_PAT=ghp_file\n")
        config = load_config(str(tmp_path / "nonexistent.yaml"), env_file=str(env_file))
        assert config.github.token == "ghp_file"

    def test_environment_wins_over_env_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITHUB_PAT", "ghp_env")
        env_file = tmp_path / ".env"
        env_file.write_text("GITHUB_PAT=ghp_file\n")
        config = load_config(str(tmp_path / "nonexistent.yaml"), env_file=str(env_file))
        assert config.github.token == "ghp_env"

    def test_token_in_yaml_is_ignored(self, tmp_path: Path) -> None:
        config_file = tmp_path / "c.yaml"
        config_file.write_text("github:\n  token: from-yaml\n")
        config = load_config(str(config_file), env_file=str(tmp_path / "none.env"))
        assert config.github.token == ""


class TestSaveToken:
    """Tests for storing the token in a .env file."""

    def test_creates_file(self, tmp_path: Path) -> None:
        path = save_token("ghp_new", str(tmp_path / ".env"))
        assert dotenv_values(path) == {"GITHUB_PAT": "ghp_new"}

    def test_replaces_existing_token(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("OTHER=1\nGITHUB_PAT=ghp_old\n")

        save_token(" ghp_new \n", str(env_file))

        assert dotenv_values(env_file) == {"OTHER": "1", "GITHUB_PAT": "ghp_new"}
