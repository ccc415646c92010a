"""Configuration loader for dredger.

Loads settings from configs/config.yaml and the process environment
and provides typed access to every section via dataclasses. This is
the only module that reads the environment; everything else receives
its settings from the AppConfig built here.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv, set_key

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

TOKEN_ENV_VAR = "GITHUB_PAT"


@dataclass
class GitHubConfig:
    """Configuration for the GitHub REST client."""

    api_url: str = "https://api.github.com"
    token: str = field(default="", repr=False)
    user_agent: str = "dredger"
    timeout: float = 30.0
    workers: int = 1


@dataclass
class OllamaConfig:
    """Configuration for the local model-serving endpoint."""

    url: str = "http://localhost:11434/api/generate"
    model: str = "llama3.1"
    timeout: float = 120.0


@dataclass
class TokenizerConfig:
    """Configuration for the tokenizer model."""

    path: str = "tokenizers/llama.json"


@dataclass
class GenerationConfig:
    """Configuration for the documentation pipeline."""

    context_lines: int = 10
    summarize_context: bool = True


@dataclass
class OutputConfig:
    """Configuration for generated documentation output."""

    output_dir: str = "docs/dredger"
    pr_docs_dir: str = "docs/dredger"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class AppConfig:
    """Top-level application configuration."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> AppConfig:
    """Load application configuration from a YAML file and the environment.

    Reads the YAML config file and constructs a fully typed AppConfig.
    Missing values fall back to defaults. The GitHub token is never
    read from the YAML file: it comes from the GITHUB_PAT environment
    variable, after loading the given .env file (or ./.env) into the
    environment without overriding variables that are already set.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.
        env_file: Path to a .env file. If None, python-dotenv searches
            for one.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    load_dotenv(env_file)
    token = os.getenv(TOKEN_ENV_VAR, "")
    if not token:
        logger.warning("%s not set in environment", TOKEN_ENV_VAR)

    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning("Config file not found at %s, using defaults", path)
        return AppConfig(github=GitHubConfig(token=token))

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    logger.info("Loaded configuration from %s", path)

    github_data = raw.get("github", {})
    github_config = GitHubConfig(
        api_url=github_data.get("api_url", "https://api.github.com").rstrip("/"),
        token=token,
        user_agent=github_data.get("user_agent", "dredger"),
        timeout=github_data.get("timeout", 30.0),
        workers=github_data.get("workers", 1),
    )

    ollama_data = raw.get("ollama", {})
    ollama_config = OllamaConfig(
        url=ollama_data.get("url", "http://localhost:11434/api/generate"),
        model=ollama_data.get("model", "llama3.1"),
        timeout=ollama_data.get("timeout", 120.0),
    )

    tokenizer_data = raw.get("tokenizer", {})
    tokenizer_config = TokenizerConfig(
        path=tokenizer_data.get("path", "tokenizers/llama.json"),
    )

    generation_data = raw.get("generation", {})
    generation_config = GenerationConfig(
        context_lines=generation_data.get("context_lines", 10),
        summarize_context=generation_data.get("summarize_context", True),
    )

    output_data = raw.get("output", {})
    output_config = OutputConfig(
        output_dir=output_data.get("output_dir", "docs/dredger"),
        pr_docs_dir=output_data.get("pr_docs_dir", "docs/dredger"),
    )

    logging_data = raw.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        format=logging_data.get(
            "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        file=logging_data.get("file"),
    )

    return AppConfig(
        github=github_config,
        ollama=ollama_config,
        tokenizer=tokenizer_config,
        generation=generation_config,
        output=output_config,
        logging=logging_config,
    )


def save_token(token: str, env_file: str = ".env") -> Path:
    """Store a GitHub token in a .env file.

    Replaces an existing GITHUB_PAT line or appends a new one, creating
    the file if needed.

    Args:
        token: The personal access token.
        env_file: Path of the .env file to update.

    Returns:
        Path to the updated file.
    """
    path = Path(env_file)
    path.touch(exist_ok=True)
    set_key(str(path), TOKEN_ENV_VAR, token.strip(), quote_mode="never")
    logger.info("Saved %s to %s", TOKEN_ENV_VAR, path)
    return path
