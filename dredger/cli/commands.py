"""CLI commands for dredger.

Provides the Click-based command group 'dredger' with subcommands for
storing and validating the GitHub token, printing a repository's
token tree, generating documentation, and publishing it as a pull
request.
"""

import json
import logging
import threading
from typing import Callable, Optional, TypeVar

import click

from dredger import __version__
from dredger.generators.doc_gen import DredgerDoc
from dredger.generators.languages import detect_language
from dredger.generators.ollama_client import OllamaClient
from dredger.generators.pipeline import DocPipeline
from dredger.github.client import GitHubClient, split_owner_repo
from dredger.github.publisher import PullRequestPublisher
from dredger.output.markdown import MarkdownWriter
from dredger.repo.structure import DirectoryNode, iter_files, render_tree
from dredger.repo.tree_builder import build_tree
from dredger.utils.config import AppConfig, load_config, save_token
from dredger.utils.errors import DredgerError
from dredger.utils.logging import setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(cancel_event: threading.Event, action: Callable[[], T]) -> T:
    """Run an action, turning dredger errors into CLI errors.

    Ctrl-C sets the shared cancel event so worker threads stop issuing
    requests before the interrupt propagates.
    """
    try:
        return action()
    except KeyboardInterrupt:
        cancel_event.set()
        raise click.Abort()
    except DredgerError as e:
        raise click.ClickException(str(e)) from e


def _read_tree(
    config: AppConfig,
    owner_repo: str,
    path: str,
    tokenizer: Optional[str],
    workers: Optional[int],
    cancel_event: threading.Event,
) -> tuple[GitHubClient, DirectoryNode]:
    """Validate the token, then read the repository into a tree."""
    split_owner_repo(owner_repo)
    client = GitHubClient(config.github, cancel_event=cancel_event)
    login = client.validate_token()
    click.echo(f"GitHub token verified ({login or 'unknown user'}). Reading {owner_repo}...")
    tree = build_tree(
        client,
        owner_repo,
        tokenizer or config.tokenizer.path,
        root_path=path,
        workers=workers or config.github.workers,
        cancel_event=cancel_event,
    )
    return client, tree


def _run_pipeline(
    config: AppConfig,
    tree: DirectoryNode,
    project_name: str,
    cancel_event: threading.Event,
) -> list[DredgerDoc]:
    llm = OllamaClient(config.ollama, cancel_event=cancel_event)
    pipeline = DocPipeline(llm, config=config.generation, cancel_event=cancel_event)
    docs = pipeline.run(tree, project_name=project_name)
    logger.info("Model usage: %d tokens", llm.total_usage.total_tokens)
    return docs


@click.group()
@click.version_option(version=__version__, prog_name="dredger")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Path to config.yaml.")
@click.option("--env-file", type=click.Path(), default=None, help="Path to the .env file.")
@click.pass_context
def dredger(ctx: click.Context, config_path: Optional[str], env_file: Optional[str]) -> None:
    """Dredger: read a GitHub repository and document it with a local LLM."""
    config = load_config(config_path, env_file=env_file)
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )
    ctx.obj = {"config": config, "env_file": env_file or ".env"}


@dredger.command()
@click.option("--token", default=None, help="Token to store (prompted if omitted).")
@click.pass_context
def setup(ctx: click.Context, token: Optional[str]) -> None:
    """Store a GitHub personal access token in the .env file."""
    if token is None:
        token = click.prompt("Please enter your GitHub personal access token", hide_input=True)
    if not token.strip():
        raise click.ClickException("Token cannot be empty.")
    path = save_token(token, ctx.obj["env_file"])
    click.echo(f"Token saved to {path}")


@dredger.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configured GitHub token."""
    config: AppConfig = ctx.obj["config"]
    cancel_event = threading.Event()

    def action() -> str:
        return GitHubClient(config.github, cancel_event=cancel_event).validate_token()

    login = _guarded(cancel_event, action)
    click.echo(f"GitHub token verified for {login or 'unknown user'}")


@dredger.command()
@click.argument("owner_repo")
@click.option("--path", default="", help="Directory to start from (default: repository root).")
@click.option("--tokenizer", type=click.Path(), default=None, help="Path to tokenizer.json.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Concurrent file fetches.")
@click.option("--json", "as_json", is_flag=True, help="Print the tree as JSON.")
@click.pass_context
def tree(
    ctx: click.Context,
    owner_repo: str,
    path: str,
    tokenizer: Optional[str],
    workers: Optional[int],
    as_json: bool,
) -> None:
    """Print a repository's file tree with token counts."""
    config: AppConfig = ctx.obj["config"]
    cancel_event = threading.Event()
    _, root = _guarded(
        cancel_event,
        lambda: _read_tree(config, owner_repo, path, tokenizer, workers, cancel_event),
    )

    if as_json:
        click.echo(json.dumps(root.to_dict(), indent=2))
    else:
        click.echo(render_tree(root))
        click.echo(f"\nTotal: {root.token_count:,} tokens")


@dredger.command()
@click.argument("owner_repo")
@click.option("--tokenizer", type=click.Path(), default=None, help="Path to tokenizer.json.")
@click.option("--output-dir", type=click.Path(), default=None, help="Output directory.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Concurrent file fetches.")
@click.option(
    "--dry-run",
    is_flag=True,
    help="List the files that would be documented without calling the model.",
)
@click.pass_context
def generate(
    ctx: click.Context,
    owner_repo: str,
    tokenizer: Optional[str],
    output_dir: Optional[str],
    workers: Optional[int],
    dry_run: bool,
) -> None:
    """Generate documentation for every source file of a repository.

    Reads the repository, summarizes its README, asks the model to
    document each source file, and writes the results as Markdown.
    """
    config: AppConfig = ctx.obj["config"]
    cancel_event = threading.Event()
    _, root = _guarded(
        cancel_event,
        lambda: _read_tree(config, owner_repo, "", tokenizer, workers, cancel_event),
    )

    if dry_run:
        candidates = [f for f in iter_files(root) if detect_language(f.path)]
        for node in candidates:
            click.echo(f"  Would document: {node.path} ({node.token_count} tokens)")
        click.echo(f"Dry run complete. {len(candidates)} files, no model calls made.")
        return

    _, repo_name = split_owner_repo(owner_repo)
    docs = _guarded(
        cancel_event, lambda: _run_pipeline(config, root, repo_name, cancel_event)
    )
    click.echo(f"Generated documentation for {len(docs)} files")

    writer = MarkdownWriter(output_dir=output_dir or config.output.output_dir)
    writer.write_all(docs, tree=root)
    click.echo(f"Markdown documentation written to {writer.output_dir}")


@dredger.command()
@click.argument("owner_repo")
@click.option("--base", default="main", show_default=True, help="Branch to open the PR against.")
@click.option("--branch", required=True, help="Name of the new branch.")
@click.option("--title", default="docs: add generated documentation", help="Pull request title.")
@click.option("--tokenizer", type=click.Path(), default=None, help="Path to tokenizer.json.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Concurrent file fetches.")
@click.pass_context
def publish(
    ctx: click.Context,
    owner_repo: str,
    base: str,
    branch: str,
    title: str,
    tokenizer: Optional[str],
    workers: Optional[int],
) -> None:
    """Generate documentation and open a pull request with it."""
    config: AppConfig = ctx.obj["config"]
    cancel_event = threading.Event()
    client, root = _guarded(
        cancel_event,
        lambda: _read_tree(config, owner_repo, "", tokenizer, workers, cancel_event),
    )

    _, repo_name = split_owner_repo(owner_repo)
    docs = _guarded(
        cancel_event, lambda: _run_pipeline(config, root, repo_name, cancel_event)
    )
    if not docs:
        click.echo("No documentation generated; nothing to publish.")
        return

    publisher = PullRequestPublisher(client, docs_dir=config.output.pr_docs_dir)
    pr_url = _guarded(
        cancel_event,
        lambda: publisher.publish_docs(owner_repo, docs, base=base, branch=branch, title=title),
    )
    click.echo(f"Pull request created: {pr_url}")
