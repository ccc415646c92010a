"""Client for a local Ollama-compatible generation endpoint.

Posts a generation request and reassembles the newline-delimited JSON
stream into the full completion. Tracks cumulative prompt and output
token usage reported by the server.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

import requests

from dredger.utils.config import OllamaConfig
from dredger.utils.errors import ModelQueryError, OperationCancelled

logger = logging.getLogger(__name__)

FewShotExamples = Sequence[tuple[str, str]]


@dataclass
class TokenUsage:
    """Token usage reported by the model server.

    Attributes:
        input_tokens: Number of tokens in the prompt.
        output_tokens: Number of tokens in the response.
    """

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed."""
        return self.input_tokens + self.output_tokens


def join_stream(lines: Iterable[str], usage: Optional[TokenUsage] = None) -> str:
    """Concatenate the response fragments of an NDJSON generation stream.

    Lines that are not JSON objects are skipped: stray framing is
    expected from the stream and is not an error.

    Args:
        lines: Decoded stream lines in arrival order.
        usage: Optional accumulator for the counts in the final chunk.

    Returns:
        The full completion text.
    """
    fragments: list[str] = []
    for line in lines:
        if not line or not line.strip():
            continue
        try:
            chunk = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping non-JSON stream line: %r", line[:80])
            continue
        if not isinstance(chunk, dict):
            continue
        text = chunk.get("response")
        if isinstance(text, str):
            fragments.append(text)
        if usage is not None and chunk.get("done"):
            prompt_count = chunk.get("prompt_eval_count")
            eval_count = chunk.get("eval_count")
            if isinstance(prompt_count, int):
                usage.input_tokens += prompt_count
            if isinstance(eval_count, int):
                usage.output_tokens += eval_count
    return "".join(fragments)


class OllamaClient:
    """Queries a local model server and returns full completions."""

    def __init__(
        self,
        config: Optional[OllamaConfig] = None,
        session: Optional[requests.Session] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Model endpoint settings. Uses defaults if not provided.
            session: Optional pre-built session.
            cancel_event: Optional event that aborts a query mid-stream.
        """
        self.config = config or OllamaConfig()
        self.session = session or requests.Session()
        self.cancel_event = cancel_event
        self._total_usage = TokenUsage()

    def query_model(
        self,
        system_prompt: str,
        user_prompt: str,
        few_shot_examples: FewShotExamples = (),
    ) -> str:
        """Run one generation and return the concatenated completion.

        Args:
            system_prompt: System instruction for the model.
            user_prompt: The prompt text.
            few_shot_examples: (input, output) example pairs.

        Returns:
            The completion text assembled from the stream.

        Raises:
            ModelQueryError: On transport failure, timeout, or non-2xx status.
            OperationCancelled: If the cancel event is set during the query.
        """
        self._check_cancelled()
        body: dict[str, Any] = {
            "model": self.config.model,
            "prompt": user_prompt,
            "system": system_prompt,
            "examples": [[given, expected] for given, expected in few_shot_examples],
        }

        usage = TokenUsage()
        try:
            with self.session.post(
                self.config.url,
                json=body,
                stream=True,
                timeout=self.config.timeout,
            ) as response:
                if not response.ok:
                    raise ModelQueryError(
                        f"Model endpoint returned HTTP {response.status_code}: "
                        f"{response.text[:500]}"
                    )
                text = join_stream(self._lines(response), usage)
        except requests.exceptions.RequestException as e:
            raise ModelQueryError(
                f"Model query to {self.config.url} failed: {type(e).__name__}: {e}"
            ) from e

        self._total_usage.input_tokens += usage.input_tokens
        self._total_usage.output_tokens += usage.output_tokens
        logger.info(
            "Model %s returned %d chars (input: %d, output: %d tokens)",
            self.config.model,
            len(text),
            usage.input_tokens,
            usage.output_tokens,
        )
        return text

    @property
    def total_usage(self) -> TokenUsage:
        """Cumulative token usage across all queries."""
        return self._total_usage

    def _lines(self, response: requests.Response) -> Iterable[str]:
        for raw in response.iter_lines():
            self._check_cancelled()
            yield raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled("Model query cancelled")
