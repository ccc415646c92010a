"""Tests for the streaming model client."""

import json
import threading

import pytest
import requests.exceptions
import responses

from dredger.generators.ollama_client import OllamaClient, TokenUsage, join_stream
from dredger.utils.config import OllamaConfig
from dredger.utils.errors import ModelQueryError, OperationCancelled
from tests.fixtures import OLLAMA_URL


def _stream(*chunks: dict, extra: str = "") -> str:
    return "".join(json.dumps(c) + "\n" for c in chunks) + extra


class TestTokenUsage:

    def test_total_tokens(self) -> None:
        usage = TokenUsage(input_tokens=100, output_tokens=50)
        assert usage.total_tokens == 150

    def test_defaults(self) -> None:
        assert TokenUsage().total_tokens == 0


class TestJoinStream:
    """Tests for reassembling the NDJSON stream."""

    def test_concatenates_in_order(self) -> None:
        lines = ['{"response":"//! "}', '{"response":"hi"}']
        assert join_stream(lines) == "//! hi"

    def test_skips_garbage_and_blank_lines(self) -> None:
        lines = ["", '{"response":"a"}', "garbage", "   ", "[1, 2]", '{"response":"b"}']
        assert join_stream(lines) == "ab"

    def test_ignores_chunks_without_text(self) -> None:
        lines = ['{"response":"a"}', '{"status":"loading"}', '{"response":5}']
        assert join_stream(lines) == "a"

    def test_empty_stream(self) -> None:
        assert join_stream([]) == ""

    def test_collects_usage_from_final_chunk(self) -> None:
        usage = TokenUsage()
        lines = [
            '{"response":"x","done":false}',
            '{"response":"","done":true,"prompt_eval_count":12,"eval_count":3}',
        ]
        assert join_stream(lines, usage) == "x"
        assert usage.input_tokens == 12
        assert usage.output_tokens == 3

    def test_malformed_usage_counts_are_ignored(self) -> None:
        usage = TokenUsage()
        lines = [
            '{"response":"x"}',
            '{"response":"","done":true,"prompt_eval_count":"many","eval_count":null}',
        ]
        assert join_stream(lines, usage) == "x"
        assert usage.total_tokens == 0


class TestQueryModel:
    """Tests for OllamaClient.query_model against a mocked endpoint."""

    @responses.activate
    def test_returns_joined_stream(self, ollama_config: OllamaConfig) -> None:
        responses.add(
            responses.POST,
            OLLAMA_URL,
            body=_stream({"response": "//! "}, {"response": "hi"}),
        )
        client = OllamaClient(ollama_config)
        assert client.query_model("sys", "fn main() {}") == "//! hi"

    @responses.activate
    def test_request_body(self, ollama_config: OllamaConfig) -> None:
        responses.add(responses.POST, OLLAMA_URL, body=_stream({"response": "ok"}))
        client = OllamaClient(ollama_config)

        client.query_model("be brief", "source text", [("in1", "out1"), ("in2", "out2")])

        sent = json.loads(responses.calls[0].request.body)
        assert sent == {
            "model": "test-model",
            "prompt": "source text",
            "system": "be brief",
            "examples": [["in1", "out1"], ["in2", "out2"]],
        }

    @responses.activate
    def test_skips_non_json_lines(self, ollama_config: OllamaConfig) -> None:
        body = '{"response":"a"}\nnot json\n{"response":"b"}\n'
        responses.add(responses.POST, OLLAMA_URL, body=body)
        assert OllamaClient(ollama_config).query_model("s", "u") == "ab"

    @responses.activate
    def test_http_error(self, ollama_config: OllamaConfig) -> None:
        responses.add(responses.POST, OLLAMA_URL, body="model not found", status=500)
        with pytest.raises(ModelQueryError, match="HTTP 500"):
            OllamaClient(ollama_config).query_model("s", "u")

    @responses.activate
    def test_connection_error(self, ollama_config: OllamaConfig) -> None:
        responses.add(
            responses.POST,
            OLLAMA_URL,
            body=requests.exceptions.ConnectionError("refused"),
        )
        with pytest.raises(ModelQueryError, match="ConnectionError"):
            OllamaClient(ollama_config).query_model("s", "u")

    @responses.activate
    def test_timeout(self, ollama_config: OllamaConfig) -> None:
        responses.add(
            responses.POST, OLLAMA_URL, body=requests.exceptions.ReadTimeout("slow")
        )
        with pytest.raises(ModelQueryError, match="ReadTimeout"):
            OllamaClient(ollama_config).query_model("s", "u")

    @responses.activate
    def test_usage_accumulates(self, ollama_config: OllamaConfig) -> None:
        done = {"response": "", "done": True, "prompt_eval_count": 10, "eval_count": 4}
        responses.add(responses.POST, OLLAMA_URL, body=_stream({"response": "a"}, done))
        responses.add(responses.POST, OLLAMA_URL, body=_stream({"response": "b"}, done))
        client = OllamaClient(ollama_config)

        client.query_model("s", "one")
        client.query_model("s", "two")

        assert client.total_usage.input_tokens == 20
        assert client.total_usage.output_tokens == 8
        assert client.total_usage.total_tokens == 28

    @responses.activate
    def test_cancelled(self, ollama_config: OllamaConfig) -> None:
        cancel = threading.Event()
        cancel.set()
        client = OllamaClient(ollama_config, cancel_event=cancel)

        with pytest.raises(OperationCancelled):
            client.query_model("s", "u")

        assert len(responses.calls) == 0

    def test_default_config(self) -> None:
        client = OllamaClient()
        assert client.config.url == "http://localhost:11434/api/generate"
        assert client.config.model == "llama3.1"
