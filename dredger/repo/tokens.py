"""Token counting backed by a HuggingFace tokenizer model.

The model is loaded once per run from a tokenizer.json file and
reused for every file in the traversal.
"""

import logging
from pathlib import Path
from typing import Union

from tokenizers import Tokenizer

from dredger.utils.errors import TokenizationError, TokenizerLoadError

logger = logging.getLogger(__name__)


class TokenCounter:
    """Counts model tokens for text using a loaded tokenizer."""

    def __init__(self, tokenizer: Tokenizer, source: str = "<memory>") -> None:
        self._tokenizer = tokenizer
        self.source = source

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TokenCounter":
        """Load a tokenizer model from a tokenizer.json file.

        Args:
            path: Filesystem path to the serialized tokenizer.

        Returns:
            A TokenCounter wrapping the loaded model.

        Raises:
            TokenizerLoadError: If the file does not exist or cannot be parsed.
        """
        model_path = Path(path)
        if not model_path.is_file():
            raise TokenizerLoadError(f"Tokenizer file not found: {model_path}")
        try:
            tokenizer = Tokenizer.from_file(str(model_path))
        except Exception as e:
            # tokenizers surfaces parse failures as a bare Exception
            raise TokenizerLoadError(
                f"Failed to load tokenizer from {model_path}: {e}"
            ) from e
        logger.info("Loaded tokenizer from %s", model_path)
        return cls(tokenizer, source=str(model_path))

    def count(self, text: str) -> int:
        """Return the number of tokens the model produces for text.

        Raises:
            TokenizationError: If the tokenizer rejects the input.
        """
        try:
            encoding = self._tokenizer.encode(text, add_special_tokens=True)
        except Exception as e:
            raise TokenizationError(f"Tokenization failed: {e}") from e
        return len(encoding.ids)


def count_tokens(text: str, counter: TokenCounter) -> int:
    """Return the number of tokens in text using an already-loaded counter."""
    return counter.count(text)
