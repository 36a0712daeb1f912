"""Approximate token counting for assembled prompts (tiktoken)."""

from __future__ import annotations

import logging
from functools import lru_cache

import tiktoken

from config import TOKEN_ENCODING

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _get_encoding(name: str) -> "tiktoken.Encoding":
    return tiktoken.get_encoding(name)


def count_tokens(text: str, *, encoding_name: str = TOKEN_ENCODING) -> int:
    """Number of tokens in `text`; 0 if the tokenizer fails."""
    if not text:
        return 0
    try:
        encoding = _get_encoding(encoding_name)
        return len(encoding.encode(text, disallowed_special=()))
    except Exception as e:
        logger.warning("Token counting failed (%s): %s", encoding_name, e)
        return 0
