#!/usr/bin/env python3
"""
Reply generation for the Wake Word Assistant.

Utterances go to Ollama's /api/generate endpoint. The server answers with
newline-delimited JSON objects whose "response" fields are concatenated.
"""

import sys
from typing import Iterable, Optional

import httpx
import ollama

from .config import default_config


def collect_response(parts: Iterable) -> str:
    """Concatenate the "response" field of every streamed part."""
    chunks = []
    for part in parts:
        text = part.get('response')
        if isinstance(text, str):
            chunks.append(text)
    return ''.join(chunks)


class ReplyClient:
    """Synchronous, at-most-once reply client.

    ``reply`` never raises for transport or payload problems: the error is
    printed and the reply is empty.
    """

    def __init__(self, config=None, client: Optional[ollama.Client] = None):
        self.config = config or default_config
        self.client = client or ollama.Client(host=self.config.ollama_host)

    def _options(self) -> Optional[dict]:
        if self.config.reply_max_tokens is None:
            return None
        return {"num_predict": self.config.reply_max_tokens}

    def reply(self, prompt: str) -> str:
        try:
            parts = self.client.generate(
                model=self.config.ollama_model,
                prompt=prompt,
                stream=True,
                options=self._options(),
            )
            return collect_response(parts)
        except (ollama.ResponseError, ollama.RequestError, ConnectionError, httpx.HTTPError) as e:
            print(f"[LLM Error] {e}", file=sys.stderr)
        except ValueError as e:
            print(f"[LLM Error] malformed reply: {e}", file=sys.stderr)
        return ''
