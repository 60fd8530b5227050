"""
Normalisation of completion-provider responses.

Chat models hand back different shapes depending on provider and version:

    "plain text"                                  bare string
    AIMessage(content="text")                     message object
    AIMessage(content=[{"type": "text", ...}])    list of content parts
    {"content": "text"}                           mapping

``extract_completion`` maps all of them onto a single ``CompletionResult``.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel


class CompletionResult(BaseModel):
    """Text extracted from a provider response, plus the shape it came in."""
    text: Optional[str] = None
    shape: str = "unrecognized"

    @property
    def ok(self) -> bool:
        return self.text is not None


def _join_parts(parts: list) -> Optional[str]:
    texts = []
    for part in parts:
        if isinstance(part, str):
            texts.append(part)
        elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
            texts.append(part["text"])
    return "".join(texts) if texts else None


def extract_completion(raw: Any) -> CompletionResult:
    """Pull the generated text out of *raw*; never raises."""
    if isinstance(raw, str):
        return CompletionResult(text=raw, shape="string")

    if isinstance(raw, Mapping):
        content, shape = raw.get("content"), "mapping"
    else:
        content, shape = getattr(raw, "content", None), "message"

    if isinstance(content, str):
        return CompletionResult(text=content, shape=shape)

    if isinstance(content, list):
        text = _join_parts(content)
        if text is not None:
            return CompletionResult(text=text, shape="parts")

    return CompletionResult()
