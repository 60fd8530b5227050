"""Chat model initialisation for the financial advisor."""

import os

from langchain_openai import ChatOpenAI

from src.utils.config import get_section


class MissingCredentialError(EnvironmentError):
    """Raised when OPENAI_API_KEY is not configured."""


def has_credentials() -> bool:
    return bool(os.environ.get("OPENAI_API_KEY", "").strip())


def get_llm() -> ChatOpenAI:
    """Return a ChatOpenAI instance configured from config.yaml / environment."""
    api_key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise MissingCredentialError(
            "OPENAI_API_KEY is not set. "
            "Add it to your environment or to a .env file in the project root."
        )

    cfg = get_section("llm")
    return ChatOpenAI(
        model=cfg.get("model", "gpt-4o-mini"),
        temperature=float(cfg.get("temperature", 0.7)),
        max_tokens=cfg.get("max_tokens"),
        timeout=cfg.get("timeout"),
        api_key=api_key,
    )
