"""
LangSmith tracing helper.

Set these variables in .env to send traces of the chat adapter to LangSmith:
    LANGCHAIN_TRACING_V2=true
    LANGCHAIN_API_KEY=ls__...
    LANGCHAIN_PROJECT=finance-dashboard   (optional)

When tracing is not configured, ``traceable`` returns the function unchanged.
"""

from __future__ import annotations

import os
from typing import Any, Callable, TypeVar

from langsmith import traceable as ls_traceable

from src.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def tracing_enabled() -> bool:
    return (
        os.getenv("LANGCHAIN_TRACING_V2", "").lower() in ("true", "1", "yes")
        and bool(os.getenv("LANGCHAIN_API_KEY", "").strip())
    )


def traceable(
    name: str | None = None,
    run_type: str = "chain",
    tags: list[str] | None = None,
) -> Callable[[F], F]:
    """
    Wrap a function with LangSmith tracing when tracing is enabled.

    Parameters
    ----------
    name : str | None
        Display name in the LangSmith UI (defaults to the function name).
    run_type : str
        One of "chain", "llm", "tool", "retriever" (default "chain").
    tags : list[str] | None
        Optional list of tags visible in the LangSmith UI.
    """
    def decorator(func: F) -> F:
        if not tracing_enabled():
            return func

        logger.info(
            "LangSmith tracing enabled for '%s' (project: %s)",
            name or func.__name__,
            os.getenv("LANGCHAIN_PROJECT", "default"),
        )
        return ls_traceable(  # type: ignore[return-value]
            run_type=run_type,
            name=name or func.__name__,
            tags=tags or [],
        )(func)

    return decorator
