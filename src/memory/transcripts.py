"""
Per-user conversation transcripts for the chat adapter.

Each user gets a LangChain ``InMemoryChatMessageHistory`` the first time
they talk to the assistant.  Transcripts live for the life of the process.
"""
from __future__ import annotations

import threading
from typing import Dict, List

from langchain_core.chat_history import InMemoryChatMessageHistory
from langchain_core.messages import BaseMessage


class TranscriptRegistry:
    """Maps user id → running chat history."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._histories: Dict[int, InMemoryChatMessageHistory] = {}

    def get(self, user_id: int) -> InMemoryChatMessageHistory:
        """Return the user's history, creating an empty one on first contact."""
        with self._lock:
            history = self._histories.get(user_id)
            if history is None:
                history = InMemoryChatMessageHistory()
                self._histories[user_id] = history
            return history

    def messages(self, user_id: int) -> List[BaseMessage]:
        """Snapshot of the user's transcript (empty if they never chatted)."""
        with self._lock:
            history = self._histories.get(user_id)
        return list(history.messages) if history is not None else []

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._histories

    def __len__(self) -> int:
        return len(self._histories)
