"""
Dashboard service.

One ``DashboardService`` is built at process start and handed to every
request handler.  It owns the record store and the chat advisor; nothing in
the web layer reaches for module-level state.
"""
from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.agents.financial_advisor_agent import FinancialAdvisor
from src.memory.models import (
    Account,
    AccountType,
    ChatMessage,
    ChatMessageCreate,
    ChatRole,
    SavingsGoal,
    UserProfileUpdate,
    UserPublic,
)
from src.memory.record_store import RecordStore
from src.memory.seed import seed_demo_data
from src.utils.config import get_section
from src.utils.logging import get_logger

logger = get_logger(__name__)


class GoalProgress(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    current: float
    target: float
    progress: int


class DashboardSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int
    total_assets: float
    total_liabilities: float
    net_worth: float
    goals: List[GoalProgress]


def goal_progress(current: float, target: float) -> int:
    """Whole-number percentage of *target* reached (0 for a zero target)."""
    if not target:
        return 0
    return round(current / target * 100)


class DashboardService:
    """Operations behind the dashboard's REST endpoints."""

    def __init__(self, store: RecordStore, advisor: Optional[FinancialAdvisor] = None) -> None:
        self.store = store
        self.advisor = advisor or FinancialAdvisor(store=store)
        self._chat_locks: Dict[int, threading.Lock] = defaultdict(threading.Lock)
        self._chat_locks_guard = threading.Lock()

    @classmethod
    def from_config(cls) -> "DashboardService":
        """Build the process-wide service, seeding demo data when configured."""
        store = RecordStore()
        if get_section("store").get("seed_demo_data", True):
            seed_demo_data(store)
        return cls(store)

    def _chat_lock(self, user_id: int) -> threading.Lock:
        with self._chat_locks_guard:
            return self._chat_locks[user_id]

    # ── users ─────────────────────────────────────────────────────────────────

    def get_public_user(self, user_id: int) -> Optional[UserPublic]:
        user = self.store.get_user(user_id)
        return UserPublic.from_user(user) if user is not None else None

    def update_profile(self, user_id: int, changes: UserProfileUpdate) -> Optional[UserPublic]:
        """Apply the profile form's fields; None when the user does not exist."""
        user = self.store.update_user(
            user_id, changes.model_dump(exclude_unset=True),
        )
        if user is None:
            return None
        logger.info("Updated profile for user %d", user_id)
        return UserPublic.from_user(user)

    # ── accounts / goals ──────────────────────────────────────────────────────

    def list_accounts(self, user_id: int) -> List[Account]:
        return self.store.get_accounts(user_id)

    def list_savings_goals(self, user_id: int) -> List[SavingsGoal]:
        return self.store.get_savings_goals(user_id)

    def get_summary(self, user_id: int) -> DashboardSummary:
        """Totals for the overview cards: assets, credit balances, goal progress."""
        accounts = self.store.get_accounts(user_id)
        assets = sum(a.balance for a in accounts if a.type is not AccountType.CREDIT)
        liabilities = sum(a.balance for a in accounts if a.type is AccountType.CREDIT)
        goals = [
            GoalProgress(
                id=g.id, name=g.name, current=g.current, target=g.target,
                progress=goal_progress(g.current, g.target),
            )
            for g in self.store.get_savings_goals(user_id)
        ]
        return DashboardSummary(
            user_id=user_id,
            total_assets=round(assets, 2),
            total_liabilities=round(liabilities, 2),
            net_worth=round(assets - liabilities, 2),
            goals=goals,
        )

    # ── chat ──────────────────────────────────────────────────────────────────

    def list_chat_messages(self, user_id: int) -> List[ChatMessage]:
        return self.store.get_chat_messages(user_id)

    def post_chat(self, message: str, user_id: int) -> List[ChatMessage]:
        """
        Store the user's message, ask the advisor, store the reply and return
        the user's full chat history.  Messages from the same user are
        handled one at a time so each sees the previous exchange.
        """
        with self._chat_lock(user_id):
            self.store.create_chat_message(ChatMessageCreate(
                user_id=user_id, role=ChatRole.USER, content=message,
            ))
            reply = self.advisor.respond(message, user_id)
            self.store.create_chat_message(ChatMessageCreate(
                user_id=user_id, role=ChatRole.ASSISTANT, content=reply,
            ))
            return self.store.get_chat_messages(user_id)
