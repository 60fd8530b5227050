"""
In-memory record store for users, accounts, savings goals and chat messages.

Every kind lives in its own table with its own id counter (starting at 1,
never reused).  Records are immutable pydantic models; updates swap in a
copy with the supplied fields applied, so callers can never mutate stored
state behind the store's back.

Usage
-----
    store = RecordStore()
    user = store.create_user(UserCreate(username="sam", password="x",
                                        name="Sam", email="sam@example.com"))
    store.create_account({"userId": user.id, "name": "Checking",
                          "type": "checking", "number": "**** 1111",
                          "balance": 250.0})
    accounts = store.get_accounts(user.id)

Missing ids are not errors: lookups and updates return ``None``.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from pydantic import BaseModel

from src.utils.logging import get_logger
from .models import (
    Account,
    AccountCreate,
    AccountUpdate,
    ChatMessage,
    ChatMessageCreate,
    EntityKind,
    SavingsGoal,
    SavingsGoalCreate,
    SavingsGoalUpdate,
    User,
    UserCreate,
    UserUpdate,
)

logger = get_logger(__name__)

Fields = Union[BaseModel, Mapping[str, Any]]


@dataclass
class _Table:
    record_model: Type[BaseModel]
    create_model: Type[BaseModel]
    update_model: Optional[Type[BaseModel]]
    rows: Dict[int, BaseModel] = field(default_factory=dict)
    next_id: int = 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


def chronological(messages: Iterable[ChatMessage]) -> List[ChatMessage]:
    """
    Sort chat messages by timestamp, oldest first.

    Messages without a timestamp come before every message that has one.
    The sort is stable, so equal timestamps keep insertion order.
    """
    return sorted(
        messages,
        key=lambda m: (0,) if m.timestamp is None else (1, m.timestamp),
    )


class RecordStore:
    """Thread-safe in-memory store keyed by (kind, id)."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: Dict[EntityKind, _Table] = {
            EntityKind.USER: _Table(User, UserCreate, UserUpdate),
            EntityKind.ACCOUNT: _Table(Account, AccountCreate, AccountUpdate),
            EntityKind.SAVINGS_GOAL: _Table(SavingsGoal, SavingsGoalCreate, SavingsGoalUpdate),
            EntityKind.CHAT_MESSAGE: _Table(ChatMessage, ChatMessageCreate, None),
        }

    # ── internal ──────────────────────────────────────────────────────────────

    @staticmethod
    def _coerce(model: Type[BaseModel], fields: Fields) -> BaseModel:
        if isinstance(fields, model):
            return fields
        if isinstance(fields, BaseModel):
            raise TypeError(
                f"Expected {model.__name__}, got {type(fields).__name__}"
            )
        return model.model_validate(fields)

    @staticmethod
    def _server_fields(kind: EntityKind) -> Dict[str, Any]:
        if kind is EntityKind.CHAT_MESSAGE:
            return {"message_id": str(uuid.uuid4()), "timestamp": _now()}
        if kind in (EntityKind.USER, EntityKind.SAVINGS_GOAL):
            return {"created_at": _now()}
        return {}

    # ── generic API ───────────────────────────────────────────────────────────

    def get_by_id(self, kind: EntityKind, record_id: int) -> Optional[BaseModel]:
        """Return the record, or None when *record_id* is unknown."""
        return self._tables[kind].rows.get(record_id)

    def get_by_owner(self, kind: EntityKind, user_id: int) -> List[BaseModel]:
        """Return every *kind* record owned by *user_id*, in insertion order."""
        if kind is EntityKind.USER:
            raise TypeError("Users are not owned by another record")
        with self._lock:
            rows = list(self._tables[kind].rows.values())
        return [r for r in rows if r.user_id == user_id]

    def create(self, kind: EntityKind, fields: Fields) -> BaseModel:
        """
        Insert a new record.

        *fields* is the kind's ``<Kind>Create`` model or a mapping that
        validates against it.  The store assigns the id and any
        server-computed fields (creation time, chat message UUID).
        """
        table = self._tables[kind]
        data = self._coerce(table.create_model, fields).model_dump()
        with self._lock:
            record_id = table.next_id
            table.next_id += 1
            record = table.record_model(id=record_id, **data, **self._server_fields(kind))
            table.rows[record_id] = record
        logger.debug("Created %s id=%d", kind.value, record_id)
        return record

    def update(self, kind: EntityKind, record_id: int, changes: Fields) -> Optional[BaseModel]:
        """
        Apply a ``<Kind>Update`` command to an existing record.

        Only fields the caller explicitly set are applied; id and creation
        time are never touched.  The merged record is validated again, so
        ``None`` is accepted only for fields that are optional on the record
        (raises ``ValidationError`` otherwise).  Returns None (and changes nothing) when
        *record_id* is unknown.
        """
        table = self._tables[kind]
        if table.update_model is None:
            raise TypeError(f"{kind.value} records cannot be updated")
        command = self._coerce(table.update_model, changes)
        applied = command.model_dump(exclude_unset=True)

        with self._lock:
            current = table.rows.get(record_id)
            if current is None:
                return None
            # Re-validate the merged record so an explicit null cannot clear a
            # required field.
            updated = table.record_model.model_validate({**current.model_dump(), **applied})
            table.rows[record_id] = updated
        logger.debug("Updated %s id=%d fields=%s", kind.value, record_id, sorted(applied))
        return updated

    def count(self, kind: EntityKind) -> int:
        return len(self._tables[kind].rows)

    # ── users ─────────────────────────────────────────────────────────────────

    def get_user(self, user_id: int) -> Optional[User]:
        return self.get_by_id(EntityKind.USER, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        # Usernames are not checked for uniqueness on insert; first match wins.
        with self._lock:
            users = list(self._tables[EntityKind.USER].rows.values())
        return next((u for u in users if u.username == username), None)

    def create_user(self, fields: Fields) -> User:
        return self.create(EntityKind.USER, fields)

    def update_user(self, user_id: int, changes: Fields) -> Optional[User]:
        return self.update(EntityKind.USER, user_id, changes)

    # ── accounts ──────────────────────────────────────────────────────────────

    def get_accounts(self, user_id: int) -> List[Account]:
        return self.get_by_owner(EntityKind.ACCOUNT, user_id)

    def get_account(self, account_id: int) -> Optional[Account]:
        return self.get_by_id(EntityKind.ACCOUNT, account_id)

    def create_account(self, fields: Fields) -> Account:
        return self.create(EntityKind.ACCOUNT, fields)

    def update_account(self, account_id: int, changes: Fields) -> Optional[Account]:
        return self.update(EntityKind.ACCOUNT, account_id, changes)

    # ── savings goals ─────────────────────────────────────────────────────────

    def get_savings_goals(self, user_id: int) -> List[SavingsGoal]:
        return self.get_by_owner(EntityKind.SAVINGS_GOAL, user_id)

    def get_savings_goal(self, goal_id: int) -> Optional[SavingsGoal]:
        return self.get_by_id(EntityKind.SAVINGS_GOAL, goal_id)

    def create_savings_goal(self, fields: Fields) -> SavingsGoal:
        return self.create(EntityKind.SAVINGS_GOAL, fields)

    def update_savings_goal(self, goal_id: int, changes: Fields) -> Optional[SavingsGoal]:
        return self.update(EntityKind.SAVINGS_GOAL, goal_id, changes)

    # ── chat messages ─────────────────────────────────────────────────────────

    def get_chat_messages(self, user_id: int) -> List[ChatMessage]:
        """Return the user's chat messages, oldest first."""
        return chronological(self.get_by_owner(EntityKind.CHAT_MESSAGE, user_id))

    def create_chat_message(self, fields: Fields) -> ChatMessage:
        return self.create(EntityKind.CHAT_MESSAGE, fields)
