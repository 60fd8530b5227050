"""
Record types held by the in-memory store.

Each entity kind has three models:

    <Kind>          the stored record (immutable; the store hands these out)
    <Kind>Create    fields a caller supplies on insert
    <Kind>Update    typed partial-update command; unknown fields are rejected

JSON uses camelCase names (``userId``, ``monthlyIncome``...) because that is
what the dashboard front end reads; Python code uses the snake_case names.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EntityKind(str, Enum):
    """Entity kinds the record store knows about"""
    USER = "user"
    ACCOUNT = "account"
    SAVINGS_GOAL = "savings_goal"
    CHAT_MESSAGE = "chat_message"


class RiskTolerance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _Record(_Schema):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class _Command(_Schema):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ── Users ──────────────────────────────────────────────────────────────────────

class UserCreate(_Command):
    username: str
    password: str
    name: str
    email: str
    monthly_income: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None


class User(_Record):
    id: int
    username: str
    password: str
    name: str
    email: str
    monthly_income: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None
    created_at: Optional[datetime] = None


class UserPublic(_Schema):
    """A user as returned over the API (no password)."""
    id: int
    username: str
    name: str
    email: str
    monthly_income: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls.model_validate(user.model_dump(exclude={"password"}))


class UserUpdate(_Command):
    username: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    monthly_income: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None


class UserProfileUpdate(_Command):
    """The subset of user fields the profile page may change."""
    monthly_income: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={"example": {"monthlyIncome": 6200, "riskTolerance": "high"}},
    )


# ── Accounts ───────────────────────────────────────────────────────────────────

class AccountCreate(_Command):
    user_id: int
    name: str
    type: AccountType
    number: str = Field(description="Masked account number, e.g. '**** 4567'")
    balance: float
    last_transaction: Optional[datetime] = None


class Account(_Record):
    id: int
    user_id: int
    name: str
    type: AccountType
    number: str
    balance: float
    last_transaction: Optional[datetime] = None


class AccountUpdate(_Command):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    number: Optional[str] = None
    balance: Optional[float] = None
    last_transaction: Optional[datetime] = None


# ── Savings goals ──────────────────────────────────────────────────────────────

class SavingsGoalCreate(_Command):
    user_id: int
    name: str
    current: float
    target: float


class SavingsGoal(_Record):
    id: int
    user_id: int
    name: str
    current: float
    target: float
    created_at: Optional[datetime] = None


class SavingsGoalUpdate(_Command):
    name: Optional[str] = None
    current: Optional[float] = None
    target: Optional[float] = None


# ── Chat messages ──────────────────────────────────────────────────────────────

class ChatMessageCreate(_Command):
    user_id: int
    role: ChatRole
    content: str


class ChatMessage(_Record):
    id: int
    user_id: int
    message_id: str = Field(description="Random UUID the front end keys on")
    role: ChatRole
    content: str
    timestamp: Optional[datetime] = None
