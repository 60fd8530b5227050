"""Demo data for a fresh store: one user with accounts, goals and a greeting."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.utils.logging import get_logger
from .models import (
    AccountCreate,
    AccountType,
    ChatMessageCreate,
    ChatRole,
    RiskTolerance,
    SavingsGoalCreate,
    User,
    UserCreate,
)
from .record_store import RecordStore

logger = get_logger(__name__)

GREETING = (
    "Hello! I'm your financial assistant. I can help you with budgeting, "
    "saving strategies, investment insights, and more. How can I assist you today?"
)


def seed_demo_data(store: RecordStore) -> User:
    """Populate *store* with the demo user and return it."""
    now = datetime.now(timezone.utc)

    user = store.create_user(UserCreate(
        username="alexmorgan",
        password="password123",
        name="Alex Morgan",
        email="alex@example.com",
        monthly_income=5000,
        risk_tolerance=RiskTolerance.MEDIUM,
    ))

    for name, kind, number, balance, days_ago in (
        ("Checking Account", AccountType.CHECKING, "**** 4567", 12458.32, 1),
        ("Savings Account",  AccountType.SAVINGS,  "**** 7890", 28745.16, 3),
        ("Credit Card",      AccountType.CREDIT,   "**** 2345", 1846.29,  5),
    ):
        store.create_account(AccountCreate(
            user_id=user.id,
            name=name,
            type=kind,
            number=number,
            balance=balance,
            last_transaction=now - timedelta(days=days_ago),
        ))

    for name, current, target in (
        ("Emergency Fund", 6800, 10000),
        ("Vacation",       1750, 5000),
        ("New Car",        3600, 30000),
    ):
        store.create_savings_goal(SavingsGoalCreate(
            user_id=user.id, name=name, current=current, target=target,
        ))

    store.create_chat_message(ChatMessageCreate(
        user_id=user.id, role=ChatRole.ASSISTANT, content=GREETING,
    ))

    logger.info("Seeded demo data for user id=%d (%s)", user.id, user.username)
    return user
