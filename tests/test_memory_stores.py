"""Unit tests for src/memory/record_store.py, seed.py and transcripts.py"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
import uuid

import pytest
from pydantic import ValidationError


@pytest.fixture
def store():
    from src.memory.record_store import RecordStore
    return RecordStore()


@pytest.fixture
def user(store):
    return store.create_user({
        "username": "sam",
        "password": "hunter2",
        "name": "Sam Lee",
        "email": "sam@example.com",
    })


def _account(user_id: int, name: str = "Checking", balance: float = 100.0) -> dict:
    return {
        "userId": user_id,
        "name": name,
        "type": "checking",
        "number": "**** 0001",
        "balance": balance,
    }


# ══════════════════════════════════════════════════════════════════════════════
# RecordStore — create / get_by_id
# ══════════════════════════════════════════════════════════════════════════════

class TestCreate:

    def test_ids_start_at_one_per_kind(self, store, user):
        from src.memory.models import EntityKind
        account = store.create_account(_account(user.id))
        goal = store.create_savings_goal(
            {"userId": user.id, "name": "Trip", "current": 0, "target": 100}
        )
        assert user.id == 1
        assert account.id == 1
        assert goal.id == 1
        assert store.count(EntityKind.ACCOUNT) == 1

    def test_ids_increase(self, store, user):
        first = store.create_account(_account(user.id, "A"))
        second = store.create_account(_account(user.id, "B"))
        assert second.id == first.id + 1

    @pytest.mark.parametrize("kind_name", ["USER", "ACCOUNT", "SAVINGS_GOAL", "CHAT_MESSAGE"])
    def test_create_then_get_returns_equal_record(self, store, kind_name):
        from src.memory.models import EntityKind
        kind = EntityKind[kind_name]
        fields = {
            EntityKind.USER: {"username": "u", "password": "p", "name": "N", "email": "e@x.io"},
            EntityKind.ACCOUNT: _account(7),
            EntityKind.SAVINGS_GOAL: {"userId": 7, "name": "Car", "current": 5, "target": 50},
            EntityKind.CHAT_MESSAGE: {"userId": 7, "role": "user", "content": "hi"},
        }[kind]
        created = store.create(kind, fields)
        assert store.get_by_id(kind, created.id) == created

    def test_user_gets_created_at(self, user):
        assert isinstance(user.created_at, datetime)

    def test_optional_user_fields_default_to_none(self, user):
        assert user.monthly_income is None
        assert user.risk_tolerance is None

    def test_chat_message_gets_uuid_and_timestamp(self, store):
        msg = store.create_chat_message({"userId": 1, "role": "assistant", "content": "Hello"})
        uuid.UUID(msg.message_id)  # should not raise
        assert msg.timestamp is not None

    def test_message_ids_unique(self, store):
        a = store.create_chat_message({"userId": 1, "role": "user", "content": "a"})
        b = store.create_chat_message({"userId": 1, "role": "user", "content": "b"})
        assert a.message_id != b.message_id

    def test_account_owner_not_validated(self, store):
        account = store.create_account(_account(user_id=404))
        assert account.user_id == 404

    def test_invalid_role_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_chat_message({"userId": 1, "role": "system", "content": "x"})

    def test_server_fields_cannot_be_supplied(self, store):
        with pytest.raises(ValidationError):
            store.create_chat_message(
                {"userId": 1, "role": "user", "content": "x", "messageId": "mine"}
            )

    def test_accepts_create_model(self, store):
        from src.memory.models import SavingsGoalCreate
        goal = store.create_savings_goal(
            SavingsGoalCreate(user_id=1, name="Fund", current=10, target=5)
        )
        # current > target is allowed
        assert goal.current == 10

    def test_rejects_wrong_model_type(self, store):
        from src.memory.models import AccountCreate, EntityKind
        fields = AccountCreate(**_account(1))
        with pytest.raises(TypeError):
            store.create(EntityKind.SAVINGS_GOAL, fields)

    def test_records_are_immutable(self, user):
        with pytest.raises(ValidationError):
            user.name = "Changed"

    def test_get_missing_returns_none(self, store):
        from src.memory.models import EntityKind
        assert store.get_by_id(EntityKind.ACCOUNT, 99) is None
        assert store.get_user(99) is None


# ══════════════════════════════════════════════════════════════════════════════
# RecordStore — get_by_owner
# ══════════════════════════════════════════════════════════════════════════════

class TestGetByOwner:

    def test_filters_by_owner(self, store):
        store.create_account(_account(1, "Mine"))
        store.create_account(_account(2, "Theirs"))
        accounts = store.get_accounts(1)
        assert [a.name for a in accounts] == ["Mine"]
        assert all(a.user_id == 1 for a in accounts)

    def test_insertion_order(self, store):
        for name in ("C", "A", "B"):
            store.create_savings_goal({"userId": 3, "name": name, "current": 0, "target": 1})
        assert [g.name for g in store.get_savings_goals(3)] == ["C", "A", "B"]

    def test_unknown_owner_returns_empty(self, store):
        assert store.get_accounts(12345) == []

    def test_users_have_no_owner(self, store):
        from src.memory.models import EntityKind
        with pytest.raises(TypeError):
            store.get_by_owner(EntityKind.USER, 1)


# ══════════════════════════════════════════════════════════════════════════════
# RecordStore — update
# ══════════════════════════════════════════════════════════════════════════════

class TestUpdate:

    def test_merges_supplied_fields(self, store, user):
        updated = store.update_user(user.id, {"monthlyIncome": 6100, "riskTolerance": "high"})
        assert updated.monthly_income == 6100
        assert updated.risk_tolerance.value == "high"
        assert updated.name == "Sam Lee"

    def test_preserves_id_and_created_at(self, store, user):
        updated = store.update_user(user.id, {"name": "Samantha"})
        assert updated.id == user.id
        assert updated.created_at == user.created_at

    def test_persisted(self, store, user):
        store.update_user(user.id, {"email": "new@example.com"})
        assert store.get_user(user.id).email == "new@example.com"

    def test_unset_fields_untouched(self, store, user):
        store.update_user(user.id, {"monthlyIncome": 4000})
        store.update_user(user.id, {"riskTolerance": "low"})
        assert store.get_user(user.id).monthly_income == 4000

    def test_explicit_none_clears_field(self, store, user):
        store.update_user(user.id, {"monthlyIncome": 4000})
        store.update_user(user.id, {"monthlyIncome": None})
        assert store.get_user(user.id).monthly_income is None

    def test_missing_id_returns_none_and_changes_nothing(self, store, user):
        from src.memory.models import EntityKind
        before = store.get_user(user.id)
        assert store.update_user(999, {"name": "Ghost"}) is None
        assert store.get_user(999) is None
        assert store.get_user(user.id) == before
        assert store.count(EntityKind.USER) == 1

    def test_unknown_field_rejected(self, store, user):
        with pytest.raises(ValidationError):
            store.update_user(user.id, {"nickname": "S"})

    def test_null_balance_rejected(self, store):
        account = store.create_account(_account(1, balance=250.0))
        with pytest.raises(ValidationError):
            store.update_account(account.id, {"balance": None})
        assert store.get_account(account.id) == account

    @pytest.mark.parametrize("changes", [{"username": None}, {"name": None}, {"email": None}])
    def test_null_required_user_field_rejected(self, store, user, changes):
        with pytest.raises(ValidationError):
            store.update_user(user.id, changes)
        assert store.get_user(user.id) == user
        assert store.get_user_by_username(None) is None

    def test_null_goal_amounts_rejected(self, store):
        goal = store.create_savings_goal({"userId": 1, "name": "Trip", "current": 10, "target": 100})
        with pytest.raises(ValidationError):
            store.update_savings_goal(goal.id, {"current": None})
        with pytest.raises(ValidationError):
            store.update_savings_goal(goal.id, {"target": None})
        assert store.get_savings_goal(goal.id) == goal

    def test_null_last_transaction_allowed(self, store):
        account = store.create_account({**_account(1), "lastTransaction": "2024-05-01T10:00:00Z"})
        updated = store.update_account(account.id, {"lastTransaction": None})
        assert updated.last_transaction is None

    def test_id_not_updatable(self, store):
        account = store.create_account(_account(1))
        with pytest.raises(ValidationError):
            store.update_account(account.id, {"id": 50})

    def test_update_account_balance(self, store):
        account = store.create_account(_account(1, balance=10.0))
        store.update_account(account.id, {"balance": -25.5})
        assert store.get_account(account.id).balance == -25.5

    def test_update_savings_goal(self, store):
        goal = store.create_savings_goal({"userId": 1, "name": "Car", "current": 0, "target": 10})
        updated = store.update_savings_goal(goal.id, {"current": 4})
        assert updated.current == 4
        assert updated.created_at == goal.created_at

    def test_chat_messages_have_no_update(self, store):
        from src.memory.models import EntityKind
        msg = store.create_chat_message({"userId": 1, "role": "user", "content": "x"})
        with pytest.raises(TypeError):
            store.update(EntityKind.CHAT_MESSAGE, msg.id, {"content": "y"})

    def test_earlier_copy_unchanged_after_update(self, store, user):
        store.update_user(user.id, {"name": "Other"})
        assert user.name == "Sam Lee"


# ══════════════════════════════════════════════════════════════════════════════
# Usernames
# ══════════════════════════════════════════════════════════════════════════════

class TestGetUserByUsername:

    def test_exact_match(self, store, user):
        assert store.get_user_by_username("sam") == user

    def test_no_match(self, store, user):
        assert store.get_user_by_username("SAM") is None
        assert store.get_user_by_username("nobody") is None

    def test_duplicates_allowed_first_wins(self, store, user):
        dup = store.create_user({"username": "sam", "password": "x", "name": "Other", "email": "o@x.io"})
        assert dup.id != user.id
        assert store.get_user_by_username("sam").id == user.id


# ══════════════════════════════════════════════════════════════════════════════
# Chat ordering
# ══════════════════════════════════════════════════════════════════════════════

def _message(id_: int, timestamp):
    from src.memory.models import ChatMessage
    return ChatMessage(
        id=id_, user_id=1, message_id=str(uuid.uuid4()),
        role="user", content=f"m{id_}", timestamp=timestamp,
    )


class TestChronological:

    def test_sorted_ascending(self):
        from src.memory.record_store import chronological
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        msgs = [_message(1, base + timedelta(minutes=2)), _message(2, base), _message(3, base + timedelta(minutes=1))]
        assert [m.id for m in chronological(msgs)] == [2, 3, 1]

    def test_missing_timestamp_first(self):
        from src.memory.record_store import chronological
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        msgs = [_message(1, base), _message(2, None), _message(3, base - timedelta(days=1))]
        assert [m.id for m in chronological(msgs)] == [2, 3, 1]

    def test_ties_keep_insertion_order(self):
        from src.memory.record_store import chronological
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        msgs = [_message(5, ts), _message(4, ts), _message(6, None), _message(7, None)]
        assert [m.id for m in chronological(msgs)] == [6, 7, 5, 4]

    def test_store_returns_messages_in_creation_order(self, store):
        for text in ("one", "two", "three"):
            store.create_chat_message({"userId": 2, "role": "user", "content": text})
        store.create_chat_message({"userId": 3, "role": "user", "content": "other"})
        assert [m.content for m in store.get_chat_messages(2)] == ["one", "two", "three"]


# ══════════════════════════════════════════════════════════════════════════════
# Seed data
# ══════════════════════════════════════════════════════════════════════════════

class TestSeedDemoData:

    def test_seeds_demo_user(self, store):
        from src.memory.seed import seed_demo_data
        user = seed_demo_data(store)
        assert user.id == 1
        assert store.get_user_by_username("alexmorgan") == user
        assert user.monthly_income == 5000
        assert user.risk_tolerance.value == "medium"

    def test_seeds_accounts_goals_and_greeting(self, store):
        from src.memory.seed import GREETING, seed_demo_data
        seed_demo_data(store)
        accounts = store.get_accounts(1)
        assert [a.number for a in accounts] == ["**** 4567", "**** 7890", "**** 2345"]
        assert [g.name for g in store.get_savings_goals(1)] == ["Emergency Fund", "Vacation", "New Car"]
        messages = store.get_chat_messages(1)
        assert len(messages) == 1
        assert messages[0].role.value == "assistant"
        assert messages[0].content == GREETING

    def test_last_transactions_in_the_past(self, store):
        from src.memory.seed import seed_demo_data
        seed_demo_data(store)
        now = datetime.now(timezone.utc)
        assert all(a.last_transaction < now for a in store.get_accounts(1))

    def test_fresh_store_is_empty(self, store):
        from src.memory.models import EntityKind
        assert all(store.count(kind) == 0 for kind in EntityKind)


# ══════════════════════════════════════════════════════════════════════════════
# TranscriptRegistry
# ══════════════════════════════════════════════════════════════════════════════

class TestTranscriptRegistry:

    def test_lazily_created(self):
        from src.memory.transcripts import TranscriptRegistry
        registry = TranscriptRegistry()
        assert 1 not in registry
        registry.get(1)
        assert 1 in registry
        assert len(registry) == 1

    def test_same_history_returned(self):
        from src.memory.transcripts import TranscriptRegistry
        registry = TranscriptRegistry()
        assert registry.get(1) is registry.get(1)

    def test_messages_snapshot(self):
        from src.memory.transcripts import TranscriptRegistry
        registry = TranscriptRegistry()
        registry.get(1).add_user_message("Q")
        registry.get(1).add_ai_message("A")
        snapshot = registry.messages(1)
        assert [m.content for m in snapshot] == ["Q", "A"]
        snapshot.clear()
        assert len(registry.messages(1)) == 2

    def test_users_isolated(self):
        from src.memory.transcripts import TranscriptRegistry
        registry = TranscriptRegistry()
        registry.get(1).add_user_message("mine")
        assert registry.messages(2) == []
        assert 2 not in registry
