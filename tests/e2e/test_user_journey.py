"""
E2E tests for the client package talking to the API in-process.

Flow covered:
- sign in through AuthSession (creates the profile)
- parse free text, confirm, store through TransactionStore
- refresh, edit, delete, and read dashboard summaries
- ownership errors surface as domain exceptions
- sign out clears the store
"""

import httpx
import pytest
from decimal import Decimal
from finance_tracker.client.api_client import FinanceTrackerClient
from finance_tracker.client.session import AuthSession, SessionState
from finance_tracker.client.store import TransactionStore
from finance_tracker.domain.exceptions import (
    AuthenticationInvalidError,
    AuthorizationDeniedError,
    TransactionNotFoundError,
)


@pytest.fixture
def api_factory(app):
    def make(token=None) -> FinanceTrackerClient:
        return FinanceTrackerClient(
            "http://testserver",
            token=token,
            transport=httpx.ASGITransport(app=app),
        )

    return make


@pytest.mark.integration
async def test_full_user_journey(api_factory):
    api = api_factory()
    session = AuthSession(api)
    store = TransactionStore(api)
    unsubscribe = session.subscribe(store.on_session_change)

    user = await session.sign_in("token-alice")
    assert user.id == "user-alice"
    assert session.state is SessionState.SIGNED_IN

    salary = await store.add(await api.parse("Monthly salary $4500"))
    coffee = await store.add(await api.parse("Coffee at Starbucks $6.50"))
    await store.add(await api.parse("Gas station $40"))

    assert salary.type == "income"
    assert coffee.description == "At starbucks"
    assert coffee.confidence == 0.9

    await store.refresh()
    assert len(store.transactions) == 3

    summary = store.summary()
    assert summary.total_income == Decimal("4500")
    assert summary.total_expenses == Decimal("46.50")
    assert summary.savings == summary.total_income - summary.total_expenses

    edited = await store.update(coffee.id, amount=Decimal("7.00"), description="Latte")
    assert edited.amount == Decimal("7.00")
    assert store.summary().total_expenses == Decimal("47.00")

    await store.remove(salary.id)
    assert [t.type for t in store.transactions] == ["expense", "expense"]

    categories = store.categories()
    assert [c.category for c in categories] == ["Transportation", "Food & Dining"]

    await session.sign_out()
    assert store.transactions == []
    assert store.user is None
    unsubscribe()


@pytest.mark.integration
async def test_other_users_records_are_protected(api_factory):
    alice = api_factory("token-alice")
    bob = api_factory("token-bob")

    txn = await alice.create_transaction(
        amount=Decimal("25"),
        category="Shopping",
        description="Book",
        txn_type="expense",
    )

    with pytest.raises(AuthorizationDeniedError):
        await bob.delete_transaction(txn.id)
    with pytest.raises(AuthorizationDeniedError):
        await bob.update_transaction(txn.id, amount=Decimal("1"))
    with pytest.raises(TransactionNotFoundError):
        await bob.delete_transaction("00000000-0000-0000-0000-000000000000")

    assert await bob.list_transactions() == []
    remaining = await alice.list_transactions()
    assert [t.amount for t in remaining] == [Decimal("25")]


@pytest.mark.integration
async def test_bad_token_cannot_sign_in(api_factory):
    session = AuthSession(api_factory())

    with pytest.raises(AuthenticationInvalidError):
        await session.sign_in("forged")

    assert session.state is SessionState.SIGNED_OUT
