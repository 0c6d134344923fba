from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ledgerwise.db.repository import LedgerRepository
from ledgerwise.deps import get_advisor, get_ledger, get_split_sessions
from ledgerwise.llm.advisor import FinancialAdvisor
from ledgerwise.models.schemas import LedgerEntry
from ledgerwise.split.session import SplitSessionRegistry
from ledgerwise.store.forms import FormStore


class FakeGenerator:
    """Stands in for the model API: records prompts, returns a canned reply or raises."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def make_entry(user_id, type, amount, day, category=None, description=None):
    return LedgerEntry(
        user_id=user_id,
        type=type,
        amount=Decimal(amount),
        category=category,
        date=day,
        description=description,
    )


@pytest.fixture
def ledger():
    return LedgerRepository(None)


@pytest.fixture
def seeded_ledger(ledger):
    """March 2024 vs February 2024 for user 'u1', with noise for another user."""
    for entry in [
        make_entry("u1", "INCOME", "50000", date(2024, 3, 1), "salary"),
        make_entry("u1", "EXPENSE", "1200.50", date(2024, 3, 5), "food", "Groceries"),
        make_entry("u1", "EXPENSE", "800.25", date(2024, 3, 31), "food", "Dinner"),
        make_entry("u1", "EXPENSE", "15000", date(2024, 3, 10), "housing", "Rent"),
        make_entry("u1", "EXPENSE", "99", date(2024, 3, 12)),
        make_entry("u1", "INCOME", "48000", date(2024, 2, 1), "salary"),
        make_entry("u1", "EXPENSE", "2000", date(2024, 2, 29), "food"),
        make_entry("u1", "EXPENSE", "500", date(2024, 1, 15), "transport"),
        make_entry("u1", "EXPENSE", "700", date(2024, 4, 1), "food"),
        make_entry("u2", "EXPENSE", "999999", date(2024, 3, 5), "food"),
    ]:
        ledger.add_entry(entry)
    return ledger


@pytest.fixture
def form_store():
    return FormStore(None)


@pytest.fixture
def sessions(form_store):
    return SplitSessionRegistry(form_store, default_requester_name="Me")


@pytest.fixture
def generator():
    return FakeGenerator(reply="Spend less on food.")


@pytest.fixture
def advisor(generator, seeded_ledger):
    return FinancialAdvisor(generator, seeded_ledger)


@pytest.fixture
def client(seeded_ledger, advisor, sessions):
    from main import app

    app.dependency_overrides[get_ledger] = lambda: seeded_ledger
    app.dependency_overrides[get_advisor] = lambda: advisor
    app.dependency_overrides[get_split_sessions] = lambda: sessions
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
