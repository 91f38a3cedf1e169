"""Shared fixtures: an in-memory database and an authenticated API client."""

from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import trade_journal.models  # noqa: F401  registers table metadata
from trade_journal.api.deps import get_current_user
from trade_journal.database import get_session
from trade_journal.main import app
from trade_journal.models import Account, Trade, User


def make_trade(**overrides) -> SimpleNamespace:
    """An in-memory trade with the attributes the analytics engine reads."""
    fields = {
        "id": "t0",
        "symbol": "EURUSD",
        "type": "Long",
        "strategy": None,
        "setup": None,
        "entry_price": 1.1,
        "exit_price": None,
        "stop_loss": None,
        "take_profit": None,
        "lot": 1.0,
        "pnl": None,
        "commission": None,
        "swap": None,
        "outcome": "pending",
        "r_multiple": None,
        "entry_date": date(2024, 1, 1),
        "entry_time": None,
        "exit_date": None,
        "exit_time": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session) -> User:
    user = User(id="user-1", username="alice", hashed_password="x", totp_secret="JBSWY3DPEHPK3PXP")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session) -> User:
    user = User(id="user-2", username="bob", hashed_password="x", totp_secret="JBSWY3DPEHPK3PXP")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def account(session, user) -> Account:
    account = Account(id="acc-1", user_id=user.id, name="Main", initial_balance=10000.0)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@pytest.fixture
def add_trade(session):
    """Persist a trade; returns the stored row."""
    counter = {"n": 0}

    def _add(**overrides) -> Trade:
        counter["n"] += 1
        fields = {
            "id": f"trade-{counter['n']:03d}",
            "account_id": "acc-1",
            "user_id": "user-1",
            "symbol": "EURUSD",
            "type": "Long",
            "entry_price": 1.1,
            "lot": 1.0,
            "entry_date": date(2024, 1, 1),
        }
        fields.update(overrides)
        trade = Trade(**fields)
        session.add(trade)
        session.commit()
        session.refresh(trade)
        return trade

    return _add


@pytest.fixture
def client(engine, user):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    # detached copy so request threads never touch the fixture session
    current = User(id=user.id, username=user.username, hashed_password="x", totp_secret=user.totp_secret)
    app.dependency_overrides[get_current_user] = lambda: current
    yield TestClient(app)
    app.dependency_overrides.clear()
