"""CLI tool for admin operations.

Usage:
    python -m trade_journal.cli create-user
    python -m trade_journal.cli metrics <username> <account_id>
"""

import sys
import getpass
import json
from dataclasses import asdict

from sqlmodel import Session, select

from trade_journal.database import engine, create_db_and_tables
from trade_journal.models.user import User
from trade_journal.services import metrics
from trade_journal.services.auth import hash_password, generate_totp_secret, get_totp_uri
from trade_journal.services.trade_store import (
    TradeStoreError,
    fetch_initial_balance,
    fetch_playbooks,
    fetch_trades,
)
from trade_journal.utils.logging import setup_logging


def create_user():
    """Create a user with TOTP setup."""
    create_db_and_tables()

    username = input("Username: ").strip()
    if not username:
        print("Username cannot be empty.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            print(f"User '{username}' already exists.")
            sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)

    totp_secret = generate_totp_secret()
    user = User(
        username=username,
        hashed_password=hash_password(password),
        totp_secret=totp_secret,
    )
    with Session(engine) as session:
        session.add(user)
        session.commit()

    print(f"\nUser '{username}' created successfully.")
    print(f"\nTOTP Secret: {totp_secret}")
    print(f"TOTP URI: {get_totp_uri(totp_secret, username)}")


def account_report(session: Session, user: User, account_id: str) -> dict:
    """Dashboard, advanced and playbook metrics as plain dicts."""
    trades = fetch_trades(session, account_id, user.id)
    initial_balance = fetch_initial_balance(session, account_id, user.id)
    playbooks = fetch_playbooks(session, user.id, account_id)
    return {
        "dashboard": asdict(metrics.compute_dashboard_metrics(trades)),
        "advanced": asdict(metrics.compute_advanced_metrics(trades, initial_balance)),
        "playbooks": [asdict(s) for s in metrics.compute_playbook_stats(trades, playbooks)],
    }


def print_metrics(username: str, account_id: str):
    """Print an account's metrics as JSON."""
    create_db_and_tables()

    with Session(engine) as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if not user:
            print(f"User '{username}' not found.")
            sys.exit(1)
        try:
            report = account_report(session, user, account_id)
        except TradeStoreError as e:
            print(f"Unable to load metrics: {e}")
            sys.exit(1)

    print(json.dumps(report, indent=2, default=str))


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m trade_journal.cli <command>")
        print("Commands: create-user, metrics <username> <account_id>")
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]
    if command == "create-user":
        create_user()
    elif command == "metrics":
        if len(sys.argv) != 4:
            print("Usage: python -m trade_journal.cli metrics <username> <account_id>")
            sys.exit(1)
        print_metrics(sys.argv[2], sys.argv[3])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
