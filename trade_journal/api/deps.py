"""Shared API dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select

from trade_journal.database import get_session
from trade_journal.models.account import Account
from trade_journal.models.user import User
from trade_journal.services.auth import decode_access_token

bearer_scheme = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Validate JWT and return the current user."""
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


def get_owned_account(session: Session, account_id: str, user: User) -> Account:
    """Load an account of the current user; someone else's account is a 404."""
    account = session.exec(
        select(Account).where(Account.id == account_id, Account.user_id == user.id)
    ).first()
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return account
