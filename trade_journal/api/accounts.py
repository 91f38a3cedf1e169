"""Trading accounts API."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from trade_journal.database import get_session
from trade_journal.models.account import Account
from trade_journal.models.user import User
from trade_journal.schemas.account import AccountCreate, AccountRead
from trade_journal.api.deps import get_current_user, get_owned_account

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountRead])
def list_accounts(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    stmt = select(Account).where(Account.user_id == user.id).order_by(Account.created_at)
    return session.exec(stmt).all()


@router.post("", response_model=AccountRead, status_code=201)
def create_account(
    data: AccountCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    account = Account(**data.model_dump(), user_id=user.id)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@router.get("/{account_id}", response_model=AccountRead)
def get_account(
    account_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return get_owned_account(session, account_id, user)
