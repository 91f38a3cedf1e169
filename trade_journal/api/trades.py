"""Trade journal API."""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlmodel import Session, select

from trade_journal.database import get_session
from trade_journal.models.trade import Trade
from trade_journal.models.user import User
from trade_journal.schemas.trade import TradeCreate, TradeUpdate, TradeRead
from trade_journal.api.deps import get_current_user, get_owned_account

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _get_owned_trade(session: Session, trade_id: str, user: User) -> Trade:
    trade = session.get(Trade, trade_id)
    if not trade or trade.user_id != user.id:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@router.get("", response_model=list[TradeRead])
def list_trades(
    account_id: str | None = None,
    symbol: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 50,
    offset: int = 0,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    stmt = select(Trade).where(Trade.user_id == user.id)
    if account_id is not None:
        stmt = stmt.where(Trade.account_id == account_id)
    if symbol is not None:
        stmt = stmt.where(Trade.symbol == symbol.upper())
    if date_from is not None:
        stmt = stmt.where(Trade.entry_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Trade.entry_date <= date_to)
    stmt = stmt.order_by(Trade.entry_date.desc(), Trade.entry_time.desc(), Trade.id.desc())
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(
    data: TradeCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_owned_account(session, data.account_id, user)
    trade = Trade(**data.model_dump(), user_id=user.id)
    session.add(trade)
    session.commit()
    session.refresh(trade)
    return trade


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _get_owned_trade(session, trade_id, user)


@router.put("/{trade_id}", response_model=TradeRead)
def update_trade(
    trade_id: str,
    data: TradeUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = _get_owned_trade(session, trade_id, user)
    update_data = data.model_dump(exclude_unset=True)

    # Validate full merged trade so partial updates cannot bypass cross-field rules.
    merged = {**trade.model_dump(include=set(TradeCreate.model_fields)), **update_data}
    try:
        TradeCreate.model_validate(merged)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=422, detail=errors)

    for key, value in update_data.items():
        setattr(trade, key, value)
    trade.updated_at = datetime.now(timezone.utc)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    return trade


@router.delete("/{trade_id}", status_code=204)
def delete_trade(
    trade_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = _get_owned_trade(session, trade_id, user)
    session.delete(trade)
    session.commit()
