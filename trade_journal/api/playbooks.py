"""Playbook (named strategy) API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from trade_journal.database import get_session
from trade_journal.models.playbook import Playbook
from trade_journal.models.user import User
from trade_journal.schemas.playbook import PlaybookCreate, PlaybookRead
from trade_journal.services.trade_store import fetch_playbooks
from trade_journal.api.deps import get_current_user, get_owned_account

router = APIRouter(prefix="/api/playbooks", tags=["playbooks"])


@router.get("", response_model=list[PlaybookRead])
def list_playbooks(
    account_id: str | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return fetch_playbooks(session, user.id, account_id)


@router.post("", response_model=PlaybookRead, status_code=201)
def create_playbook(
    data: PlaybookCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if data.account_id is not None:
        get_owned_account(session, data.account_id, user)

    existing = session.exec(
        select(Playbook).where(
            Playbook.user_id == user.id,
            Playbook.account_id == data.account_id,
            Playbook.name == data.name,
        )
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="A playbook with this name already exists")

    playbook = Playbook(**data.model_dump(), user_id=user.id)
    session.add(playbook)
    session.commit()
    session.refresh(playbook)
    return playbook


@router.delete("/{playbook_id}", status_code=204)
def delete_playbook(
    playbook_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    playbook = session.get(Playbook, playbook_id)
    if not playbook or playbook.user_id != user.id:
        raise HTTPException(status_code=404, detail="Playbook not found")
    session.delete(playbook)
    session.commit()
