import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.message_repo import MessageRepository
from app.schemas.message import MessageCreate, MessageRead, MessageUpdate, ReadFilter
from app.schemas.profile import ProfileRead
from app.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])

repo = MessageRepository()
service = MessageService(repo)


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_message(
    payload: MessageCreate,
    session: Session = Depends(get_session),
):
    """
    Contact form submission. Public endpoint.

    The stored message is only readable by admins, so the response
    carries just its id.
    """
    message = service.submit(session, payload)
    return {"id": message.id}


# -------- Admin endpoints --------


@router.get("", response_model=list[MessageRead])
def list_messages(
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
    search: str | None = None,
    read: ReadFilter = "all",
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    Admin inbox.

    - search: matches name, email or subject
    - read: all | read | unread
    """
    return service.list_messages(
        session,
        admin.id,
        search=search,
        read_filter=read,
        skip=skip,
        limit=limit,
    )


@router.get("/{message_id}", response_model=MessageRead)
def get_message(
    message_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    return service.get_message(session, admin.id, message_id)


@router.patch("/{message_id}", response_model=MessageRead)
def update_message(
    message_id: uuid.UUID,
    payload: MessageUpdate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """Mark read / unread / replied (admin only)."""
    return service.update_message(session, admin.id, message_id, payload)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    service.delete_message(session, admin.id, message_id)
