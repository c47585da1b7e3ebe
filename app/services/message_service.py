import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policies import Viewer
from app.models.message import Message
from app.repositories.message_repo import MessageRepository
from app.schemas.message import MessageCreate, MessageUpdate, ReadFilter


class MessageService:
    """Contact messages: public submission, admin inbox."""

    def __init__(self, repo: MessageRepository):
        self.repo = repo

    def submit(self, session: Session, payload: MessageCreate) -> Message:
        message = Message(**payload.model_dump())
        return self.repo.create(session, message)

    def list_messages(
        self,
        session: Session,
        viewer_id: Viewer,
        search: str | None = None,
        read_filter: ReadFilter = "all",
        skip: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        is_read = {"read": True, "unread": False}.get(read_filter)
        search = search.strip() if search else None
        return self.repo.list(
            session,
            viewer_id,
            search=search or None,
            is_read=is_read,
            skip=skip,
            limit=limit,
        )

    def get_message(
        self,
        session: Session,
        viewer_id: Viewer,
        message_id: uuid.UUID,
    ) -> Message:
        message = self.repo.get_by_id(session, viewer_id, message_id)
        if not message:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Message not found",
            )
        return message

    def update_message(
        self,
        session: Session,
        viewer_id: Viewer,
        message_id: uuid.UUID,
        payload: MessageUpdate,
    ) -> Message:
        message = self.get_message(session, viewer_id, message_id)

        if payload.is_read is not None:
            message.is_read = payload.is_read

        if payload.replied is True:
            message.replied_at = datetime.now(timezone.utc)
            message.is_read = True
        elif payload.replied is False:
            message.replied_at = None

        return self.repo.update(session, viewer_id, message)

    def delete_message(
        self,
        session: Session,
        viewer_id: Viewer,
        message_id: uuid.UUID,
    ) -> None:
        message = self.get_message(session, viewer_id, message_id)
        self.repo.delete(session, viewer_id, message)
