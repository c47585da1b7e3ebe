import uuid

from sqlalchemy import or_
from sqlmodel import Session, select

from app.core.policies import Viewer, message_read_filter, require_admin_row
from app.models.message import Message


class MessageRepository:
    """
    Data access layer for contact messages.

    Anyone may insert; everything else is admin-only.
    """

    def list(
        self,
        session: Session,
        viewer_id: Viewer,
        search: str | None = None,
        is_read: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        require_admin_row(session, viewer_id, "messages", "select")
        stmt = select(Message).where(message_read_filter(viewer_id))

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Message.name.ilike(pattern),
                    Message.email.ilike(pattern),
                    Message.subject.ilike(pattern),
                )
            )

        if is_read is not None:
            stmt = stmt.where(Message.is_read == is_read)

        stmt = stmt.order_by(Message.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def get_by_id(
        self,
        session: Session,
        viewer_id: Viewer,
        message_id: uuid.UUID,
    ) -> Message | None:
        stmt = select(Message).where(Message.id == message_id, message_read_filter(viewer_id))
        return session.exec(stmt).first()

    def create(self, session: Session, message: Message) -> Message:
        """Public insert; no policy check."""
        session.add(message)
        session.commit()
        session.refresh(message)
        return message

    def update(self, session: Session, viewer_id: Viewer, message: Message) -> Message:
        require_admin_row(session, viewer_id, "messages", "update")
        session.add(message)
        session.commit()
        session.refresh(message)
        return message

    def delete(self, session: Session, viewer_id: Viewer, message: Message) -> None:
        require_admin_row(session, viewer_id, "messages", "delete")
        session.delete(message)
        session.commit()
