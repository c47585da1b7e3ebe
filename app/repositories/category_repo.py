import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.core.policies import Viewer, category_read_filter, require_admin_row
from app.models.category import Category


class CategoryRepository:
    """
    Data access layer for categories.

    - Reads are public.
    - Writes require an admin row for the viewer.
    """

    def get_by_id(
        self,
        session: Session,
        viewer_id: Viewer,
        category_id: uuid.UUID,
    ) -> Category | None:
        stmt = select(Category).where(
            Category.id == category_id,
            category_read_filter(viewer_id),
        )
        return session.exec(stmt).first()

    def get_by_name(self, session: Session, name: str) -> Category | None:
        stmt = select(Category).where(Category.name == name)
        return session.exec(stmt).first()

    def list(
        self,
        session: Session,
        viewer_id: Viewer,
        limit: int | None = None,
    ) -> list[Category]:
        stmt = select(Category).where(category_read_filter(viewer_id)).order_by(Category.name)
        if limit is not None:
            stmt = stmt.limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, viewer_id: Viewer, category: Category) -> Category:
        require_admin_row(session, viewer_id, "categories", "insert")
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update(self, session: Session, viewer_id: Viewer, category: Category) -> Category:
        require_admin_row(session, viewer_id, "categories", "update")
        category.updated_at = datetime.now(timezone.utc)
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, viewer_id: Viewer, category: Category) -> None:
        """Products of the category keep existing with category_id = NULL."""
        require_admin_row(session, viewer_id, "categories", "delete")
        session.delete(category)
        session.commit()
