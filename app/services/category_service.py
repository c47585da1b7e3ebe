import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policies import Viewer
from app.models.category import Category
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryUpdate


class CategoryService:
    """
    Business logic for categories.

    Responsibilities:
      - name uniqueness (409 instead of a raw IntegrityError)
      - 404 mapping
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    def _ensure_name_free(
        self,
        session: Session,
        name: str,
        current_id: uuid.UUID | None = None,
    ) -> None:
        existing = self.repo.get_by_name(session, name)
        if existing is not None and existing.id != current_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Category name already exists",
            )

    def list_categories(
        self,
        session: Session,
        viewer_id: Viewer,
        limit: int | None = None,
    ) -> list[Category]:
        return self.repo.list(session, viewer_id, limit=limit)

    def get_category(
        self,
        session: Session,
        viewer_id: Viewer,
        category_id: uuid.UUID,
    ) -> Category:
        category = self.repo.get_by_id(session, viewer_id, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    def create_category(
        self,
        session: Session,
        viewer_id: Viewer,
        payload: CategoryCreate,
    ) -> Category:
        self._ensure_name_free(session, payload.name)
        category = Category(
            name=payload.name,
            description=payload.description,
            image_url=payload.image_url,
        )
        return self.repo.create(session, viewer_id, category)

    def update_category(
        self,
        session: Session,
        viewer_id: Viewer,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> Category:
        category = self.get_category(session, viewer_id, category_id)

        if payload.name is not None and payload.name != category.name:
            self._ensure_name_free(session, payload.name, current_id=category.id)
            category.name = payload.name

        if payload.description is not None:
            category.description = payload.description

        if payload.image_url is not None:
            category.image_url = payload.image_url

        return self.repo.update(session, viewer_id, category)

    def delete_category(
        self,
        session: Session,
        viewer_id: Viewer,
        category_id: uuid.UUID,
    ) -> None:
        category = self.get_category(session, viewer_id, category_id)
        self.repo.delete(session, viewer_id, category)
