import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policies import Viewer
from app.models.product import Product
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductFilters, ProductUpdate

RELATED_PRODUCTS_LIMIT = 4


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - validation beyond pydantic (category must exist)
      - 404 mapping for rows that are missing *or* hidden by policy
      - admin-only writes (enforced by the repository policies)
    """

    def __init__(self, repo: ProductRepository, category_repo: CategoryRepository):
        self.repo = repo
        self.category_repo = category_repo

    # ----- Helpers -----

    def _ensure_category(
        self,
        session: Session,
        viewer_id: Viewer,
        category_id: uuid.UUID | None,
    ) -> None:
        if category_id is None:
            return
        if self.category_repo.get_by_id(session, viewer_id, category_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category does not exist",
            )

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        viewer_id: Viewer,
        filters: ProductFilters,
    ) -> list[Product]:
        return self.repo.list(session, viewer_id, filters)

    def get_product(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
    ) -> Product:
        product = self.repo.get_by_id(session, viewer_id, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def list_related(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
    ) -> list[Product]:
        """Other active products of the same category."""
        product = self.get_product(session, viewer_id, product_id)
        if product.category_id is None:
            return []
        filters = ProductFilters(
            category_id=product.category_id,
            exclude_id=product.id,
            limit=RELATED_PRODUCTS_LIMIT,
        )
        return self.repo.list(session, viewer_id, filters)

    # ----- Admin writes -----

    def create_product(
        self,
        session: Session,
        viewer_id: Viewer,
        payload: ProductCreate,
    ) -> Product:
        self._ensure_category(session, viewer_id, payload.category_id)
        product = Product(**payload.model_dump())
        created = self.repo.create(session, viewer_id, product)
        return self.get_product(session, viewer_id, created.id)

    def update_product(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product; only fields present in the payload
        are applied. `updated_at` is refreshed by the repository.
        """
        product = self.get_product(session, viewer_id, product_id)
        changes = payload.model_dump(exclude_unset=True)

        if "category_id" in changes:
            self._ensure_category(session, viewer_id, changes["category_id"])

        for field, value in changes.items():
            if value is None and field != "category_id":
                continue
            setattr(product, field, value)

        self.repo.update(session, viewer_id, product)
        return self.get_product(session, viewer_id, product_id)

    def toggle_active(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
    ) -> Product:
        product = self.get_product(session, viewer_id, product_id)
        product.is_active = not product.is_active
        self.repo.update(session, viewer_id, product)
        return self.get_product(session, viewer_id, product_id)

    def delete_product(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
    ) -> None:
        product = self.get_product(session, viewer_id, product_id)
        self.repo.delete(session, viewer_id, product)
