import uuid
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from app.core.policies import Viewer, product_read_filter, require_admin_row
from app.models.product import Product
from app.schemas.product import ProductFilters


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries) under the products policy:
      public readers see active rows only, admins see and write everything.
    - No FastAPI, no business logic.
    """

    def _visible(self, viewer_id: Viewer):
        return (
            select(Product)
            .where(product_read_filter(viewer_id))
            .options(selectinload(Product.category))
        )

    def get_by_id(
        self,
        session: Session,
        viewer_id: Viewer,
        product_id: uuid.UUID,
    ) -> Product | None:
        stmt = self._visible(viewer_id).where(Product.id == product_id)
        return session.exec(stmt).first()

    def list(
        self,
        session: Session,
        viewer_id: Viewer,
        filters: ProductFilters,
    ) -> list[Product]:
        stmt = self._visible(viewer_id)

        if not filters.include_inactive:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712

        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )

        if filters.category_id is not None:
            stmt = stmt.where(Product.category_id == filters.category_id)

        if filters.featured is not None:
            stmt = stmt.where(Product.is_featured == filters.featured)

        if filters.min_price is not None:
            stmt = stmt.where(Product.price >= filters.min_price)

        if filters.max_price is not None:
            stmt = stmt.where(Product.price <= filters.max_price)

        if filters.exclude_id is not None:
            stmt = stmt.where(Product.id != filters.exclude_id)

        if filters.sort == "price_asc":
            stmt = stmt.order_by(Product.price.asc())
        elif filters.sort == "price_desc":
            stmt = stmt.order_by(Product.price.desc())
        elif filters.sort == "newest":
            stmt = stmt.order_by(Product.created_at.desc())
        else:
            stmt = stmt.order_by(Product.name.asc())

        stmt = stmt.offset(filters.skip).limit(filters.limit)
        return session.exec(stmt).all()

    def create(self, session: Session, viewer_id: Viewer, product: Product) -> Product:
        require_admin_row(session, viewer_id, "products", "insert")
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, viewer_id: Viewer, product: Product) -> Product:
        require_admin_row(session, viewer_id, "products", "update")
        product.updated_at = datetime.now(timezone.utc)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, viewer_id: Viewer, product: Product) -> None:
        require_admin_row(session, viewer_id, "products", "delete")
        session.delete(product)
        session.commit()
