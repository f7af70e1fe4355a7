# app/repositories/product_repo.py
from datetime import datetime

from sqlalchemy import delete, func
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list(self, session: Session) -> list[Product]:
        """
        All products, newest first (descending id).
        """
        stmt = select(Product).order_by(Product.id.desc())
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete_by_id(self, session: Session, product_id: int) -> None:
        """
        Delete without checking existence first; a missing id is a no-op.
        """
        session.exec(delete(Product).where(Product.id == product_id))
        session.commit()

    def server_time(self, session: Session) -> datetime:
        return session.exec(select(func.now())).one()
