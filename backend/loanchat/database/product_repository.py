from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from loanchat.errors import StorageError
from loanchat.model.product import Product
from loanchat.database.db.models import ProductRow


class ProductRepository:
    """
    Read side of the products table.

    Products are owned outside the chat flow; `save_many` exists for seeding.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """
        Get a Product by id, None when it does not exist.
        """
        try:
            with self.session_factory() as db:
                row = db.get(ProductRow, product_id)
                if not row:
                    return None
                return Product.model_validate(row)
        except SQLAlchemyError as e:
            raise StorageError("Database error", details=str(e)) from e

    def list_products(
        self,
        search: Optional[str] = None,
        min_apr: Optional[float] = None,
        max_apr: Optional[float] = None,
        income: Optional[float] = None,
        credit_score: Optional[int] = None,
    ) -> List[Product]:
        """
        Browse products.

        - search: case-insensitive match on bank or name
        - income / credit_score: only products the applicant qualifies for
        """
        stmt = select(ProductRow)

        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    ProductRow.bank.ilike(pattern),
                    ProductRow.name.ilike(pattern),
                )
            )
        if min_apr is not None:
            stmt = stmt.where(ProductRow.rate_apr >= min_apr)
        if max_apr is not None:
            stmt = stmt.where(ProductRow.rate_apr <= max_apr)
        if income is not None:
            stmt = stmt.where(ProductRow.min_income <= income)
        if credit_score is not None:
            stmt = stmt.where(ProductRow.min_credit_score <= credit_score)

        return self._fetch(stmt.order_by(ProductRow.name))

    def recommend(
        self,
        loan_type: str,
        max_apr: float,
        monthly_income: float,
        credit_score: int,
    ) -> List[Product]:
        """Eligible products of one loan type, cheapest APR first."""
        stmt = (
            select(ProductRow)
            .where(ProductRow.type == loan_type)
            .where(ProductRow.rate_apr <= max_apr)
            .where(ProductRow.min_income <= monthly_income)
            .where(ProductRow.min_credit_score <= credit_score)
            .order_by(ProductRow.rate_apr)
        )
        return self._fetch(stmt)

    def save_many(self, products: Iterable[Product]) -> int:
        """Insert or overwrite products; returns how many were written."""
        count = 0
        try:
            with self.session_factory() as db:
                for product in products:
                    db.merge(ProductRow(**product.model_dump()))
                    count += 1
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError("Database error", details=str(e)) from e
        return count

    def _fetch(self, stmt) -> List[Product]:
        try:
            with self.session_factory() as db:
                rows = db.execute(stmt).scalars().all()
                return [Product.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            raise StorageError("Database error", details=str(e)) from e
