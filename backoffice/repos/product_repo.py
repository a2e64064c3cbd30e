# backoffice/repos/product_repo.py
from typing import List

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backoffice.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def _sorted(self, stmt):
        return stmt.order_by(ProductModel.order, ProductModel.created_at.desc(), ProductModel.id.desc())

    @staticmethod
    def _active(stmt, include_inactive: bool):
        if include_inactive:
            return stmt
        return stmt.where(ProductModel.is_active.is_(True))

    def get(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_many(self, ids) -> List[ProductModel]:
        ids = list(ids)
        if not ids:
            return []
        return list(self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars())

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.slug == slug)
        ).scalar_one_or_none()

    def list(self, include_inactive: bool = False) -> List[ProductModel]:
        stmt = self._active(select(ProductModel), include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def paginate(self, page: int, limit: int, include_inactive: bool = False):
        stmt = self._active(select(ProductModel), include_inactive)
        items = list(self.db.execute(self._sorted(stmt).offset((page - 1) * limit).limit(limit)).scalars())
        total = self.db.execute(
            self._active(select(func.count()).select_from(ProductModel), include_inactive)
        ).scalar_one()
        return items, total

    def search(self, query: str, include_inactive: bool = False) -> List[ProductModel]:
        pattern = query.lower()
        stmt = select(ProductModel).where(
            func.lower(ProductModel.name).contains(pattern)
            | func.lower(func.coalesce(ProductModel.description, "")).contains(pattern)
        )
        return list(self.db.execute(self._sorted(self._active(stmt, include_inactive))).scalars())

    def list_by_category(self, category_id: int, include_inactive: bool = False) -> List[ProductModel]:
        stmt = self._active(select(ProductModel).where(ProductModel.category_id == category_id), include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def list_flagged(self, flag: str, limit: int, newest_first: bool = False) -> List[ProductModel]:
        stmt = select(ProductModel).where(
            getattr(ProductModel, flag).is_(True),
            ProductModel.is_active.is_(True),
        )
        if newest_first:
            stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        else:
            stmt = self._sorted(stmt)
        return list(self.db.execute(stmt.limit(limit)).scalars())

    def count(self, **filters) -> int:
        stmt = select(func.count()).select_from(ProductModel)
        for column, value in filters.items():
            stmt = stmt.where(getattr(ProductModel, column) == value)
        return self.db.execute(stmt).scalar_one()

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel):
        self.db.delete(product)
        self.db.commit()

    def slugs_with_prefix(self, prefix: str) -> List[str]:
        return list(
            self.db.execute(select(ProductModel.slug).where(ProductModel.slug.startswith(prefix))).scalars()
        )
