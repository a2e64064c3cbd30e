# backoffice/repos/hierarchy_repo.py
from typing import List

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session


class HierarchyRepo:
    """Zapis jednego rodzaju węzłów rodzic/dziecko (kategorie albo pozycje menu)."""

    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    def _sorted(self, stmt):
        return stmt.order_by(self.model.order, self.model.created_at, self.model.id)

    def _active(self, stmt, include_inactive: bool):
        if include_inactive:
            return stmt
        return stmt.where(self.model.is_active.is_(True))

    def get(self, node_id: int):
        return self.db.get(self.model, node_id)

    def get_many(self, ids) -> List:
        ids = list(ids)
        if not ids:
            return []
        return list(self.db.execute(select(self.model).where(self.model.id.in_(ids))).scalars())

    def get_by_slug(self, slug: str):
        return self.db.execute(
            select(self.model).where(self.model.slug == slug)
        ).scalar_one_or_none()

    def slug_exists(self, slug: str) -> bool:
        return self.get_by_slug(slug) is not None

    def list(self, include_inactive: bool = False) -> List:
        stmt = self._active(select(self.model), include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def list_roots(self, include_inactive: bool = False) -> List:
        stmt = self._active(select(self.model).where(self.model.parent_id.is_(None)), include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def children_filter(self, node_id: int):
        return self.model.parent_id == node_id

    def list_children(self, node_id: int, include_inactive: bool = False) -> List:
        stmt = self._active(select(self.model).where(self.children_filter(node_id)), include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def has_children(self, node_id: int) -> bool:
        stmt = select(func.count()).select_from(self.model).where(self.children_filter(node_id))
        return self.db.execute(stmt).scalar_one() > 0

    def search(self, query: str, include_inactive: bool = False) -> List:
        stmt = select(self.model).where(func.lower(self.model.name).contains(query.lower()))
        stmt = self._active(stmt, include_inactive)
        return list(self.db.execute(self._sorted(stmt)).scalars())

    def paginate(self, page: int, limit: int, include_inactive: bool = False):
        stmt = self._active(select(self.model), include_inactive)
        items = list(
            self.db.execute(self._sorted(stmt).offset((page - 1) * limit).limit(limit)).scalars()
        )
        total = self.count(include_inactive=include_inactive)
        return items, total

    def count(self, include_inactive: bool = True, **filters) -> int:
        stmt = self._active(select(func.count()).select_from(self.model), include_inactive)
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.model, column) == value)
        return self.db.execute(stmt).scalar_one()

    def count_with_parent(self) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.model.parent_id.is_not(None))
        return self.db.execute(stmt).scalar_one()

    def add(self, node):
        self.db.add(node)
        self.db.commit()
        self.db.refresh(node)
        return node

    def save(self, node):
        self.db.commit()
        self.db.refresh(node)
        return node

    def delete(self, node):
        self.db.delete(node)
        self.db.commit()

    def set_orders(self, updates) -> int:
        # brak atomowosci wobec rownoleglych odczytow - order to tylko podpowiedz sortowania
        changed = 0
        for node_id, order in updates:
            result = self.db.execute(
                update(self.model).where(self.model.id == node_id).values(order=order)
            )
            changed += result.rowcount
        self.db.commit()
        return changed
