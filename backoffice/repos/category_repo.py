# backoffice/repos/category_repo.py
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from backoffice.data.models.category import CategoryModel, category_parents
from backoffice.repos.hierarchy_repo import HierarchyRepo


class CategoryRepo(HierarchyRepo):
    def __init__(self, db: Session):
        super().__init__(db, CategoryModel)

    def children_filter(self, node_id: int):
        # dziecko przez parent_id albo przez dodatkowych rodzicow
        extra = select(category_parents.c.category_id).where(category_parents.c.parent_id == node_id)
        return or_(CategoryModel.parent_id == node_id, CategoryModel.id.in_(extra))
