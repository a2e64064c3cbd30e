# backoffice/repos/menu_repo.py
from sqlalchemy.orm import Session

from backoffice.data.models.menu import MenuItemModel
from backoffice.repos.hierarchy_repo import HierarchyRepo


class MenuRepo(HierarchyRepo):
    def __init__(self, db: Session):
        super().__init__(db, MenuItemModel)
