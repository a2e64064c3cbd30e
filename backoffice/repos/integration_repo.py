# backoffice/repos/integration_repo.py
from typing import Dict, List

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backoffice.data.models.integration import IntegrationModel


class IntegrationRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, integration_id: int) -> IntegrationModel | None:
        return self.db.get(IntegrationModel, integration_id)

    def list(self, include_inactive: bool = False, type: str | None = None) -> List[IntegrationModel]:
        stmt = select(IntegrationModel)
        if type:
            stmt = stmt.where(IntegrationModel.type == type)
        if not include_inactive:
            stmt = stmt.where(IntegrationModel.is_active.is_(True))
        return list(self.db.execute(self._newest_first(stmt)).scalars())

    def list_active_by_type(self, type: str) -> List[IntegrationModel]:
        stmt = select(IntegrationModel).where(
            IntegrationModel.type == type,
            IntegrationModel.is_active.is_(True),
            IntegrationModel.status == "active",
        )
        return list(self.db.execute(self._newest_first(stmt)).scalars())

    def count(self, **filters) -> int:
        stmt = select(func.count()).select_from(IntegrationModel)
        for column, value in filters.items():
            stmt = stmt.where(getattr(IntegrationModel, column) == value)
        return self.db.execute(stmt).scalar_one()

    def count_by_type(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(IntegrationModel.type, func.count()).group_by(IntegrationModel.type)
        ).all()
        return {type_: n for type_, n in rows}

    def create(self, integration: IntegrationModel) -> IntegrationModel:
        self.db.add(integration)
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def save(self, integration: IntegrationModel) -> IntegrationModel:
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def delete(self, integration: IntegrationModel):
        self.db.delete(integration)
        self.db.commit()

    @staticmethod
    def _newest_first(stmt):
        return stmt.order_by(IntegrationModel.created_at.desc(), IntegrationModel.id.desc())
