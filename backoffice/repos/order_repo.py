# backoffice/repos/order_repo.py
from typing import List

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel
from backoffice.utils.retry import OrderNumberCollision


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.get_by_number(order.order_number) is not None:
                raise OrderNumberCollision(order.order_number)
            raise
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_by_number(self, order_number: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.order_number == order_number)
        ).scalar_one_or_none()

    def list_orders(self, exclude_status: str | None = None) -> List[OrderModel]:
        stmt = select(OrderModel)
        if exclude_status:
            stmt = stmt.where(OrderModel.status != exclude_status)
        return list(self.db.execute(stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())).scalars())

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(OrderModel)).scalar_one()

    def save(self, order: OrderModel) -> OrderModel:
        self.db.commit()
        self.db.refresh(order)
        return order

    def delete(self, order: OrderModel):
        self.db.delete(order)
        self.db.commit()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order
