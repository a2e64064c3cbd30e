# backoffice/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from backoffice.data.models.cart import CartModel
from backoffice.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_session(self, session_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.session_id == session_id)
        ).scalar_one_or_none()

    def get_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_item(self, cart: CartModel, item_id: int) -> CartItemModel | None:
        for item in cart.items:
            if item.id == item_id:
                return item
        return None

    def save(self, cart: CartModel) -> CartModel:
        # read-modify-write calego koszyka, last write wins
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def delete_by_session(self, session_id: str) -> int:
        cart = self.get_by_session(session_id)
        if not cart:
            return 0
        self.db.delete(cart)
        self.db.commit()
        return 1

    def delete_expired(self, now: datetime) -> int:
        expired_ids = select(CartModel.id).where(CartModel.expires_at < now)
        # bez synchronizacji sesji - commit i tak wygasza obiekty
        self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id.in_(expired_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(CartModel).where(CartModel.expires_at < now).execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount
