# backoffice/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.domain.schemas import CartItemIn, CartOut, CartQuantityIn, PromoCodeIn
from backoffice.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db)


def cart_owner(session_id: str | None = Query(None), user_id: int | None = Query(None, gt=0)):
    return {"session_id": session_id, "user_id": user_id}


@router.get("/", response_model=CartOut)
def get_cart(owner: dict = Depends(cart_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.with_resolved_products(svc.get_or_create(**owner))


@router.post("/items", response_model=CartOut)
def add_item(payload: CartItemIn, owner: dict = Depends(cart_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.add_item(svc.get_or_create(**owner), payload)
    return svc.with_resolved_products(cart)


@router.patch("/items/{item_id}", response_model=CartOut)
def set_quantity(item_id: int, payload: CartQuantityIn, owner: dict = Depends(cart_owner),
                 db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.set_quantity(svc.get_or_create(**owner), item_id, payload.quantity)
    return svc.with_resolved_products(cart)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: int, owner: dict = Depends(cart_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.remove_item(svc.get_or_create(**owner), item_id)
    return svc.with_resolved_products(cart)


@router.delete("/", response_model=CartOut)
def clear_cart(owner: dict = Depends(cart_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.with_resolved_products(svc.clear(svc.get_or_create(**owner)))


@router.put("/promo-code", response_model=CartOut)
def set_promo_code(payload: PromoCodeIn, owner: dict = Depends(cart_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.set_promo_code(svc.get_or_create(**owner), payload.promo_code)
    return svc.with_resolved_products(cart)
