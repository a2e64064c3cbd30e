# backoffice/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.domain.schemas import DispatchOut, OrderCreate, OrderOut, OrderUpdate
from backoffice.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    request: Request,
    session_id: str | None = Query(None),
    db: Session = Depends(get_db),
):
    return get_service(db).create_order(
        payload,
        session_id=session_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


@router.get("/", response_model=List[OrderOut])
def list_orders(include_cancelled: bool = Query(False), db: Session = Depends(get_db)):
    return get_service(db).list_orders(include_cancelled)


@router.get("/statistics")
def statistics(db: Session = Depends(get_db)):
    return get_service(db).statistics()


@router.get("/number/{order_number}", response_model=OrderOut)
def get_by_number(order_number: str, db: Session = Depends(get_db)):
    return get_service(db).get_by_number(order_number)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_order(order_id)


@router.patch("/{order_id}", response_model=OrderOut)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    return get_service(db).update_order(order_id, payload)


@router.delete("/{order_id}")
def remove_order(order_id: int, db: Session = Depends(get_db)):
    return get_service(db).remove_order(order_id)


@router.post("/{order_id}/dispatch", response_model=DispatchOut)
def resend_notification(order_id: int, db: Session = Depends(get_db)):
    outcome = get_service(db).resend_notification(order_id)
    return {"order_id": order_id, "outcome": outcome.value}
