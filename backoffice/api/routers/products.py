# backoffice/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.domain.schemas import (
    ProductCreate,
    ProductOut,
    ProductPageOut,
    ProductStatisticsOut,
    ProductUpdate,
)
from backoffice.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return get_service(db).create(payload)


@router.get("/", response_model=List[ProductOut])
def list_products(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
    return get_service(db).list(include_inactive)


# statyczne ścieżki muszą być przed /{product_id}
@router.get("/paginated", response_model=ProductPageOut)
def paginate_products(
    page: int = Query(1),
    limit: int = Query(10),
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    return get_service(db).paginate(page, limit, include_inactive)


@router.get("/search", response_model=List[ProductOut])
def search_products(q: str = Query(..., min_length=1), include_inactive: bool = Query(False),
                    db: Session = Depends(get_db)):
    return get_service(db).search(q, include_inactive)


@router.get("/category/{category_id}", response_model=List[ProductOut])
def products_by_category(category_id: int, include_inactive: bool = Query(False),
                         db: Session = Depends(get_db)):
    return get_service(db).find_by_category(category_id, include_inactive)


@router.get("/featured", response_model=List[ProductOut])
def featured_products(limit: int = Query(10, ge=1), db: Session = Depends(get_db)):
    return get_service(db).find_featured(limit)


@router.get("/on-sale", response_model=List[ProductOut])
def on_sale_products(limit: int = Query(10, ge=1), db: Session = Depends(get_db)):
    return get_service(db).find_on_sale(limit)


@router.get("/new", response_model=List[ProductOut])
def new_products(limit: int = Query(10, ge=1), db: Session = Depends(get_db)):
    return get_service(db).find_new(limit)


@router.get("/statistics", response_model=ProductStatisticsOut)
def product_statistics(db: Session = Depends(get_db)):
    return get_service(db).statistics()


@router.get("/slug/{slug}", response_model=ProductOut)
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    return get_service(db).get_by_slug(slug)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return get_service(db).get(product_id)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    return get_service(db).update(product_id, payload)


@router.delete("/{product_id}", response_model=ProductOut)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    return get_service(db).remove(product_id)


@router.post("/{product_id}/images", response_model=ProductOut, status_code=201)
def upload_product_image(product_id: int, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return get_service(db).add_image(product_id, file.filename, file.file.read(), file.content_type)
