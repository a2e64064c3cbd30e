# backoffice/api/routers/hierarchy.py
from typing import List, Type

from fastapi import APIRouter, Depends, File, Query, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.domain.schemas import ReorderItem
from backoffice.services.hierarchy_service import HierarchyService


def build_router(
    prefix: str,
    tag: str,
    service_class: Type[HierarchyService],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
) -> APIRouter:
    """Te same endpointy dla każdego drzewa rodzic/dziecko (kategorie, menu)."""
    router = APIRouter(prefix=prefix, tags=[tag])

    def get_service(db: Session):
        return service_class(db)

    @router.post("/", response_model=out_schema, status_code=201)
    def create(payload: create_schema, db: Session = Depends(get_db)):
        svc = get_service(db)
        return svc.to_dict(svc.create(payload))

    @router.get("/", response_model=List[out_schema])
    def list_all(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        return get_service(db).list(include_inactive)

    @router.get("/tree", response_model=List[out_schema])
    def tree(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        return get_service(db).find_tree(include_inactive)

    @router.get("/roots", response_model=List[out_schema])
    def roots(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        return get_service(db).find_roots(include_inactive)

    @router.get("/search", response_model=List[out_schema])
    def search(q: str = Query(..., min_length=1), include_inactive: bool = Query(False),
               db: Session = Depends(get_db)):
        return get_service(db).search(q, include_inactive)

    @router.get("/paginated")
    def paginated(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100),
                  include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        result = get_service(db).paginate(page, limit, include_inactive)
        result["data"] = [out_schema.model_validate(item) for item in result["data"]]
        return result

    @router.get("/statistics")
    def statistics(db: Session = Depends(get_db)):
        return get_service(db).statistics()

    @router.post("/reorder")
    def reorder(payload: List[ReorderItem], db: Session = Depends(get_db)):
        return {"updated": get_service(db).reorder(payload)}

    @router.get("/slug/{slug}", response_model=out_schema)
    def get_by_slug(slug: str, db: Session = Depends(get_db)):
        svc = get_service(db)
        return svc.to_dict(svc.get_by_slug(slug))

    @router.get("/{node_id}", response_model=out_schema)
    def get_one(node_id: int, db: Session = Depends(get_db)):
        svc = get_service(db)
        return svc.to_dict(svc.get(node_id))

    @router.get("/{node_id}/children", response_model=List[out_schema])
    def children(node_id: int, include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        svc = get_service(db)
        svc.get(node_id)
        return svc.find_children(node_id, include_inactive)

    @router.get("/{node_id}/subtree", response_model=out_schema)
    def subtree(node_id: int, include_inactive: bool = Query(False), db: Session = Depends(get_db)):
        return get_service(db).find_subtree(node_id, include_inactive)

    @router.patch("/{node_id}", response_model=out_schema)
    def update(node_id: int, payload: update_schema, db: Session = Depends(get_db)):
        svc = get_service(db)
        return svc.to_dict(svc.update(node_id, payload))

    @router.post("/{node_id}/image", response_model=out_schema)
    def upload_image(node_id: int, file: UploadFile = File(...), db: Session = Depends(get_db)):
        svc = get_service(db)
        node = svc.attach_image(node_id, file.filename, file.file.read(), file.content_type)
        return svc.to_dict(node)

    @router.delete("/{node_id}", response_model=out_schema)
    def remove(node_id: int, db: Session = Depends(get_db)):
        return get_service(db).remove(node_id)

    return router
