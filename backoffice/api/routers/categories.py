# backoffice/api/routers/categories.py
from backoffice.api.routers.hierarchy import build_router
from backoffice.domain.schemas import CategoryCreate, CategoryUpdate, CategoryTreeOut
from backoffice.services.category_service import CategoryService

router = build_router("/categories", "categories", CategoryService, CategoryCreate, CategoryUpdate, CategoryTreeOut)
