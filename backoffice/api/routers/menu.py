# backoffice/api/routers/menu.py
from backoffice.api.routers.hierarchy import build_router
from backoffice.domain.schemas import MenuItemCreate, MenuItemUpdate, MenuTreeOut
from backoffice.services.menu_service import MenuService

router = build_router("/menu", "menu", MenuService, MenuItemCreate, MenuItemUpdate, MenuTreeOut)
