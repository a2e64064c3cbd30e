# backoffice/services/menu_service.py
from backoffice.repos.menu_repo import MenuRepo
from backoffice.services.hierarchy_service import HierarchyService


class MenuService(HierarchyService):
    label = "Menu item"
    asset_kind = "menu"
    image_field = "icon"
    repo_class = MenuRepo
    display_fields = ("url", "icon", "description", "type", "is_new_tab")
    required_fields = HierarchyService.required_fields | {"type", "is_new_tab"}
