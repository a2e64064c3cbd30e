# backoffice/services/category_service.py
from typing import Any, Dict

from backoffice.domain.errors import NotFoundError
from backoffice.repos.category_repo import CategoryRepo
from backoffice.services.hierarchy_service import HierarchyService


class CategoryService(HierarchyService):
    """
    Kategorie: drzewo po parent_id plus dodatkowi rodzice (cross-listing).

    Dodatkowi rodzice nie są sprawdzani pod kątem cykli, liczą się za to
    jako dzieci przy usuwaniu i w find_subtree.
    """

    label = "Category"
    asset_kind = "categories"
    repo_class = CategoryRepo
    display_fields = (
        "extra_parent_ids",
        "description",
        "image",
        "icon",
        "meta_title",
        "meta_description",
        "meta_keywords",
    )

    def _pop_links(self, data: Dict[str, Any], node_id: int | None = None):
        ids = data.pop("extra_parent_ids", None)
        if ids is None:
            return None

        wanted = [i for i in dict.fromkeys(ids) if i != node_id]
        parents = self.repo.get_many(wanted)

        found = {p.id for p in parents}
        missing = [i for i in wanted if i not in found]
        if missing:
            raise NotFoundError("Parent category", ids=missing)

        return parents

    def _apply_links(self, node, links):
        if links is not None:
            node.extra_parents = links
