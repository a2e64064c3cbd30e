# backoffice/services/hierarchy_service.py
import math
from typing import Any, Dict, List

from pydantic import BaseModel
from sqlalchemy.orm import Session

from backoffice.domain.errors import ConflictError, InvalidError, NotFoundError
from backoffice.domain.schemas import ReorderItem
from backoffice.services.asset_store import AssetStore
from backoffice.utils import slug as slugs
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

BASE_FIELDS = ("id", "name", "slug", "parent_id", "order", "is_active", "created_at", "updated_at")


class HierarchyService:
    """
    Wspólna logika drzewa rodzic/dziecko (kategorie, menu).

    Invariant: krawędzie parent_id tworzą las (bez cykli), sprawdzane przy
    każdej zmianie rodzica.
    """

    label = "Node"
    asset_kind = "nodes"
    # kolumna, do której trafia URL wgranego obrazka
    image_field = "image"
    repo_class = None
    display_fields: tuple = ()
    # kolumny NOT NULL - jawny null w patchu jest ignorowany
    required_fields = frozenset({"name", "slug", "order", "is_active"})

    def __init__(self, db: Session, asset_store: AssetStore | None = None):
        self.repo = self.repo_class(db)
        self.asset_store = asset_store or AssetStore()

    # ------------------------------------------------------------------
    # query
    # ------------------------------------------------------------------
    def get(self, node_id: int):
        node = self.repo.get(node_id)
        if not node:
            raise NotFoundError(self.label, id=node_id)
        return node

    def get_by_slug(self, slug: str):
        node = self.repo.get_by_slug(slug)
        if not node:
            raise NotFoundError(self.label, slug=slug)
        return node

    def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return [self.to_dict(n) for n in self.repo.list(include_inactive)]

    def find_roots(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return [self.to_dict(n) for n in self.repo.list_roots(include_inactive)]

    def find_children(self, node_id: int, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return [self.to_dict(n) for n in self.repo.list_children(node_id, include_inactive)]

    def search(self, query: str, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return [self.to_dict(n) for n in self.repo.search(query, include_inactive)]

    def paginate(self, page: int = 1, limit: int = 10, include_inactive: bool = False) -> Dict[str, Any]:
        if page < 1 or limit < 1:
            raise InvalidError("Page and limit must be positive", details={"page": page, "limit": limit})

        nodes, total = self.repo.paginate(page, limit, include_inactive)
        return {
            "data": [self.to_dict(n) for n in nodes],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    def statistics(self) -> Dict[str, int]:
        total = self.repo.count()
        roots = total - self.repo.count_with_parent()
        return {
            "total": total,
            "active": self.repo.count(is_active=True),
            "inactive": self.repo.count(is_active=False),
            "with_parent": total - roots,
            "roots": roots,
            f"sub_{self.asset_kind}": total - roots,
        }

    def find_tree(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        _, roots = self._assemble(self.repo.list(include_inactive))
        return roots

    def find_subtree(self, node_id: int, include_inactive: bool = False) -> Dict[str, Any]:
        node = self.get(node_id)
        if not include_inactive and not node.is_active:
            raise NotFoundError(self.label, id=node_id)
        index, _ = self._assemble(self.repo.list(include_inactive))

        item = self.to_dict(node)
        item["children"] = [
            index[child.id] if child.id in index else self._leaf(child)
            for child in self.repo.list_children(node_id, include_inactive)
        ]
        return item

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    def create(self, cmd: BaseModel):
        data = cmd.model_dump()
        slug = data.pop("slug", None) or slugs.generate(data["name"])
        if self.repo.slug_exists(slug):
            raise ConflictError(f'{self.label} with slug "{slug}" already exists', details={"slug": slug})

        parent_id = data.get("parent_id")
        if parent_id is not None and not self.repo.get(parent_id):
            raise NotFoundError(f"Parent {self.label.lower()}", id=parent_id)

        if not slugs.is_valid(slug):
            raise InvalidError("Invalid slug format", details={"slug": slug})

        links = self._pop_links(data)
        node = self.repo.model(**data, slug=slug)
        self._apply_links(node, links)

        created = self.repo.add(node)
        logger.info(f"{self.label} {created.id} created with slug '{created.slug}'")
        return created

    def update(self, node_id: int, patch: BaseModel):
        node = self.get(node_id)
        fields = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key not in self.required_fields
        }

        # pusty string tez jest sprawdzany, is_valid("") == False
        if "slug" in fields and fields["slug"] != node.slug:
            self._check_new_slug(fields["slug"])

        if fields.get("name") and "slug" not in fields:
            derived = slugs.generate(fields["name"])
            # przyjmujemy tylko jesli nie koliduje z innym wezlem
            if derived != node.slug and slugs.is_valid(derived) and not self.repo.slug_exists(derived):
                fields["slug"] = derived

        if fields.get("parent_id") is not None:
            self._check_parent(node_id, fields["parent_id"])

        links = self._pop_links(fields, node_id=node_id)
        for key, value in fields.items():
            setattr(node, key, value)
        self._apply_links(node, links)

        saved = self.repo.save(node)
        logger.info(f"{self.label} {node_id} updated: {sorted(fields)}")
        return saved

    def remove(self, node_id: int) -> Dict[str, Any]:
        node = self.get(node_id)

        if self.repo.has_children(node_id):
            raise InvalidError(
                f"Cannot delete {self.label.lower()} with children. Please delete or move children first.",
                details={"id": node_id},
            )

        snapshot = self.to_dict(node)
        self.asset_store.delete_all(self.asset_kind, node_id)
        self.repo.delete(node)

        logger.info(f"{self.label} {node_id} deleted")
        return snapshot

    def attach_image(self, node_id: int, filename: str | None, data: bytes, content_type: str | None):
        node = self.get(node_id)
        url = self.asset_store.save_image(self.asset_kind, node_id, filename, data, content_type)

        previous = getattr(node, self.image_field)
        setattr(node, self.image_field, url)
        saved = self.repo.save(node)

        # stary plik usuwany dopiero po zapisie nowego URL
        if previous and previous != url:
            self.asset_store.delete_url(previous)

        logger.info(f"{self.label} {node_id}: {self.image_field} set to {url}")
        return saved

    def reorder(self, updates: List[ReorderItem]) -> int:
        changed = self.repo.set_orders((u.id, u.order) for u in updates)
        logger.info(f"Reordered {changed} of {len(updates)} {self.asset_kind}")
        return changed

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def would_create_cycle(self, node_id: int, new_parent_id: int) -> bool:
        """Idzie w górę od nowego rodzica, dojście do node_id oznacza cykl."""
        current = new_parent_id
        seen = set()

        while current is not None:
            if current == node_id:
                return True
            if current in seen:
                break
            seen.add(current)

            parent = self.repo.get(current)
            if not parent or parent.parent_id is None:
                break
            current = parent.parent_id

        return False

    def _check_parent(self, node_id: int, parent_id: int):
        if parent_id == node_id:
            raise InvalidError(f"{self.label} cannot be its own parent", details={"id": node_id})

        if self.would_create_cycle(node_id, parent_id):
            raise InvalidError(
                f"Cannot create circular reference in {self.label.lower()} hierarchy",
                details={"id": node_id, "parent_id": parent_id},
            )

        if not self.repo.get(parent_id):
            raise NotFoundError(f"Parent {self.label.lower()}", id=parent_id)

    def _check_new_slug(self, slug: str):
        if self.repo.slug_exists(slug):
            raise ConflictError(f'{self.label} with slug "{slug}" already exists', details={"slug": slug})

        if not slugs.is_valid(slug):
            raise InvalidError("Invalid slug format", details={"slug": slug})

    def _pop_links(self, data: Dict[str, Any], node_id: int | None = None):
        return None

    def _apply_links(self, node, links):
        pass

    def to_dict(self, node) -> Dict[str, Any]:
        return {field: getattr(node, field) for field in BASE_FIELDS + self.display_fields}

    def _leaf(self, node) -> Dict[str, Any]:
        item = self.to_dict(node)
        item["children"] = []
        return item

    def _assemble(self, nodes):
        """Buduje las z płaskiej listy posortowanej po (order, created_at, id).

        Węzeł, którego rodzica nie ma na liście, staje się korzeniem.
        Zwraca (węzły po id, korzenie).
        """
        index = {node.id: self._leaf(node) for node in nodes}
        roots = []

        for node in nodes:
            item = index[node.id]
            parent = index.get(node.parent_id) if node.parent_id is not None else None
            if parent is not None:
                parent["children"].append(item)
            else:
                roots.append(item)

        _sort_by_order(roots)
        return index, roots


def _sort_by_order(items: List[Dict[str, Any]]):
    # sort stabilny - w obrebie tego samego order zostaje kolejnosc created_at z zapytania
    stack = [items]
    while stack:
        level = stack.pop()
        level.sort(key=lambda i: i["order"])
        stack.extend(i["children"] for i in level if i["children"])
