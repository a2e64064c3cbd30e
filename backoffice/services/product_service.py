# backoffice/services/product_service.py
import math
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from backoffice.data.models.product import ProductModel
from backoffice.domain.errors import ConflictError, InvalidError, NotFoundError
from backoffice.domain.schemas import ProductCreate, ProductUpdate
from backoffice.repos.product_repo import ProductRepo
from backoffice.services.asset_store import AssetStore
from backoffice.utils import slug as slugs
from backoffice.utils.settings import DEFAULT_CURRENCY
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

ASSET_KIND = "products"
# kolumny NOT NULL - jawny null w patchu jest ignorowany
REQUIRED_FIELDS = frozenset({
    "name", "slug", "price_current", "currency", "stock", "images", "order",
    "is_active", "is_featured", "is_on_sale", "is_new",
})


class ProductService:
    """
    Katalog produktów. Ceny w koszyku są zawsze aktualne,
    zamówienie zapisuje ich kopię w chwili złożenia.
    """

    def __init__(self, db: Session, asset_store: AssetStore | None = None):
        self.repo = ProductRepo(db)
        self.asset_store = asset_store or AssetStore()

    # commands
    def create(self, cmd: ProductCreate) -> ProductModel:
        if cmd.slug:
            slug = cmd.slug
            if self.repo.get_by_slug(slug):
                raise ConflictError(f'Product with slug "{slug}" already exists', details={"slug": slug})
        else:
            base = slugs.generate(cmd.name)
            slug = slugs.generate_unique(cmd.name, self.repo.slugs_with_prefix(base))

        if not slugs.is_valid(slug):
            raise InvalidError("Invalid slug format", details={"slug": slug})

        data = cmd.model_dump(exclude={"slug", "images"})
        data["currency"] = data["currency"] or DEFAULT_CURRENCY
        product = ProductModel(**data, slug=slug, images=_sorted_images(cmd.images))
        created = self.repo.create(product)

        logger.info(f"Product {created.id} created with slug '{created.slug}'")
        return created

    def update(self, product_id: int, patch: ProductUpdate) -> ProductModel:
        product = self.get(product_id)
        fields = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_FIELDS
        }

        if "slug" in fields and fields["slug"] != product.slug:
            slug = fields["slug"]
            if self.repo.get_by_slug(slug):
                raise ConflictError(f'Product with slug "{slug}" already exists', details={"slug": slug})
            if not slugs.is_valid(slug):
                raise InvalidError("Invalid slug format", details={"slug": slug})

        if "images" in fields:
            fields["images"] = _sorted_images(patch.images)

        for key, value in fields.items():
            setattr(product, key, value)

        saved = self.repo.save(product)
        logger.info(f"Product {product_id} updated: {sorted(fields)}")
        return saved

    def remove(self, product_id: int) -> Dict[str, Any]:
        product = self.get(product_id)
        snapshot = self.to_dict(product)

        self.asset_store.delete_all(ASSET_KIND, product_id)
        self.repo.delete(product)

        logger.info(f"Product {product_id} deleted")
        return snapshot

    def add_image(self, product_id: int, filename: str | None, data: bytes, content_type: str | None,
                  alt: str | None = None) -> ProductModel:
        product = self.get(product_id)
        url = self.asset_store.save_image(ASSET_KIND, product_id, filename, data, content_type)

        images = list(product.images or [])
        images.append({"url": url, "alt": alt, "order": len(images), "is_main": not images})
        # nowa lista, żeby SQLAlchemy zauważył zmianę kolumny JSON
        product.images = images

        return self.repo.save(product)

    # query
    def get(self, product_id: int) -> ProductModel:
        product = self.repo.get(product_id)
        if not product:
            raise NotFoundError("Product", id=product_id)
        return product

    def get_by_slug(self, slug: str) -> ProductModel:
        product = self.repo.get_by_slug(slug)
        if not product:
            raise NotFoundError("Product", slug=slug)
        return product

    def list(self, include_inactive: bool = False) -> List[ProductModel]:
        return self.repo.list(include_inactive)

    def get_many(self, ids) -> List[ProductModel]:
        return self.repo.get_many(ids)

    def search(self, query: str, include_inactive: bool = False) -> List[ProductModel]:
        return self.repo.search(query, include_inactive)

    def find_by_category(self, category_id: int, include_inactive: bool = False) -> List[ProductModel]:
        return self.repo.list_by_category(category_id, include_inactive)

    def paginate(self, page: int = 1, limit: int = 10, include_inactive: bool = False) -> Dict[str, Any]:
        if page < 1 or limit < 1:
            raise InvalidError("Page and limit must be positive", details={"page": page, "limit": limit})

        products, total = self.repo.paginate(page, limit, include_inactive)
        return {
            "data": products,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    def find_featured(self, limit: int = 10) -> List[ProductModel]:
        return self.repo.list_flagged("is_featured", limit)

    def find_on_sale(self, limit: int = 10) -> List[ProductModel]:
        return self.repo.list_flagged("is_on_sale", limit)

    def find_new(self, limit: int = 10) -> List[ProductModel]:
        return self.repo.list_flagged("is_new", limit, newest_first=True)

    def statistics(self) -> Dict[str, int]:
        return {
            "total": self.repo.count(),
            "active": self.repo.count(is_active=True),
            "inactive": self.repo.count(is_active=False),
            "featured": self.repo.count(is_featured=True),
            "on_sale": self.repo.count(is_on_sale=True),
            "new": self.repo.count(is_new=True),
        }

    @staticmethod
    def to_dict(product: ProductModel) -> Dict[str, Any]:
        return {
            column: getattr(product, column)
            for column in (
                "id", "name", "slug", "description", "category_id", "price_current", "price_old",
                "currency", "stock", "images", "sku", "order", "is_active", "is_featured",
                "is_on_sale", "is_new", "created_at", "updated_at",
            )
        }

    @staticmethod
    def summary(product: ProductModel) -> Dict[str, Any]:
        return {
            "id": product.id,
            "name": product.name,
            "slug": product.slug,
            "image": product.main_image,
            "price_current": product.price_current,
            "price_old": product.price_old,
            "currency": product.currency,
        }


def _sorted_images(images) -> List[Dict[str, Any]]:
    return [img.model_dump() for img in sorted(images or [], key=lambda i: i.order)]
