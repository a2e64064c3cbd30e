#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from backoffice.data.models.category import CategoryModel, category_parents
from backoffice.data.models.menu import MenuItemModel
from backoffice.data.models.product import ProductModel
from backoffice.data.models.cart import CartModel
from backoffice.data.models.cart_item import CartItemModel
from backoffice.data.models.order import OrderModel
from backoffice.data.models.order_item import OrderItemModel
from backoffice.data.models.integration import IntegrationModel

__all__ = [
    "CategoryModel",
    "category_parents",
    "MenuItemModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "IntegrationModel",
]
