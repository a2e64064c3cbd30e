# backoffice/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from backoffice.domain.enums import (
    DeliveryMethod,
    IntegrationStatus,
    IntegrationType,
    MenuItemType,
    OrderStatus,
    PaymentMethod,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Catalog hierarchy
# ---------------------------------------------------------------------------

class CategoryCreate(BaseModel):
    """Schema dla tworzenia kategorii."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[int] = Field(None, gt=0)
    extra_parent_ids: List[int] = Field(default_factory=list)
    order: int = 0
    is_active: bool = True
    description: Optional[str] = None
    image: Optional[str] = None
    icon: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None


class CategoryUpdate(BaseModel):
    """Częściowa aktualizacja, stosowane są tylko pola obecne w payloadzie."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[int] = Field(None, gt=0)
    extra_parent_ids: Optional[List[int]] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None
    description: Optional[str] = None
    image: Optional[str] = None
    icon: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None


class MenuItemCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[int] = Field(None, gt=0)
    order: int = 0
    is_active: bool = True
    url: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    type: MenuItemType = MenuItemType.INTERNAL
    is_new_tab: bool = False


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[int] = Field(None, gt=0)
    order: Optional[int] = None
    is_active: Optional[bool] = None
    url: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    type: Optional[MenuItemType] = None
    is_new_tab: Optional[bool] = None


class ReorderItem(BaseModel):
    id: int = Field(..., gt=0)
    order: int


class CategoryTreeOut(BaseModel):
    id: int
    name: str
    slug: str
    parent_id: Optional[int] = None
    extra_parent_ids: List[int] = []
    order: int
    is_active: bool
    description: Optional[str] = None
    image: Optional[str] = None
    icon: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    children: List["CategoryTreeOut"] = []


class MenuTreeOut(BaseModel):
    id: int
    name: str
    slug: str
    parent_id: Optional[int] = None
    order: int
    is_active: bool
    url: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    type: str
    is_new_tab: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    children: List["MenuTreeOut"] = []


CategoryTreeOut.model_rebuild()
MenuTreeOut.model_rebuild()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

class ProductImageIn(BaseModel):
    url: str = Field(..., min_length=1)
    alt: Optional[str] = None
    order: int = 0
    is_main: bool = False


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0)
    price_current: Decimal = Field(..., ge=0)
    price_old: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    stock: int = Field(0, ge=0)
    images: List[ProductImageIn] = Field(default_factory=list)
    sku: Optional[str] = None
    order: int = 0
    is_active: bool = True
    is_featured: bool = False
    is_on_sale: bool = False
    is_new: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0)
    price_current: Optional[Decimal] = Field(None, ge=0)
    price_old: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    images: Optional[List[ProductImageIn]] = None
    sku: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_on_sale: Optional[bool] = None
    is_new: Optional[bool] = None


class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    price_current: Decimal
    price_old: Optional[Decimal] = None
    currency: str
    stock: int
    images: List[Dict[str, Any]] = []
    sku: Optional[str] = None
    order: int = 0
    is_active: bool
    is_featured: bool = False
    is_on_sale: bool = False
    is_new: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductPageOut(BaseModel):
    data: List[ProductOut]
    total: int
    page: int
    limit: int
    total_pages: int


class ProductStatisticsOut(BaseModel):
    total: int
    active: int
    inactive: int
    featured: int
    on_sale: int
    new: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------

class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, ge=1, description="Ilość produktu (musi być >= 1)")
    variant: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class CartQuantityIn(BaseModel):
    """Ilość <= 0 usuwa pozycję."""

    quantity: int


class PromoCodeIn(BaseModel):
    promo_code: Optional[str] = Field(None, max_length=100)


class CartProductOut(BaseModel):
    id: int
    name: str
    slug: str
    image: Optional[str] = None
    price_current: Decimal
    price_old: Optional[Decimal] = None
    currency: str


class CartLineOut(BaseModel):
    id: int
    product: CartProductOut
    quantity: int
    variant: Optional[str] = None
    attributes: Dict[str, Any] = {}
    line_total: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int
    session_id: Optional[str] = None
    user_id: Optional[int] = None
    items: List[CartLineOut]
    promo_code: Optional[str] = None
    subtotal: Decimal
    expires_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class OrderItemIn(BaseModel):
    # surowe ID - walidacja w PricingService, zeby zebrac wszystkie bledy naraz
    product_id: Union[int, str]
    quantity: int = Field(..., ge=1)
    variant: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class CustomerIn(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=1)
    company: Optional[str] = None


class DeliveryAddressIn(BaseModel):
    country: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    building: Optional[str] = None
    apartment: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None


class PaymentCardIn(BaseModel):
    """Dane karty płatniczej. Pola tajne nie pojawiają się w repr."""

    card_number: SecretStr
    expiry: Optional[str] = Field(None, max_length=10)
    cardholder_name: Optional[str] = Field(None, max_length=255)
    cvc: Optional[SecretStr] = None


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    items: List[OrderItemIn] = Field(..., min_length=1)
    customer: CustomerIn
    delivery_address: Optional[DeliveryAddressIn] = None
    payment_method: PaymentMethod
    delivery_method: DeliveryMethod
    notes: Optional[str] = None
    promo_code: Optional[str] = None
    delivery_cost: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    currency: Optional[str] = None
    payment_card: Optional[PaymentCardIn] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class OrderUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = None
    is_paid: Optional[bool] = None
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    notes: Optional[str] = None


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    product_slug: Optional[str] = None
    product_image: Optional[str] = None
    quantity: int
    price: Decimal
    discount: Decimal
    total: Decimal
    variant: Optional[str] = None
    attributes: Dict[str, Any] = {}

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response). Dane karty nie są zwracane."""

    id: int
    order_number: str
    items: List[OrderItemOut]
    customer: Dict[str, Any]
    delivery_address: Optional[Dict[str, Any]] = None
    status: str
    payment_method: str
    delivery_method: str
    subtotal: Decimal
    discount: Decimal
    delivery_cost: Decimal
    total: Decimal
    currency: str
    notes: Optional[str] = None
    promo_code: Optional[str] = None
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_sent_to_telegram: bool
    sent_to_telegram_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DispatchOut(BaseModel):
    order_id: int
    outcome: str


# ---------------------------------------------------------------------------
# Integrations
# ---------------------------------------------------------------------------

class IntegrationCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    type: IntegrationType
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: IntegrationStatus = IntegrationStatus.INACTIVE
    token: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    code: Optional[str] = None
    bot_token: Optional[str] = None
    chat_id: Optional[str] = None
    group_code: Optional[str] = None
    page_id: Optional[str] = None
    app_id: Optional[str] = None
    tracking_script: Optional[str] = None
    tracking_url: Optional[str] = None
    postback_url: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    credentials: Dict[str, Any] = Field(default_factory=dict)
    token_expires_at: Optional[datetime] = None
    is_active: bool = True


class IntegrationUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[IntegrationStatus] = None
    token: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    code: Optional[str] = None
    bot_token: Optional[str] = None
    chat_id: Optional[str] = None
    group_code: Optional[str] = None
    page_id: Optional[str] = None
    app_id: Optional[str] = None
    tracking_script: Optional[str] = None
    tracking_url: Optional[str] = None
    postback_url: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    credentials: Optional[Dict[str, Any]] = None
    token_expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None


class IntegrationOut(BaseModel):
    """Dane dostępowe raportowane tylko jako ustawione/nieustawione."""

    id: int
    type: str
    name: str
    description: Optional[str] = None
    status: str
    is_active: bool
    has_bot_token: bool
    has_access_token: bool
    chat_id: Optional[str] = None
    page_id: Optional[str] = None
    tracking_url: Optional[str] = None
    settings: Dict[str, Any] = {}
    usage_count: int
    last_used_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None
    token_expires_at: Optional[datetime] = None
    created_at: datetime


class SendMessageIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    message: str = Field(..., min_length=1)
    group_id: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)


class GenerateLinkIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    base_url: str = Field(..., min_length=1)
    params: Dict[str, Optional[str]] = Field(default_factory=dict)


class GenerateButtonLinkIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    base_url: str = Field(..., min_length=1)
    campaign_name: Optional[str] = None
    site_source_name: Optional[str] = None
    placement: Optional[str] = None
    campaign_id: Optional[str] = None
    adset_id: Optional[str] = None
    ad_id: Optional[str] = None
    adset_name: Optional[str] = None
    ad_name: Optional[str] = None


class ExchangeCodeIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    code: str = Field(..., min_length=1)
    redirect_uri: Optional[str] = None


class SendDataIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    data: Dict[str, Any]
    endpoint: Optional[str] = None


class FacebookPostIn(BaseModel):
    integration_id: int = Field(..., gt=0)
    message: str = Field(..., min_length=1)
    options: Dict[str, Any] = Field(default_factory=dict)
