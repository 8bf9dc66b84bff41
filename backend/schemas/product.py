# backend/schemas/product.py
from datetime import datetime
from typing import Literal, List, Optional

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

Category = Literal[
    "Electronics",
    "Clothing & Accessories",
    "Home & Garden",
    "Books & Media",
    "Sports & Recreation",
    "Toys & Games",
    "Automotive",
    "Health & Beauty",
    "Furniture",
    "Other",
]

Condition = Literal["New", "Like New", "Good", "Fair", "Poor"]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Request bodies accept the camelCase keys the web client sends (productId, zipCode, ...)
# as well as the snake_case field names
class RequestBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(RequestBase):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


# Public seller profile embedded in product responses
class SellerOut(ORMBase):
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# Schema for creating a listing
class ProductCreate(RequestBase):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    category: Category
    price: float = Field(ge=0)
    condition: Condition
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    location: Optional[Location] = None


# Schema for editing a listing - only supplied fields change
class ProductUpdate(RequestBase):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    category: Optional[Category] = None
    price: Optional[float] = Field(None, ge=0)
    condition: Optional[Condition] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    location: Optional[Location] = None
    is_available: Optional[bool] = None


class ProductOut(ORMBase):
    id: int
    title: str
    description: str
    category: str
    price: float
    condition: str
    images: List[str] = []
    tags: List[str] = []
    location: Optional[Location] = None
    seller_id: int
    seller: Optional[SellerOut] = None
    is_available: bool
    is_sold: bool
    sold_to_id: Optional[int] = None
    sold_at: Optional[datetime] = None
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Short product view embedded in purchases
class ProductSummary(ORMBase):
    id: int
    title: str
    price: float
    images: List[str] = []
    category: str


# Paginated search result
class ProductListPage(BaseModel):
    products: List[ProductOut]
    total: int
    total_pages: int
    current_page: int
