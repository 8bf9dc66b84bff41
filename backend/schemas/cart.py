from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from schemas.product import ProductOut, RequestBase

# Request schema for adding an item to the cart
class CartAddItem(RequestBase):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating cart item quantity; values below 1 remove the line
class CartUpdateItem(RequestBase):
    quantity: int

# Response schema for a single cart line with its product resolved
class CartItemOut(BaseModel):
    id: int
    product_id: int
    product: Optional[ProductOut] = None
    quantity: int
    line_total: float
    added_at: Optional[datetime] = None

# Response schema for the whole cart
class CartOut(BaseModel):
    id: int
    user_id: int
    items: List[CartItemOut]
    item_count: int
    total: float
    updated_at: Optional[datetime] = None
