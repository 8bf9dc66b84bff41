from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from models.purchase import PurchaseStatus
from schemas.product import ProductSummary, SellerOut, RequestBase


# Request body: {street, city, state, zipCode, country}
class ShippingAddress(RequestBase):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class ShippingAddressOut(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


# Input schema for checkout: {paymentMethod, shippingAddress}
class CheckoutPayload(RequestBase):
    payment_method: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None


# Seller-side logistics update: {status, trackingNumber?, notes?}
class PurchaseStatusUpdate(RequestBase):
    status: PurchaseStatus
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


# Buyer-side review; the 1..5 range is enforced by the ledger
class PurchaseReview(RequestBase):
    rating: int
    review: Optional[str] = Field(None, max_length=500)


class PurchaseOut(BaseModel):
    id: int
    buyer_id: int
    seller_id: int
    product_id: int
    buyer: Optional[SellerOut] = None
    seller: Optional[SellerOut] = None
    product: Optional[ProductSummary] = None
    quantity: int
    total_price: float
    payment_method: Optional[str] = None
    shipping_address: ShippingAddressOut
    status: PurchaseStatus
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Dashboard numbers for the signed-in user
class SalesSummary(BaseModel):
    total_listings: int
    active_listings: int
    items_sold: int
    revenue: float
    purchases_made: int
