# backend/models/purchase.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, CheckConstraint, func
from database import Base
import enum

# Logistics states of a purchase. Any state may follow any other.
class PurchaseStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

# One completed transaction per (buyer, product, quantity).
# Identity fields are written once by checkout; the seller owns the logistics
# fields (status, tracking_number, notes), the buyer owns rating/review.
class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)

    # Price snapshot: product price at checkout * quantity
    total_price = Column(Float, nullable=False)
    payment_method = Column(String, nullable=True)

    # Shipping address
    shipping_street = Column(String, nullable=True)
    shipping_city = Column(String, nullable=True)
    shipping_state = Column(String, nullable=True)
    shipping_zip_code = Column(String, nullable=True)
    shipping_country = Column(String, nullable=True)

    status = Column(Enum(PurchaseStatus), default=PurchaseStatus.PENDING, nullable=False)
    tracking_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    rating = Column(Integer, CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)"), nullable=True)
    review = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
