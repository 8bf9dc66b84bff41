# backend/models/product.py
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, CheckConstraint, func
)
from sqlalchemy.orm import validates
from database import Base

CATEGORIES = [
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

CONDITIONS = ["New", "Like New", "Good", "Fair", "Poor"]

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x300?text=Product+Image"

# Model Product
# A single listing put up by a seller. Availability is driven by two flags:
# is_available (seller-controlled) and is_sold (set once by checkout, never cleared).
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(String(1000), nullable=False)
    category = Column(String, nullable=False, index=True)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False, index=True)
    condition = Column(String, nullable=False)

    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    # Search copy of tags: "\ntag1\ntag2\n", kept in step with tags by _sync_tags_text
    tags_text = Column(String, nullable=False, default="")

    # Optional location
    location_city = Column(String, nullable=True)
    location_state = Column(String, nullable=True)
    location_country = Column(String, nullable=True)

    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    is_available = Column(Boolean, nullable=False, default=True)
    is_sold = Column(Boolean, nullable=False, default=False)
    sold_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    sold_at = Column(DateTime(timezone=True), nullable=True)

    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @validates("tags")
    def _sync_tags_text(self, key, tags):
        tags = list(tags or [])
        cleaned = [" ".join(str(tag).split()) for tag in tags]
        self.tags_text = "\n" + "\n".join(cleaned) + "\n" if cleaned else ""
        return tags
