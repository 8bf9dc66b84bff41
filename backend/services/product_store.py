# services/product_store.py
import logging
import math
import shutil
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import settings
from models.cart import CartItem
from models.product import Product, PLACEHOLDER_IMAGE
from models.purchase import Purchase
from models.users import User
from schemas.product import ProductCreate, ProductUpdate
from utils.errors import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


def public_profile(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
    }


def _location(product: Product) -> Optional[dict]:
    if not (product.location_city or product.location_state or product.location_country):
        return None
    return {
        "city": product.location_city,
        "state": product.location_state,
        "country": product.location_country,
    }


def product_to_dict(product: Product, seller: Optional[User] = None) -> dict:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "category": product.category,
        "price": product.price,
        "condition": product.condition,
        "images": list(product.images or []),
        "tags": list(product.tags or []),
        "location": _location(product),
        "seller_id": product.seller_id,
        "seller": public_profile(seller),
        "is_available": product.is_available,
        "is_sold": product.is_sold,
        "sold_to_id": product.sold_to_id,
        "sold_at": product.sold_at,
        "views": product.views,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def load_users(db: Session, user_ids: Iterable[int]) -> dict:
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


def hydrate_products(db: Session, products: List[Product]) -> List[dict]:
    """Resolve the seller reference of each product to a public profile."""
    sellers = load_users(db, (p.seller_id for p in products))
    return [product_to_dict(p, sellers.get(p.seller_id)) for p in products]


def _get_owned(db: Session, product_id: int, user: User) -> Product:
    product = get_product(db, product_id)
    if product.seller_id != user.id:
        raise AuthorizationError("Not authorized")
    return product


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def view_product(db: Session, product_id: int, viewer: Optional[User] = None) -> Product:
    product = get_product(db, product_id)
    # Sellers looking at their own listing don't count as views
    if viewer is None or viewer.id != product.seller_id:
        product.views = (product.views or 0) + 1
        db.commit()
        db.refresh(product)
    return product


def create_product(db: Session, seller: User, data: ProductCreate) -> Product:
    location = data.location
    product = Product(
        title=data.title.strip(),
        description=data.description.strip(),
        category=data.category,
        price=data.price,
        condition=data.condition,
        images=data.images or [PLACEHOLDER_IMAGE],
        tags=data.tags or [],
        location_city=location.city if location else None,
        location_state=location.state if location else None,
        location_country=location.country if location else None,
        seller_id=seller.id,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s listed by user %s", product.id, seller.id)
    return product


def update_product(db: Session, product_id: int, user: User, data: ProductUpdate) -> Product:
    product = _get_owned(db, product_id, user)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    location = changes.pop("location", None)
    if location is not None:
        product.location_city = location.get("city")
        product.location_state = location.get("state")
        product.location_country = location.get("country")

    for key, value in changes.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int, user: User) -> None:
    product = _get_owned(db, product_id, user)

    # Purchases keep pointing at the product, so sold listings stay
    has_purchases = db.query(Purchase.id).filter(Purchase.product_id == product.id).first()
    if has_purchases:
        raise ValidationError("Cannot delete a product that has purchases")

    db.query(CartItem).filter(CartItem.product_id == product.id).delete(synchronize_session=False)
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted by user %s", product_id, user.id)


def _like_term(search: Optional[str]) -> str:
    # Search text is matched literally; newlines would let a term span two tags
    term = " ".join((search or "").split())
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_products(
    db: Session,
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    query = db.query(Product).filter(Product.is_available.is_(True), Product.is_sold.is_(False))

    if category and category != "all":
        query = query.filter(Product.category == category)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    term = _like_term(search)
    if term:
        like = f"%{term}%"
        query = query.filter(
            or_(
                Product.title.ilike(like, escape="\\"),
                Product.description.ilike(like, escape="\\"),
                Product.tags_text.ilike(like, escape="\\"),
            )
        )

    total = query.count()
    products = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "products": hydrate_products(db, products),
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "current_page": page,
    }


def list_seller_products(db: Session, seller_id: int) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.seller_id == seller_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def add_product_image(db: Session, product_id: int, user: User, file: UploadFile) -> Product:
    product = _get_owned(db, product_id, user)

    ext = ALLOWED_IMAGE_TYPES.get(file.content_type)
    if ext is None:
        raise ValidationError("Invalid file type")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    unique_filename = f"{uuid.uuid4()}.{ext}"
    try:
        with open(upload_dir / unique_filename, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    finally:
        file.file.close()

    # Uploaded files replace the placeholder instead of sitting next to it
    images = [img for img in (product.images or []) if img != PLACEHOLDER_IMAGE]
    images.append(f"/uploads/{unique_filename}")
    product.images = images
    db.commit()
    db.refresh(product)
    return product
