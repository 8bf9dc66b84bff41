# services/purchase_ledger.py
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.product import Product
from models.purchase import Purchase, PurchaseStatus
from schemas.purchase import ShippingAddress
from services.product_store import load_users, public_profile
from utils.errors import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_RATING, MAX_RATING = 1, 5


class PurchaseLedger:
    """Append-only record of completed purchases.

    Rows are only created by checkout. Afterwards the seller may change the
    logistics fields and the buyer the review fields, nothing else.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        buyer_id: int,
        product: Product,
        quantity: int,
        payment_method: Optional[str] = None,
        shipping_address: Optional[ShippingAddress] = None,
    ) -> Purchase:
        address = shipping_address or ShippingAddress()
        purchase = Purchase(
            buyer_id=buyer_id,
            seller_id=product.seller_id,
            product_id=product.id,
            quantity=quantity,
            total_price=product.price * quantity,
            payment_method=payment_method,
            shipping_street=address.street,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_country=address.country,
            status=PurchaseStatus.PENDING,
        )
        self.db.add(purchase)
        self.db.commit()
        self.db.refresh(purchase)
        return purchase

    def get(self, purchase_id: int) -> Purchase:
        purchase = self.db.query(Purchase).filter(Purchase.id == purchase_id).first()
        if not purchase:
            raise NotFoundError("Purchase not found")
        return purchase

    def get_for_party(self, purchase_id: int, user_id: int) -> Purchase:
        purchase = self.get(purchase_id)
        if user_id not in (purchase.buyer_id, purchase.seller_id):
            raise AuthorizationError("Not authorized")
        return purchase

    def history(self, buyer_id: int) -> List[Purchase]:
        return (
            self.db.query(Purchase)
            .filter(Purchase.buyer_id == buyer_id)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
            .all()
        )

    def sales(self, seller_id: int) -> List[Purchase]:
        return (
            self.db.query(Purchase)
            .filter(Purchase.seller_id == seller_id)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
            .all()
        )

    def update_status(
        self,
        purchase_id: int,
        user_id: int,
        status: PurchaseStatus,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Purchase:
        purchase = self.get(purchase_id)
        if purchase.seller_id != user_id:
            raise AuthorizationError("Not authorized")

        old_status = purchase.status
        purchase.status = PurchaseStatus(status)
        if tracking_number:
            purchase.tracking_number = tracking_number
        if notes:
            purchase.notes = notes

        self.db.commit()
        self.db.refresh(purchase)
        logger.info("Purchase %s status %s -> %s", purchase.id, old_status.value, purchase.status.value)
        return purchase

    def add_review(self, purchase_id: int, user_id: int, rating: int, review: Optional[str] = None) -> Purchase:
        if rating is None or rating < MIN_RATING or rating > MAX_RATING:
            raise ValidationError("Rating must be between 1 and 5")

        purchase = self.get(purchase_id)
        if purchase.buyer_id != user_id:
            raise AuthorizationError("Not authorized")

        # A later review replaces the earlier one
        purchase.rating = rating
        purchase.review = review
        self.db.commit()
        self.db.refresh(purchase)
        return purchase


def hydrate_purchases(db: Session, purchases: List[Purchase]) -> List[dict]:
    """Resolve buyer, seller and product references for a response."""
    users = load_users(db, [p.buyer_id for p in purchases] + [p.seller_id for p in purchases])
    product_ids = {p.product_id for p in purchases}
    products = {
        p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
    } if product_ids else {}

    out = []
    for p in purchases:
        product = products.get(p.product_id)
        out.append({
            "id": p.id,
            "buyer_id": p.buyer_id,
            "seller_id": p.seller_id,
            "product_id": p.product_id,
            "buyer": public_profile(users.get(p.buyer_id)),
            "seller": public_profile(users.get(p.seller_id)),
            "product": {
                "id": product.id,
                "title": product.title,
                "price": product.price,
                "images": list(product.images or []),
                "category": product.category,
            } if product else None,
            "quantity": p.quantity,
            "total_price": p.total_price,
            "payment_method": p.payment_method,
            "shipping_address": {
                "street": p.shipping_street,
                "city": p.shipping_city,
                "state": p.shipping_state,
                "zip_code": p.shipping_zip_code,
                "country": p.shipping_country,
            },
            "status": p.status,
            "tracking_number": p.tracking_number,
            "notes": p.notes,
            "rating": p.rating,
            "review": p.review,
            "created_at": p.created_at,
            "updated_at": p.updated_at,
        })
    return out


def seller_summary(db: Session, user_id: int) -> dict:
    total_listings = db.query(func.count(Product.id)).filter(Product.seller_id == user_id).scalar()
    active_listings = db.query(func.count(Product.id)).filter(
        Product.seller_id == user_id,
        Product.is_available.is_(True),
        Product.is_sold.is_(False),
    ).scalar()
    # Cancelled sales count neither as sold items nor as revenue
    items_sold = db.query(func.count(Purchase.id)).filter(
        Purchase.seller_id == user_id,
        Purchase.status != PurchaseStatus.CANCELLED,
    ).scalar()
    revenue = db.query(func.coalesce(func.sum(Purchase.total_price), 0.0)).filter(
        Purchase.seller_id == user_id,
        Purchase.status != PurchaseStatus.CANCELLED,
    ).scalar()
    purchases_made = db.query(func.count(Purchase.id)).filter(Purchase.buyer_id == user_id).scalar()

    return {
        "total_listings": total_listings or 0,
        "active_listings": active_listings or 0,
        "items_sold": items_sold or 0,
        "revenue": round(float(revenue or 0), 2),
        "purchases_made": purchases_made or 0,
    }
