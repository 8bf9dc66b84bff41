# services/cart_store.py
import logging
from typing import List

from sqlalchemy.orm import Session

from models.cart import Cart, CartItem
from models.product import Product
from models.users import User
from services.availability import ensure_purchasable
from services.product_store import hydrate_products
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class CartStore:
    """Per-user carts, keyed by user id.

    Every cart mutation goes through this class. Lines only store the product
    id; use ``hydrate_cart`` to resolve them for a response.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: int) -> Cart:
        cart = self.db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart:
            cart = Cart(user_id=user_id)
            self.db.add(cart)
            self.db.commit()
            self.db.refresh(cart)
        return cart

    def lines(self, user_id: int) -> List[CartItem]:
        cart = self.get_or_create(user_id)
        return (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart.id)
            .order_by(CartItem.id)
            .all()
        )

    def add_item(self, user: User, product_id: int, quantity: int = 1) -> Cart:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.db.query(Product).filter(Product.id == product_id).first()
        ensure_purchasable(product, user.id)

        cart = self.get_or_create(user.id)
        item = self.db.query(CartItem).filter(
            CartItem.cart_id == cart.id, CartItem.product_id == product_id
        ).first()

        if item:
            item.quantity += quantity
        else:
            item = CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity)
            self.db.add(item)

        self.db.commit()
        self.db.refresh(cart)
        logger.debug("Cart %s: product %s +%s", cart.id, product_id, quantity)
        return cart

    def get_item(self, user_id: int, item_id: int) -> CartItem:
        cart = self.get_or_create(user_id)
        item = self.db.query(CartItem).filter(
            CartItem.id == item_id, CartItem.cart_id == cart.id
        ).first()
        if not item:
            raise NotFoundError("Item not found in cart")
        return item

    def update_item(self, user_id: int, item_id: int, quantity: int) -> Cart:
        item = self.get_item(user_id, item_id)
        cart = item.cart

        item.quantity = quantity
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def remove_item(self, user_id: int, item_id: int) -> Cart:
        cart = self.get_or_create(user_id)
        # Removing a line that is not there leaves the cart as it is
        self.db.query(CartItem).filter(
            CartItem.id == item_id, CartItem.cart_id == cart.id
        ).delete(synchronize_session=False)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def clear(self, user_id: int) -> Cart:
        cart = self.get_or_create(user_id)
        self.db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
        self.db.commit()
        self.db.refresh(cart)
        return cart


def hydrate_cart(db: Session, cart: Cart) -> dict:
    """Join each cart line with its full product data and compute totals."""
    items = (
        db.query(CartItem)
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
        .all()
    )
    product_ids = [it.product_id for it in items]
    products = db.query(Product).filter(Product.id.in_(product_ids)).all() if product_ids else []
    by_id = {p["id"]: p for p in hydrate_products(db, products)}

    items_out = []
    total = 0.0
    for it in items:
        product = by_id.get(it.product_id)
        line_total = round(product["price"] * it.quantity, 2) if product else 0.0
        total += line_total
        items_out.append({
            "id": it.id,
            "product_id": it.product_id,
            "product": product,
            "quantity": it.quantity,
            "line_total": line_total,
            "added_at": it.added_at,
        })

    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "items": items_out,
        "item_count": sum(it.quantity for it in items),
        "total": round(total, 2),
        "updated_at": cart.updated_at,
    }
