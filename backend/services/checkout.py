# services/checkout.py
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from models.product import Product
from models.purchase import Purchase
from models.users import User
from schemas.purchase import ShippingAddress
from services.availability import is_purchasable
from services.cart_store import CartStore
from services.purchase_ledger import PurchaseLedger
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def checkout(
    db: Session,
    buyer: User,
    payment_method: Optional[str] = None,
    shipping_address: Optional[ShippingAddress] = None,
) -> List[Purchase]:
    """Turn every line of the buyer's cart into a purchase.

    Lines are processed in cart order and each one is committed on its own:
    re-check the product, record the purchase, mark the product sold. The
    first unavailable product stops the loop with a ValidationError. Lines
    already processed stay purchased and sold, and the cart is not cleared.
    The cart is emptied only after every line went through.
    """
    carts = CartStore(db)
    ledger = PurchaseLedger(db)

    lines = carts.lines(buyer.id)
    if not lines:
        raise ValidationError("Cart is empty")

    purchases: List[Purchase] = []
    for line in lines:
        product = db.query(Product).filter(Product.id == line.product_id).first()
        if product is None:
            raise ValidationError(
                f"Product #{line.product_id} is no longer available",
                product_id=line.product_id, completed=[p.id for p in purchases],
            )
        if not is_purchasable(product):
            raise ValidationError(
                f'Product "{product.title}" is no longer available',
                product_id=product.id, completed=[p.id for p in purchases],
            )

        purchase = ledger.record(
            buyer.id, product, line.quantity,
            payment_method=payment_method, shipping_address=shipping_address,
        )
        purchases.append(purchase)

        product.is_sold = True
        product.sold_to_id = buyer.id
        product.sold_at = datetime.now(timezone.utc)
        db.commit()
        logger.info("Product %s sold to user %s (purchase %s)", product.id, buyer.id, purchase.id)

    carts.clear(buyer.id)
    return purchases
