# services/availability.py
from models.product import Product
from utils.errors import ValidationError


def is_purchasable(product: Product) -> bool:
    return bool(product.is_available) and not product.is_sold


def ensure_purchasable(product: Product, requester_id: int, check_owner: bool = True) -> None:
    """Raise ValidationError unless ``requester_id`` may buy ``product``.

    Cart-add runs the full check. Checkout passes ``check_owner=False``:
    self-purchase is only rejected when the line is first added.
    """
    if product is None or not is_purchasable(product):
        raise ValidationError("Product not available", product_id=getattr(product, "id", None))
    if check_owner and product.seller_id == requester_id:
        raise ValidationError("Cannot add your own product to cart", product_id=product.id)
