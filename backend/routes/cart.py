# backend/routes/cart.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from models.users import User
from services.cart_store import CartStore, hydrate_cart
from schemas.cart import CartAddItem, CartUpdateItem, CartOut

router = APIRouter(prefix="/cart", tags=["Cart"])


# Fetch the caller's cart, creating an empty one on first access
@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = CartStore(db).get_or_create(current_user.id)
    return hydrate_cart(db, cart)


@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = CartStore(db).add_item(current_user, payload.product_id, payload.quantity)
    out = hydrate_cart(db, cart)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "quantity": payload.quantity, "total": out["total"]},
    )
    return out


# A quantity below 1 removes the line instead of storing it
@router.put("/update/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    carts = CartStore(db)
    if payload.quantity < 1:
        carts.get_item(current_user.id, item_id)
        cart = carts.remove_item(current_user.id, item_id)
        action = "CART_REMOVE"
    else:
        cart = carts.update_item(current_user.id, item_id, payload.quantity)
        action = "CART_UPDATE"

    out = hydrate_cart(db, cart)
    write_log(
        db,
        user_id=current_user.id,
        action=action,
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": item_id, "quantity": payload.quantity, "total": out["total"]},
    )
    return out


@router.delete("/remove/{item_id}", response_model=CartOut)
def remove_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = CartStore(db).remove_item(current_user.id, item_id)
    out = hydrate_cart(db, cart)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_REMOVE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": item_id, "cart_items": len(out["items"])},
    )
    return out


@router.delete("/clear", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = CartStore(db).clear(current_user.id)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_CLEAR",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
    )
    return hydrate_cart(db, cart)
