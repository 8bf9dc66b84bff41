# backend/routes/purchases.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.errors import ValidationError
from models.users import User
from services.checkout import checkout
from services.purchase_ledger import PurchaseLedger, hydrate_purchases, seller_summary
from schemas.purchase import (
    CheckoutPayload, PurchaseOut, PurchaseStatusUpdate, PurchaseReview, SalesSummary
)

router = APIRouter(prefix="/purchases", tags=["Purchases"])
logger = logging.getLogger(__name__)


# Convert the caller's cart into purchases
@router.post("/checkout", response_model=List[PurchaseOut], status_code=status.HTTP_201_CREATED)
def checkout_cart(
    request: Request,
    payload: Optional[CheckoutPayload] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Both fields are optional, so a request without a body is a plain checkout
    payload = payload or CheckoutPayload()
    try:
        purchases = checkout(
            db, current_user,
            payment_method=payload.payment_method,
            shipping_address=payload.shipping_address,
        )
    except ValidationError as e:
        # Lines before the failing one are not rolled back; keep a trace for reconciliation
        write_log(
            db, user_id=current_user.id, action="CHECKOUT", resource="purchases", status="FAIL",
            ip=client_ip(request), meta={"reason": e.message, **e.context},
        )
        if e.context.get("completed"):
            logger.warning(
                "Partial checkout for user %s: purchases %s kept, product %s failed",
                current_user.id, e.context["completed"], e.context.get("product_id"),
            )
        raise

    write_log(
        db, user_id=current_user.id, action="CHECKOUT", resource="purchases", status="SUCCESS",
        ip=client_ip(request),
        meta={"purchases": [p.id for p in purchases], "total": sum(p.total_price for p in purchases)},
    )
    return hydrate_purchases(db, purchases)


# Purchases where the caller is the buyer
@router.get("/history", response_model=List[PurchaseOut])
def purchase_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return hydrate_purchases(db, PurchaseLedger(db).history(current_user.id))


# Purchases where the caller is the seller
@router.get("/sales", response_model=List[PurchaseOut])
def sales_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return hydrate_purchases(db, PurchaseLedger(db).sales(current_user.id))


@router.get("/summary", response_model=SalesSummary)
def dashboard_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return seller_summary(db, current_user.id)


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    purchase = PurchaseLedger(db).get_for_party(purchase_id, current_user.id)
    return hydrate_purchases(db, [purchase])[0]


# Seller-only logistics update
@router.put("/{purchase_id}/status", response_model=PurchaseOut)
def update_purchase_status(
    purchase_id: int,
    payload: PurchaseStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    purchase = PurchaseLedger(db).update_status(
        purchase_id, current_user.id, payload.status,
        tracking_number=payload.tracking_number, notes=payload.notes,
    )
    write_log(
        db, user_id=current_user.id, action="PURCHASE_STATUS", resource="purchases", status="SUCCESS",
        ip=client_ip(request), meta={"purchase_id": purchase.id, "new": purchase.status.value},
    )
    return hydrate_purchases(db, [purchase])[0]


# Buyer-only rating and review
@router.post("/{purchase_id}/review", response_model=PurchaseOut)
def review_purchase(
    purchase_id: int,
    payload: PurchaseReview,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    purchase = PurchaseLedger(db).add_review(purchase_id, current_user.id, payload.rating, payload.review)
    write_log(
        db, user_id=current_user.id, action="PURCHASE_REVIEW", resource="purchases", status="SUCCESS",
        ip=client_ip(request), meta={"purchase_id": purchase.id, "rating": purchase.rating},
    )
    return hydrate_purchases(db, [purchase])[0]
