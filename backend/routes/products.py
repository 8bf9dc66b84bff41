# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request, UploadFile, File, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, get_optional_user
from utils.audit import write_log, client_ip
from models.users import User
from models.product import CATEGORIES, CONDITIONS
from services import product_store
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])


def _out(db: Session, product) -> dict:
    return product_store.hydrate_products(db, [product])[0]


# =========================
# BROWSE / SEARCH
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    category: Optional[str] = Query(None, description="Category name or 'all'"),
    search: Optional[str] = Query(None, description="Text in title, description or tags"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return product_store.search_products(
        db, category=category, search=search,
        min_price=min_price, max_price=max_price, page=page, limit=limit,
    )


@router.get("/categories", response_model=List[str])
def get_categories():
    return CATEGORIES


@router.get("/conditions", response_model=List[str])
def get_conditions():
    return CONDITIONS


# Every listing of the caller, sold ones included
@router.get("/user/my-listings", response_model=List[product_schemas.ProductOut])
def my_listings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    products = product_store.list_seller_products(db, current_user.id)
    return product_store.hydrate_products(db, products)


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    product = product_store.view_product(db, product_id, viewer)
    return _out(db, product)


@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = product_store.create_product(db, current_user, payload)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "price": product.price},
    )
    return _out(db, product)


@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = product_store.update_product(db, product_id, current_user, payload)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id},
    )
    return _out(db, product)


@router.post("/{product_id}/images", response_model=product_schemas.ProductOut)
def upload_product_image(
    product_id: int,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = product_store.add_product_image(db, product_id, current_user, file)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_IMAGE_UPLOAD", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "images": len(product.images)},
    )
    return _out(db, product)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product_store.delete_product(db, product_id, current_user)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id},
    )
    return {"message": "Product deleted successfully"}
