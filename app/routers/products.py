# app/routers/products.py

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.models.price_history import PriceHistory
from app.models.products import Product
from app.models.sale_details import SaleDetail
from app.schemas.product import (
    PriceEntryCreate,
    PriceEntryResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductUpdate,
    ProductResponse,
)
from app.services.report_service import get_price_as_of

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


def _get_product_or_404(db: Session, prodcode: str) -> Product:
    product = db.query(Product).filter(Product.prodcode == prodcode).first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    return product


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    existing_product = (
        db.query(Product)
        .filter(Product.prodcode == product_data.prodcode)
        .first()
    )
    if existing_product:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this code already exists",
        )

    product = Product(
        prodcode=product_data.prodcode,
        description=product_data.description,
        unit=product_data.unit,
    )

    try:
        db.add(product)

        # Opening price becomes the first price history entry
        if product_data.unitprice is not None:
            db.add(
                PriceHistory(
                    prodcode=product.prodcode,
                    effdate=product_data.effdate or date.today(),
                    unitprice=product_data.unitprice,
                )
            )

        db.commit()
        db.refresh(product)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create product")

    return product


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    search: Optional[str] = Query(None),
):
    query = db.query(Product)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Product.prodcode.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    return query.order_by(Product.prodcode).all()


@router.get("/{prodcode}", response_model=ProductDetailResponse)
def get_product(
    prodcode: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    product = _get_product_or_404(db, prodcode)

    current_price = get_price_as_of(db, prodcode, date.today())

    return ProductDetailResponse(
        prodcode=product.prodcode,
        description=product.description,
        unit=product.unit,
        current_price=float(current_price) if current_price is not None else None,
        prices=[PriceEntryResponse.model_validate(p) for p in product.prices],
    )


@router.put("/{prodcode}", response_model=ProductResponse)
def update_product(
    prodcode: str,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    product = _get_product_or_404(db, prodcode)

    if product_data.description is not None:
        product.description = product_data.description

    if "unit" in product_data.model_fields_set:
        product.unit = product_data.unit

    db.commit()
    db.refresh(product)

    return product


@router.delete("/{prodcode}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    prodcode: str,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    product = _get_product_or_404(db, prodcode)

    used_in_sales = (
        db.query(SaleDetail.transno)
        .filter(SaleDetail.prodcode == prodcode)
        .first()
    )
    if used_in_sales:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product appears in sales transactions and cannot be deleted",
        )

    db.delete(product)
    db.commit()

    return None


# =========================================================
# PRICE HISTORY
# =========================================================

@router.get("/{prodcode}/prices", response_model=list[PriceEntryResponse])
def list_prices(
    prodcode: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _get_product_or_404(db, prodcode)

    return (
        db.query(PriceHistory)
        .filter(PriceHistory.prodcode == prodcode)
        .order_by(PriceHistory.effdate.desc())
        .all()
    )


@router.post(
    "/{prodcode}/prices",
    response_model=PriceEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_price(
    prodcode: str,
    price_data: PriceEntryCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    _get_product_or_404(db, prodcode)

    existing_entry = (
        db.query(PriceHistory)
        .filter(
            PriceHistory.prodcode == prodcode,
            PriceHistory.effdate == price_data.effdate,
        )
        .first()
    )
    if existing_entry:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A price is already recorded for this effective date",
        )

    entry = PriceHistory(
        prodcode=prodcode,
        effdate=price_data.effdate,
        unitprice=price_data.unitprice,
    )

    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to record price")

    return entry
