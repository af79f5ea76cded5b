# app/routers/customers.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.config import settings
from app.models.customers import Customer
from app.models.sales import Sale
from app.schemas.customer import (
    CustomerCreate,
    CustomerDetailResponse,
    CustomerResponse,
    CustomerUpdate,
)
from app.schemas.sale import CustomerSalesResponse
from app.services import report_service

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
)


def _get_customer_or_404(db: Session, custno: str) -> Customer:
    customer = db.query(Customer).filter(Customer.custno == custno).first()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    return customer


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    search: Optional[str] = Query(None),
):
    query = db.query(Customer)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Customer.custno.ilike(pattern),
                Customer.custname.ilike(pattern),
                Customer.address.ilike(pattern),
                Customer.payterm.ilike(pattern),
            )
        )

    return query.order_by(Customer.custno).all()


@router.get("/{custno}", response_model=CustomerDetailResponse)
def get_customer(
    custno: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    customer = _get_customer_or_404(db, custno)

    transaction_count = (
        db.query(func.count(Sale.transno))
        .filter(Sale.custno == custno)
        .scalar()
    )

    return CustomerDetailResponse(
        custno=customer.custno,
        custname=customer.custname,
        address=customer.address,
        payterm=customer.payterm,
        transaction_count=transaction_count,
    )


@router.get("/{custno}/sales", response_model=CustomerSalesResponse)
def list_customer_sales(
    custno: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    _get_customer_or_404(db, custno)

    sales = report_service.get_customer_sales(db, custno)
    price_book = report_service.build_price_book(db, sales, settings.REPORT_PRICE_MODE)
    transactions = report_service.process_transactions(sales, price_book)

    return CustomerSalesResponse(
        custno=custno,
        transaction_count=len(transactions),
        transactions=transactions,
    )


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    # Customer IDs are unique and immutable
    existing_customer = (
        db.query(Customer)
        .filter(Customer.custno == customer_data.custno)
        .first()
    )
    if existing_customer:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Customer ID already exists",
        )

    customer = Customer(
        custno=customer_data.custno,
        custname=customer_data.custname,
        address=customer_data.address or None,
        payterm=customer_data.payterm,
    )

    try:
        db.add(customer)
        db.commit()
        db.refresh(customer)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create customer")

    return customer


@router.put("/{custno}", response_model=CustomerResponse)
def update_customer(
    custno: str,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    customer = _get_customer_or_404(db, custno)

    if customer_data.custname is not None:
        customer.custname = customer_data.custname

    if "address" in customer_data.model_fields_set:
        customer.address = customer_data.address or None

    if "payterm" in customer_data.model_fields_set:
        customer.payterm = customer_data.payterm

    db.commit()
    db.refresh(customer)

    return customer


@router.delete("/{custno}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    custno: str,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    customer = _get_customer_or_404(db, custno)

    has_sales = db.query(Sale.transno).filter(Sale.custno == custno).first()
    if has_sales:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Customer has sales transactions and cannot be deleted",
        )

    db.delete(customer)
    db.commit()

    return None
