# app/models/customers.py

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from app.database import Base


PAYMENT_TERMS = ("30D", "45D", "COD")


class Customer(Base):
    __tablename__ = "customer"

    custno = Column(String(15), primary_key=True, index=True)
    custname = Column(String(100), nullable=False, index=True)
    address = Column(String(255), nullable=True)
    payterm = Column(String(10), nullable=True)

    sales = relationship("Sale", back_populates="customer")

    __table_args__ = (
        CheckConstraint(
            f"payterm IS NULL OR payterm IN ({', '.join(repr(term) for term in PAYMENT_TERMS)})",
            name="ck_customer_payterm_valid",
        ),
    )
