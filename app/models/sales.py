# models/sales.py

from sqlalchemy import Column, Date, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from app.database import Base


class Sale(Base):
    __tablename__ = "sales"

    transno = Column(String(15), primary_key=True, index=True)
    salesdate = Column(Date, nullable=False, index=True)

    custno = Column(String(15), ForeignKey("customer.custno"), nullable=False, index=True)
    empno = Column(String(15), ForeignKey("employee.empno"), nullable=True)

    customer = relationship("Customer", back_populates="sales")
    employee = relationship("Employee")

    details = relationship(
        "SaleDetail",
        back_populates="sale",
        cascade="all, delete-orphan",
    )


    # Composite index for customer history ordered by date
    __table_args__ = (
        Index("ix_sales_custno_salesdate", "custno", "salesdate"),
    )
