# models/sale_details.py

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class SaleDetail(Base):
    __tablename__ = "salesdetail"

    transno = Column(String(15), ForeignKey("sales.transno", ondelete="CASCADE"), primary_key=True)
    prodcode = Column(String(15), ForeignKey("product.prodcode"), primary_key=True, index=True)

    quantity = Column(Integer, nullable=False, default=0)

    sale = relationship("Sale", back_populates="details")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_salesdetail_quantity_non_negative"),
    )
