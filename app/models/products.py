# app/models/products.py

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.database import Base


class Product(Base):
    __tablename__ = "product"

    prodcode = Column(String(15), primary_key=True, index=True)
    description = Column(String(255), nullable=False)
    unit = Column(String(20), nullable=True)

    prices = relationship(
        "PriceHistory",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceHistory.effdate.desc()",
    )
