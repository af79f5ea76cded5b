# app/models/price_history.py

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base


class PriceHistory(Base):
    __tablename__ = "pricehist"

    prodcode = Column(
        String(15),
        ForeignKey("product.prodcode", ondelete="CASCADE"),
        primary_key=True,
    )
    effdate = Column(Date, primary_key=True)
    unitprice = Column(Numeric(10, 2), nullable=False)

    product = relationship("Product", back_populates="prices")

    __table_args__ = (
        # Point-in-time lookups: WHERE prodcode = ? AND effdate <= ? ORDER BY effdate DESC
        Index("ix_pricehist_prodcode_effdate", "prodcode", "effdate"),
        CheckConstraint("unitprice >= 0", name="ck_pricehist_unitprice_non_negative"),
    )
