from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import date


class PriceEntryCreate(BaseModel):
    effdate: date
    unitprice: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Unit price must be below 100 million"
    )


class PriceEntryResponse(BaseModel):
    prodcode: str
    effdate: date
    unitprice: float

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    prodcode: str = Field(..., min_length=1, max_length=15)
    description: str = Field(..., min_length=1, max_length=255)
    unit: str | None = Field(None, max_length=20)

    # Optional opening price, effective from the given date (today if omitted)
    unitprice: Decimal | None = Field(None, ge=0, lt=100_000_000)
    effdate: date | None = None
    

class ProductUpdate(BaseModel):
    description: str | None = Field(None, min_length=1, max_length=255)
    unit: str | None = Field(None, max_length=20)

class ProductResponse(BaseModel):
    prodcode: str
    description: str
    unit: str | None

    class Config:
        from_attributes = True


class ProductDetailResponse(ProductResponse):
    current_price: float | None
    prices: list[PriceEntryResponse]
