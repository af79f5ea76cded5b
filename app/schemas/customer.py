# schemas/customer.py

from pydantic import BaseModel, Field
from typing import Literal

PaymentTerm = Literal["30D", "45D", "COD"]


class CustomerCreate(BaseModel):
    custno: str = Field(..., min_length=1, max_length=15, description="Customer ID")
    custname: str = Field(..., min_length=1, max_length=100)
    address: str | None = Field(None, max_length=255)
    payterm: PaymentTerm | None = None


class CustomerUpdate(BaseModel):
    custname: str | None = Field(None, min_length=1, max_length=100)
    address: str | None = Field(None, max_length=255)
    payterm: PaymentTerm | None = None


class CustomerResponse(BaseModel):
    custno: str
    custname: str
    address: str | None
    payterm: str | None

    class Config:
        from_attributes = True


class CustomerDetailResponse(CustomerResponse):
    transaction_count: int
