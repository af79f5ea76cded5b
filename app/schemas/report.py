# schemas/report.py

from pydantic import BaseModel
from datetime import date
from typing import List, Literal


class CustomerOption(BaseModel):
    custno: str
    custname: str

    class Config:
        from_attributes = True


class ReportCustomer(BaseModel):
    custno: str
    custname: str
    address: str | None = None
    payterm: str | None = None

    class Config:
        from_attributes = True


class ProcessedDetail(BaseModel):
    prodcode: str
    description: str
    unit: str | None
    quantity: int
    unit_price: float
    subtotal: float


class ProcessedTransaction(BaseModel):
    transno: str
    date: str
    raw_date: date
    employee: str
    total_amount: str
    details: List[ProcessedDetail]


class CustomerSalesReport(BaseModel):
    status: Literal["ok", "not_found", "no_data"]
    custno: str
    customer: ReportCustomer | None = None
    transactions: List[ProcessedTransaction] = []
    total_amount: str = "0.00"
