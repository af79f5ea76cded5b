# schemas/sale.py

from pydantic import BaseModel
from typing import List

from app.schemas.report import ProcessedTransaction


class CustomerSalesResponse(BaseModel):
    custno: str
    transaction_count: int
    transactions: List[ProcessedTransaction]
