# =========================================================
# CUSTOMER SALES REPORT SERVICE
#
# custno
#   -> customer record
#   -> sales joined with employee, line items and products
#   -> unit price per (product, sale date) from price history
#   -> processed transactions: subtotals, totals, newest first
#
# Prices are point-in-time: a line item is priced with the
# latest price history entry effective on or before the
# date of its own sale, or 0.00 when there is none.
# =========================================================

import logging
from bisect import bisect_right
from datetime import date
from typing import Callable, Iterable, Mapping, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.models.customers import Customer
from app.models.employees import Employee
from app.models.price_history import PriceHistory
from app.models.sales import Sale
from app.models.sale_details import SaleDetail
from app.schemas.report import (
    CustomerSalesReport,
    ProcessedDetail,
    ProcessedTransaction,
    ReportCustomer,
)
from app.services.errors import ReportRetrievalError

logger = logging.getLogger("app.reports")

# (prodcode, sale date) -> unit price
PriceBook = dict[tuple[str, date], float]
AsOf = Union[date, Callable[[str], date]]

NOT_AVAILABLE = "N/A"


# =========================================================
# STORE QUERIES
# =========================================================
def list_customers(db: Session):
    try:
        return (
            db.query(Customer.custno, Customer.custname)
            .order_by(Customer.custname, Customer.custno)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching customers: {exc}")
        raise ReportRetrievalError("Failed to load customers", stage="customers") from exc


def get_customer(db: Session, custno: str) -> Customer | None:
    try:
        return db.query(Customer).filter(Customer.custno == custno).first()
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching customer {custno}: {exc}")
        raise ReportRetrievalError(
            "Failed to load customer", stage="customer", custno=custno
        ) from exc


def get_customer_sales(db: Session, custno: str) -> list[Sale]:
    """Every sale of one customer with its employee, line items and products, newest first."""
    try:
        return (
            db.query(Sale)
            .options(
                joinedload(Sale.employee),
                joinedload(Sale.details).joinedload(SaleDetail.product),
            )
            .filter(Sale.custno == custno)
            .order_by(Sale.salesdate.desc(), Sale.transno)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching sales for {custno}: {exc}")
        raise ReportRetrievalError(
            "Failed to load sales transactions", stage="sales", custno=custno
        ) from exc


def get_price_as_of(db: Session, prodcode: str, on: date):
    row = (
        db.query(PriceHistory.unitprice)
        .filter(
            PriceHistory.prodcode == prodcode,
            PriceHistory.effdate <= on,
        )
        .order_by(PriceHistory.effdate.desc())
        .first()
    )
    return row.unitprice if row else None


def get_price_histories(db: Session, product_codes: Iterable[str], up_to: date):
    """Price history of several products in one query, oldest entry first per product."""
    product_codes = list(product_codes)
    histories: dict[str, list[tuple[date, float]]] = {code: [] for code in product_codes}

    if not product_codes:
        return histories

    rows = (
        db.query(PriceHistory.prodcode, PriceHistory.effdate, PriceHistory.unitprice)
        .filter(
            PriceHistory.prodcode.in_(product_codes),
            PriceHistory.effdate <= up_to,
        )
        .order_by(PriceHistory.prodcode, PriceHistory.effdate)
        .all()
    )

    for row in rows:
        histories[row.prodcode].append((row.effdate, float(row.unitprice)))

    return histories


def price_on(history: list[tuple[date, float]], on: date) -> float:
    """Unit price in effect on ``on`` from an ascending history, 0.0 before the first entry."""
    index = bisect_right(history, on, key=lambda entry: entry[0])
    return history[index - 1][1] if index else 0.0


# =========================================================
# PRICE RESOLUTION
# =========================================================
def extract_product_codes(sales: Iterable[Sale]) -> list[str]:
    product_codes: list[str] = []
    seen = set()

    for sale in sales:
        for detail in sale.details or []:
            if detail.prodcode and detail.prodcode not in seen:
                seen.add(detail.prodcode)
                product_codes.append(detail.prodcode)

    return product_codes


def resolve_latest_prices(
    db: Session,
    product_codes: Iterable[str],
    as_of: AsOf,
    lookup=get_price_as_of,
) -> dict[str, float]:
    """Latest unit price per product effective on or before ``as_of``.

    ``as_of`` is either one date for every product or a callable giving
    the date for each product code. Products are looked up one at a time.
    A product without history, or whose lookup fails, is priced at 0.0 so
    a single bad product never sinks the whole report.
    """
    prices: dict[str, float] = {}

    for prodcode in product_codes:
        on = as_of(prodcode) if callable(as_of) else as_of

        try:
            price = lookup(db, prodcode, on)
        except SQLAlchemyError as exc:
            logger.warning(f"Error fetching price for {prodcode} as of {on}: {exc}")
            db.rollback()
            price = None

        prices[prodcode] = float(price) if price is not None else 0.0

    return prices


def build_price_book(
    db: Session,
    sales: Iterable[Sale],
    mode: str = "as_of_sale_date",
) -> PriceBook:
    sales = list(sales)
    book: PriceBook = {}

    if mode == "latest":
        # Legacy behaviour: newest price overall, whatever the sale date
        latest = resolve_latest_prices(db, extract_product_codes(sales), date.max)
        for sale in sales:
            for detail in sale.details or []:
                book[(detail.prodcode, sale.salesdate)] = latest.get(detail.prodcode, 0.0)
        return book

    codes_by_date: dict[date, list[str]] = {}
    for sale in sales:
        codes = codes_by_date.setdefault(sale.salesdate, [])
        for prodcode in extract_product_codes([sale]):
            if prodcode not in codes:
                codes.append(prodcode)

    if not codes_by_date:
        return book

    try:
        histories = get_price_histories(db, extract_product_codes(sales), max(codes_by_date))
    except SQLAlchemyError as exc:
        logger.warning(f"Batch price lookup failed, pricing one product at a time: {exc}")
        db.rollback()

        for on, codes in codes_by_date.items():
            for prodcode, price in resolve_latest_prices(db, codes, on).items():
                book[(prodcode, on)] = price
        return book

    for on, codes in codes_by_date.items():
        for prodcode in codes:
            book[(prodcode, on)] = price_on(histories[prodcode], on)

    return book


# =========================================================
# PROCESSING
# =========================================================
def employee_display_name(employee: Employee | None) -> str:
    if employee is None:
        return NOT_AVAILABLE
    name = f"{employee.firstname or ''} {employee.lastname or ''}".strip()
    return name or NOT_AVAILABLE


def format_sale_date(value: date, date_format: str | None = None) -> str:
    return value.strftime(date_format or settings.REPORT_DATE_FORMAT)


def process_transactions(
    sales: Iterable[Sale],
    price_book: Mapping[tuple[str, date], float],
    date_format: str | None = None,
) -> list[ProcessedTransaction]:
    processed = []

    for sale in sales:
        # Sum unrounded subtotals; round only the final total
        total = 0.0
        details = []

        for detail in sale.details or []:
            unit_price = price_book.get((detail.prodcode, sale.salesdate), 0.0)
            quantity = detail.quantity or 0
            subtotal = unit_price * quantity
            total += subtotal

            product = detail.product
            details.append(
                ProcessedDetail(
                    prodcode=detail.prodcode,
                    description=(product.description if product and product.description else NOT_AVAILABLE),
                    unit=product.unit if product else None,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
            )

        processed.append(
            ProcessedTransaction(
                transno=sale.transno,
                date=format_sale_date(sale.salesdate, date_format),
                raw_date=sale.salesdate,
                employee=employee_display_name(sale.employee),
                total_amount=f"{total:.2f}",
                details=details,
            )
        )

    # Newest first; sort is stable so same-day sales keep fetch order
    processed.sort(key=lambda transaction: transaction.raw_date, reverse=True)
    return processed


def report_total(transactions: Iterable[ProcessedTransaction]) -> str:
    return f"{sum(float(t.total_amount) for t in transactions):.2f}"


# =========================================================
# REPORT PIPELINE
# =========================================================
def fetch_report(
    db: Session,
    custno: str,
    *,
    price_mode: str | None = None,
    date_format: str | None = None,
) -> CustomerSalesReport:
    customer = get_customer(db, custno)

    if customer is None:
        logger.info(f"Sales report requested for unknown customer {custno}")
        return CustomerSalesReport(status="not_found", custno=custno)

    report_customer = ReportCustomer.model_validate(customer)

    sales = get_customer_sales(db, custno)

    if not sales:
        logger.info(f"No sales transactions found for customer {custno}")
        return CustomerSalesReport(
            status="no_data",
            custno=custno,
            customer=report_customer,
        )

    price_book = build_price_book(
        db,
        sales,
        price_mode or settings.REPORT_PRICE_MODE,
    )

    transactions = process_transactions(sales, price_book, date_format)

    logger.info(
        f"Sales report for {custno}: "
        f"{len(transactions)} transactions, "
        f"{len(extract_product_codes(sales))} products"
    )

    return CustomerSalesReport(
        status="ok",
        custno=custno,
        customer=report_customer,
        transactions=transactions,
        total_amount=report_total(transactions),
    )
