"""
Customer sales report PDF.

``build_customer_sales_pdf`` runs the whole layout and returns the PDF
bytes. ``generate_customer_sales_pdf`` (download) and
``preview_customer_sales_pdf`` (preview) wrap it, hand the bytes to a sink
and report success instead of raising, so callers can offer the other
path when one fails.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from app.pdf.document import LayoutUnavailableError, ReportDocument, require_table_support
from app.pdf.sections import (
    PAGE_BREAK_Y,
    PAGE_TOP_Y,
    add_company_branding,
    add_customer_details,
    add_detailed_transactions,
    add_document_title,
    add_page_footers,
    add_sales_summary_table,
)
from app.schemas.report import ProcessedTransaction

logger = logging.getLogger("app.pdf")

REPORT_TITLE = "Customer Sales Report"


@dataclass(frozen=True)
class ReportOptions:
    max_detailed: int = 50
    page_break_y: float = PAGE_BREAK_Y
    page_top_y: float = PAGE_TOP_Y
    company_name: str = "Company Name, Inc."
    company_short_name: str = "COMPANY"
    company_contact_line: str = (
        "Company Name, Inc. | 123 Business St, City, State 12345 | (555) 123-4567"
    )
    date_format: str = "%m/%d/%Y"
    filename_date_suffix: bool = True
    compress: bool = True

    @classmethod
    def from_settings(cls, settings) -> "ReportOptions":
        return cls(
            max_detailed=settings.REPORT_MAX_DETAILED_TRANSACTIONS,
            page_break_y=settings.REPORT_PAGE_BREAK_Y,
            page_top_y=settings.REPORT_PAGE_TOP_Y,
            company_name=settings.COMPANY_NAME,
            company_short_name=settings.COMPANY_SHORT_NAME,
            company_contact_line=settings.COMPANY_CONTACT_LINE,
            date_format=settings.REPORT_DATE_FORMAT,
            filename_date_suffix=settings.REPORT_FILENAME_DATE_SUFFIX,
        )


class DocumentSink(Protocol):
    def trigger_download(self, content: bytes, filename: str) -> None: ...

    def open_preview(self, content: bytes, filename: str) -> None: ...


@dataclass
class RenderResult:
    ok: bool
    filename: str | None = None
    error: str | None = None
    layout_unavailable: bool = False

    def __bool__(self) -> bool:
        return self.ok


def sanitize_custno(custno: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", custno)


def report_filename(custno: str, on: date | None = None, with_date: bool = True) -> str:
    name = f"{sanitize_custno(custno)}_Sales_Report"
    if with_date:
        name += f"_{(on or date.today()).isoformat()}"
    return f"{name}.pdf"


def build_customer_sales_pdf(
    customer,
    sales: Sequence[ProcessedTransaction],
    options: ReportOptions | None = None,
    generated_on: date | None = None,
) -> bytes:
    options = options or ReportOptions()
    generated_on = generated_on or date.today()

    # Fail before drawing anything rather than emit a report without tables
    require_table_support()

    doc = ReportDocument(
        title=f"{REPORT_TITLE} - {customer.custname}",
        author=options.company_name,
        compress=options.compress,
    )

    add_company_branding(doc, options.company_short_name)
    add_document_title(doc, REPORT_TITLE)
    add_customer_details(doc, customer, sales, generated_on, options.date_format)

    y = add_sales_summary_table(doc, sales)
    add_detailed_transactions(
        doc,
        sales,
        y,
        max_detailed=options.max_detailed,
        page_break_y=options.page_break_y,
        page_top_y=options.page_top_y,
    )

    add_page_footers(doc, options.company_contact_line)

    logger.info(
        f"Built sales report PDF for {customer.custno}: "
        f"{len(sales)} transactions, {doc.page_count} pages"
    )
    return doc.output()


def _render(customer, sales, options, emit, action: str) -> RenderResult:
    options = options or ReportOptions()
    filename = report_filename(
        customer.custno,
        with_date=options.filename_date_suffix,
    )

    try:
        content = build_customer_sales_pdf(customer, sales, options)
        emit(content, filename)
    except LayoutUnavailableError as exc:
        logger.error(f"PDF {action} failed for {customer.custno}: {exc}")
        return RenderResult(ok=False, error=str(exc), layout_unavailable=True)
    except Exception as exc:
        logger.exception(f"Error generating PDF ({action}) for {customer.custno}")
        return RenderResult(ok=False, error=str(exc))

    return RenderResult(ok=True, filename=filename)


def generate_customer_sales_pdf(
    customer,
    sales: Sequence[ProcessedTransaction],
    sink: DocumentSink,
    options: ReportOptions | None = None,
) -> RenderResult:
    return _render(customer, sales, options, sink.trigger_download, "download")


def preview_customer_sales_pdf(
    customer,
    sales: Sequence[ProcessedTransaction],
    sink: DocumentSink,
    options: ReportOptions | None = None,
) -> RenderResult:
    return _render(customer, sales, options, sink.open_preview, "preview")
