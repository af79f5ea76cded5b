"""
Section builders for the customer sales report.

Each builder draws one part of the page. Builders that depend on how much
came before take the layout cursor (mm from the top of the current page)
and return where the next section should start.
"""

from datetime import date
from typing import Sequence

from app.pdf.document import (
    BRAND_COLORS,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    CONTENT_WIDTH,
    ROW_ALT,
    WHITE,
    ReportDocument,
)
from app.schemas.report import ProcessedTransaction

PAGE_BREAK_Y = 250
PAGE_TOP_Y = 20
DETAILS_HEADING_GAP = 10

SUMMARY_COLUMNS = ["Transaction #", "Date", "Employee", "Total Amount"]
SUMMARY_WIDTHS = [40, 36, 64, 42]
DETAIL_COLUMNS = ["Product", "Description", "Quantity", "Unit Price", "Subtotal"]
DETAIL_WIDTHS = [28, 74, 22, 29, 29]

NO_DETAILS_NOTICE = "No line items recorded for this transaction."


def money(value: float | str) -> str:
    return f"${float(value):.2f}"


def ensure_room(
    doc: ReportDocument,
    y: float,
    page_break_y: float = PAGE_BREAK_Y,
    page_top_y: float = PAGE_TOP_Y,
) -> float:
    """Start a new page when the cursor is already past the break line."""
    if y > page_break_y:
        doc.add_page()
        return page_top_y
    return y


# ─── FIXED HEADER ───

def add_company_branding(doc: ReportDocument, short_name: str) -> None:
    # Logo placeholder
    doc.set_fill_color(BRAND_COLORS["primary"])
    doc.rect(MARGIN_LEFT, 10, 30, 10)
    doc.set_text_color(WHITE)
    doc.set_font("bold", 12)
    doc.text(doc.fit_text(short_name, 26), 17, 16.5)

    doc.set_text_color(BRAND_COLORS["dark"])


def add_document_title(doc: ReportDocument, title: str) -> None:
    doc.set_font("bold", 24)
    doc.text(title, 50, 20)

    doc.set_draw_color(BRAND_COLORS["primary"])
    doc.set_line_width(0.5)
    doc.line(MARGIN_LEFT, 24, MARGIN_RIGHT, 24)


def add_customer_details(
    doc: ReportDocument,
    customer,
    sales: Sequence[ProcessedTransaction],
    generated_on: date,
    date_format: str = "%m/%d/%Y",
) -> None:
    left_width = 120 - MARGIN_LEFT - 4
    right_width = MARGIN_RIGHT - 120

    doc.set_font("bold", 12)
    doc.text("Customer Details", MARGIN_LEFT, 34)
    doc.set_font("normal")
    doc.text(doc.fit_text(f"Name: {customer.custname} ({customer.custno})", left_width), MARGIN_LEFT, 42)
    doc.text(doc.fit_text(f"Address: {customer.address or 'N/A'}", left_width), MARGIN_LEFT, 50)
    doc.text(f"Payment Terms: {customer.payterm or 'N/A'}", MARGIN_LEFT, 58)

    total_amount = sum(float(sale.total_amount) for sale in sales)

    doc.set_font("bold")
    doc.text("Report Information", 120, 34)
    doc.set_font("normal")
    doc.text(f"Generated: {generated_on.strftime(date_format)}", 120, 42)
    doc.text(f"Total Transactions: {len(sales)}", 120, 50)
    doc.text(doc.fit_text(f"Total Amount: {money(total_amount)}", right_width), 120, 58)

    doc.set_draw_color(BRAND_COLORS["gray"])
    doc.set_line_width(0.2)
    doc.line(MARGIN_LEFT, 65, MARGIN_RIGHT, 65)


# ─── SUMMARY ───

def add_sales_summary_table(doc: ReportDocument, sales: Sequence[ProcessedTransaction]) -> float:
    doc.set_font("bold", 14)
    doc.text("Sales Transactions", MARGIN_LEFT, 75)

    rows = [
        [sale.transno, sale.date, sale.employee, money(sale.total_amount)]
        for sale in sales
    ]

    final_y = doc.table(
        SUMMARY_COLUMNS,
        rows,
        80,
        col_widths=SUMMARY_WIDTHS,
        font_size=10,
        cell_padding=3,
        head_fill=BRAND_COLORS["primary"],
        alternate_fill=ROW_ALT,
        right_columns=(3,),
        wrap_columns=(2,),
        margin_top=10,
    )
    return final_y + 15


# ─── DETAILS ───

def add_transaction_header(doc: ReportDocument, sale: ProcessedTransaction, y: float) -> float:
    doc.set_fill_color(BRAND_COLORS["light"])
    doc.rect(MARGIN_LEFT, y - 5, CONTENT_WIDTH, 8)

    doc.set_font("bold", 12)
    doc.set_text_color(BRAND_COLORS["dark"])
    doc.text(f"Transaction #{sale.transno} - {sale.date}", MARGIN_LEFT + 2, y)
    return y + 8


def add_transaction_table(
    doc: ReportDocument,
    sale: ProcessedTransaction,
    y: float,
    page_top_y: float = PAGE_TOP_Y,
) -> float:
    if not sale.details:
        doc.set_font("italic", 10)
        doc.set_text_color(BRAND_COLORS["gray"])
        doc.text(NO_DETAILS_NOTICE, MARGIN_LEFT + 2, y + 1)
        doc.set_text_color(BRAND_COLORS["dark"])
        return y + 4

    rows = [
        [
            detail.prodcode,
            detail.description,
            str(detail.quantity),
            money(detail.unit_price),
            money(detail.subtotal),
        ]
        for detail in sale.details
    ]

    return doc.table(
        DETAIL_COLUMNS,
        rows,
        y,
        col_widths=DETAIL_WIDTHS,
        font_size=9,
        cell_padding=2,
        head_fill=BRAND_COLORS["secondary"],
        bold_columns=(4,),
        right_columns=(2, 3, 4),
        wrap_columns=(0, 1),
        margin_top=page_top_y,
    )


def add_truncation_note(doc: ReportDocument, shown: int, total: int, y: float) -> float:
    omitted = total - shown
    doc.set_font("italic", 10)
    doc.set_text_color(BRAND_COLORS["accent"])
    doc.text(
        f"{omitted} more transaction{'s' if omitted != 1 else ''} not shown in detail "
        f"(showing {shown} of {total} transactions).",
        MARGIN_LEFT,
        y,
    )
    doc.set_text_color(BRAND_COLORS["dark"])
    return y + 6


def add_detailed_transactions(
    doc: ReportDocument,
    sales: Sequence[ProcessedTransaction],
    start_y: float,
    *,
    max_detailed: int = 50,
    page_break_y: float = PAGE_BREAK_Y,
    page_top_y: float = PAGE_TOP_Y,
) -> float:
    """Detail header and line-item table per transaction, newest first.

    Only the first ``max_detailed`` transactions get a section; when there
    are more, one closing note says how many were left out.
    """
    # The heading moves with the first section header below it
    y = start_y
    if y + DETAILS_HEADING_GAP > page_break_y:
        doc.add_page()
        y = page_top_y

    doc.set_font("bold", 14)
    doc.set_text_color(BRAND_COLORS["dark"])
    doc.text("Transaction Details", MARGIN_LEFT, y)
    y += DETAILS_HEADING_GAP

    detailed = list(sales[:max(max_detailed, 0)])

    for index, sale in enumerate(detailed):
        y = ensure_room(doc, y, page_break_y, page_top_y)
        y = add_transaction_header(doc, sale, y)
        y = add_transaction_table(doc, sale, y, page_top_y)

        last = index == len(detailed) - 1
        y += 5 if last else 20

    if len(sales) > len(detailed):
        y = ensure_room(doc, y + 5, page_break_y, page_top_y)
        y = add_truncation_note(doc, len(detailed), len(sales), y)

    return y


# ─── FOOTER ───

def add_page_footers(doc: ReportDocument, contact_line: str) -> None:
    """Second pass over the finished document: rule, contact line, page X of N."""

    def stamp(doc: ReportDocument, page_number: int, page_count: int) -> None:
        doc.set_font("normal", 8)
        doc.set_text_color((100, 100, 100))
        page_text = f"Page {page_number} of {page_count}"
        doc.text(page_text, MARGIN_RIGHT - doc.text_width(page_text), 285)

        doc.set_draw_color(BRAND_COLORS["primary"])
        doc.set_line_width(0.1)
        doc.line(MARGIN_LEFT, 280, MARGIN_RIGHT, 280)

        doc.set_text_color(BRAND_COLORS["gray"])
        doc.text(contact_line, MARGIN_LEFT, 285)

    doc.decorate_pages(stamp)
