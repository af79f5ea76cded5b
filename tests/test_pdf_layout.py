import re
from datetime import date, timedelta

import pytest

from app.pdf import document, generator
from app.pdf.document import LayoutUnavailableError, ReportDocument
from app.pdf.generator import (
    ReportOptions,
    build_customer_sales_pdf,
    generate_customer_sales_pdf,
    preview_customer_sales_pdf,
    report_filename,
)
from app.pdf.sections import (
    NO_DETAILS_NOTICE,
    add_detailed_transactions,
    add_sales_summary_table,
    add_transaction_table,
    ensure_room,
)
from app.schemas.report import ProcessedDetail, ProcessedTransaction, ReportCustomer


CUSTOMER = ReportCustomer(
    custno="C0001",
    custname="Acme Trading",
    address="12 Harbor Rd",
    payterm="30D",
)

PLAIN = ReportOptions(compress=False, filename_date_suffix=False)


class RecordingSink:
    def __init__(self):
        self.downloads = []
        self.previews = []

    def trigger_download(self, content, filename):
        self.downloads.append((content, filename))

    def open_preview(self, content, filename):
        self.previews.append((content, filename))


def make_transactions(count, lines=1):
    start = date(2024, 1, 1)
    transactions = []

    for index in range(count):
        details = [
            ProcessedDetail(
                prodcode=f"P{line}",
                description=f"Product {line}",
                unit="pc",
                quantity=2,
                unit_price=5.0,
                subtotal=10.0,
            )
            for line in range(lines)
        ]
        transactions.append(
            ProcessedTransaction(
                transno=f"T{index:04d}",
                date=(start + timedelta(days=index)).strftime("%m/%d/%Y"),
                raw_date=start + timedelta(days=index),
                employee="Jane Cruz",
                total_amount=f"{10.0 * lines:.2f}",
                details=details,
            )
        )

    transactions.reverse()
    return transactions


# --------------------------------------------------------------------
# LAYOUT CURSOR
# --------------------------------------------------------------------
def test_ensure_room_breaks_only_past_the_break_line():
    doc = ReportDocument()

    assert ensure_room(doc, 250) == 250
    assert doc.page_count == 1

    assert ensure_room(doc, 250.5) == 20
    assert doc.page_count == 2


def test_summary_table_returns_cursor_below_table():
    doc = ReportDocument()
    y = add_sales_summary_table(doc, make_transactions(3))

    placement = doc.tables[-1]
    assert placement.start_y == 80
    assert placement.rows == 3
    assert y == pytest.approx(placement.final_y + 15)


def test_long_summary_table_continues_on_new_pages():
    doc = ReportDocument()
    add_sales_summary_table(doc, make_transactions(120))

    placement = doc.tables[-1]
    assert placement.first_page == 1
    assert placement.last_page > 1
    assert doc.page_count == placement.last_page


def test_transaction_without_lines_gets_notice():
    sale = make_transactions(1, lines=0)[0]
    doc = ReportDocument(compress=False)

    y = add_transaction_table(doc, sale, 100)

    assert y == 104
    assert doc.tables == []
    assert NO_DETAILS_NOTICE.encode() in doc.output()


# --------------------------------------------------------------------
# DETAIL SECTIONS
# --------------------------------------------------------------------
def test_detail_sections_respect_the_cap():
    doc = ReportDocument(compress=False)
    sales = make_transactions(8)

    add_detailed_transactions(doc, sales, 100, max_detailed=3)

    assert len(doc.tables) == 3
    content = doc.output()
    assert b"5 more transactions not shown in detail" in content
    assert b"showing 3 of 8 transactions" in content


def test_no_truncation_note_under_the_cap():
    doc = ReportDocument(compress=False)
    add_detailed_transactions(doc, make_transactions(2), 100, max_detailed=3)

    assert len(doc.tables) == 2
    assert b"not shown in detail" not in doc.output()


def test_detail_sections_start_new_pages():
    doc = ReportDocument()
    add_detailed_transactions(doc, make_transactions(12, lines=2), 100, max_detailed=50)

    assert doc.page_count > 1
    # Every section header sits at or above the break line
    assert all(t.start_y - 8 <= 250 for t in doc.tables)


def test_section_header_on_the_break_line_stays_on_the_page():
    doc = ReportDocument()
    add_detailed_transactions(doc, make_transactions(1), 240, max_detailed=50)

    placement = doc.tables[0]
    assert doc.page_count == 1
    assert placement.first_page == 1
    assert placement.start_y == 258


def test_details_heading_moves_with_the_first_section():
    doc = ReportDocument()
    add_detailed_transactions(doc, make_transactions(1), 245, max_detailed=50)

    placement = doc.tables[0]
    assert doc.page_count == 2
    assert placement.first_page == 2
    # Heading at the page top, header 10 below it, table 8 below that
    assert placement.start_y == 20 + 10 + 8


def test_long_description_wraps_inside_its_column():
    short = make_transactions(1)[0]
    long_sale = short.model_copy(deep=True)
    long_sale.details[0].description = "Industrial grade stainless steel widget " * 6

    y_short = add_transaction_table(ReportDocument(), short, 100)
    y_long = add_transaction_table(ReportDocument(), long_sale, 100)

    assert y_long > y_short


def test_long_employee_name_grows_the_summary_row():
    sales = make_transactions(1)
    long_sales = [sales[0].model_copy(update={"employee": "Maria Fernanda de los Santos " * 3})]

    doc_short, doc_long = ReportDocument(), ReportDocument()
    add_sales_summary_table(doc_short, sales)
    add_sales_summary_table(doc_long, long_sales)

    assert doc_long.tables[0].final_y > doc_short.tables[0].final_y


# --------------------------------------------------------------------
# FULL DOCUMENT
# --------------------------------------------------------------------
def test_pdf_has_numbered_footer_on_every_page():
    content = build_customer_sales_pdf(CUSTOMER, make_transactions(60), PLAIN)

    assert content.startswith(b"%PDF")
    pages = re.findall(rb"Page (\d+) of (\d+)", content)
    total = int(pages[0][1])

    assert total > 1
    assert [int(n) for n, _ in pages] == list(range(1, total + 1))
    assert all(int(t) == total for _, t in pages)
    assert content.count(b"123 Business St") == total


def test_pdf_customer_panel():
    content = build_customer_sales_pdf(
        CUSTOMER,
        make_transactions(2),
        PLAIN,
        generated_on=date(2024, 6, 30),
    )

    assert b"Customer Sales Report" in content
    assert b"Acme Trading" in content
    assert b"Payment Terms: 30D" in content
    assert b"Generated: 06/30/2024" in content
    assert b"Total Transactions: 2" in content
    assert b"Total Amount: $20.00" in content


def test_download_hands_pdf_to_sink():
    sink = RecordingSink()

    result = generate_customer_sales_pdf(CUSTOMER, make_transactions(2), sink, PLAIN)

    assert result
    assert result.filename == "C0001_Sales_Report.pdf"
    content, filename = sink.downloads[0]
    assert content.startswith(b"%PDF")
    assert filename == "C0001_Sales_Report.pdf"
    assert sink.previews == []


def test_preview_uses_the_same_document():
    sink = RecordingSink()

    result = preview_customer_sales_pdf(CUSTOMER, make_transactions(2), sink, PLAIN)

    assert result
    assert sink.previews[0][0].startswith(b"%PDF")
    assert sink.downloads == []


def test_missing_table_layout_fails_without_output(monkeypatch):
    monkeypatch.setattr(document, "Table", None)
    sink = RecordingSink()

    result = generate_customer_sales_pdf(CUSTOMER, make_transactions(2), sink, PLAIN)

    assert not result
    assert result.layout_unavailable
    assert "table layout" in result.error
    assert sink.downloads == []


def test_missing_table_layout_raises_before_drawing(monkeypatch):
    monkeypatch.setattr(document, "TableStyle", None)

    with pytest.raises(LayoutUnavailableError):
        build_customer_sales_pdf(CUSTOMER, make_transactions(1), PLAIN)


def test_render_failure_is_reported_not_raised(monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("boom")

    monkeypatch.setattr(generator, "add_sales_summary_table", broken)
    sink = RecordingSink()

    result = preview_customer_sales_pdf(CUSTOMER, make_transactions(2), sink, PLAIN)

    assert not result
    assert not result.layout_unavailable
    assert result.error == "boom"
    assert sink.previews == []


# --------------------------------------------------------------------
# FILENAMES
# --------------------------------------------------------------------
def test_filename_replaces_unsafe_characters():
    filename = report_filename("C-100/β", on=date(2024, 6, 30))

    assert filename == "C_100___Sales_Report_2024-06-30.pdf"
    stem = filename.split("_Sales_Report")[0]
    assert re.fullmatch(r"[A-Za-z0-9_]+", stem)


def test_filename_without_date():
    assert report_filename("C0001", with_date=False) == "C0001_Sales_Report.pdf"
