from unittest.mock import patch

from conftest import auth_headers, make_user
from app.pdf import document
from app.services.errors import ReportRetrievalError


# --------------------------------------------------------------------
# CUSTOMER PICKER
# --------------------------------------------------------------------
def test_report_customers_requires_login(client, sales_data):
    response = client.get("/reports/customers")
    assert response.status_code == 401


def test_report_customers_lists_id_and_name(client, sales_data, staff):
    response = client.get("/reports/customers", headers=auth_headers(staff))

    assert response.status_code == 200
    assert response.json() == [
        {"custno": "C0001", "custname": "Acme Trading"},
        {"custno": "C0002", "custname": "Blue Lantern Supply"},
    ]


def test_report_customers_unavailable(client, sales_data, staff):
    with patch(
        "app.services.report_service.list_customers",
        side_effect=ReportRetrievalError("Failed to load customers", stage="customers"),
    ):
        response = client.get("/reports/customers", headers=auth_headers(staff))

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to load customer data"


def test_blocked_user_cannot_read_reports(client, sales_data, db):
    blocked = make_user(db, "blocked@example.com", role="blocked")

    response = client.get("/reports/customers", headers=auth_headers(blocked))

    assert response.status_code == 403
    assert response.json()["detail"] == "Your account has been blocked"


# --------------------------------------------------------------------
# REPORT DATA
# --------------------------------------------------------------------
def test_report_json(client, sales_data, staff):
    response = client.get("/reports/customers/C0001", headers=auth_headers(staff))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["total_amount"] == "66.00"
    assert [t["transno"] for t in body["transactions"]] == ["T0002", "T0001"]
    assert body["transactions"][0]["details"][0]["subtotal"] == 36.0


def test_report_json_unknown_customer(client, sales_data, staff):
    response = client.get("/reports/customers/NOPE", headers=auth_headers(staff))

    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found"


def test_report_json_without_sales(client, sales_data, staff):
    response = client.get("/reports/customers/C0002", headers=auth_headers(staff))

    assert response.status_code == 200
    assert response.json()["status"] == "no_data"
    assert response.json()["transactions"] == []


def test_report_retrieval_failure(client, sales_data, staff):
    with patch(
        "app.services.report_service.fetch_report",
        side_effect=ReportRetrievalError("boom", stage="sales", custno="C0001"),
    ):
        response = client.get("/reports/customers/C0001/pdf", headers=auth_headers(staff))

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate report"


# --------------------------------------------------------------------
# PDF
# --------------------------------------------------------------------
def test_pdf_download(client, sales_data, staff):
    response = client.get("/reports/customers/C0001/pdf", headers=auth_headers(staff))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"].startswith(
        'attachment; filename="C0001_Sales_Report_'
    )
    assert response.content.startswith(b"%PDF")


def test_pdf_preview_is_inline(client, sales_data, staff):
    response = client.get("/reports/customers/C0001/preview", headers=auth_headers(staff))

    assert response.status_code == 200
    assert response.headers["content-disposition"].startswith("inline;")
    assert response.content.startswith(b"%PDF")


def test_pdf_without_sales(client, sales_data, staff):
    response = client.get("/reports/customers/C0002/pdf", headers=auth_headers(staff))

    assert response.status_code == 404
    assert response.json()["detail"] == "No sales transactions found for this customer"


def test_pdf_unknown_customer(client, sales_data, staff):
    response = client.get("/reports/customers/NOPE/preview", headers=auth_headers(staff))

    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found"


def test_pdf_without_table_layout(client, sales_data, staff, monkeypatch):
    monkeypatch.setattr(document, "Table", None)

    response = client.get("/reports/customers/C0001/pdf", headers=auth_headers(staff))

    assert response.status_code == 500
    assert response.json()["detail"] == (
        "PDF generation failed - table layout support is unavailable"
    )


def test_pdf_render_failure_suggests_preview(client, sales_data, staff):
    with patch(
        "app.pdf.generator.add_customer_details",
        side_effect=ValueError("bad layout"),
    ):
        response = client.get("/reports/customers/C0001/pdf", headers=auth_headers(staff))

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate PDF. Try the preview instead."
