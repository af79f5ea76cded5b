# =========================================================
# CUSTOMER SALES REPORTS
#
# GET /reports/customers                  customer picker
# GET /reports/customers/{custno}         report data (JSON)
# GET /reports/customers/{custno}/pdf     PDF download
# GET /reports/customers/{custno}/preview PDF opened inline
#
# Data retrieval failures never reach the renderer; render
# failures come back as a failed result, never as a crash.
# =========================================================

import logging
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_current_user
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.pdf.generator import (
    ReportOptions,
    generate_customer_sales_pdf,
    preview_customer_sales_pdf,
)
from app.schemas.report import CustomerOption, CustomerSalesReport
from app.services import report_service
from app.services.errors import ReportRetrievalError

router = APIRouter(prefix="/reports", tags=["Reports"])

logger = logging.getLogger("app.reports")

PDF_MEDIA_TYPE = "application/pdf"


class ResponseSink:
    """Collects the rendered PDF and turns it into an HTTP response."""

    def __init__(self):
        self.response = None

    def _respond(self, content: bytes, filename: str, disposition: str):
        self.response = StreamingResponse(
            BytesIO(content),
            media_type=PDF_MEDIA_TYPE,
            headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
        )

    def trigger_download(self, content: bytes, filename: str) -> None:
        self._respond(content, filename, "attachment")

    def open_preview(self, content: bytes, filename: str) -> None:
        self._respond(content, filename, "inline")


# =========================================================
# HELPERS
# =========================================================
def _load_report(db: Session, custno: str) -> CustomerSalesReport:
    try:
        return report_service.fetch_report(db, custno)
    except ReportRetrievalError as exc:
        logger.error(f"Report generation failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate report",
        )


def _require_report_data(report: CustomerSalesReport) -> CustomerSalesReport:
    if report.status == "not_found":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    if report.status == "no_data":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No sales transactions found for this customer",
        )

    return report


def _render_failed(result, fallback_detail: str):
    if result.layout_unavailable:
        detail = "PDF generation failed - table layout support is unavailable"
    else:
        detail = fallback_detail

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )


# =========================================================
# ROUTES
# =========================================================
@router.get("/customers", response_model=list[CustomerOption])
def report_customers(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        customers = report_service.list_customers(db)
    except ReportRetrievalError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to load customer data",
        )

    return [
        CustomerOption(custno=row.custno, custname=row.custname)
        for row in customers
    ]


@router.get("/customers/{custno}", response_model=CustomerSalesReport)
def customer_sales_report(
    custno: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    report = _load_report(db, custno)

    if report.status == "not_found":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    return report


@router.get("/customers/{custno}/pdf")
@limiter.limit("10/minute")
def download_customer_sales_pdf(
    request: Request,
    custno: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    report = _require_report_data(_load_report(db, custno))

    sink = ResponseSink()
    result = generate_customer_sales_pdf(
        report.customer,
        report.transactions,
        sink,
        ReportOptions.from_settings(settings),
    )

    if not result:
        raise _render_failed(result, "Failed to generate PDF. Try the preview instead.")

    logger.info(f"{current_user.email} downloaded {result.filename}")
    return sink.response


@router.get("/customers/{custno}/preview")
@limiter.limit("10/minute")
def preview_customer_sales_pdf_route(
    request: Request,
    custno: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    report = _require_report_data(_load_report(db, custno))

    sink = ResponseSink()
    result = preview_customer_sales_pdf(
        report.customer,
        report.transactions,
        sink,
        ReportOptions.from_settings(settings),
    )

    if not result:
        raise _render_failed(result, "Failed to preview PDF")

    return sink.response
