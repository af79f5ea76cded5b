# app/services/errors.py


class ReportError(Exception):
    """Base class for failures while building a customer sales report.

    ``stage`` names the step that failed (customers, customer, sales,
    prices, render) and ``custno`` the customer the report was for, so
    every log line and error response can say where things went wrong.
    """

    def __init__(self, message: str, *, stage: str, custno: str | None = None):
        super().__init__(message)
        self.stage = stage
        self.custno = custno

    def __str__(self) -> str:
        base = super().__str__()
        if self.custno is None:
            return f"[{self.stage}] {base}"
        return f"[{self.stage}] {base} (custno={self.custno})"


class ReportRetrievalError(ReportError):
    """A backing-store query failed; no partial report may be shown."""
