"""
Paginated PDF canvas for reports.

Wraps a reportlab canvas so layout code can work the way a printed page is
read: millimetres measured from the top-left corner, y growing downwards,
text positioned by its baseline. Font, colour and line settings persist
across page breaks.

Finished pages are held back instead of written out, so a final pass can
decorate every page once the total page count is known (page X of N).
"""

from dataclasses import dataclass
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

try:
    from reportlab.platypus import Table, TableStyle
except ImportError:  # pragma: no cover
    Table = TableStyle = None


# ─── PAGE GEOMETRY (mm) ───
PAGE_WIDTH = A4[0] / mm    # 210
PAGE_HEIGHT = A4[1] / mm   # 297
MARGIN_LEFT = 14
MARGIN_RIGHT = 196         # right edge of content
CONTENT_WIDTH = MARGIN_RIGHT - MARGIN_LEFT
TABLE_BOTTOM = 277         # tables never run into the footer band

# ─── COLOR PALETTE (RGB 0-255) ───
BRAND_COLORS = {
    "primary": (155, 135, 245),    # #9b87f5
    "secondary": (126, 105, 171),  # #7E69AB
    "accent": (110, 89, 165),      # #6E59A5
    "dark": (26, 31, 44),          # #1A1F2C
    "light": (214, 188, 250),      # #D6BCFA
    "gray": (142, 145, 150),       # #8E9196
}
WHITE = (255, 255, 255)
ROW_ALT = (248, 250, 252)
RULE = (226, 232, 240)

FONTS = {
    "normal": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
}


class LayoutUnavailableError(RuntimeError):
    """The table layout primitive cannot be used; no document can be built."""


def require_table_support() -> None:
    if Table is None or TableStyle is None:
        raise LayoutUnavailableError(
            "PDF generation failed - table layout support is unavailable"
        )


def rgb(value) -> Color:
    r, g, b = value
    return Color(r / 255.0, g / 255.0, b / 255.0)


@dataclass
class TablePlacement:
    first_page: int
    last_page: int
    start_y: float
    final_y: float
    rows: int


class ReportDocument:
    def __init__(self, title: str | None = None, author: str | None = None, compress: bool = True):
        self._buffer = BytesIO()
        self.c = canvas.Canvas(self._buffer, pagesize=A4, pageCompression=1 if compress else 0)
        if title:
            self.c.setTitle(title)
        if author:
            self.c.setAuthor(author)

        self._finished_pages: list[dict] = []
        self._closed = False
        self.tables: list[TablePlacement] = []

        # Drawing state, re-applied on every drawing call
        self.font_style = "normal"
        self.font_size = 12
        self.text_color = BRAND_COLORS["dark"]
        self.draw_color = (0, 0, 0)
        self.fill_color = (0, 0, 0)
        self.line_width = 0.2

    # ─── PAGES ───

    @property
    def page_count(self) -> int:
        return len(self._finished_pages) + (0 if self._closed else 1)

    @property
    def current_page(self) -> int:
        return len(self._finished_pages) + 1

    def add_page(self) -> None:
        self._check_open()
        self._finished_pages.append(dict(self.c.__dict__))
        self.c._startPage()

    def decorate_pages(self, decorate=None) -> None:
        """Close the document, calling ``decorate(doc, page_number, page_count)`` on each page."""
        self._check_open()
        self._finished_pages.append(dict(self.c.__dict__))
        self._closed = True

        total = len(self._finished_pages)
        for number, state in enumerate(self._finished_pages, start=1):
            self.c.__dict__.update(state)
            if decorate is not None:
                decorate(self, number, total)
            canvas.Canvas.showPage(self.c)

        self.c.save()

    def output(self) -> bytes:
        if not self._closed:
            self.decorate_pages()
        return self._buffer.getvalue()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Document is already finalised")

    # ─── DRAWING STATE ───

    def set_font(self, style: str = "normal", size: float | None = None) -> None:
        self.font_style = style
        if size is not None:
            self.font_size = size

    def set_text_color(self, color) -> None:
        self.text_color = color

    def set_draw_color(self, color) -> None:
        self.draw_color = color

    def set_fill_color(self, color) -> None:
        self.fill_color = color

    def set_line_width(self, width: float) -> None:
        self.line_width = width

    # ─── DRAWING PRIMITIVES ───

    def _y(self, y: float) -> float:
        return (PAGE_HEIGHT - y) * mm

    def text(self, value: str, x: float, y: float) -> None:
        self.c.setFont(FONTS[self.font_style], self.font_size)
        self.c.setFillColor(rgb(self.text_color))
        self.c.drawString(x * mm, self._y(y), value)

    def text_width(self, value: str) -> float:
        return stringWidth(value, FONTS[self.font_style], self.font_size) / mm

    def fit_text(self, value: str, max_width: float) -> str:
        """Trim ``value`` with a trailing '...' so it fits ``max_width`` mm."""
        if self.text_width(value) <= max_width:
            return value
        while value and self.text_width(value + "...") > max_width:
            value = value[:-1]
        return value + "..."

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.c.setStrokeColor(rgb(self.draw_color))
        self.c.setLineWidth(self.line_width * mm)
        self.c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        """Filled rectangle with its top-left corner at (x, y)."""
        self.c.setFillColor(rgb(self.fill_color))
        self.c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)

    # ─── TABLES ───

    def table(
        self,
        head: list[str],
        body: list[list[str]],
        start_y: float,
        *,
        col_widths: list[float] | None = None,
        font_size: float = 10,
        cell_padding: float = 3,
        head_fill=BRAND_COLORS["primary"],
        head_text=WHITE,
        alternate_fill=None,
        bold_columns=(),
        right_columns=(),
        wrap_columns=(),
        margin_top: float = 10,
    ) -> float:
        """Lay out a table from ``start_y`` and return the y just below it.

        Body cells in ``wrap_columns`` break onto extra lines inside their
        column, growing the row. Rows that do not fit above the footer band
        continue on new pages, starting at ``margin_top``, with the header
        row repeated.
        """
        require_table_support()

        width = CONTENT_WIDTH * mm
        if col_widths is None:
            col_widths = [CONTENT_WIDTH / len(head)] * len(head)

        if wrap_columns:
            cell_style = ParagraphStyle(
                name="TableCell",
                fontName=FONTS["normal"],
                fontSize=font_size,
                leading=font_size * 1.2,
                textColor=rgb(BRAND_COLORS["dark"]),
            )
            body = [
                [
                    Paragraph(escape(str(value)), cell_style) if column in wrap_columns else value
                    for column, value in enumerate(row)
                ]
                for row in body
            ]

        remaining = Table(
            [head] + body,
            colWidths=[w * mm for w in col_widths],
            repeatRows=1,
        )
        remaining.setStyle(
            self._table_style(
                font_size=font_size,
                cell_padding=cell_padding,
                head_fill=head_fill,
                head_text=head_text,
                alternate_fill=alternate_fill,
                bold_columns=bold_columns,
                right_columns=right_columns,
            )
        )

        first_page = self.current_page
        y = start_y
        fresh_page = False

        while True:
            available = (TABLE_BOTTOM - y) * mm
            _, height = remaining.wrapOn(self.c, width, available)

            if height <= available:
                remaining.drawOn(self.c, MARGIN_LEFT * mm, self._y(y) - height)
                final_y = y + height / mm
                break

            parts = remaining.split(width, available)

            if len(parts) < 2:
                if fresh_page:
                    # A single row taller than a whole page: draw it anyway
                    remaining.drawOn(self.c, MARGIN_LEFT * mm, self._y(y) - height)
                    final_y = y + height / mm
                    break
                self.add_page()
                y = margin_top
                fresh_page = True
                continue

            head_part, remaining = parts[0], parts[1]
            _, part_height = head_part.wrapOn(self.c, width, available)
            head_part.drawOn(self.c, MARGIN_LEFT * mm, self._y(y) - part_height)

            self.add_page()
            y = margin_top
            fresh_page = True

        self.tables.append(
            TablePlacement(
                first_page=first_page,
                last_page=self.current_page,
                start_y=start_y,
                final_y=final_y,
                rows=len(body),
            )
        )
        return final_y

    def _table_style(
        self,
        *,
        font_size,
        cell_padding,
        head_fill,
        head_text,
        alternate_fill,
        bold_columns,
        right_columns,
    ):
        padding = cell_padding * mm / 2
        commands = [
            ("FONTNAME", (0, 0), (-1, 0), FONTS["bold"]),
            ("FONTNAME", (0, 1), (-1, -1), FONTS["normal"]),
            ("FONTSIZE", (0, 0), (-1, -1), font_size),
            ("LEADING", (0, 0), (-1, -1), font_size * 1.2),
            ("BACKGROUND", (0, 0), (-1, 0), rgb(head_fill)),
            ("TEXTCOLOR", (0, 0), (-1, 0), rgb(head_text)),
            ("TEXTCOLOR", (0, 1), (-1, -1), rgb(BRAND_COLORS["dark"])),
            ("LINEBELOW", (0, 1), (-1, -1), 0.25, rgb(RULE)),
            ("LEFTPADDING", (0, 0), (-1, -1), padding),
            ("RIGHTPADDING", (0, 0), (-1, -1), padding),
            ("TOPPADDING", (0, 0), (-1, -1), padding),
            ("BOTTOMPADDING", (0, 0), (-1, -1), padding),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]

        if alternate_fill is not None:
            commands.append(
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [rgb(WHITE), rgb(alternate_fill)])
            )

        for column in bold_columns:
            commands.append(("FONTNAME", (column, 1), (column, -1), FONTS["bold"]))

        for column in right_columns:
            commands.append(("ALIGN", (column, 0), (column, -1), "RIGHT"))

        return TableStyle(commands)
