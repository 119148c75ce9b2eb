"""Tabular PDF report of clients missing contact details."""
import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from src.config.settings import Settings
from src.models.contact import ClassifiedRecord
from src.utils.error_handlers import ReportRenderError
from src.utils.pdf_text import validate_pdf_bytes

logger = logging.getLogger(__name__)

SEGMENT_COLORS: dict[str, str] = {
    "A": "#b6d7a8",
    "B": "#9fc5e8",
    "C": "#fff2cc",
    "D": "#f9cb9c",
    "Red Flag": "#ea9999",
}
DEFAULT_SEGMENT_COLOR = "#cccccc"
ROW_FILL_ALPHA = 0.2
CELL_PADDING = 5


def segment_color(segmentation: str) -> colors.Color:
    return colors.HexColor(SEGMENT_COLORS.get(segmentation, DEFAULT_SEGMENT_COLOR))


@dataclass(frozen=True)
class RendererLayout:
    """Page geometry for the report, in PDF points."""

    margin: float = 30.0
    row_height: float = 25.0
    title: str = "Clients Missing Contact Info"
    page_size: tuple[float, float] = A4
    title_font_size: int = 20
    font_size: int = 12
    font_name: str = "Helvetica"
    header_font_name: str = "Helvetica-Bold"
    # TrueType file used for all text instead of the built-in fonts
    font_path: str | None = None

    # (header, share of printable width)
    COLUMNS: ClassVar[tuple[tuple[str, float], ...]] = (
        ("Name", 0.45),
        ("Segmentation", 0.25),
        ("Missing", 0.30),
    )

    def __post_init__(self) -> None:
        if self.margin < 0 or self.row_height <= 0:
            raise ValueError("margin must be >= 0 and row_height > 0")
        if 2 * self.margin + self.row_height > self.page_size[1]:
            raise ValueError("row_height does not fit between the page margins")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RendererLayout":
        return cls(
            margin=settings.report_margin,
            row_height=settings.report_row_height,
            title=settings.report_title,
            font_path=settings.report_font_path,
        )

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def printable_width(self) -> float:
        return self.page_width - 2 * self.margin

    def column_widths(self) -> list[float]:
        return [self.printable_width * share for _, share in self.COLUMNS]


@dataclass
class RenderedReport:
    """An in-memory PDF document and what went into it."""

    content: bytes
    page_count: int
    row_count: int


class PDFReportRenderer:
    """Draws classified records as a colour-coded table with reportlab."""

    def __init__(self, layout: RendererLayout | None = None):
        self.layout = layout or RendererLayout()

    def render(self, records: Sequence[ClassifiedRecord]) -> RenderedReport:
        """Render rows in the given order.

        Args:
            records: Sorted records, one table row each

        Returns:
            RenderedReport holding the PDF bytes

        Raises:
            ReportRenderError: If reportlab fails to build the document
        """
        try:
            return self._render(records)
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}", exc_info=True)
            raise ReportRenderError(e) from e

    def _render(self, records: Sequence[ClassifiedRecord]) -> RenderedReport:
        layout = self.layout
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=layout.page_size)
        pdf.setTitle(layout.title)
        body_font, header_font = self._fonts()

        page_count = 1

        # Vertical cursor measured down from the top edge of the page
        cursor = layout.margin
        pdf.setFont(header_font, layout.title_font_size)
        pdf.setFillColor(colors.black)
        pdf.drawCentredString(
            layout.page_width / 2,
            layout.page_height - cursor - layout.title_font_size,
            layout.title,
        )
        cursor += layout.title_font_size + layout.row_height

        self._draw_cells(
            pdf,
            cursor,
            [header for header, _ in layout.COLUMNS],
            header_font,
        )
        cursor += layout.row_height
        pdf.setStrokeColor(colors.black)
        pdf.setLineWidth(0.5)
        pdf.line(
            layout.margin,
            layout.page_height - cursor,
            layout.page_width - layout.margin,
            layout.page_height - cursor,
        )

        for record in records:
            if cursor + layout.row_height > layout.page_height - layout.margin:
                pdf.showPage()
                page_count += 1
                cursor = layout.margin

            self._draw_row_background(pdf, cursor, record.segmentation)
            self._draw_cells(
                pdf,
                cursor,
                [record.name, record.segmentation, record.missing_description],
                body_font,
            )
            cursor += layout.row_height

        pdf.save()
        content = buffer.getvalue()
        valid, error = validate_pdf_bytes(content)
        if not valid:
            raise ValueError(f"Rendered document is not a readable PDF: {error}")

        logger.info(f"Rendered {len(records)} rows on {page_count} page(s), {len(content)} bytes")
        return RenderedReport(content=content, page_count=page_count, row_count=len(records))

    def _fonts(self) -> tuple[str, str]:
        """Body and header font names, registering the configured TrueType font."""
        layout = self.layout
        if not layout.font_path:
            return layout.font_name, layout.header_font_name

        font_name = register_ttf_font(layout.font_path)
        return font_name, font_name

    def _draw_row_background(self, pdf: canvas.Canvas, cursor: float, segmentation: str) -> None:
        layout = self.layout
        pdf.saveState()
        pdf.setFillColor(segment_color(segmentation))
        pdf.setFillAlpha(ROW_FILL_ALPHA)
        pdf.rect(
            layout.margin,
            layout.page_height - cursor - layout.row_height,
            layout.printable_width,
            layout.row_height,
            stroke=0,
            fill=1,
        )
        pdf.restoreState()

    def _draw_cells(self, pdf: canvas.Canvas, cursor: float, values: list[str], font_name: str) -> None:
        layout = self.layout
        pdf.setFont(font_name, layout.font_size)
        pdf.setFillColor(colors.black)

        # Vertically centre the text inside the row
        baseline = layout.page_height - cursor - layout.row_height / 2 - layout.font_size * 0.35
        x = layout.margin
        for value, width in zip(values, layout.column_widths()):
            text = fit_text(value, width - 2 * CELL_PADDING, font_name, layout.font_size)
            pdf.drawString(x + CELL_PADDING, baseline, text)
            x += width


def register_ttf_font(font_path: str) -> str:
    """Register a TrueType font with reportlab once and return its name."""
    font_name = f"Report-{Path(font_path).stem}"
    if font_name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(font_name, font_path))
        logger.info(f"Registered report font {font_name} from {font_path}")
    return font_name


def fit_text(text: str, max_width: float, font_name: str, font_size: int) -> str:
    """Truncate text with an ellipsis so it fits within max_width."""
    if stringWidth(text, font_name, font_size) <= max_width:
        return text

    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font_name, font_size) > max_width:
        text = text[:-1]
    return text.rstrip() + ellipsis
