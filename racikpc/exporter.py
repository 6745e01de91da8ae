"""
PDF export of a build ("Detail Rakitan PC").

The session supplies the ordered (category, name, price) rows; this module
only lays them out with fpdf2.
"""
import logging
import os
from datetime import datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .errors import ExportError

logger = logging.getLogger(__name__)

BRAND = "NPC"
BRAND_TAGLINE = "New Personal Computer"
TITLE = "Detail Rakitan PC"
HEADERS = ("Komponen", "Nama Produk", "Harga")
FOOTER = "Terima kasih telah menggunakan layanan NPC builder."

ACCENT = (37, 99, 235)
INK = (33, 37, 41)
MUTED = (100, 116, 139)
STRIPE = (245, 245, 245)

# Column widths (mm) on a 180mm wide table starting at x=15
COLUMN_WIDTHS = (40, 100, 40)
ROW_HEIGHT = 8


def build_rows(session):
    """
    The rows for the PDF table, refusing builds that cannot be exported.

    :param session: A BuildSession.
    :return: 8 part rows followed by the total row.
    :raises ExportError: If the build is empty or has compatibility issues.
    """
    if not session.can_export():
        issues = session.get_compatibility_issues()
        reason = "; ".join(issues) if issues else "no parts selected"
        raise ExportError(f"Build cannot be exported: {reason}")
    return session.export_rows()


def format_printed_at(moment):
    """Renders a timestamp like the id-ID locale: '19/10/2026, 14.05.03'."""
    return f"{moment.day}/{moment.month}/{moment.year}, {moment:%H.%M.%S}"


def export_filename(moment=None):
    moment = moment or datetime.now()
    return f"Rakitan-NPC-{int(moment.timestamp() * 1000)}.pdf"


def _latin1(text):
    # Core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


def render_pdf(session, printed_at=None, logo_path=None):
    """
    Renders the build as a one-page PDF document.

    :param session: A BuildSession that passes `can_export()`.
    :param printed_at: Timestamp printed under the title (default: now).
    :param logo_path: Optional path to a PNG logo; skipped if unreadable.
    :return: The PDF file contents as bytes.
    :raises ExportError: If the build cannot be exported.
    """
    rows = build_rows(session)
    printed_at = printed_at or datetime.now()

    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    # --- Header ---
    if logo_path:
        if os.path.isfile(logo_path):
            pdf.image(logo_path, x=15, y=10, w=20, h=20)
        else:
            logger.warning(f"Could not load logo {logo_path}")

    pdf.set_font("Helvetica", "B", 22)
    pdf.set_text_color(*INK)
    pdf.text(40, 20, BRAND)
    pdf.set_font("Helvetica", "", 12)
    pdf.set_text_color(*MUTED)
    pdf.text(40, 27, BRAND_TAGLINE)

    pdf.set_draw_color(200, 200, 200)
    pdf.line(15, 35, 195, 35)

    pdf.set_font("Helvetica", "B", 16)
    pdf.set_text_color(*INK)
    pdf.text(15, 45, TITLE)

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(100, 100, 100)
    pdf.text(15, 52, f"Dicetak pada: {format_printed_at(printed_at)}")

    # --- Table ---
    pdf.set_xy(15, 60)
    pdf.set_font("Helvetica", "B", 10)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    for width, header in zip(COLUMN_WIDTHS, HEADERS):
        pdf.cell(w=width, h=ROW_HEIGHT, text=header, fill=True,
                 new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.ln(ROW_HEIGHT)

    for index, row in enumerate(rows):
        is_total = index == len(rows) - 1
        pdf.set_x(15)
        pdf.set_fill_color(*STRIPE)
        pdf.set_text_color(*(ACCENT if is_total else INK))
        for column, (width, value) in enumerate(zip(COLUMN_WIDTHS, row)):
            bold = is_total or column == 0
            pdf.set_font("Helvetica", "B" if bold else "", 10)
            pdf.cell(
                w=width,
                h=ROW_HEIGHT,
                text=_latin1(value),
                fill=index % 2 == 1,
                align="R" if column == 2 else "L",
                new_x=XPos.RIGHT,
                new_y=YPos.TOP,
            )
        pdf.ln(ROW_HEIGHT)

    # --- Footer ---
    pdf.ln(10)
    pdf.set_x(15)
    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(100, 100, 100)
    pdf.cell(w=0, h=ROW_HEIGHT, text=FOOTER)

    logger.info(f"Rendered build PDF ({len(rows) - 1} slots, total {rows[-1][2]})")
    return bytes(pdf.output())
