# backend/utils/pdf.py
import io
import logging
from pathlib import Path

from models.purchase import Purchase

logger = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parents[1]
FONT_DIRS = [BACKEND_DIR / "assets" / "fonts", BACKEND_DIR / "fonts"]

FONT_REGULAR_NAME = "DejaVuSans"
FONT_BOLD_NAME = "DejaVuSans-Bold"

STATUS_LABELS = {
    "pending": "Pending",
    "approved": "Approved",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}

_fonts = None
def _init_fonts():
    """Register DejaVu when shipped with the app, otherwise fall back to Helvetica."""
    global _fonts
    if _fonts is not None:
        return _fonts

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    regular = bold = None
    for d in FONT_DIRS:
        if regular is None and (d / "DejaVuSans.ttf").exists():
            regular = d / "DejaVuSans.ttf"
        if bold is None and (d / "DejaVuSans-Bold.ttf").exists():
            bold = d / "DejaVuSans-Bold.ttf"

    if regular is None:
        logger.info("DejaVu fonts not found, using Helvetica for PDFs")
        _fonts = ("Helvetica", "Helvetica-Bold")
        return _fonts

    pdfmetrics.registerFont(TTFont(FONT_REGULAR_NAME, str(regular)))
    if bold is not None:
        pdfmetrics.registerFont(TTFont(FONT_BOLD_NAME, str(bold)))
        _fonts = (FONT_REGULAR_NAME, FONT_BOLD_NAME)
    else:
        _fonts = (FONT_REGULAR_NAME, FONT_REGULAR_NAME)
    return _fonts


def _money(value) -> str:
    return f"R$ {value or 0:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def purchase_order_pdf(purchase: Purchase) -> bytes:
    """Render a purchase order (header, items, totals, signature lines) to PDF bytes."""
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.units import mm
    from reportlab.pdfgen import canvas

    regular, bold = _init_fonts()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4
    y = height - 25 * mm

    c.setFont(bold, 16)
    number = purchase.document_number or f"PO-{purchase.id}"
    c.drawString(20 * mm, y, f"Purchase order {number}")
    y -= 10 * mm

    c.setFont(regular, 10)
    c.drawString(20 * mm, y, f"Date: {purchase.date.strftime('%d/%m/%Y') if purchase.date else '-'}")
    c.drawRightString(190 * mm, y, f"Status: {STATUS_LABELS.get(getattr(purchase.status, 'value', purchase.status), '-')}")
    y -= 6 * mm
    c.drawString(20 * mm, y, f"Supplier: {purchase.supplier_name or '-'}")
    y -= 6 * mm
    if purchase.expected_delivery_date:
        c.drawString(20 * mm, y, f"Expected delivery: {purchase.expected_delivery_date.strftime('%d/%m/%Y')}")
        y -= 6 * mm
    y -= 4 * mm

    c.setFont(bold, 10)
    c.drawString(20 * mm, y, "Item")
    c.drawRightString(130 * mm, y, "Qty")
    c.drawRightString(160 * mm, y, "Unit price")
    c.drawRightString(190 * mm, y, "Total")
    y -= 3 * mm
    c.line(20 * mm, y, 190 * mm, y)
    y -= 6 * mm

    c.setFont(regular, 10)
    for item in purchase.items:
        c.drawString(20 * mm, y, (item.product_name or "")[:55])
        c.drawRightString(130 * mm, y, str(item.quantity))
        c.drawRightString(160 * mm, y, _money(item.unit_price))
        c.drawRightString(190 * mm, y, _money(item.total_price))
        y -= 6 * mm
        if y < 40 * mm:
            c.showPage()
            y = height - 20 * mm
            c.setFont(regular, 10)

    y -= 2 * mm
    c.line(120 * mm, y, 190 * mm, y)
    y -= 6 * mm
    if purchase.discount:
        c.drawString(120 * mm, y, "Discount")
        c.drawRightString(190 * mm, y, f"- {_money(purchase.discount)}")
        y -= 6 * mm
    c.setFont(bold, 11)
    c.drawString(120 * mm, y, "Total")
    c.drawRightString(190 * mm, y, _money(purchase.total_value))

    if purchase.notes:
        y -= 12 * mm
        c.setFont(regular, 9)
        c.drawString(20 * mm, y, f"Notes: {purchase.notes[:100]}")

    y -= 25 * mm
    c.setFont(regular, 10)
    c.drawString(20 * mm, y, "Requested by: ______________________")
    c.drawString(110 * mm, y, "Approved by: ______________________")

    c.showPage()
    c.save()
    return buf.getvalue()
