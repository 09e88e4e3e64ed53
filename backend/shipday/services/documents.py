"""
Waybill / proof-of-delivery PDF rendering (reportlab)
- Fixed A4 layout; coordinates below are measured from the top-left corner
  and flipped onto reportlab's bottom-left origin.
- Missing nested fields render blank.
"""

import io
import logging
import os
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from shipday.config import settings

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 30
FOOTER_TEXT = "ShipDay Courier Services | Terms & Conditions Apply"


def _field(block: dict | None, *path: str) -> str:
    value = block or {}
    for key in path:
        if not isinstance(value, dict):
            return ""
        value = value.get(key)
        if value is None:
            return ""
    return str(value)


def _enum_value(value) -> str:
    return str(getattr(value, "value", value) or "")


def _date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


class _Page:
    """Top-left coordinate helper around a reportlab canvas."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.font("Helvetica", 9)

    def font(self, name: str, size: float):
        self.c.setFont(name, size)
        self.size = size

    def text(self, x: float, y: float, value: str, align: str = "left", width: float = 0):
        baseline = PAGE_HEIGHT - y - self.size
        if align == "right":
            self.c.drawRightString(x + width, baseline, value)
        elif align == "center":
            self.c.drawCentredString(x + width / 2, baseline, value)
        else:
            self.c.drawString(x, baseline, value)

    def rect(self, x: float, y: float, w: float, h: float, fill_color=None):
        if fill_color is not None:
            self.c.setFillColor(fill_color)
            self.c.rect(x, PAGE_HEIGHT - y - h, w, h, stroke=0, fill=1)
            self.c.setFillColor(colors.black)
        else:
            self.c.setStrokeColor(colors.HexColor("#333333"))
            self.c.rect(x, PAGE_HEIGHT - y - h, w, h, stroke=1, fill=0)

    def line(self, x1: float, y1: float, x2: float, y2: float):
        self.c.line(x1, PAGE_HEIGHT - y1, x2, PAGE_HEIGHT - y2)

    def box(self, x: float, y: float, w: float, h: float, title: str) -> float:
        """Titled box; returns the y where content starts."""
        self.rect(x, y, w, 20, fill_color=colors.HexColor("#f8f9fa"))
        self.rect(x, y, w, h)
        self.font("Helvetica-Bold", 9)
        self.text(x + 5, y + 5, title.upper())
        self.font("Helvetica", 9)
        return y + 25


def _party(page: _Page, x: float, y: float, details: dict | None, name_key: str, fallback_name: str, fallback_phone: str):
    if details:
        page.text(x, y, _field(details, name_key))
        page.font("Helvetica-Bold", 9)
        page.text(x, y + 12, _field(details, "company"))
        page.font("Helvetica", 9)
        page.text(x, y + 24, _field(details, "mobile"))
        page.text(x, y + 36, _field(details, "email"))
        page.text(x, y + 50, _field(details, "address", "street"))
        page.text(x, y + 62, f"{_field(details, 'address', 'suburb')}, {_field(details, 'address', 'city')}")
        page.text(x, y + 74, f"{_field(details, 'address', 'province')}, {_field(details, 'address', 'postalCode')}")
    else:
        page.text(x, y, fallback_name or "N/A")
        page.text(x, y + 12, fallback_phone or "")


def render_waybill(shipment) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Waybill {shipment.shipment_id}")
    page = _Page(c)

    # Header
    if settings.WAYBILL_LOGO_PATH and os.path.isfile(settings.WAYBILL_LOGO_PATH):
        c.drawImage(settings.WAYBILL_LOGO_PATH, MARGIN, PAGE_HEIGHT - 30 - 60, width=120, height=60,
                    preserveAspectRatio=True, mask="auto")

    page.font("Helvetica-Bold", 24)
    page.text(400, 35, "WAYBILL", align="right", width=PAGE_WIDTH - 400 - MARGIN)
    page.font("Helvetica", 10)
    page.text(400, 65, f"Ref: {shipment.shipment_id}", align="right", width=PAGE_WIDTH - 400 - MARGIN)
    page.text(400, 80, f"Date: {_date(shipment.created_at)}", align="right", width=PAGE_WIDTH - 400 - MARGIN)

    # Sender / receiver row
    content_y = page.box(30, 120, 260, 110, "Sender Details")
    _party(page, 40, content_y, shipment.sender_details, "fullName", shipment.sender_name, shipment.sender_phone)

    content_y = page.box(305, 120, 260, 110, "Receiver Details")
    _party(page, 315, content_y, shipment.delivery_details, "receiverName", shipment.receiver_name, shipment.receiver_phone)

    # Service / instructions / payment row
    parcel = shipment.parcel_details
    content_y = page.box(30, 250, 170, 100, "Service Info")
    if parcel:
        page.text(40, content_y, "Service:")
        page.font("Helvetica-Bold", 9)
        page.text(90, content_y, _field(parcel, "serviceType").upper())
        page.font("Helvetica", 9)
        page.text(40, content_y + 15, "Type:")
        page.text(90, content_y + 15, _field(parcel, "parcelType"))
        if parcel.get("dimensions"):
            page.text(40, content_y + 30, "Weight:")
            page.text(90, content_y + 30, f"{_field(parcel, 'dimensions', 'weight')} kg")
            dims = "x".join(_field(parcel, "dimensions", k) for k in ("length", "width", "height"))
            page.text(40, content_y + 45, "Dims:")
            page.text(90, content_y + 45, f"{dims} cm")
    else:
        page.text(40, content_y, "Type:")
        page.text(90, content_y, shipment.package_type or "")
        page.text(40, content_y + 15, "Weight:")
        page.text(90, content_y + 15, f"{shipment.parcel_weight} kg")

    content_y = page.box(210, 250, 170, 100, "Instructions")
    page.text(220, content_y, _field(parcel, "specialInstructions") or "None")

    content_y = page.box(390, 250, 175, 100, "Payment Info")
    if shipment.payment_method:
        page.text(400, content_y, "Method:")
        page.font("Helvetica-Bold", 9)
        page.text(460, content_y, _enum_value(shipment.payment_method).upper())
        page.font("Helvetica", 9)
        page.text(400, content_y + 15, "Status:")
        page.text(460, content_y + 15, _enum_value(shipment.payment_status).upper())

    # Signature table
    sig_y = 550
    table_width = PAGE_WIDTH - 2 * MARGIN
    col_width = table_width / 2
    header_h, name_h, sig_h = 20, 25, 80
    page.rect(30, sig_y, table_width, header_h + name_h + sig_h)
    page.line(30 + col_width, sig_y, 30 + col_width, sig_y + header_h + name_h + sig_h)
    page.line(30, sig_y + header_h, 30 + table_width, sig_y + header_h)
    page.line(30, sig_y + header_h + name_h, 30 + table_width, sig_y + header_h + name_h)

    page.font("Helvetica-Bold", 10)
    page.text(35, sig_y + 6, "SENDER SIGNATURE")
    page.text(30 + col_width + 5, sig_y + 6, "RECEIVER SIGNATURE")
    page.font("Helvetica", 10)
    page.text(35, sig_y + header_h + 8, "NAME:")
    page.text(30 + col_width + 5, sig_y + header_h + 8, "NAME:")

    c.setFillColor(colors.HexColor("#888888"))
    page.font("Helvetica", 7)
    page.text(30, 750, FOOTER_TEXT, align="center", width=table_width)

    c.showPage()
    c.save()
    logger.info(f"Waybill rendered: {shipment.shipment_id}")
    return buffer.getvalue()


def render_proof_of_delivery(shipment) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Proof of delivery {shipment.shipment_id}")
    page = _Page(c)
    width = PAGE_WIDTH - 2 * 50

    page.font("Helvetica", 20)
    page.text(50, 60, "SHIPDAY WAYBILL", align="center", width=width)
    page.font("Helvetica", 12)
    page.text(50, 100, f"Waybill No: {shipment.shipment_id}", align="right", width=width)

    sender = shipment.sender_name or _field(shipment.sender_details, "fullName")
    receiver = shipment.receiver_name or _field(shipment.delivery_details, "receiverName")
    page.text(50, 140, f"Date Shipped: {_date(shipment.created_at)}")
    page.text(50, 158, f"From: {sender}")
    page.text(50, 176, f"To: {receiver}")
    if shipment.delivered_at:
        page.text(50, 194, f"Delivered: {_date(shipment.delivered_at)}")

    page.text(50, 230, "Received in good order and condition:")

    sig_y = 400
    page.line(50, sig_y, 250, sig_y)
    page.text(50, sig_y + 10, "Receiver Signature")
    page.line(300, sig_y, 500, sig_y)
    page.text(300, sig_y + 10, "Date & Time")

    c.showPage()
    c.save()
    logger.info(f"Proof of delivery rendered: {shipment.shipment_id}")
    return buffer.getvalue()
