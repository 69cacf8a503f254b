"""PDF invoices carrying the per-item download passwords."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
import logging
from pathlib import Path
import re
import secrets

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from study_store.services.pricing import CartLine, Totals, fmt_money

LOGGER = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
LEFT = 50
RIGHT = 550
BOTTOM_MARGIN = 60
HEADER_FILL = colors.HexColor("#2C3E50")
STRIPE_FILL = colors.HexColor("#F8F9FA")
BOX_STROKE = colors.HexColor("#CCCCCC")


class InvoiceRenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class InvoiceDocument:
    account_name: str
    account_email: str
    lines: list[CartLine]
    totals: Totals
    secrets_by_item: dict[str, str]
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def number(self) -> str:
        return str(int(self.issued_at.timestamp() * 1000))


def _artifact_stem(email: str) -> str:
    return re.sub(r"[^\w.@-]", "_", email)


class InvoiceRenderer:
    def __init__(
        self,
        bills_dir: Path,
        store_name: str,
        store_email: str,
        store_phone: str,
        tax_rate: Decimal,
        currency_label: str = "Rs.",
    ) -> None:
        self._bills_dir = Path(bills_dir)
        self._store_name = store_name
        self._store_email = store_email
        self._store_phone = store_phone
        self._tax_rate = tax_rate
        self._currency = currency_label

    def render(self, document: InvoiceDocument) -> str:
        """Write the invoice PDF and return its artifact name."""
        artifact = (
            f"{_artifact_stem(document.account_email)}_bill_{document.number}"
            f"_{secrets.token_hex(4)}.pdf"
        )
        try:
            self._bills_dir.mkdir(parents=True, exist_ok=True)
            pdf = canvas.Canvas(str(self._bills_dir / artifact), pagesize=A4)
            pdf.setTitle(f"Invoice #{document.number}")
            self._draw(pdf, document)
            pdf.save()
        except (OSError, ValueError) as exc:
            LOGGER.error("Invoice rendering failed for %s: %s", document.account_email, exc)
            raise InvoiceRenderError("Failed to render invoice") from exc
        return artifact

    def resolve(self, artifact: str) -> Path | None:
        if not artifact or Path(artifact).name != artifact:
            return None
        path = self._bills_dir / artifact
        return path if path.is_file() else None

    def _draw(self, pdf: canvas.Canvas, document: InvoiceDocument) -> None:
        y = self._draw_header(pdf, document)
        y = self._draw_lines(pdf, document.lines, y)
        y = self._draw_totals(pdf, document.totals, y)
        y = self._draw_payment_box(pdf, y)
        self._draw_passwords(pdf, document.secrets_by_item, y)

    def _draw_header(self, pdf: canvas.Canvas, document: InvoiceDocument) -> float:
        top = PAGE_HEIGHT
        pdf.setFont("Helvetica-Bold", 24)
        pdf.drawRightString(RIGHT, top - 70, self._store_name)
        pdf.setFont("Helvetica", 14)
        pdf.drawRightString(RIGHT, top - 92, "Invoice")
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(RIGHT, top - 108, self._store_email)
        pdf.drawRightString(RIGHT, top - 122, self._store_phone)

        pdf.setStrokeColor(colors.HexColor("#333333"))
        pdf.setLineWidth(1)
        pdf.line(LEFT, top - 140, RIGHT, top - 140)

        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(LEFT, top - 165, "BILL TO")
        pdf.drawString(350, top - 165, "Invoice No:")
        pdf.drawString(350, top - 180, "Date:")
        pdf.drawString(350, top - 195, "Due Date:")
        pdf.setFont("Helvetica", 10)
        pdf.drawString(LEFT, top - 180, document.account_name)
        pdf.drawString(LEFT, top - 195, document.account_email)
        pdf.drawString(420, top - 165, f"#{document.number}")
        pdf.drawString(420, top - 180, document.issued_at.strftime("%d/%m/%Y"))
        pdf.drawString(420, top - 195, "Due on receipt")
        return top - 230

    def _draw_table_header(self, pdf: canvas.Canvas, y: float) -> float:
        pdf.setFillColor(HEADER_FILL)
        pdf.rect(LEFT, y - 8, RIGHT - LEFT, 25, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(60, y, "No")
        pdf.drawString(100, y, "Description")
        pdf.drawCentredString(305, y, "Qty")
        pdf.drawRightString(430, y, f"Price ({self._currency})")
        pdf.drawRightString(530, y, f"Amount ({self._currency})")
        pdf.setFillColor(colors.black)
        return y - 25

    def _draw_lines(self, pdf: canvas.Canvas, lines: list[CartLine], y: float) -> float:
        y = self._draw_table_header(pdf, y)
        for index, line in enumerate(lines):
            if y < BOTTOM_MARGIN:
                pdf.showPage()
                y = self._draw_table_header(pdf, PAGE_HEIGHT - 60)
            if index % 2 == 0:
                pdf.setFillColor(STRIPE_FILL)
                pdf.rect(LEFT, y - 6, RIGHT - LEFT, 20, stroke=0, fill=1)
                pdf.setFillColor(colors.black)
            pdf.setFont("Helvetica", 9)
            pdf.drawString(60, y, str(index + 1))
            pdf.drawString(100, y, line.title[:40])
            pdf.drawCentredString(305, y, str(line.quantity))
            pdf.drawRightString(430, y, fmt_money(line.price, ""))
            pdf.drawRightString(530, y, fmt_money(line.amount, ""))
            y -= 20
        return y - 20

    def _draw_totals(self, pdf: canvas.Canvas, totals: Totals, y: float) -> float:
        if y < BOTTOM_MARGIN + 80:
            pdf.showPage()
            y = PAGE_HEIGHT - 60
        percent = (self._tax_rate * 100).normalize()
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(470, y, "Subtotal:")
        pdf.drawRightString(RIGHT, y, fmt_money(totals.subtotal, self._currency))
        pdf.drawRightString(470, y - 20, f"GST ({percent:f}%):")
        pdf.drawRightString(RIGHT, y - 20, fmt_money(totals.tax, self._currency))
        pdf.setStrokeColor(colors.black)
        pdf.line(380, y - 35, RIGHT, y - 35)
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawRightString(470, y - 55, "Total:")
        pdf.drawRightString(RIGHT, y - 55, fmt_money(totals.total, self._currency))
        return y - 85

    def _draw_payment_box(self, pdf: canvas.Canvas, y: float) -> float:
        if y < BOTTOM_MARGIN + 80:
            pdf.showPage()
            y = PAGE_HEIGHT - 60
        pdf.setStrokeColor(BOX_STROKE)
        pdf.setLineWidth(0.5)
        pdf.rect(LEFT, y - 70, 250, 70, stroke=1, fill=0)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(60, y - 15, "Payment Information")
        pdf.setFont("Helvetica", 9)
        pdf.drawString(60, y - 30, f"Bank Name: {self._store_name} Bank")
        pdf.drawString(60, y - 45, "Account No: 123-456-7890")
        pdf.drawString(60, y - 60, "IFSC Code: STDY0001234")
        return y - 100

    def _draw_passwords(
        self, pdf: canvas.Canvas, secrets_by_item: dict[str, str], y: float
    ) -> None:
        if y < BOTTOM_MARGIN + 40:
            pdf.showPage()
            y = PAGE_HEIGHT - 60
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(LEFT, y, "Your Download Passwords (One-Time Use Only)")
        y -= 20
        pdf.setFont("Helvetica", 9)
        for title, secret in secrets_by_item.items():
            if y < BOTTOM_MARGIN:
                pdf.showPage()
                pdf.setFont("Helvetica", 9)
                y = PAGE_HEIGHT - 60
            pdf.drawString(LEFT, y, f"{title}: {secret}")
            y -= 15

        y -= 20
        pdf.setFont("Helvetica", 10)
        pdf.drawCentredString(PAGE_WIDTH / 2, max(y, 40), "Thank you for your business!")
        pdf.setFont("Helvetica", 8)
        pdf.drawString(LEFT, 30, "Terms & Conditions Apply")
        pdf.drawRightString(RIGHT, 30, f"{self._store_name} © {datetime.now().year}")
