"""
Invoice PDF Generator
Renders a branded A4 invoice with company, customer and line item tables
"""

import io
import logging
from html import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...models_invoice import Invoice

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "PENDING": "Pending payment",
    "PAID": "Paid",
    "OVERDUE": "Overdue",
    "CANCELLED": "Cancelled",
}


def _money(value) -> str:
    return f"€{value or 0:.2f}"


def _address_lines(address) -> str:
    if not address:
        return ""
    if isinstance(address, str):
        return escape(address)
    city = " ".join(
        part for part in (address.get("postal_code"), address.get("city")) if part
    )
    parts = [address.get("street"), city, address.get("state"), address.get("country")]
    return "<br/>".join(escape(str(part)) for part in parts if part)


class InvoicePDFGenerator:
    """Generate invoice PDFs"""

    def __init__(self, invoice: Invoice):
        self.invoice = invoice

        # PDF settings
        self.page_width, self.page_height = A4
        self.margin = 0.75 * inch
        self.content_width = self.page_width - (2 * self.margin)

        # Brand colors
        self.brand_color = colors.HexColor("#db2777")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        invoice = self.invoice
        logger.info(f"📄 Generating invoice PDF {invoice.invoice_number}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Invoice {invoice.invoice_number}",
        )

        story = []
        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=24,
            textColor=self.brand_color,
            spaceAfter=6,
        )
        heading_style = ParagraphStyle(
            "InvoiceHeading",
            parent=styles["Heading3"],
            fontSize=11,
            textColor=self.dark_gray,
            spaceAfter=4,
        )
        body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=9,
            leading=13,
            textColor=self.dark_gray,
        )

        # Header
        story.append(Paragraph("INVOICE", title_style))
        story.append(
            Paragraph(
                f"No. <b>{escape(invoice.invoice_number)}</b> &nbsp; "
                f"{STATUS_LABELS.get(invoice.status, invoice.status)}",
                body_style,
            )
        )
        story.append(Spacer(1, 0.3 * inch))

        # Issuer and customer side by side
        company = [
            Paragraph("From", heading_style),
            Paragraph(
                "<br/>".join(
                    part
                    for part in (
                        f"<b>{escape(invoice.company_name)}</b>",
                        _address_lines(invoice.company_address),
                        f"Tax ID: {escape(invoice.company_tax_id)}" if invoice.company_tax_id else "",
                        escape(invoice.company_phone or ""),
                        escape(invoice.company_email or ""),
                    )
                    if part
                ),
                body_style,
            ),
        ]
        customer = [
            Paragraph("Bill to", heading_style),
            Paragraph(
                "<br/>".join(
                    part
                    for part in (
                        f"<b>{escape(invoice.customer_name)}</b>",
                        escape(invoice.customer_email),
                        escape(invoice.customer_phone or ""),
                        _address_lines(invoice.billing_address),
                    )
                    if part
                ),
                body_style,
            ),
        ]
        parties = Table([[company, customer]], colWidths=[self.content_width / 2] * 2)
        parties.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        story.append(parties)
        story.append(Spacer(1, 0.25 * inch))

        # Dates
        dates = [
            ["Issue date:", self._date(invoice.issue_date)],
            ["Due date:", self._date(invoice.due_date)],
        ]
        if invoice.paid_at:
            dates.append(["Paid on:", self._date(invoice.paid_at)])
        if invoice.payment_terms:
            dates.append(["Payment terms:", invoice.payment_terms])
        dates_table = Table(dates, colWidths=[1.3 * inch, 3 * inch])
        dates_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 9),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 9),
                    ("TEXTCOLOR", (0, 0), (-1, -1), self.dark_gray),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        story.append(dates_table)
        story.append(Spacer(1, 0.3 * inch))

        # Line items
        table_data = [["Description", "Qty", "Unit price", "Total"]]
        for item in invoice.line_items or []:
            description = escape(item.get("product_name", ""))
            if item.get("variant_name"):
                description += f"<br/><font size=8 color='#64748b'>{escape(item['variant_name'])}</font>"
            table_data.append(
                [
                    Paragraph(description, body_style),
                    str(item.get("quantity", 0)),
                    _money(item.get("unit_price")),
                    _money(item.get("total_price")),
                ]
            )

        items_table = Table(
            table_data,
            colWidths=[
                self.content_width - 3.3 * inch,
                0.7 * inch,
                1.3 * inch,
                1.3 * inch,
            ],
            repeatRows=1,
        )
        items_table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("TOPPADDING", (0, 0), (-1, 0), 8),
                    # Data rows
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_gray),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("VALIGN", (0, 1), (-1, -1), "MIDDLE"),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, self.light_gray]),
                    ("LINEBELOW", (0, 0), (-1, -1), 0.5, colors.HexColor("#e2e8f0")),
                ]
            )
        )
        story.append(items_table)
        story.append(Spacer(1, 0.2 * inch))

        # Totals
        totals = Table(
            [
                ["Subtotal", _money(invoice.subtotal)],
                [f"VAT ({invoice.tax_rate * 100:.0f}%)", _money(invoice.tax_amount)],
                ["Total", _money(invoice.total_amount)],
            ],
            colWidths=[1.5 * inch, 1.3 * inch],
            hAlign="RIGHT",
        )
        totals.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (-1, 1), "Helvetica", 9),
                    ("FONT", (0, 2), (-1, 2), "Helvetica-Bold", 11),
                    ("TEXTCOLOR", (0, 0), (-1, 1), self.dark_gray),
                    ("TEXTCOLOR", (0, 2), (-1, 2), self.brand_color),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("LINEABOVE", (0, 2), (-1, 2), 1, self.dark_gray),
                    ("TOPPADDING", (0, 2), (-1, 2), 6),
                ]
            )
        )
        story.append(totals)

        if invoice.notes:
            story.append(Spacer(1, 0.3 * inch))
            story.append(Paragraph("Notes", heading_style))
            story.append(Paragraph(escape(invoice.notes), body_style))

        story.append(Spacer(1, 0.5 * inch))
        story.append(
            Paragraph(
                f"<i>Thank you for shopping with {escape(invoice.company_name)}.</i>",
                ParagraphStyle(
                    "Footer",
                    parent=body_style,
                    fontSize=8,
                    textColor=colors.grey,
                    alignment=1,
                ),
            )
        )

        doc.build(story, onFirstPage=self._add_page_number, onLaterPages=self._add_page_number)

        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Generated invoice PDF ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    @staticmethod
    def _date(value) -> str:
        return value.strftime("%d/%m/%Y") if value else "-"

    def _add_page_number(self, canvas_obj, doc):
        """Add page numbers to PDF"""
        page_num = canvas_obj.getPageNumber()
        canvas_obj.setFont("Helvetica", 9)
        canvas_obj.setFillColor(colors.grey)
        canvas_obj.drawRightString(
            self.page_width - self.margin, self.margin / 2, f"Page {page_num}"
        )
