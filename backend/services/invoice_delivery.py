from typing import List
import logging

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from schemas.invoices import InvoiceLanguage, InvoiceOrder
from services.cart import CartItem
from services.exceptions import InvoiceExportError
from services.invoice import TRANSLATIONS, format_invoice_date, invoice_reference, invoice_total
from utils.formatting import format_currency

logger = logging.getLogger(__name__)

PRINT_HOOK = "<script>window.onload = function () { window.print(); };</script>"


def invoice_filename(order_id, ext: str) -> str:
    return f"invoice_{order_id}.{ext}"


def print_document(html: str) -> str:
    """Return the rendered invoice with a hook that opens the print dialog on load."""
    if "</body>" in html:
        return html.replace("</body>", f"{PRINT_HOOK}\n</body>", 1)
    return html + PRINT_HOOK


class InvoicePDF(FPDF):
    def __init__(self, title: str):
        super().__init__()
        self.invoice_title = title

    def header(self):
        self.set_font('Helvetica', 'B', 16)
        self.cell(0, 10, self.invoice_title, border=0, align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(5)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 10, f'Page {self.page_no()}', border=0, align='C')


def _check_latin1(*texts: str) -> None:
    for text in texts:
        try:
            text.encode('latin-1')
        except UnicodeEncodeError:
            raise InvoiceExportError(
                f"'{text}' cannot be written with the built-in PDF fonts. Use the HTML invoice instead."
            )


def export_pdf(
    order: InvoiceOrder,
    items: List[CartItem],
    language: InvoiceLanguage = InvoiceLanguage.EN,
    currency: str = "MAD",
) -> bytes:
    """
    Build a PDF version of the invoice for download.

    The built-in PDF fonts only cover Latin-1 and cannot shape right-to-left
    scripts, so only the English layout is exported. Arabic invoices are
    delivered as HTML.
    """
    language = InvoiceLanguage(language)
    if language != InvoiceLanguage.EN:
        raise InvoiceExportError("PDF export is only available for English invoices. Use the HTML invoice instead.")

    labels = TRANSLATIONS[language]
    client_name = order.client_name or labels["not_available"]
    _check_latin1(client_name, invoice_reference(order), *(item.name for item in items))

    pdf = InvoicePDF(labels["invoice"])
    pdf.add_page()

    pdf.set_font('Helvetica', '', 12)
    pdf.cell(0, 8, f'{labels["invoice_number"]}: #{invoice_reference(order)}', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 8, f'{labels["date"]}: {format_invoice_date(order, language)}', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 8, f'{labels["client"]}: {client_name}', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)

    # Items Table Header
    pdf.set_font('Helvetica', 'B', 12)
    pdf.cell(90, 10, labels["item"], border=1, align='C')
    pdf.cell(25, 10, labels["quantity"], border=1, align='C')
    pdf.cell(35, 10, labels["price"], border=1, align='C')
    pdf.cell(40, 10, labels["total"], border=1, align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    # Items Table Rows
    pdf.set_font('Helvetica', '', 12)
    for item in items:
        pdf.cell(90, 10, item.name, border=1, align='L')
        pdf.cell(25, 10, str(item.quantity), border=1, align='R')
        pdf.cell(35, 10, format_currency(item.price, currency), border=1, align='R')
        pdf.cell(40, 10, format_currency(item.price * item.quantity, currency), border=1, align='R',
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(6)
    pdf.set_font('Helvetica', 'B', 12)
    pdf.cell(115, 10, '', border=0)
    pdf.cell(35, 10, f'{labels["grand_total"]}:', border=1, align='R')
    pdf.cell(40, 10, format_currency(invoice_total(items), currency), border=1, align='R',
             new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(12)
    pdf.set_font('Helvetica', 'I', 10)
    pdf.cell(0, 10, labels["thank_you"], align='C')

    logger.debug(f"PDF invoice built for order {order.id} with {len(items)} lines")
    return bytes(pdf.output())
