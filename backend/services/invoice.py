"""
Invoice rendering.

`render_invoice` turns an order header and its lines into a self-contained
HTML document (inline styles, no external assets) that can be handed straight
to a print dialog or saved as a file. It performs no I/O and reads no clock,
so rendering the same input twice yields the same bytes.
"""
from decimal import Decimal
from html import escape
from typing import Iterable, List

from schemas.invoices import InvoiceLanguage, InvoiceOrder
from services.cart import CartItem
from utils.formatting import format_currency, to_money

TRANSLATIONS = {
    InvoiceLanguage.EN: {
        "dir": "ltr",
        "invoice": "Invoice",
        "invoice_number": "Invoice Number",
        "date": "Date",
        "client": "Client",
        "item": "Item",
        "quantity": "Quantity",
        "price": "Price",
        "total": "Total",
        "grand_total": "Grand Total",
        "thank_you": "Thank you for your business",
        "not_available": "N/A",
        "months": [
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ],
    },
    InvoiceLanguage.AR: {
        "dir": "rtl",
        "invoice": "فاتورة",
        "invoice_number": "رقم الفاتورة",
        "date": "التاريخ",
        "client": "العميل",
        "item": "المنتج",
        "quantity": "الكمية",
        "price": "السعر",
        "total": "المجموع",
        "grand_total": "المجموع الكلي",
        "thank_you": "شكرا لتسوقكم معنا",
        "not_available": "غير متوفر",
        # Moroccan month names
        "months": [
            "يناير", "فبراير", "مارس", "أبريل", "ماي", "يونيو",
            "يوليوز", "غشت", "شتنبر", "أكتوبر", "نونبر", "دجنبر",
        ],
    },
}

INVOICE_CSS = """
    body {{ font-family: Arial, sans-serif; margin: 0; padding: 20px; color: #333; direction: {dir}; text-align: {align}; }}
    .invoice-header {{ text-align: center; margin-bottom: 30px; }}
    .invoice-title {{ font-size: 24px; font-weight: bold; margin-bottom: 5px; }}
    .invoice-details {{ display: flex; justify-content: space-between; margin-bottom: 30px; }}
    .invoice-details div {{ flex: 1; }}
    table {{ width: 100%; border-collapse: collapse; margin-bottom: 30px; }}
    th, td {{ padding: 10px; border-bottom: 1px solid #ddd; text-align: {align}; }}
    th {{ background-color: #f2f2f2; font-weight: bold; }}
    .totals {{ width: 300px; margin-{far_side}: auto; }}
    .totals table {{ margin-bottom: 0; }}
    .grand-total {{ font-weight: bold; font-size: 18px; }}
    .footer {{ margin-top: 50px; text-align: center; color: #777; font-size: 14px; }}
"""


def invoice_total(items: Iterable[CartItem]) -> Decimal:
    return to_money(sum((item.price * item.quantity for item in items), Decimal("0")))


def format_invoice_date(order: InvoiceOrder, language: InvoiceLanguage) -> str:
    if order.created_at is None:
        return "-"
    months = TRANSLATIONS[language]["months"]
    created = order.created_at
    if language == InvoiceLanguage.AR:
        return f"{created.day} {months[created.month - 1]} {created.year}"
    return f"{months[created.month - 1]} {created.day}, {created.year}"


def invoice_reference(order: InvoiceOrder) -> str:
    return order.invoice_number or str(order.id)


def render_invoice(
    order: InvoiceOrder,
    items: List[CartItem],
    language: InvoiceLanguage = InvoiceLanguage.AR,
    currency: str = "MAD",
) -> str:
    language = InvoiceLanguage(language)
    labels = TRANSLATIONS[language]
    is_rtl = labels["dir"] == "rtl"
    css = INVOICE_CSS.format(
        dir=labels["dir"],
        align="right" if is_rtl else "left",
        far_side="right" if is_rtl else "left",
    )
    reference = escape(invoice_reference(order))
    client_name = escape(order.client_name) if order.client_name else labels["not_available"]

    rows = "".join(
        "<tr>"
        f"<td>{escape(item.name)}</td>"
        f"<td>{item.quantity}</td>"
        f"<td>{escape(format_currency(item.price, currency))}</td>"
        f"<td>{escape(format_currency(item.price * item.quantity, currency))}</td>"
        "</tr>"
        for item in items
    )
    grand_total = escape(format_currency(invoice_total(items), currency))

    return (
        "<!DOCTYPE html>\n"
        f'<html lang="{language.value}" dir="{labels["dir"]}">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{labels['invoice']} #{reference}</title>\n"
        f"<style>{css}</style>\n"
        "</head>\n"
        "<body>\n"
        '<div class="invoice-header">'
        f'<div class="invoice-title">{labels["invoice"]}</div>'
        f"<div>#{reference}</div>"
        "</div>\n"
        '<div class="invoice-details">'
        "<div>"
        f"<p><strong>{labels['date']}:</strong> {format_invoice_date(order, language)}</p>"
        f"<p><strong>{labels['invoice_number']}:</strong> #{reference}</p>"
        "</div>"
        f"<div><p><strong>{labels['client']}:</strong> {client_name}</p></div>"
        "</div>\n"
        "<table>"
        "<thead><tr>"
        f"<th>{labels['item']}</th><th>{labels['quantity']}</th>"
        f"<th>{labels['price']}</th><th>{labels['total']}</th>"
        "</tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>\n"
        '<div class="totals"><table>'
        f'<tr class="grand-total"><th>{labels["grand_total"]}:</th><td>{grand_total}</td></tr>'
        "</table></div>\n"
        f'<div class="footer"><p>{labels["thank_you"]}</p></div>\n'
        "</body>\n"
        "</html>\n"
    )


def invoice_items_from_order(order) -> List[CartItem]:
    """Stored order lines (client or supplier order) as invoice lines."""
    return [
        CartItem(id=item.product_id, name=item.product_name, price=item.price, quantity=item.quantity)
        for item in order.items
    ]
