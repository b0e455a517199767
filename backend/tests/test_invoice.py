from datetime import datetime
from decimal import Decimal

import pytest

from schemas.invoices import InvoiceLanguage, InvoiceOrder
from services.cart import Cart, CartItem
from services.exceptions import InvoiceExportError
from services.invoice import format_invoice_date, render_invoice
from services.invoice_delivery import export_pdf, invoice_filename, print_document


@pytest.fixture
def order():
    return InvoiceOrder(
        id=7,
        invoice_number="INV-0007",
        client_name="Sara",
        created_at=datetime(2026, 10, 19, 9, 30),
        total_amount=Decimal("1440.00"),
    )


@pytest.fixture
def items():
    return [
        CartItem(id="1", name="A", price=Decimal("70"), quantity=2),
        CartItem(id="4", name="B", price=Decimal("1300"), quantity=1),
    ]


def test_english_invoice_shows_items_and_grand_total(order, items):
    cart = Cart(items)
    assert cart.total() == Decimal("1440.00")

    html = render_invoice(order, cart.items, language="en")

    assert "1440.00" in html
    assert "<td>A</td>" in html
    assert "<td>B</td>" in html
    assert 'dir="ltr"' in html
    assert "Grand Total" in html
    assert "#INV-0007" in html


def test_grand_total_is_recomputed_from_lines(order):
    order = order.model_copy(update={"total_amount": Decimal("999")})
    items = [CartItem(id=1, name="Soap", price=Decimal("25"), quantity=2)]

    html = render_invoice(order, items, language=InvoiceLanguage.EN, currency="MAD")

    assert "50.00 MAD" in html
    assert "999" not in html


def test_rendering_is_idempotent(order, items):
    first = render_invoice(order, items, language=InvoiceLanguage.AR)
    second = render_invoice(order, items, language=InvoiceLanguage.AR)
    assert first == second


def test_arabic_invoice_is_right_to_left(order, items):
    html = render_invoice(order, items, language=InvoiceLanguage.AR)

    assert 'dir="rtl"' in html
    assert 'lang="ar"' in html
    assert "فاتورة" in html
    assert "19 أكتوبر 2026" in html


def test_missing_client_and_date_fall_back(items):
    bare = InvoiceOrder(id=3)
    html = render_invoice(bare, items, language=InvoiceLanguage.EN)

    assert "N/A" in html
    assert "#3" in html
    assert format_invoice_date(bare, InvoiceLanguage.EN) == "-"


def test_item_names_are_html_escaped(order):
    items = [CartItem(id=1, name="<b>Bold</b> & Co", price=Decimal("1"), quantity=1)]
    html = render_invoice(order, items, language=InvoiceLanguage.EN)

    assert "&lt;b&gt;Bold&lt;/b&gt; &amp; Co" in html
    assert "<b>Bold</b>" not in html


def test_english_date_format(order):
    assert format_invoice_date(order, InvoiceLanguage.EN) == "October 19, 2026"


def test_print_document_adds_print_hook(order, items):
    html = render_invoice(order, items, language=InvoiceLanguage.EN)
    printable = print_document(html)

    assert "window.print()" in printable
    assert printable.index("window.print()") < printable.index("</body>")


def test_invoice_filename():
    assert invoice_filename(12, "html") == "invoice_12.html"
    assert invoice_filename(12, "pdf") == "invoice_12.pdf"


def test_pdf_export_produces_pdf_bytes(order, items):
    content = export_pdf(order, items, language=InvoiceLanguage.EN)
    assert content.startswith(b"%PDF")


def test_pdf_export_refuses_arabic(order, items):
    with pytest.raises(InvoiceExportError):
        export_pdf(order, items, language=InvoiceLanguage.AR)


def test_pdf_export_refuses_non_latin_text(order):
    items = [CartItem(id=1, name="زيت", price=Decimal("10"), quantity=1)]
    with pytest.raises(InvoiceExportError):
        export_pdf(order, items, language=InvoiceLanguage.EN)
