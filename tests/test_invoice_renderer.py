# tests/test_invoice_renderer.py

import sys
from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace
from urllib.parse import parse_qs

import pytest

from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.entities.tax_configuration import TaxConfiguration
from gst_billing.presentation.invoice_renderer import InvoiceRenderer, hex_to_rgba

from conftest import make_invoice, make_line

GST_12 = TaxConfiguration(enabled=True, rate=Decimal("12"))
NO_GST = TaxConfiguration(enabled=False, rate=Decimal("12"))


@pytest.fixture
def settings():
    return BusinessSettings(name="Shree <Traders>", gstin="24ABCDE1234F1Z5", enable_gst=True,
                            upi_id="shree@upi", show_upi_qr=False)


def _invoice(tax=GST_12, **kwargs):
    items = [
        make_line("1", "Sugar", rate="100", quantity="2", unit="Kg", packing="1 kg"),
        make_line("2", "Tea", rate="50.5", quantity="1", unit="Pkt", packing="500 gm"),
    ]
    return make_invoice("7", items=items, tax=tax, **kwargs)


def test_html_carries_header_and_meta(settings):
    html = InvoiceRenderer(settings).render_html(_invoice())

    assert "Shree &lt;Traders&gt;" in html
    assert "<Traders>" not in html
    assert "GSTIN: 24ABCDE1234F1Z5" in html
    assert "05/03/2024" in html
    assert "Ram Traders" in html
    assert "(Surat)" in html
    assert "width: 794px" in html
    assert "height: 1123px" in html


def test_gstin_hidden_when_the_bill_has_no_tax(settings):
    html = InvoiceRenderer(settings).render_html(_invoice(tax=NO_GST))
    assert "GSTIN" not in html


def test_logo_badge_or_image(settings):
    html = InvoiceRenderer(settings).render_html(_invoice())
    assert 'class="logo-badge"' in html

    with_logo = replace(settings, logo_url="https://example.com/logo.png", logo_width=120)
    html = InvoiceRenderer(with_logo).render_html(_invoice())
    assert 'src="https://example.com/logo.png"' in html
    assert "width: 120px" in html


def test_taxed_bill_rows(settings):
    html = InvoiceRenderer(settings).render_html(_invoice())

    assert html.count('class="filler"') == 6
    assert "Subtotal" in html
    assert "Add: CGST (6%)" in html
    assert "Add: SGST (6%)" in html
    assert "Grand Total" in html
    assert "₹280.5" in html
    # the weight summary appears on the subtotal row only
    assert html.count("2 Kg 500 Gm") == 1


def test_untaxed_bill_rows(settings):
    html = InvoiceRenderer(settings).render_html(_invoice(tax=NO_GST))

    assert html.count('class="filler"') == 8
    assert "Subtotal" not in html
    assert "CGST" not in html
    assert "Grand Total" not in html
    assert html.count("2 Kg 500 Gm") == 1


def test_item_cells(settings):
    invoice = make_invoice("8", items=[make_line("1", "Soap & Co", rate="35", quantity="3", unit="Pcs")],
                           tax=NO_GST)
    html = InvoiceRenderer(settings).render_html(invoice)

    assert "Soap &amp; Co" in html
    assert "<td>-</td>" in html
    assert "3 Pcs" in html
    assert html.count('class="filler"') == 9


def test_measure_units_are_not_repeated_in_quantity(settings):
    html = InvoiceRenderer(settings).render_html(_invoice())
    assert "<td>2</td>" in html
    assert "1 Pkt" in html


def test_fractional_quantity_is_printed_exactly(settings):
    invoice = make_invoice("9", items=[make_line("1", "Saffron", rate="1000", quantity="0.125", unit="Gm")],
                           tax=NO_GST)
    renderer = InvoiceRenderer(settings)
    html = renderer.render_html(invoice)

    assert "<td>0.125</td>" in html
    assert "0.13" not in html
    assert "<td><b>125</b></td>" in html
    assert "Saffron: 0.125Gm x 1000 = 125" in renderer.render_text(invoice)


def test_footer_amount_in_words_and_signatory(settings):
    html = InvoiceRenderer(settings).render_html(_invoice())

    assert "Two Hundred and Eighty One Only" in html
    assert "For, Shree &lt;Traders&gt;" in html
    assert "Authorised Signatory" in html

    signed = replace(settings, signature_name="R. Shah")
    assert "For, R. Shah" in InvoiceRenderer(signed).render_html(_invoice())


def test_bank_block_only_with_bank_name(settings):
    assert "Bank Details" not in InvoiceRenderer(settings).render_html(_invoice())

    banked = replace(settings, bank_name="State Bank", bank_account_number="1234", bank_ifsc="SBIN0001")
    html = InvoiceRenderer(banked).render_html(_invoice())
    assert "Bank Details" in html
    assert "SBIN0001" in html


def test_upi_qr_only_when_enabled_with_an_id(settings):
    assert "data:image/png;base64," not in InvoiceRenderer(settings).render_html(_invoice())

    no_id = replace(settings, show_upi_qr=True, upi_id="")
    assert "data:image/png;base64," not in InvoiceRenderer(no_id).render_html(_invoice())

    with_qr = replace(settings, show_upi_qr=True)
    html = InvoiceRenderer(with_qr).render_html(_invoice())
    assert "data:image/png;base64," in html
    assert "UPI: shree@upi" in html


def test_upi_payload(settings):
    payload = InvoiceRenderer(settings).upi_payload(_invoice())
    assert payload == "upi://pay?pa=shree@upi&pn=Shree%20%3CTraders%3E&am=280.50&cu=INR"


def test_upi_payload_keeps_ampersand_inside_payee_name(settings):
    renderer = InvoiceRenderer(replace(settings, name="Ram & Sons #1"))
    payload = renderer.upi_payload(_invoice())

    query = payload.split("?", 1)[1]
    assert query.split("&") == ["pa=shree@upi", "pn=Ram%20%26%20Sons%20%231", "am=280.50", "cu=INR"]
    assert parse_qs(query)["pn"] == ["Ram & Sons #1"]


def test_invalid_theme_color_falls_back(settings):
    html = InvoiceRenderer(replace(settings, theme_color="red; } body { display:none")).render_html(_invoice())

    assert "display:none" not in html
    assert "#dc2626" in html


def test_hex_to_rgba():
    assert hex_to_rgba("#dc2626", 0.3) == "rgba(220,38,38,0.3)"
    assert hex_to_rgba("#fff", 1) == "rgba(255,255,255,1)"
    assert hex_to_rgba("nonsense", 0.5) == "rgba(0,0,0,0.5)"


def test_rendering_is_deterministic(settings):
    renderer = InvoiceRenderer(settings)
    assert renderer.render_html(_invoice()) == renderer.render_html(_invoice())


def test_render_text(settings):
    text = InvoiceRenderer(settings).render_text(_invoice())

    assert text.splitlines() == [
        "*INVOICE No: 7*",
        "Date: 05/03/2024",
        "Customer: Ram Traders",
        "",
        "*Items:*",
        "Sugar(1 kg): 2Kg x 100 = 200",
        "Tea(500 gm): 1Pkt x 50.5 = 50.5",
        "",
        "*TOTAL: ₹280.5*",
    ]


def test_render_email(settings):
    subject, body = InvoiceRenderer(settings).render_email(_invoice())

    assert subject == "Invoice 7 from Shree <Traders>"
    assert body.startswith("Dear Ram Traders,")
    assert "Total Amount: ₹280.5" in body


def test_pdf_file_name():
    invoice = make_invoice("7", customer_name="Ram & Sons")
    assert InvoiceRenderer.pdf_file_name(invoice) == "Invoice_7_Ram___Sons.pdf"
    assert InvoiceRenderer.pdf_file_name(invoice, "Walk-in") == "Invoice_7_Walk_in.pdf"


class _RecordingHTML:
    rendered = []

    def __init__(self, string):
        self.string = string

    def write_pdf(self, target=None):
        _RecordingHTML.rendered.append(self.string)
        return b"%PDF-1.7 " + self.string.encode("utf-8")[:16]


@pytest.fixture
def fake_weasyprint(monkeypatch):
    _RecordingHTML.rendered = []
    monkeypatch.setitem(sys.modules, "weasyprint", SimpleNamespace(HTML=_RecordingHTML))
    return _RecordingHTML


def test_pdf_is_made_from_the_rendered_html(settings, fake_weasyprint, tmp_path):
    renderer = InvoiceRenderer(settings)
    invoice = _invoice()

    data = renderer.pdf_bytes(invoice)
    path = renderer.write_pdf(invoice, str(tmp_path / "bill.pdf"))

    assert fake_weasyprint.rendered == [renderer.render_html(invoice)] * 2
    assert data.startswith(b"%PDF")
    with open(path, "rb") as f:
        assert f.read() == data
