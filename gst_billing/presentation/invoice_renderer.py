# gst_billing/presentation/invoice_renderer.py

import base64
import io
import re
from html import escape
from typing import List, Optional, Tuple
from urllib.parse import quote

import qrcode

from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.entities.invoice_entity import InvoiceEntity
from gst_billing.business_logic.invoice_calculator import calculate_totals, quantity_summary
from gst_billing.config import CURRENCY_SYMBOL, DEFAULT_CURRENCY
from gst_billing.constants import (
    A4_WIDTH_PX, A4_HEIGHT_PX, MIN_ROWS_WITH_TAX, MIN_ROWS_WITHOUT_TAX,
    MEASURE_UNITS, INVOICE_DECLARATION, DEFAULT_THEME_COLOR, DEFAULT_LOGO_WIDTH, TaxComponent
)
from gst_billing.utils.money import amount_in_words, format_amount, format_quantity

import logging
logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

def hex_to_rgba(hex_color: str, alpha: float) -> str:
    """#rgb / #rrggbb to an rgba() string; anything else reads as black."""
    r = g = b = 0
    value = (hex_color or "").strip()
    try:
        if len(value) == 4 and value.startswith("#"):
            r, g, b = (int(ch * 2, 16) for ch in value[1:])
        elif len(value) == 7 and value.startswith("#"):
            r, g, b = (int(value[i:i + 2], 16) for i in (1, 3, 5))
    except ValueError:
        r = g = b = 0
    return f"rgba({r},{g},{b},{alpha})"


class InvoiceRenderer:
    """
    Lays a bill out as one self-contained HTML page of fixed A4 pixel size.
    The PDF and printing both come from this string through weasyprint;
    the on-screen preview shows the same string in a QTextEdit.

    Business identity comes from the settings given here; every figure and
    the tax switch come from the invoice itself, so a bill from history
    prints with the rate it was saved under.
    """

    def __init__(self, settings: BusinessSettings):
        self.settings = settings

    # --- helpers ---
    def _money(self, value) -> str:
        return f"{CURRENCY_SYMBOL}{format_amount(value)}"

    def _quantity_cell(self, item) -> str:
        qty = format_quantity(item.quantity)
        if item.unit in MEASURE_UNITS:
            return qty
        return f"{qty} {escape(item.unit)}"

    def upi_payload(self, invoice: InvoiceEntity) -> str:
        """UPI deep link; payee name and VPA are percent-encoded so "&" or spaces cannot break the query."""
        return (f"upi://pay?pa={quote(self.settings.upi_id, safe='@')}&pn={quote(self.settings.name)}"
                f"&am={invoice.total:.2f}&cu={DEFAULT_CURRENCY}")

    def upi_qr_data_uri(self, invoice: InvoiceEntity) -> str:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=2,
        )
        qr.add_data(self.upi_payload(invoice))
        qr.make(fit=True)
        qr_img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        qr_img.save(buffer)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def _css(self) -> str:
        theme = self.settings.theme_color or DEFAULT_THEME_COLOR
        if not _HEX_COLOR_RE.match(theme):
            logger.warning(f"Theme color {theme!r} is not a hex color; using {DEFAULT_THEME_COLOR}.")
            theme = DEFAULT_THEME_COLOR
        light_bg = hex_to_rgba(theme, 0.05)
        light_border = hex_to_rgba(theme, 0.3)
        faint_border = hex_to_rgba(theme, 0.1)
        return f"""
            @page {{ size: A4; margin: 0; }}
            body {{
                margin: 0;
                font-family: 'Times New Roman', Georgia, serif;
                color: {theme};
                background-color: #fff;
            }}
            .page {{
                width: {A4_WIDTH_PX}px;
                height: {A4_HEIGHT_PX}px;
                box-sizing: border-box;
                padding: 16px;
            }}
            .frame {{ border: 2px solid {theme}; height: 100%; box-sizing: border-box; position: relative; }}
            .header {{ border-bottom: 2px solid {theme}; padding: 16px; text-align: center; position: relative; min-height: 110px; }}
            .logo-img {{ position: absolute; left: 16px; top: 16px; max-height: 120px; }}
            .logo-badge {{
                position: absolute; left: 16px; top: 16px; width: 64px; height: 64px;
                border: 2px solid {theme}; border-radius: 50%;
                font-size: 24px; font-weight: bold; line-height: 64px; text-align: center;
            }}
            .biz-name {{ font-size: 44px; font-weight: bold; letter-spacing: 2px; margin: 4px 0; }}
            .biz-sub {{ font-size: 22px; font-weight: bold; margin: 0; }}
            .biz-line {{ font-size: 13px; margin: 4px 0 0 0; }}
            .gstin {{ font-weight: bold; }}
            table {{ width: 100%; border-collapse: collapse; }}
            .meta td {{ padding: 6px 8px; border-bottom: 2px solid {theme}; }}
            .meta .label {{ font-weight: bold; }}
            .meta .value {{ font-size: 18px; color: #0f172a; }}
            .meta .right {{ text-align: right; }}
            .meta .split {{ border-right: 1px solid {theme}; }}
            .customer {{ border-bottom: 1px dashed {light_border}; }}
            .items th {{
                background-color: {light_bg}; font-weight: bold; text-align: center;
                border-bottom: 2px solid {theme}; border-right: 1px solid {theme}; padding: 4px;
            }}
            .items td {{
                border-right: 1px solid {theme}; border-bottom: 1px solid {light_border};
                padding: 4px; text-align: center; color: #0f172a; height: 26px;
            }}
            .items th:last-child, .items td:last-child {{ border-right: none; }}
            .items td.details {{ text-align: left; padding-left: 12px; }}
            .items tr.filler td {{ border-bottom: 1px solid {faint_border}; }}
            .items tr.summary td {{ border-top: 1px solid {theme}; font-weight: bold; }}
            .items tr.summary td.caption {{ text-align: right; padding-right: 16px; color: {theme}; }}
            .items tr.grand td {{ font-size: 17px; }}
            .footer {{ border-top: 2px solid {theme}; }}
            .words {{ padding: 8px; border-bottom: 1px solid {light_border}; }}
            .words .label {{ font-weight: bold; font-size: 13px; display: block; }}
            .words .value {{ font-weight: bold; font-style: italic; color: #0f172a; }}
            .bank {{ padding: 8px; font-size: 13px; vertical-align: top; }}
            .bank h3 {{ font-size: 13px; text-decoration: underline; margin: 0 0 4px 0; }}
            .qr {{ padding: 8px; text-align: center; border-left: 1px solid {light_border}; width: 120px; }}
            .qr img {{ width: 96px; height: 96px; border: 1px solid {theme}; }}
            .qr .caption {{ font-size: 10px; font-weight: bold; display: block; }}
            .qr .upi {{ font-size: 8px; display: block; }}
            .total-box {{ font-size: 20px; font-weight: bold; text-align: right; padding: 8px; background-color: {light_bg}; }}
            .total-value {{ font-size: 24px; font-weight: bold; text-align: center; color: #0f172a; }}
            .signatures {{ border-top: 2px solid {theme}; padding: 24px 12px 12px 12px; }}
            .declaration {{ font-size: 11px; font-style: italic; color: #64748b; width: 40%; vertical-align: bottom; }}
            .sign {{ text-align: center; width: 35%; vertical-align: bottom; font-size: 13px; }}
            .sign img {{ max-height: 48px; }}
            .sign .line {{ border-top: 1px solid {light_border}; margin-top: 8px; }}
        """

    def _header_html(self, invoice: InvoiceEntity) -> str:
        s = self.settings
        if s.logo_url:
            logo = (f'<img class="logo-img" src="{escape(s.logo_url)}" alt="Logo" '
                    f'style="width: {s.logo_width or DEFAULT_LOGO_WIDTH}px;">')
        else:
            logo = f'<div class="logo-badge">{escape(s.logo_initial)}</div>'
        gstin = ""
        if invoice.tax.enabled and s.gstin:
            gstin = f'<p class="biz-line gstin">GSTIN: {escape(s.gstin)}</p>'
        return f"""
            <div class="header">
                {logo}
                <div class="biz-name">{escape(s.name)}</div>
                <div class="biz-sub">{escape(s.sub_name)}</div>
                <p class="biz-line">{escape(s.address)} M.: {escape(s.mobile)}</p>
                {gstin}
            </div>
        """

    def _meta_html(self, invoice: InvoiceEntity) -> str:
        city = f"({escape(invoice.customer_city)})" if invoice.customer_city else ""
        return f"""
            <table class="meta">
                <tr>
                    <td class="split"><span class="label">Bill No.:</span> <span class="value">{escape(str(invoice.id))}</span></td>
                    <td class="right"><span class="label">Date:</span> <span class="value">{escape(invoice.invoice_date)}</span></td>
                </tr>
            </table>
            <table class="meta">
                <tr>
                    <td style="width: 8%;" class="label">M/s.</td>
                    <td class="value customer">{escape(invoice.customer_name)}</td>
                    <td class="value customer" style="width: 33%; text-align: center;">{city}</td>
                </tr>
            </table>
        """

    def _items_html(self, invoice: InvoiceEntity) -> str:
        tax_on = invoice.tax.enabled
        totals = calculate_totals(invoice.items, invoice.tax)
        summary = escape(quantity_summary(totals))

        parts: List[str] = ["""
            <table class="items">
                <thead><tr>
                    <th style="width: 6%;">No.</th>
                    <th>Details</th>
                    <th style="width: 14%;">Packing</th>
                    <th style="width: 11%;">Qty</th>
                    <th style="width: 11%;">Rate</th>
                    <th style="width: 14%;">Amount</th>
                </tr></thead>
                <tbody>
        """]
        for index, item in enumerate(invoice.items, start=1):
            parts.append(f"""
                <tr>
                    <td>{index}</td>
                    <td class="details">{escape(item.name)}</td>
                    <td>{escape(item.packing) if item.packing else '-'}</td>
                    <td>{self._quantity_cell(item)}</td>
                    <td>{format_amount(item.rate)}</td>
                    <td><b>{format_amount(item.amount)}</b></td>
                </tr>""")

        min_rows = MIN_ROWS_WITH_TAX if tax_on else MIN_ROWS_WITHOUT_TAX
        for _ in range(max(0, min_rows - len(invoice.items))):
            parts.append('<tr class="filler"><td>&nbsp;</td><td></td><td></td><td></td><td></td><td></td></tr>')

        if tax_on:
            half = format_amount(invoice.tax.half_rate)
            parts.append(f"""
                <tr class="summary"><td></td><td class="caption">Subtotal</td>
                    <td colspan="2">{summary}</td><td></td><td>{self._money(invoice.subtotal)}</td></tr>
                <tr class="summary"><td></td><td class="caption">Add: {TaxComponent.CGST.value} ({half}%)</td>
                    <td colspan="2"></td><td></td><td>{self._money(invoice.cgst_amount)}</td></tr>
                <tr class="summary"><td></td><td class="caption">Add: {TaxComponent.SGST.value} ({half}%)</td>
                    <td colspan="2"></td><td></td><td>{self._money(invoice.sgst_amount)}</td></tr>
                <tr class="summary grand"><td></td><td class="caption">Grand Total</td>
                    <td colspan="2"></td><td></td><td>{self._money(invoice.total)}</td></tr>
            """)
        else:
            parts.append(f"""
                <tr class="summary grand"><td></td><td class="caption">Total</td>
                    <td colspan="2">{summary}</td><td></td><td>{self._money(invoice.total)}</td></tr>
            """)
        parts.append("</tbody></table>")
        return "".join(parts)

    def _footer_html(self, invoice: InvoiceEntity) -> str:
        s = self.settings
        bank = ""
        if s.bank_name:
            bank = f"""
                <h3>Company's Bank Details</h3>
                <div>Bank Name: <b>{escape(s.bank_name)}</b></div>
                <div>A/c No.: <b>{escape(s.bank_account_number)}</b></div>
                <div>Branch &amp; IFS: <b>{escape(s.bank_branch)} {escape(s.bank_ifsc)}</b></div>
            """
        qr = ""
        if s.show_upi_qr and s.upi_id:
            qr = f"""
                <td class="qr">
                    <img src="{self.upi_qr_data_uri(invoice)}" alt="UPI QR Code">
                    <span class="caption">Scan to Pay: {self._money(invoice.total)}</span>
                    <span class="upi">UPI: {escape(s.upi_id)}</span>
                </td>
            """
        signature_img = ""
        if s.signature_url:
            signature_img = f'<div><img src="{escape(s.signature_url)}" alt="Signature"></div>'

        return f"""
            <div class="footer">
                <table>
                    <tr>
                        <td style="border-right: 2px solid; vertical-align: top; padding: 0;">
                            <div class="words">
                                <span class="label">Amount Chargeable (in words):</span>
                                <span class="value">{escape(amount_in_words(invoice.total))}</span>
                            </div>
                            <table><tr><td class="bank">{bank}</td>{qr}</tr></table>
                        </td>
                        <td style="width: 33%; vertical-align: bottom; padding: 0;">
                            <table><tr>
                                <td class="total-box">Total</td>
                                <td class="total-value">{self._money(invoice.total)}</td>
                            </tr></table>
                        </td>
                    </tr>
                </table>
                <table class="signatures">
                    <tr>
                        <td class="declaration">Declaration:<br>{escape(INVOICE_DECLARATION)}</td>
                        <td></td>
                        <td class="sign">
                            <b>For, {escape(s.signature_name or s.name)}</b>
                            {signature_img}
                            <div class="line"></div>
                            <span>Authorised Signatory</span>
                        </td>
                    </tr>
                </table>
            </div>
        """

    # --- public API ---
    def render_html(self, invoice: InvoiceEntity) -> str:
        html_parts = [
            f"<html><head><meta charset='UTF-8'><style>{self._css()}</style></head><body>",
            "<div class='page'><div class='frame'>",
            self._header_html(invoice),
            self._meta_html(invoice),
            self._items_html(invoice),
            self._footer_html(invoice),
            "</div></div></body></html>",
        ]
        return "".join(html_parts)

    def pdf_bytes(self, invoice: InvoiceEntity) -> bytes:
        """The A4 PDF of render_html(); both Download PDF and Print use it."""
        from weasyprint import HTML
        return HTML(string=self.render_html(invoice)).write_pdf()

    def write_pdf(self, invoice: InvoiceEntity, file_path: str) -> str:
        logger.info(f"Generating PDF for bill {invoice.id} at: {file_path}")
        with open(file_path, "wb") as f:
            f.write(self.pdf_bytes(invoice))
        return file_path

    def render_text(self, invoice: InvoiceEntity) -> str:
        """Plain-text summary for pasting into a chat message."""
        lines = [
            f"*INVOICE No: {invoice.id}*",
            f"Date: {invoice.invoice_date}",
            f"Customer: {invoice.customer_name}",
            "",
            "*Items:*",
        ]
        for item in invoice.items:
            packing = f"({item.packing})" if item.packing else ""
            lines.append(f"{item.name}{packing}: {format_quantity(item.quantity)}{item.unit} x "
                         f"{format_amount(item.rate)} = {format_amount(item.amount)}")
        lines.append("")
        lines.append(f"*TOTAL: {self._money(invoice.total)}*")
        return "\n".join(lines)

    def render_email(self, invoice: InvoiceEntity) -> Tuple[str, str]:
        subject = f"Invoice {invoice.id} from {self.settings.name}"
        body = (f"Dear {invoice.customer_name},\n\n"
                f"Please find the invoice details below:\n\n"
                f"Total Amount: {self._money(invoice.total)}\n\n"
                f"I have attached the PDF invoice to this email.\n\nThank you.")
        return subject, body

    @staticmethod
    def pdf_file_name(invoice: InvoiceEntity, customer_name: Optional[str] = None) -> str:
        name = customer_name if customer_name is not None else invoice.customer_name
        safe_name = re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE)
        return f"Invoice_{invoice.id}_{safe_name}.pdf"
