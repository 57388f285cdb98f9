"""PDF documents for order fulfilment: invoices and shipping labels.

Documents are built as HTML and converted to PDF with weasyprint.
Requires: pip install weasyprint

Note: weasyprint requires system dependencies (cairo, pango).
On Ubuntu/Debian: apt-get install libcairo2 libpango-1.0-0 libpangocairo-1.0-0
On macOS: brew install cairo pango
"""

from html import escape
from typing import Optional

from storefront.db.models import Address, Order
from storefront.logging_config import get_logger
from storefront.services.pricing import calculate_tax_amount

logger = get_logger(__name__)

INVOICE_PAGE_SIZE = "A4"
# 100 x 150 mm thermal label (283.46 x 425.2 pt)
LABEL_PAGE_SIZE = "100mm 150mm"


def format_money(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}${cents // 100:,}.{cents % 100:02d}"


def _customer_name(order: Order, address: Optional[Address]) -> str:
    if address:
        return f"{address.first_name} {address.last_name}"
    return order.user.full_name or order.user.email


def _address_lines(address: Address) -> list[str]:
    return [
        address.full_address,
        f"{address.neighborhood}, {address.district}",
        address.city,
    ]


def render_pdf(html_content: str, css: str) -> bytes:
    """Convert HTML to PDF bytes.

    Raises:
        ImportError: If weasyprint is not installed
    """
    try:
        from weasyprint import CSS, HTML
    except ImportError:
        raise ImportError(
            "PDF generation requires weasyprint. "
            "Install with: pip install weasyprint\n"
            "Note: weasyprint requires system dependencies (cairo, pango). "
            "See https://weasyprint.org/docs/install/"
        )

    return HTML(string=html_content).write_pdf(stylesheets=[CSS(string=css)])


class InvoiceBuilder:
    """Build the customer invoice for an order.

    The order must have ``user`` and ``items`` (with ``product``) loaded.
    Shipping is derived from the stored total, since the order keeps the
    amount actually charged rather than the settings at purchase time.
    """

    def __init__(self, store_name: str, tax_percent: int = 0):
        self.store_name = store_name
        self.tax_percent = tax_percent

    def build_html(self, order: Order, address: Optional[Address]) -> str:
        subtotal = sum(item.line_total for item in order.items)
        shipping = max(order.total - subtotal, 0)
        tax_amount = calculate_tax_amount(subtotal, self.tax_percent)

        rows = "\n".join(
            f"""
            <tr>
              <td>{escape(item.product.title)}</td>
              <td class="num">{item.quantity}</td>
              <td class="num">{format_money(item.price)}</td>
              <td class="num">{format_money(item.line_total)}</td>
            </tr>"""
            for item in order.items
        )

        if address:
            billing = "<br>".join(escape(line) for line in _address_lines(address))
            phone = escape(address.phone)
        else:
            billing = "No address on file"
            phone = escape(order.user.phone or "-")

        return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Invoice {escape(order.order_number or '')}</title></head>
<body>
  <header>
    <h1>{escape(self.store_name)}</h1>
    <p class="subtitle">Invoice</p>
  </header>

  <section class="meta">
    <div>
      <h2>Order Information</h2>
      <p>Order Number: {escape(order.order_number or str(order.id))}</p>
      <p>Date: {order.created_at:%Y-%m-%d}</p>
      <p>Status: {order.status.value}</p>
    </div>
    <div>
      <h2>Customer</h2>
      <p>{escape(_customer_name(order, address))}</p>
      <p>{escape(order.user.email)}</p>
      <p>Phone: {phone}</p>
    </div>
    <div>
      <h2>Billing Address</h2>
      <p>{billing}</p>
    </div>
  </section>

  <table class="items">
    <thead>
      <tr><th>Product</th><th class="num">Qty</th><th class="num">Unit Price</th><th class="num">Total</th></tr>
    </thead>
    <tbody>{rows}
    </tbody>
  </table>

  <table class="totals">
    <tr><td>Subtotal</td><td class="num">{format_money(subtotal)}</td></tr>
    <tr><td>Shipping</td><td class="num">{"Free" if shipping == 0 else format_money(shipping)}</td></tr>
    <tr class="grand"><td>Total</td><td class="num">{format_money(order.total)}</td></tr>
    <tr class="note"><td>Includes tax ({self.tax_percent}%)</td><td class="num">{format_money(tax_amount)}</td></tr>
  </table>

  <footer>Thank you for your purchase!</footer>
</body>
</html>"""

    @staticmethod
    def css() -> str:
        return f"""
@page {{ size: {INVOICE_PAGE_SIZE}; margin: 20mm; }}
body {{ font-family: Helvetica, Arial, sans-serif; font-size: 10pt; color: #111827; }}
header {{ text-align: center; margin-bottom: 12mm; }}
header h1 {{ font-size: 24pt; margin: 0; }}
.subtitle {{ margin: 2mm 0 0; color: #6b7280; }}
.meta {{ display: flex; justify-content: space-between; margin-bottom: 8mm; }}
.meta h2 {{ font-size: 10pt; margin: 0 0 2mm; }}
.meta p {{ margin: 0 0 1mm; }}
table {{ width: 100%; border-collapse: collapse; }}
.items th {{ background: #f3f4f6; text-align: left; padding: 2mm; }}
.items td {{ border-bottom: 1px solid #e5e7eb; padding: 2mm; }}
.num {{ text-align: right; }}
.totals {{ width: 45%; margin-left: auto; margin-top: 6mm; }}
.totals td {{ padding: 1mm 2mm; }}
.totals .grand td {{ font-weight: bold; border-top: 1px solid #111827; }}
.totals .note td {{ color: #6b7280; font-size: 8pt; }}
footer {{ margin-top: 15mm; text-align: center; color: #6b7280; }}
"""

    def render(self, order: Order, address: Optional[Address]) -> bytes:
        pdf = render_pdf(self.build_html(order, address), self.css())
        logger.info(f"Invoice generated for order {order.order_number}")
        return pdf


class ShippingLabelBuilder:
    """Build a 100 x 150 mm shipping label for an order."""

    def __init__(self, store_name: str):
        self.store_name = store_name

    def build_html(self, order: Order, address: Address) -> str:
        lines = "<br>".join(escape(line) for line in _address_lines(address))
        item_count = sum(item.quantity for item in order.items)
        return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Label {escape(order.order_number or '')}</title></head>
<body>
  <div class="from">FROM: {escape(self.store_name)}</div>
  <div class="to">
    <div class="label">SHIP TO</div>
    <div class="name">{escape(address.first_name)} {escape(address.last_name)}</div>
    <div>{lines}</div>
    <div>Tel: {escape(address.phone)}</div>
  </div>
  <div class="order">
    <div>Order #{escape(order.order_number or str(order.id))}</div>
    <div>{item_count} item(s)</div>
    <div>{order.created_at:%Y-%m-%d}</div>
  </div>
</body>
</html>"""

    @staticmethod
    def css() -> str:
        return f"""
@page {{ size: {LABEL_PAGE_SIZE}; margin: 6mm; }}
body {{ font-family: Helvetica, Arial, sans-serif; font-size: 10pt; }}
.from {{ border-bottom: 2px solid #000; padding-bottom: 3mm; font-weight: bold; }}
.to {{ padding: 5mm 0; border-bottom: 2px solid #000; }}
.to .label {{ font-size: 8pt; color: #444; }}
.to .name {{ font-size: 14pt; font-weight: bold; margin: 2mm 0; }}
.order {{ padding-top: 4mm; font-size: 12pt; }}
"""

    def render(self, order: Order, address: Address) -> bytes:
        pdf = render_pdf(self.build_html(order, address), self.css())
        logger.info(f"Shipping label generated for order {order.order_number}")
        return pdf
