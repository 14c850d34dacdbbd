# quotedesk/services/quote_renderer.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

from quotedesk.config import Settings, settings as default_settings
from quotedesk.core.logging_config import logger
from quotedesk.models import Quotation
from quotedesk.web.jinja_filters import FILTERS

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

PDF_CSS = """
@page { size: A4; margin: 1.5cm; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; font-size: 11px; }
.header { page-break-after: avoid; }
.items { page-break-inside: avoid; }
"""


class QuoteRenderer:
    """Renders the customer-facing quotation document (HTML and PDF)."""

    def __init__(
        self,
        templates_dir: Path | str = TEMPLATES_DIR,
        settings: Optional[Settings] = None,
    ):
        self.templates_dir = Path(templates_dir)
        self.settings = settings or default_settings

        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
        )
        self.jinja_env.filters.update(FILTERS)

    def _template_data(self, q: Quotation) -> Dict[str, Any]:
        # only customer-facing figures leave this method; costs and profit
        # columns of the quotation are never handed to the template
        customer = q.customer
        items = [
            {
                "product_name": i.product.name if i.product else "",
                "has_installation": bool(i.product and i.product.has_installation),
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "subtotal": i.subtotal,
            }
            for i in q.items
        ]
        return {
            "company": {
                "name": self.settings.company_name,
                "tax_id": self.settings.company_tax_id,
                "tagline": self.settings.company_tagline,
            },
            "quotation": {
                "number": q.quotation_number,
                "title": q.pdf_title or "Orçamento",
                "created_at": q.created_at,
                "valid_until": q.valid_until,
                "notes": q.notes,
                "shipping_included": q.shipping_included,
                "warranty_text": q.warranty_text or self.settings.default_warranty_text,
                "responsible_name": q.responsible_name,
                "responsible_position": q.responsible_position,
                "subtotal": q.subtotal,
                "discount_percent": q.discount_percent,
                "discount_amount": q.discount_amount,
                "total": q.total,
            },
            "customer": {
                "name": customer.name if customer else "",
                "document": customer.cpf_cnpj if customer else None,
                "email": customer.email if customer else None,
                "phone": customer.phone if customer else None,
                "address": customer.full_address if customer else "",
            },
            "items": items,
            "generated_at": datetime.now(),
        }

    def render_html(self, q: Quotation) -> str:
        template = self.jinja_env.get_template("quotation.html")
        return template.render(**self._template_data(q))

    def render_pdf(self, q: Quotation) -> bytes:
        # weasyprint pulls in native libs (pango/cairo); import on use
        from weasyprint import CSS, HTML
        from weasyprint.text.fonts import FontConfiguration

        html_content = self.render_html(q)
        font_config = FontConfiguration()
        pdf_bytes = HTML(string=html_content).write_pdf(
            stylesheets=[CSS(string=PDF_CSS, font_config=font_config)],
            font_config=font_config,
        )
        logger.info(
            "quotation_pdf_rendered",
            quotation_id=q.id,
            quotation_number=q.quotation_number,
            size=len(pdf_bytes),
        )
        return pdf_bytes
