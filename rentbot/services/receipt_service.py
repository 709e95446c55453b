"""PDF receipt rendering and delivery."""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from playwright.async_api import Browser, async_playwright

from rentbot.channel.base import ChannelSession
from rentbot.core.config import get_settings
from rentbot.core.exceptions import ReceiptGenerationError
from rentbot.core.logging import get_logger, log_business_event, mask_phone
from rentbot.models import PaymentDetails, PaymentMethod
from rentbot.services.database import DatabaseService
from rentbot.utils.formatting import DEFAULT_TIMEZONE, format_amount, format_long_date, receipt_filename
from rentbot.utils.phone import to_channel_address

logger = get_logger(__name__)

PDF_MIMETYPE = "application/pdf"
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@asynccontextmanager
async def chromium_browser() -> AsyncIterator[Browser]:
    """Launch a headless Chromium for the duration of the block."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        try:
            yield browser
        finally:
            await browser.close()


class PdfRenderer:
    """Prints HTML to an A4 PDF file with headless Chromium."""

    async def render_to_file(self, html: str, path: str) -> None:
        async with chromium_browser() as browser:
            page = await browser.new_page()
            await page.set_content(html, wait_until="networkidle")
            await page.pdf(
                path=path,
                format="A4",
                print_background=True,
                margin={"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"},
            )


class ReceiptTemplate:
    """Fixed HTML receipt layout."""

    def __init__(self, currency: str = "UGX", locale: str = "en-UG", tz: str = DEFAULT_TIMEZONE):
        self.currency = currency
        self.locale = locale
        self.tz = tz
        self._env = Environment(
            loader=PackageLoader("rentbot", "templates"),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    def render(self, payment: PaymentDetails) -> str:
        tenant = payment.tenant
        landlord = tenant.property.landlord
        return self._env.get_template("receipt.html").render(
            receipt_number=payment.receipt_number,
            currency=self.currency,
            amount=format_amount(payment.amount),
            tenant_name=tenant.name,
            property_address=tenant.property.address or "",
            period=payment.period or "",
            payment_date=format_long_date(payment.recorded_at, self.locale, self.tz),
            payment_method=PaymentMethod.label_for(payment.payment_method),
            landlord_name=landlord.name,
            landlord_phone=landlord.phone or "",
            landlord_email=landlord.email,
        )

    def caption(self, payment: PaymentDetails) -> str:
        return (
            "🧾 *Rent Receipt*\n\n"
            f"Tenant: {payment.tenant.name}\n"
            f"Amount: {self.currency} {format_amount(payment.amount)}\n"
            f"Period: {payment.period}\n"
            f"Date: {format_long_date(payment.recorded_at, self.locale, self.tz)}\n\n"
            "Thank you for your payment!"
        )


class ReceiptService:
    """Builds a receipt for a recorded payment and sends it to the tenant."""

    def __init__(
        self,
        database: DatabaseService,
        pdf_renderer: Optional[PdfRenderer] = None,
        template: Optional[ReceiptTemplate] = None,
        tmp_dir: Optional[str] = None,
    ):
        settings = get_settings()
        self.database = database
        self.pdf_renderer = pdf_renderer or PdfRenderer()
        self.template = template or ReceiptTemplate(
            settings.currency_code, settings.date_locale, settings.business_timezone
        )
        self.tmp_dir = tmp_dir or settings.receipt_tmp_dir

    @staticmethod
    def _discard(pdf_path: str, payment_id: str) -> None:
        try:
            if os.path.exists(pdf_path):
                os.remove(pdf_path)
        except OSError as e:
            logger.warning("Could not remove receipt file", payment_id=payment_id, path=pdf_path, error=str(e))

    async def generate_and_send(self, payment_id: str, tenant_phone: str, channel: ChannelSession) -> None:
        """
        Render the receipt for ``payment_id`` and send it to ``tenant_phone``.

        Raises:
            ReceiptGenerationError: If the payment cannot be loaded, rendered or sent
        """
        if not tenant_phone:
            raise ReceiptGenerationError("Tenant has no phone number", payment_id=payment_id)

        try:
            payment = await self.database.get_payment_details(payment_id)
        except Exception as e:
            raise ReceiptGenerationError(f"Payment not found: {e}", payment_id=payment_id) from e
        if payment is None:
            raise ReceiptGenerationError("Payment not found", payment_id=payment_id)

        pdf_path = os.path.join(self.tmp_dir, f"receipt_{payment_id}.pdf")

        try:
            os.makedirs(self.tmp_dir, exist_ok=True)
            html = self.template.render(payment)
            await self.pdf_renderer.render_to_file(html, pdf_path)

            with open(pdf_path, "rb") as f:
                pdf_bytes = f.read()

            await channel.send_document(
                to_channel_address(tenant_phone),
                pdf_bytes,
                filename=receipt_filename(payment.tenant.name, payment.period or ""),
                mimetype=PDF_MIMETYPE,
                caption=self.template.caption(payment),
            )
        except Exception as e:
            logger.error("Receipt generation failed", payment_id=payment_id, error=str(e))
            log_business_event("receipt_failed", payment_id=payment_id, error=str(e))
            raise ReceiptGenerationError(str(e), payment_id=payment_id) from e
        finally:
            self._discard(pdf_path, payment_id)

        logger.info("Receipt sent", payment_id=payment_id, tenant=mask_phone(tenant_phone))
        log_business_event("receipt_sent", payment_id=payment_id, receipt_number=payment.receipt_number)
