import logging

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig

from config import EMAIL_FROM, EMAIL_FROM_NAME, EMAIL_PORT, EMAIL_SERVER, EMAIL_SUPPRESS_SEND, business_settings

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self):
        self.config = ConnectionConfig(
            MAIL_USERNAME="",
            MAIL_PASSWORD="",
            MAIL_FROM=EMAIL_FROM,
            MAIL_PORT=EMAIL_PORT,
            MAIL_SERVER=EMAIL_SERVER,
            MAIL_FROM_NAME=EMAIL_FROM_NAME,
            MAIL_STARTTLS=False,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=False,
            VALIDATE_CERTS=False,
            SUPPRESS_SEND=1 if EMAIL_SUPPRESS_SEND else 0,
        )
        self.mailer = FastMail(self.config)

    async def send_email(self, to_email: str, subject: str, body: str) -> bool:
        """Send a plain text email. Delivery problems are logged and reported as False."""
        if not to_email:
            return False
        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=body,
            subtype="plain",
        )
        try:
            await self.mailer.send_message(message)
        except Exception:
            logger.exception("Failed to send '%s' email to %s", subject, to_email)
            return False
        return True

    async def send_booking_confirmation_email(self, email: str, booking, warehouse_name: str) -> bool:
        exit_line = f"Expected exit: {booking.expected_exit_date}\n" if booking.expected_exit_date else ""
        return await self.send_email(
            email,
            f"📦 Booking Confirmed - {booking.reference}",
            f"""Hello,

Your warehouse space booking has been confirmed.

Reference: {booking.reference}
Warehouse: {warehouse_name}
Space: {booking.area_requested:,.2f} m² ({booking.space_type})
Entry date: {booking.entry_date}
{exit_line}Status: {booking.status}

You can follow your booking and stock from your dashboard at any time.

Best regards,
The Warehouse Team""",
        )

    async def send_booking_cancelled_email(self, email: str, booking, reason: str = None) -> bool:
        reason_line = f"\nReason: {reason}\n" if reason else ""
        return await self.send_email(
            email,
            f"❌ Booking Cancelled - {booking.reference}",
            f"""Hello,

Your booking {booking.reference} for {booking.area_requested:,.2f} m² has been cancelled and the space released.
{reason_line}
If you did not request this cancellation, please contact our support team.

Best regards,
The Warehouse Team""",
        )

    async def send_quote_email(self, email: str, quote) -> bool:
        currency = business_settings.currency
        return await self.send_email(
            email,
            f"🧾 Your Warehouse Quote {quote.quote_number}",
            f"""Hello {quote.client_name},

Thank you for your enquiry. Your quote is summarised below.

Quote number: {quote.quote_number}
Space: {quote.area_requested:,.2f} m² {quote.space_type} ({quote.tenure} term, band {quote.area_band_name})
Lease: {quote.lease_start} to {quote.lease_end}
Subtotal: {quote.subtotal:,.3f} {currency}
Discount: {quote.discount_amount:,.3f} {currency}
VAT: {quote.vat_amount:,.3f} {currency}
Grand total: {quote.grand_total:,.3f} {currency}
Valid until: {quote.valid_until}

{quote.payment_terms or ""}

Best regards,
The Warehouse Team""",
        )
