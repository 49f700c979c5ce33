# -*- coding: utf-8 -*-
"""
SendGrid Email Service
Sends transactional emails for the storefront (order history with download links)
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from markupsafe import escape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from storefront.infra.log import get_logger

logger = get_logger('storefront.email')


@dataclass
class EmailSendResult:
    """Provider response reduced to what the handlers need."""
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def format_price(price_in_cents: int) -> str:
    return f"${price_in_cents / 100:,.2f}"


class EmailService:
    """Service for sending emails via SendGrid"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key or os.getenv('SENDGRID_API_KEY')
        self.from_email = from_email or os.getenv('SENDER_EMAIL', 'support@example.com')
        self.from_name = from_name or os.getenv('SENDER_NAME', 'Support')
        self.base_url = (base_url or os.getenv('STOREFRONT_BASE_URL', 'http://localhost:3000')).rstrip('/')

        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not set - emails will not be sent")
            self.client = None
        else:
            self.client = SendGridAPIClient(self.api_key)

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> EmailSendResult:
        """
        Send an email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML email body
            text_content: Plain text email body (optional)

        Returns:
            EmailSendResult with ``error`` set when the provider rejected the
            message or could not be reached
        """
        if not self.client:
            logger.log_email_event('send', success=False, subject=subject,
                                   reason='not_configured')
            return EmailSendResult(error="Email provider not configured")

        message = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(to_email),
            subject=subject,
            html_content=Content("text/html", html_content)
        )
        if text_content:
            message.add_content(Content("text/plain", text_content))

        try:
            response = self.client.send(message)
        except Exception as e:
            # python_http_client raises HTTPError subclasses for 4xx/5xx
            status_code = getattr(e, 'status_code', None)
            logger.log_email_event('send', success=False, subject=subject,
                                   status_code=status_code, reason=str(e))
            return EmailSendResult(error=str(e), status_code=status_code)

        if response.status_code in (200, 201, 202):
            logger.log_email_event('send', success=True, subject=subject,
                                   status_code=response.status_code)
            return EmailSendResult(status_code=response.status_code)

        logger.log_email_event('send', success=False, subject=subject,
                               status_code=response.status_code)
        return EmailSendResult(
            error=f"SendGrid returned {response.status_code}",
            status_code=response.status_code,
        )

    async def send_email_async(self, *args, **kwargs) -> EmailSendResult:
        """Run the blocking SendGrid call off the event loop."""
        return await asyncio.to_thread(self.send_email, *args, **kwargs)

    def download_url(self, download_verification_id: str) -> str:
        return f"{self.base_url}/products/download/{download_verification_id}"

    def render_order_history(self, entries: Sequence, expires_in_hours: int = 24) -> tuple:
        """
        Render the order history email.

        Args:
            entries: OrderHistoryEntry items, one per past order
            expires_in_hours: lifetime of the download links, for the footer

        Returns:
            (html_content, text_content)
        """
        footer = f"Download links expire {expires_in_hours} hours after this email was sent."
        html_rows = []
        text_rows = []
        for entry in entries:
            product = entry.product
            url = self.download_url(entry.download_verification_id)
            purchased = entry.created_at.strftime('%B %d, %Y')
            html_rows.append(f"""
                <div class="order">
                    <p class="meta">Order ID: {escape(entry.id)}<br>
                    Purchased On: {purchased}<br>
                    Price Paid: {format_price(entry.price_paid_in_cents)}</p>
                    <img src="{escape(self.base_url + product.image_path)}" alt="{escape(product.name)}" width="100%">
                    <h3>{escape(product.name)}</h3>
                    <a href="{escape(url)}" class="button">Download</a>
                    <p>{escape(product.description)}</p>
                </div>
            """)
            text_rows.append(
                f"- {product.name} (order {entry.id}, {purchased}, "
                f"{format_price(entry.price_paid_in_cents)})\n  Download: {url}"
            )

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{
                    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
                    line-height: 1.6;
                    color: #333;
                    max-width: 600px;
                    margin: 0 auto;
                    padding: 20px;
                }}
                .order {{
                    border-bottom: 1px solid #eee;
                    padding: 20px 0;
                }}
                .meta {{
                    color: #666;
                    font-size: 14px;
                }}
                .button {{
                    display: inline-block;
                    background: #111;
                    color: white;
                    padding: 12px 30px;
                    text-decoration: none;
                    border-radius: 5px;
                    margin: 10px 0;
                }}
            </style>
        </head>
        <body>
            <h1>Order History</h1>
            {''.join(html_rows)}
            <p class="meta">{footer}</p>
        </body>
        </html>
        """

        text_content = "Order History\n\n" + "\n\n".join(text_rows) + \
            f"\n\n{footer}\n"

        return html_content, text_content

    async def send_order_history(self, to_email: str, entries: Sequence,
                                 expires_in_hours: int = 24) -> EmailSendResult:
        """Send the order history email for a customer."""
        html_content, text_content = self.render_order_history(entries, expires_in_hours)
        return await self.send_email_async(
            to_email, "Order History", html_content, text_content)
