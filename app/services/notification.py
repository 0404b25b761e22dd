"""
Email notifications for registrations and new listings.

Delivery is best effort: handlers schedule sends as background tasks through
dispatch_notification, which logs failures instead of raising them.
"""

from email.message import EmailMessage
from typing import Any, Awaitable, Callable, Optional
from app.config import Settings, settings as app_settings
from app.schemas.property import PropertyResponse
import asyncio
import logging
import smtplib

logger = logging.getLogger(__name__)


class NotificationService:
    """Composes and sends transactional emails over SMTP."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or app_settings

    async def send_email(self, to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Returns:
            True if the message was handed to the SMTP server,
            False if mail is not configured
        """
        if not self.config.mail_enabled:
            logger.info(f"Mail disabled, not sending '{subject}' to {to}")
            return False

        message = EmailMessage()
        message["From"] = self.config.mail_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._deliver, message)
        logger.info(f"Sent '{subject}' to {to}")
        return True

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as smtp:
            if self.config.smtp_use_tls:
                smtp.starttls()
            if self.config.smtp_username:
                smtp.login(self.config.smtp_username, self.config.smtp_password)
            smtp.send_message(message)

    async def send_welcome_email(self, email: str, name: str) -> bool:
        body = (
            f"Hi {name},\n\n"
            f"Welcome to {self.config.app_name}! Your account is ready and you can "
            "now browse and enquire about listings.\n"
        )
        return await self.send_email(email, f"Welcome to {self.config.app_name}", body)

    async def send_property_listed_email(
        self,
        listing: PropertyResponse,
        email: str,
        name: Optional[str]
    ) -> bool:
        """Confirm to the listing contact that the property is live."""
        body = (
            f"Hi {name or 'there'},\n\n"
            f"Your property \"{listing.title}\" in {listing.location} is now live.\n"
            f"Price: {listing.price}\n"
            f"Listing ID: {listing.id}\n"
        )
        return await self.send_email(email, "Your property is now listed", body)

    async def send_admin_notification(
        self,
        listing: PropertyResponse,
        owner_name: Optional[str],
        owner_email: Optional[str]
    ) -> bool:
        """Tell the site administrator a listing was created."""
        body = (
            "A new property has been listed.\n\n"
            f"Title: {listing.title}\n"
            f"Type: {listing.type.value}\n"
            f"Location: {listing.location}\n"
            f"Price: {listing.price}\n"
            f"Contact: {owner_name or '-'} <{owner_email or '-'}>\n"
            f"Listing ID: {listing.id}\n"
        )
        return await self.send_email(self.config.admin_email, "New property listed", body)


async def dispatch_notification(
    send: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any
) -> None:
    """
    Run a notification coroutine, logging and discarding any failure.
    Used as a background task so the response never waits on mail delivery.
    """
    try:
        await send(*args, **kwargs)
    except Exception as e:
        logger.error(
            f"Notification {getattr(send, '__name__', send)} failed: {type(e).__name__} - {e}",
            exc_info=True
        )
