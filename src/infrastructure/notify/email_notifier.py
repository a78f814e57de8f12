"""Email delivery through a Resend-compatible HTTP API."""

import html

import httpx
import structlog

from core.config import settings
from infrastructure.notify.provider import DeliveryStatus, EmailMessage

logger = structlog.get_logger()


def render_invitation(
    inviter_name: str,
    resource_name: str,
    resource_kind: str,
    permission: str,
    accept_url: str,
    ttl_days: int,
) -> EmailMessage:
    """Render the invitation email."""
    permission_label = permission.replace("_", " ")
    safe_inviter = html.escape(inviter_name)
    safe_resource = html.escape(resource_name)
    safe_url = html.escape(accept_url, quote=True)
    body = (
        f"<p>{safe_inviter} invited you to the {resource_kind} <strong>{safe_resource}</strong>.</p>"
        f"<p>Your permission: <strong>{permission_label}</strong>.</p>"
        f'<p><a href="{safe_url}">Open {resource_kind}</a></p>'
        f"<p>This link expires in {ttl_days} days. If you don't have an account, "
        "you'll be asked to sign up first.</p>"
    )
    text = (
        f"{inviter_name} invited you to the {resource_kind} {resource_name} "
        f"({permission_label}).\nOpen: {accept_url}\n"
        f"This link expires in {ttl_days} days."
    )
    return EmailMessage(
        subject=f'You\'re invited to "{resource_name}" on {settings.app_name}',
        html=body,
        text=text,
    )


class HttpEmailNotifier:
    """Sends email with a single POST to the configured API."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        sender: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.email_api_key
        self._api_url = api_url or settings.email_api_url
        self._sender = sender or settings.email_from
        self._timeout = timeout
        self._transport = transport

    async def notify(self, recipient: str, payload: EmailMessage) -> DeliveryStatus:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._api_url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={
                        "from": self._sender,
                        "to": [recipient],
                        "subject": payload.subject,
                        "html": payload.html,
                        "text": payload.text,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("email_delivery_failed", recipient=recipient, error=str(exc))
            return DeliveryStatus.FAILED
        logger.info("email_delivered", recipient=recipient)
        return DeliveryStatus.DELIVERED


class LogOnlyNotifier:
    """Used when no email API key is configured: logs instead of sending."""

    async def notify(self, recipient: str, payload: EmailMessage) -> DeliveryStatus:
        logger.info("email_delivery_skipped", recipient=recipient, subject=payload.subject)
        return DeliveryStatus.SKIPPED


def build_notifier() -> HttpEmailNotifier | LogOnlyNotifier:
    """Pick the notifier for the current settings."""
    if settings.email_api_key:
        return HttpEmailNotifier()
    return LogOnlyNotifier()
