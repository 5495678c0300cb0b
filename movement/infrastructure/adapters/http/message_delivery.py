"""Message delivery adapters for SendGrid and Mailgun.

Provider rejections and transport errors become unsuccessful
DeliveryResults. Requests that are invalid before sending (bad recipient,
empty subject or body) raise MessageDeliveryError.
"""

from __future__ import annotations

import re

import httpx
import structlog

from movement.config.collaborator_config import (
    DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
    CollaboratorConfig,
)
from movement.domain.errors.collaborator import MessageDeliveryError
from movement.domain.models.representative import DeliveryResult

log = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+$")
DEFAULT_FROM_ADDRESS = "noreply@movement.app"
SENDER_NAME = "Movement"

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
MAILGUN_URL_TEMPLATE = "https://api.mailgun.net/v3/{domain}/messages"


def _check_request(provider: str, recipient: str, subject: str, body: str) -> None:
    if not EMAIL_PATTERN.match(recipient):
        raise MessageDeliveryError("invalid recipient address", provider=provider)
    if not subject.strip() or not body.strip():
        raise MessageDeliveryError("subject and body are required", provider=provider)


class _HttpDelivery:
    """Shared request plumbing for HTTP delivery providers."""

    provider_name = ""

    def __init__(
        self,
        timeout_seconds: float,
        client: httpx.AsyncClient | None,
    ) -> None:
        self._timeout = timeout_seconds
        self._client = client

    @property
    def provider(self) -> str:
        return self.provider_name

    async def _post(self, url: str, **kwargs: object) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, timeout=self._timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, **kwargs)

    def _failure(self, recipient: str, message: str) -> DeliveryResult:
        log.warning("message_delivery_failed", provider=self.provider_name, error=message)
        return DeliveryResult(
            success=False,
            provider=self.provider_name,
            recipient=recipient,
            message=message,
        )


class SendGridMessageDelivery(_HttpDelivery):
    """MessageDeliveryPort over the SendGrid v3 mail API."""

    provider_name = "sendgrid"

    def __init__(
        self,
        api_key: str,
        from_address: str = DEFAULT_FROM_ADDRESS,
        timeout_seconds: float = DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout_seconds, client)
        self._api_key = api_key
        self._from_address = from_address

    async def send(self, recipient: str, subject: str, body: str) -> DeliveryResult:
        _check_request(self.provider_name, recipient, subject, body)
        payload = {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": {"email": self._from_address, "name": SENDER_NAME},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        try:
            response = await self._post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            return self._failure(recipient, f"request failed: {exc}")

        if response.status_code >= 300:
            return self._failure(recipient, f"SendGrid error: {response.text}")

        log.info("message_delivered", provider=self.provider_name)
        return DeliveryResult(
            success=True,
            provider=self.provider_name,
            recipient=recipient,
            message="Email sent successfully",
            provider_message_id=response.headers.get("X-Message-Id"),
        )


class MailgunMessageDelivery(_HttpDelivery):
    """MessageDeliveryPort over the Mailgun messages API."""

    provider_name = "mailgun"

    def __init__(
        self,
        api_key: str,
        domain: str,
        from_address: str = DEFAULT_FROM_ADDRESS,
        timeout_seconds: float = DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout_seconds, client)
        self._api_key = api_key
        self._domain = domain
        self._from_address = from_address

    async def send(self, recipient: str, subject: str, body: str) -> DeliveryResult:
        _check_request(self.provider_name, recipient, subject, body)
        try:
            response = await self._post(
                MAILGUN_URL_TEMPLATE.format(domain=self._domain),
                data={
                    "from": f"{SENDER_NAME} <{self._from_address}>",
                    "to": recipient,
                    "subject": subject,
                    "text": body,
                },
                auth=("api", self._api_key),
            )
        except httpx.HTTPError as exc:
            return self._failure(recipient, f"request failed: {exc}")

        if response.status_code >= 300:
            return self._failure(recipient, f"Mailgun error: {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message_id = payload.get("id") if isinstance(payload, dict) else None
        if not message_id:
            return self._failure(recipient, "Mailgun error: Unable to send email")

        log.info("message_delivered", provider=self.provider_name)
        return DeliveryResult(
            success=True,
            provider=self.provider_name,
            recipient=recipient,
            message="Email sent successfully",
            provider_message_id=message_id,
        )


def build_message_delivery(
    config: CollaboratorConfig,
    client: httpx.AsyncClient | None = None,
) -> SendGridMessageDelivery | MailgunMessageDelivery:
    """Build the delivery adapter selected by configuration.

    Raises:
        MessageDeliveryError: If no provider is configured or its
            credentials are missing.
    """
    from_address = config.email_from_address or DEFAULT_FROM_ADDRESS
    if config.email_provider == "sendgrid":
        if not config.sendgrid_api_key:
            raise MessageDeliveryError("SENDGRID_API_KEY is not set", provider="sendgrid")
        return SendGridMessageDelivery(
            api_key=config.sendgrid_api_key,
            from_address=from_address,
            timeout_seconds=config.timeout_seconds,
            client=client,
        )
    if config.email_provider == "mailgun":
        if not config.mailgun_api_key or not config.mailgun_domain:
            raise MessageDeliveryError(
                "MAILGUN_API_KEY and MAILGUN_DOMAIN must be set", provider="mailgun"
            )
        return MailgunMessageDelivery(
            api_key=config.mailgun_api_key,
            domain=config.mailgun_domain,
            from_address=from_address,
            timeout_seconds=config.timeout_seconds,
            client=client,
        )
    raise MessageDeliveryError("No email provider configured")
